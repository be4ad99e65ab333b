""" Package for the geometry of the optical surfaces of the eye

    The :mod:`~.elem` subpackage provides the quadric geometry kernel:

        - Quadric surfaces, their transforms, normals and ray intersection,
          :mod:`~.quadric`
        - Geodetic coordinates on ellipsoidal surfaces, :mod:`~.geodetic`
"""
