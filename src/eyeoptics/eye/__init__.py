""" Package for model eyes and the scenes they are observed in

    The :mod:`~.eye` subpackage provides:

        - Records for the surfaces, aperture and rotation of an eye, and the
          aperture eccentricity functions, :mod:`~.eyemodel`
        - The reference human eye, :mod:`~.human`
        - Camera intrinsics, camera position and the scene geometry,
          :mod:`~.scene`
        - Visual angles between retinal points and the angular
          magnification of corrective lenses, :mod:`~.visualangle`
"""
