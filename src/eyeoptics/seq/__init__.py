""" Package for the sequential optical systems of the eye

    The :mod:`~.seq` subpackage assembles the ordered sequence of surfaces a
    ray traverses. It includes:

        - The surface record, :mod:`~.surface`
        - The :class:`~.sequential.OpticalSystem`, its reversal and its fixed
          size matrix form, :mod:`~.sequential`
        - Refractive indices of ocular and lens media, :mod:`~.medium`
        - Contact and spectacle lenses, :mod:`~.lenses`
        - Assembly of the named paths through the eye, :mod:`~.assembly`
"""
