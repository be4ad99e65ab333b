# -*- coding: utf-8 -*-
""" The **eyeoptics** geometrical optics engine for model eyes

    The optical model of an eye observed by a camera is built from the
    following subpackages:

        - :mod:`~.elem`: quadric surfaces and geodetic coordinates on
          ellipsoids
        - :mod:`~.seq`: ocular media, surface records and the assembly of
          sequential optical systems, including contact and spectacle lenses
        - :mod:`~.raytr`: ray tracing through sequential optical systems
        - :mod:`~.eye`: eye models, the reference human eye and scene
          geometry
        - :mod:`~.pose`: projection of the pupil into the camera image and
          estimation of the eye pose from it

        - :mod:`opticalglass`: provides the optical media of the eye

    The :mod:`~.util` subpackage provides vector and rotation helpers.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    __version__ = 'unknown'


def listobj(obj):
    """ Print wrapper function for listobj_str() method of `obj`.

    Classes may implement the `listobj_str` method that returns a string
    containing a formatted description of the object, e.g.
    :meth:`.OpticalSystem.listobj_str` and :meth:`.SurfaceRecord.listobj_str`.
    """
    try:
        print(obj.listobj_str())
    except AttributeError:
        print(repr(obj))
