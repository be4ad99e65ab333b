""" Package for ray tracing through sequential eye optical systems

    The :mod:`~.raytr` subpackage provides the ray propagator. It includes:

        - Base level ray tracing, refraction and reflection,
          :mod:`~.raytrace`
        - Exception classes for reporting ray trace errors, :mod:`~.traceerror`

    The optical systems traced are built by :mod:`eyeoptics.seq.assembly`.
"""

from collections import namedtuple

import numpy as np

Ray = namedtuple('Ray', ['p', 'd'])
Ray.__doc__ = "a ray: origin point and unit direction vector"
Ray.p.__doc__ = "the ray origin, [p1, p2, p3]"
Ray.d.__doc__ = "unit direction cosines of the ray"

RaySeg = namedtuple('RaySeg', ['p', 'd', 'nrml'])
RaySeg.__doc__ = "ray intersection and transfer data"
RaySeg.p.__doc__ = "the point of incidence"
RaySeg.d.__doc__ = "ray direction cosine following the interface"
RaySeg.nrml.__doc__ = "surface normal vector at the point of incidence"

RayResult = namedtuple('RayResult', ['ray', 'path', 'err'])
RayResult.__doc__ = "output Ray, the RayPath that led to it and any error"
RayResult.ray.__doc__ = "the output Ray, all NaN if the trace failed"
RayResult.path.__doc__ = "list of RaySegs, starting with the ray origin"
RayResult.err.__doc__ = "a TraceError or None, if success"


def invalid_ray():
    """ the sentinel Ray returned for a failed trace """
    return Ray(np.full(3, np.nan), np.full(3, np.nan))


def is_valid(ray):
    """ True if `ray` holds finite coordinates """
    return bool(np.all(np.isfinite(ray.p)) and np.all(np.isfinite(ray.d)))
