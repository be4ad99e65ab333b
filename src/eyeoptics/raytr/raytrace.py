#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Functions to support ray tracing a sequential eye optical system

.. Created on Wed Mar 13 11:01:04 2024

.. codeauthor: eyeoptics developers
"""

import logging

import numpy as np
from numpy.linalg import norm
from math import sqrt, copysign

from . import Ray, RaySeg, RayResult, invalid_ray
from .traceerror import (TraceError, TraceMissedSurfaceError,
                         TraceMandatorySurfaceError, TraceTIRError)
from eyeoptics.util.misc_math import normalize

logger = logging.getLogger(__name__)


def bend(d_in, normal, n_in, n_out):
    """ refract incoming direction, d_in, about normal

    Vector form of Snell's law; the tangential component of n*d is
    conserved. The normal may point either way along the surface normal.
    """
    try:
        normal_len = norm(normal)
        cosI = np.dot(d_in, normal)/normal_len
        sinI_sqr = 1.0 - cosI*cosI
        n_cosIp = copysign(sqrt(n_out*n_out - n_in*n_in*sinI_sqr), cosI)
        alpha = n_cosIp - n_in*cosI
        d_out = (n_in*d_in + alpha*normal/normal_len)/n_out
        return d_out
    except ValueError:
        raise TraceTIRError(d_in, normal, n_in, n_out)


def reflect(d_in, normal):
    """ reflect incoming direction, d_in, about normal """
    normal_len = norm(normal)
    cosI = np.dot(d_in, normal)/normal_len
    d_out = d_in - 2.0*cosI*normal/normal_len
    return d_out


def trace_raw(p0, d0, optical_system):
    """ fundamental raytrace function

    Args:
        p0: starting point of the ray
        d0: starting direction cosines of the ray
        optical_system: the :class:`~.sequential.OpticalSystem` to be traced

    Returns:
        **ray_path**, a list of :class:`~.RaySeg`, the first entry the
        starting point, then one for each surface the ray intersects

    Raises:
        TraceMandatorySurfaceError: if the ray misses a mandatory surface
        TraceTIRError: if the ray is totally internally reflected

        The exception carries the index of the failing surface in `surf`
        and the path up to that surface in `ray_path`.
    """
    p = np.asarray(p0, dtype=float)
    d = normalize(np.asarray(d0, dtype=float))
    ray_path = [RaySeg(p, d, np.zeros(3))]

    n_before = abs(optical_system.initial_index)
    for i, srf in enumerate(optical_system.surfaces):
        try:
            t, inc_pt = srf.quadric.intersect_ray(p, d, side=srf.side,
                                                  bounding_box=srf.bounding_box)
        except TraceMissedSurfaceError as ray_miss:
            if not srf.mandatory:
                logger.debug("ray skips optional surface %d %s", i, srf.label)
                continue
            ray_err = TraceMandatorySurfaceError(ray_miss.quadric,
                                                 ray_miss.p, ray_miss.d,
                                                 label=srf.label)
            ray_err.surf = i
            ray_err.ray_path = ray_path
            raise ray_err

        normal = srf.quadric.normal(inc_pt, d)
        try:
            if srf.is_reflective:
                d_out = reflect(d, normal)
            else:
                n_after = srf.index
                d_out = bend(d, normal, n_before, n_after)
                n_before = n_after
        except TraceTIRError as ray_tir:
            ray_tir.int_pt = inc_pt
            ray_tir.surf = i
            ray_tir.ray_path = ray_path
            raise ray_tir

        d = normalize(d_out)
        p = inc_pt
        ray_path.append(RaySeg(p, d, normal))

    return ray_path


def trace(ray, optical_system):
    """ trace a :class:`~.Ray` through an optical system

    Trace failures are not raised, they are reported in the result: the
    output ray is all NaN, the path is truncated at the failing surface and
    the error is returned in `err`.

    Returns:
        :class:`~.RayResult` (**ray**, **path**, **err**)
    """
    try:
        ray_path = trace_raw(ray.p, ray.d, optical_system)
    except TraceError as ray_error:
        logger.debug("trace failed at surface %s: %s",
                     ray_error.surf, type(ray_error).__name__)
        return RayResult(invalid_ray(), ray_error.ray_path, ray_error)

    last = ray_path[-1]
    return RayResult(Ray(last.p, last.d), ray_path, None)
