#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Visual angles and the angular magnification of corrective lenses

    Directions in the visual world are related to the eye by chief rays,
    the rays that pass through the center of the aperture stop. A retinal
    point is seen along the chief ray that leaves it, and a lens in front of
    the eye magnifies the world by changing the direction in which a chief
    ray leaves the eye.

.. Created on Tue Oct 13 10:21:06 2026

.. codeauthor: eyeoptics developers
"""

import logging

import numpy as np
from math import atan2, tan, radians, degrees
from scipy.optimize import root

from eyeoptics.elem.geodetic import geodetic_to_surface
from eyeoptics.raytr import Ray
from eyeoptics.raytr.raytrace import trace
from eyeoptics.seq.assembly import assemble_optical_system
from eyeoptics.util.misc_math import normalize, orthonormal_basis

logger = logging.getLogger(__name__)

# residual reported for a direction whose ray fails to leave the lens
MISSED_STOP_RESIDUAL = 1.0e3


def _plane_angle(d, k):
    """ angle of direction d from the p1 axis within the p1-pk plane """
    return atan2(d[k], d[0])


def stop_crossing(ray, stop_center):
    """ the point where the line of `ray` crosses the aperture stop plane """
    s = (stop_center[0] - ray.p[0])/ray.d[0]
    return ray.p + s*ray.d


def retinal_chief_ray(eye, X, tol=1.0e-6):
    """ Find the ray from retinal point X that passes the stop center.

    The ray is traced from the retina through the crystalline lens; the
    direction leaving X is iterated until the ray line crosses the plane of
    the aperture stop at its center.

    Args:
        eye: the :class:`~.eyemodel.EyeModel`
        X: a point on the retina, in eye coordinates
        tol: largest acceptable miss distance at the stop, in mm

    Returns:
        the :class:`~.Ray` leaving the front of the lens, or None if no
        ray reaches the stop center
    """
    X = np.asarray(X, dtype=float)
    stop_center = eye.pupil.center
    system = assemble_optical_system(eye, 'retinaToStop')
    d0 = normalize(stop_center - X)
    e1, e2 = orthonormal_basis(d0)

    def exit_ray(x):
        d = normalize(d0 + x[0]*e1 + x[1]*e2)
        ray, path, err = trace(Ray(X, d), system)
        return ray, err

    def residual(x):
        ray, err = exit_ray(x)
        if err is not None or ray.d[0] <= 0.0:
            return np.full(2, MISSED_STOP_RESIDUAL)
        return (stop_crossing(ray, stop_center) - stop_center)[1:]

    sol = root(residual, np.zeros(2), method='hybr', options={'xtol': 1e-12})
    if not np.all(np.abs(sol.fun) < tol):
        logger.debug("no ray from %s reaches the stop center: %s", X,
                     sol.message)
        return None
    ray, err = exit_ray(sol.x)
    return ray


def visual_angle_between_retinal_coords(eye, G0, G1, camera_medium='air'):
    """ Return the visual angle, in degrees, between two retinal points.

    Args:
        eye: the :class:`~.eyemodel.EyeModel`
        G0, G1: geodetic coordinates [latitude, longitude, 0] on the retina
        camera_medium: the medium in front of the eye

    Returns:
        numpy array with the signed angles from the direction of G0 to the
        direction of G1 projected on the p1-p2 (horizontal) and the p1-p3
        (vertical) planes

    Raises:
        ValueError: if the chief ray of either point cannot be traced
    """
    retina = eye.retina[0].quadric
    outward = assemble_optical_system(eye, 'stopToCamera',
                                      camera_medium=camera_medium)
    dirs = []
    for G in (G0, G1):
        X = geodetic_to_surface(retina, [G[0], G[1], 0.])
        ray = retinal_chief_ray(eye, X)
        if ray is None:
            raise ValueError(f"no chief ray leaves the retina at {G}")
        result = trace(ray, outward)
        if result.err is not None:
            raise ValueError(f"the chief ray from {G} does not leave the "
                             f"eye: {result.err}")
        dirs.append(result.ray.d)

    d0, d1 = dirs
    return np.array([degrees(_plane_angle(d1, k) - _plane_angle(d0, k))
                     for k in (1, 2)])


def angular_magnification(eye, contact_lens=None, spectacle_lens=None,
                          angle=5.0):
    """ Return the magnification of the visual world by corrective lenses.

    A chief ray leaves the stop center at `angle` degrees from the optical
    axis and is traced out of the eye with and without the lenses. The
    magnification is the ratio of the tangents of the two exit angles.

    Args:
        eye: the :class:`~.eyemodel.EyeModel`
        contact_lens: contact lens descriptor, see
                      :func:`~.assembly.assemble_optical_system`
        spectacle_lens: spectacle lens descriptor
        angle: angle of the chief ray inside the eye, in degrees

    Returns:
        the angular magnification, 1.0 without lenses
    """
    d = np.array([1., tan(radians(angle)), 0.])
    ray = Ray(np.array(eye.pupil.center), normalize(d))

    def exit_angle(**lenses):
        system = assemble_optical_system(eye, 'stopToCamera', **lenses)
        result = trace(ray, system)
        if result.err is not None:
            raise ValueError(f"the chief ray does not leave the eye: "
                             f"{result.err}")
        return tan(_plane_angle(result.ray.d, 1))

    bare = exit_angle()
    corrected = exit_angle(contact_lens=contact_lens,
                           spectacle_lens=spectacle_lens)
    magnification = bare/corrected
    logger.debug("angular magnification %.4f for contact lens %s, "
                 "spectacle lens %s", magnification, contact_lens,
                 spectacle_lens)
    return magnification
