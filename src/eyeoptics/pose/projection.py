#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Forward projection of the pupil of a posed eye into the camera image

    The aperture stop boundary is rotated with the eye and each boundary
    point is projected into the image. When the scene includes refraction,
    the ray leaving each boundary point that reaches the camera's nodal
    point is found by iterating the ray direction through the cornea, and
    the image point is the direction from which that ray arrives.

.. Created on Mon Mar 25 14:02:11 2024

.. codeauthor: eyeoptics developers
"""

import logging

import numpy as np
from scipy.optimize import root

from eyeoptics.raytr import Ray
from eyeoptics.raytr.raytrace import trace
from eyeoptics.util.misc_math import normalize, orthonormal_basis
from .ellipse import (fit_transparent_ellipse, nan_ellipse, EllipseFitError)

logger = logging.getLogger(__name__)

# residual reported for a direction whose ray does not reach the camera
MISSED_CAMERA_RESIDUAL = 1.0e3


def _camera_miss(p, d, camera):
    """ components of the perpendicular offset of the camera from the ray """
    w = camera - p
    if np.dot(w, d) <= 0.0:
        return None
    return w - np.dot(w, d)*d


def camera_ray(pt, camera, optical_system, tol=1.0e-6):
    """ Find the ray from `pt` that reaches `camera` through the system.

    The initial direction is the straight line to the camera, perturbed in
    the plane normal to it until the exit ray passes through the camera.

    Args:
        pt: starting point, in eye coordinates
        camera: the camera nodal point, in eye coordinates
        optical_system: the :class:`~.sequential.OpticalSystem` to trace
        tol: largest acceptable miss distance, in mm

    Returns:
        the exit :class:`~.Ray`, or None if no ray reaches the camera
    """
    d0 = normalize(camera - pt)
    e1, e2 = orthonormal_basis(d0)

    def exit_ray(x):
        d = normalize(d0 + x[0]*e1 + x[1]*e2)
        ray, path, err = trace(Ray(pt, d), optical_system)
        return ray, err

    def residual(x):
        ray, err = exit_ray(x)
        if err is not None:
            return np.full(2, MISSED_CAMERA_RESIDUAL)
        miss = _camera_miss(ray.p, ray.d, camera)
        if miss is None:
            return np.full(2, MISSED_CAMERA_RESIDUAL)
        return np.array([np.dot(miss, e1), np.dot(miss, e2)])

    sol = root(residual, np.zeros(2), method='hybr', options={'xtol': 1e-12})
    if not np.all(np.abs(sol.fun) < tol):
        logger.debug("no ray from %s reaches the camera: %s", pt, sol.message)
        return None
    ray, err = exit_ray(sol.x)
    return ray


def pupil_projection(eye_pose, scene, n_points=8):
    """ Project the aperture stop of the eye into the camera image.

    Args:
        eye_pose: [azimuth, elevation, torsion, radius], degrees and mm
        scene: the :class:`~.scene.SceneGeometry`
        n_points: number of aperture boundary points

    Returns:
        (image_points, ellipse): the (m, 2) pixel coordinates of the boundary
        points that reach the camera, m <= n_points, and the transparent
        ellipse fit to them, all NaN if fewer than 5 points remain
    """
    eye = scene.eye
    pts = eye.pupil.boundary_points(eye_pose[3], n_points)
    rot, trns = eye.pose_transform(eye_pose)

    if scene.refraction is None:
        image_pts = scene.project_points(pts.dot(rot.T) + trns)
    else:
        camera = rot.T.dot(scene.camera_position.world_position() - trns)
        dirs = []
        for pt in pts:
            ray = camera_ray(pt, camera, scene.refraction)
            if ray is not None:
                # the camera sees the point along the reversed exit ray
                dirs.append(-rot.dot(ray.d))
        if len(dirs) > 0:
            image_pts = scene.project_directions(np.array(dirs))
        else:
            image_pts = np.zeros((0, 2))

    image_pts = image_pts[np.all(np.isfinite(image_pts), axis=1)]
    try:
        ellipse = fit_transparent_ellipse(image_pts[:, 0], image_pts[:, 1])
    except EllipseFitError as err:
        logger.debug("pose %s: %s", eye_pose, err)
        ellipse = nan_ellipse()
    return image_pts, ellipse

