#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" The geometry of an eye observed by a camera

    A :class:`SceneGeometry` gathers the eye model, the camera's intrinsic
    parameters and position, and the optical system a ray follows from the
    aperture stop to the camera.

    The camera position is given as [horizontal, vertical, depth] in mm
    relative to the corneal apex, the camera looking back at the eye along
    the -p1 direction. Image x runs with +p2 and image y runs with -p3.

.. Created on Thu Mar 21 13:40:18 2024

.. codeauthor: eyeoptics developers
"""

import logging

import attr
import numpy as np

from eyeoptics.seq.assembly import assemble_optical_system
from eyeoptics.util.misc_math import axis_rotation
from .human import human_eye

logger = logging.getLogger(__name__)

DEFAULT_INTRINSIC_MATRIX = ((2600., 0., 320.),
                            (0., 2600., 240.),
                            (0., 0., 1.))


def _matrix3(m):
    m = np.array(m, dtype=float)
    if m.shape != (3, 3):
        raise ValueError(f"intrinsic matrix must be 3x3, not {m.shape}")
    return m


@attr.s(frozen=True)
class CameraIntrinsic():
    """ Pinhole camera model with radial distortion.

    Attributes:
        matrix: 3x3 intrinsic matrix, focal lengths and principal point in
                pixels
        radial_distortion: coefficients (k1, k2) of r² and r⁴
        sensor_resolution: (width, height) in pixels
    """
    matrix = attr.ib(default=DEFAULT_INTRINSIC_MATRIX, converter=_matrix3,
                     eq=False)
    radial_distortion = attr.ib(default=(0., 0.), converter=tuple)
    sensor_resolution = attr.ib(default=(640, 480), converter=tuple)

    def project(self, v):
        """ return pixel coordinates for points v, (n, 3), in the camera
        frame
        """
        v = np.atleast_2d(v)
        x = v[:, 0]/v[:, 2]
        y = v[:, 1]/v[:, 2]
        k1, k2 = self.radial_distortion
        r2 = x*x + y*y
        f = 1.0 + k1*r2 + k2*r2*r2
        pts = np.column_stack((x*f, y*f, np.ones_like(x))).dot(self.matrix.T)
        return pts[:, :2]


@attr.s(frozen=True)
class CameraPosition():
    """ camera translation, [horizontal, vertical, depth], and torsion """
    translation = attr.ib(default=(0., 0., 120.),
                          converter=lambda t: tuple(float(v) for v in t))
    torsion = attr.ib(default=0.0, converter=float)

    def world_position(self):
        """ the camera's nodal point in [p1, p2, p3] """
        horizontal, vertical, depth = self.translation
        return np.array([depth, horizontal, vertical])

    def world_to_camera(self):
        """ rotation taking world directions into the camera frame """
        axes = np.array([[0., 1., 0.],
                         [0., 0., -1.],
                         [-1., 0., 0.]])
        return axis_rotation([0., 0., 1.], self.torsion).dot(axes)


@attr.s(frozen=True)
class SceneGeometry():
    """ An eye, a camera and the optical path between them.

    Attributes:
        eye: the :class:`~.eyemodel.EyeModel`
        camera_intrinsic: the :class:`CameraIntrinsic`
        camera_position: the :class:`CameraPosition`
        refraction: the stop to camera
                    :class:`~eyeoptics.seq.sequential.OpticalSystem`, or None
                    to project the aperture without refraction
        medium: the medium between eye and camera
        eye_pose_grid: optional :class:`~eyeoptics.pose.posegrid.EyePoseGrid`
    """
    eye = attr.ib()
    camera_intrinsic = attr.ib(factory=CameraIntrinsic)
    camera_position = attr.ib(factory=CameraPosition)
    refraction = attr.ib(default=None)
    medium = attr.ib(default='air')
    eye_pose_grid = attr.ib(default=None, eq=False)

    def project_points(self, world_pts):
        """ pixel coordinates of world points seen by the camera """
        cam = self.camera_position
        v = (np.atleast_2d(world_pts) - cam.world_position()).dot(
            cam.world_to_camera().T)
        return self.camera_intrinsic.project(v)

    def project_directions(self, world_dirs):
        """ pixel coordinates of the directions from the camera's nodal
        point to the points it images
        """
        v = np.atleast_2d(world_dirs).dot(
            self.camera_position.world_to_camera().T)
        return self.camera_intrinsic.project(v)


scene_keywords = ('eye', 'spectral_domain', 'intrinsic_camera_matrix',
                  'sensor_resolution', 'radial_distortion',
                  'camera_translation', 'camera_torsion', 'camera_medium',
                  'contact_lens', 'spectacle_lens', 'do_refraction')


def create_scene_geometry(**kwargs):
    """ create a :class:`SceneGeometry`, filling in defaults.

    Keyword Args:
        eye: an EyeModel; by default the reference human eye
        spectral_domain: 'nir' (default) or 'vis', for the default eye
        intrinsic_camera_matrix: 3x3 matrix
        sensor_resolution: (width, height), default (640, 480)
        radial_distortion: (k1, k2), default (0, 0)
        camera_translation: [horizontal, vertical, depth], default
                            [0, 0, 120]
        camera_torsion: degrees, default 0
        camera_medium: default 'air'
        contact_lens: contact lens descriptor or None
        spectacle_lens: spectacle lens descriptor or None
        do_refraction: if False, project the aperture without refraction
    """
    unknown = set(kwargs) - set(scene_keywords)
    if unknown:
        raise TypeError(f"unexpected scene keywords: {sorted(unknown)}")

    eye = kwargs.get('eye', None)
    if eye is None:
        eye = human_eye(spectral_domain=kwargs.get('spectral_domain', 'nir'))

    intrinsic = CameraIntrinsic(
        matrix=kwargs.get('intrinsic_camera_matrix',
                          DEFAULT_INTRINSIC_MATRIX),
        radial_distortion=kwargs.get('radial_distortion', (0., 0.)),
        sensor_resolution=kwargs.get('sensor_resolution', (640, 480)))
    position = CameraPosition(
        translation=kwargs.get('camera_translation', (0., 0., 120.)),
        torsion=kwargs.get('camera_torsion', 0.))

    medium = kwargs.get('camera_medium', 'air')
    refraction = None
    if kwargs.get('do_refraction', True):
        refraction = assemble_optical_system(
            eye, 'stopToCamera', camera_medium=medium,
            contact_lens=kwargs.get('contact_lens', None),
            spectacle_lens=kwargs.get('spectacle_lens', None))
    else:
        logger.debug("scene projects the aperture without refraction")

    return SceneGeometry(eye, intrinsic, position, refraction, medium)
