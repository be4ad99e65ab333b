#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for the forward projection of the pupil

.. Created on Tue Mar 26 09:02:57 2024

.. codeauthor: eyeoptics developers
"""

import unittest
from pytest import approx
import numpy as np
import numpy.testing as npt
from numpy.linalg import norm

from eyeoptics.eye.eyemodel import ConstantEccentricity
from eyeoptics.eye.human import human_eye
from eyeoptics.eye.scene import create_scene_geometry
from eyeoptics.pose.projection import camera_ray, pupil_projection


class PinholeProjectionTestCase(unittest.TestCase):
    def setUp(self):
        eye = human_eye(pupil_eccentricity=ConstantEccentricity(0.))
        self.scene = create_scene_geometry(eye=eye, do_refraction=False)

    def test_primary_position(self):
        pts, ellipse = pupil_projection([0., 0., 0., 2.], self.scene)
        assert pts.shape == (8, 2)
        radius = 2600.*2./123.7
        npt.assert_allclose(norm(pts - [320., 240.], axis=1), radius)
        npt.assert_allclose(ellipse[:2], [320., 240.], atol=1e-6)
        assert ellipse[2] == approx(np.pi*radius**2, rel=1e-9)
        assert ellipse[3] == approx(0., abs=1e-4)

    def test_rotation_moves_ellipse(self):
        center = pupil_projection([0., 0., 0., 2.], self.scene)[1]
        right = pupil_projection([10., 0., 0., 2.], self.scene)[1]
        up = pupil_projection([0., 10., 0., 2.], self.scene)[1]
        assert right[0] > center[0] + 10.
        assert right[1] == approx(center[1])
        assert up[1] < center[1] - 10.
        # a rotated aperture is foreshortened
        assert right[2] < center[2]
        assert right[3] > 0.05

    def test_too_few_points(self):
        pts, ellipse = pupil_projection([0., 0., 0., 2.], self.scene,
                                        n_points=4)
        assert len(pts) == 4
        assert np.all(np.isnan(ellipse))


class RefractedProjectionTestCase(unittest.TestCase):
    def setUp(self):
        self.eye = human_eye(pupil_eccentricity=ConstantEccentricity(0.))
        self.scene = create_scene_geometry(eye=self.eye)

    def test_camera_ray(self):
        camera = self.scene.camera_position.world_position()
        pt = np.array([-3.7, 1.5, -1.0])
        ray = camera_ray(pt, camera, self.scene.refraction)
        assert ray is not None
        w = camera - ray.p
        miss = w - np.dot(w, ray.d)*ray.d
        assert norm(miss) < 1e-6
        # the exit ray leaves the tear film
        assert ray.p[0] == approx(-0.22, abs=0.05)

    def test_entrance_pupil_is_magnified(self):
        pinhole = create_scene_geometry(eye=self.eye, do_refraction=False)
        pts, ellipse = pupil_projection([0., 0., 0., 2.], self.scene)
        unrefracted = pupil_projection([0., 0., 0., 2.], pinhole)[1]
        assert len(pts) == 8
        assert ellipse[2] > 1.1*unrefracted[2]
        assert ellipse[1] == approx(240., abs=0.5)
        assert ellipse[0] == approx(320., abs=10.)

    def test_refraction_follows_rotation(self):
        center = pupil_projection([0., 0., 0., 2.], self.scene)[1]
        right = pupil_projection([15., 0., 0., 2.], self.scene)[1]
        assert right[0] > center[0] + 10.
