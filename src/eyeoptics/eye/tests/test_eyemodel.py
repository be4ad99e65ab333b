#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for the eye model, its aperture and its rotation

.. Created on Fri Mar 22 10:05:39 2024

.. codeauthor: eyeoptics developers
"""

import unittest
import pytest
from pytest import approx
import numpy as np
import numpy.testing as npt
from math import sqrt

from eyeoptics.eye.eyemodel import (ConstantEccentricity, SigmoidEccentricity,
                                    Pupil)
from eyeoptics.eye.human import human_eye
from eyeoptics.eye.scene import (create_scene_geometry, CameraPosition,
                                 CameraIntrinsic)
from eyeoptics.seq.medium import refractive_index


def test_eccentricity_variants():
    assert ConstantEccentricity()(2.0) == 0.0
    assert ConstantEccentricity(0.3)(1.0) == 0.3
    sigmoid = SigmoidEccentricity()
    p0, p1, p2, p3 = sigmoid.params
    assert sigmoid(2.0) == approx((np.tanh((2.0 + p0)*p1) + p2)*p3)
    # the sign changes across the radius range
    assert sigmoid(1.0)*sigmoid(3.0) < 0.0


class PupilTestCase(unittest.TestCase):
    def test_circular_aperture(self):
        pupil = Pupil([-3.7, 0., 0.])
        pts = pupil.boundary_points(2.0, n_points=6)
        assert pts.shape == (6, 3)
        npt.assert_allclose(pts[:, 0], -3.7)
        npt.assert_allclose(np.hypot(pts[:, 1], pts[:, 2]), 2.0)

    def test_area_preserving(self):
        pupil = Pupil([0., 0., 0.], ConstantEccentricity(0.6),
                      thetas=(0.0, np.pi/2))
        a, b, theta = pupil.ellipse(2.0)
        assert a*b == approx(4.0)
        assert sqrt(1 - (b/a)**2) == approx(0.6)
        assert theta == approx(np.pi/2)

        pupil = Pupil([0., 0., 0.], ConstantEccentricity(-0.6),
                      thetas=(0.25, np.pi/2))
        assert pupil.ellipse(2.0)[2] == approx(0.25)

        with pytest.raises(ValueError):
            Pupil([0., 0., 0.], ConstantEccentricity(1.0)).ellipse(2.0)


class EyeModelTestCase(unittest.TestCase):
    def setUp(self):
        self.eye = human_eye()

    def test_surfaces(self):
        assert [s.label for s in self.eye.cornea] == [
            'cornea.back', 'cornea.front', 'cornea.tearfilm']
        assert self.eye.lens[0].label == 'lens.back'
        assert self.eye.lens[-1].label == 'lens.front'
        assert self.eye.lens[-1].index == approx(
            refractive_index('aqueous', 'nir'))
        assert self.eye.retina[0].index == approx(
            refractive_index('vitreous', 'nir'))
        # the retina reaches back to the axial length
        retina = self.eye.retina[0].quadric
        t, X = retina.intersect_ray(retina.center(), np.array([-1., 0., 0.]))
        assert X[0] == approx(-23.58)

    def test_zero_pose(self):
        rot, trns = self.eye.pose_transform([0., 0., 0., 2.])
        npt.assert_allclose(rot, np.identity(3), atol=1e-15)
        npt.assert_allclose(trns, np.zeros(3), atol=1e-12)

    def test_rotation_directions(self):
        pupil_ctr = self.eye.pupil.center
        rot, trns = self.eye.pose_transform([10., 0., 0., 2.])
        moved = rot.dot(pupil_ctr) + trns
        assert moved[1] > pupil_ctr[1]
        npt.assert_allclose(rot.dot(self.eye.rotation_centers.azimuth)
                            + trns, self.eye.rotation_centers.azimuth,
                            atol=1e-12)

        rot, trns = self.eye.pose_transform([0., 10., 0., 2.])
        moved = rot.dot(pupil_ctr) + trns
        assert moved[2] > pupil_ctr[2]

    def test_left_eye(self):
        left = human_eye(laterality='Left')
        assert left.rotation_centers.azimuth[1] == \
            -self.eye.rotation_centers.azimuth[1]
        with pytest.raises(ValueError):
            human_eye(laterality='Cyclopean')
        with pytest.raises(TypeError):
            human_eye(pupil_centre=[-3.7, 0., 0.])


class SceneTestCase(unittest.TestCase):
    def test_defaults(self):
        scene = create_scene_geometry()
        assert scene.refraction.labels()[-1] == 'cornea.tearfilm'
        npt.assert_allclose(scene.camera_position.world_position(),
                            [120., 0., 0.])
        # the corneal apex images onto the principal point
        npt.assert_allclose(scene.project_points([0., 0., 0.]),
                            [[320., 240.]])

        scene = create_scene_geometry(do_refraction=False)
        assert scene.refraction is None

        with pytest.raises(TypeError):
            create_scene_geometry(camera_translaton=[0., 0., 100.])

    def test_image_axes(self):
        scene = create_scene_geometry(do_refraction=False)
        pts = scene.project_points([[0., 1., 0.], [0., 0., 1.]])
        assert pts[0, 0] > 320.
        assert pts[1, 1] < 240.

    def test_camera_torsion(self):
        position = CameraPosition(torsion=90.)
        rot = position.world_to_camera()
        # +p2 turns from the image x axis onto the image y axis
        npt.assert_allclose(rot.dot([0., 1., 0.]), [0., 1., 0.], atol=1e-12)

    def test_radial_distortion(self):
        intrinsic = CameraIntrinsic(radial_distortion=(0.5, 0.))
        pinhole = CameraIntrinsic()
        v = np.array([[0.01, 0., 1.]])
        assert intrinsic.project(v)[0, 0] > pinhole.project(v)[0, 0]
        npt.assert_allclose(intrinsic.project([[0., 0., 1.]]),
                            [[320., 240.]])
