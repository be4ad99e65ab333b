#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for fitting the eye pose to pupil boundary points

.. Created on Wed Mar 27 15:21:48 2024

.. codeauthor: eyeoptics developers
"""

import unittest
import pytest
import numpy as np
import numpy.testing as npt

from eyeoptics.eye.scene import create_scene_geometry
from eyeoptics.pose.posefit import (fit_eye_pose, FitResult,
                                    UnderconstrainedSearchWarning,
                                    analytic_guess, initial_guesses,
                                    DEFAULT_LB, DEFAULT_UB)
from eyeoptics.pose.projection import pupil_projection


@pytest.fixture(scope='module')
def scene():
    return create_scene_geometry(do_refraction=False)


@pytest.fixture(scope='module')
def refracted_scene():
    return create_scene_geometry()


def observed_points(eye_pose, scene, n_points=16):
    pts, ellipse = pupil_projection(eye_pose, scene, n_points=n_points)
    return pts[:, 0], pts[:, 1]


@pytest.mark.parametrize("truth", [[10., -5., 0., 2.5],
                                   [-15., 8., 0., 3.],
                                   [3., 20., 0., 1.8]])
def test_fit_recovers_pose(scene, truth):
    truth = np.array(truth)
    Xp, Yp = observed_points(truth, scene)
    result = fit_eye_pose(Xp, Yp, scene)
    assert isinstance(result, FitResult)
    assert result.rmse < 1e-2
    npt.assert_allclose(result.eye_pose[:2], truth[:2], atol=0.1)
    assert result.eye_pose[2] == 0.
    assert abs(result.eye_pose[3] - truth[3]) < 0.01
    assert not result.fit_at_bound
    assert np.all(np.isfinite(result.fitted_ellipse))


def test_fit_recovers_pose_through_cornea(refracted_scene):
    truth = np.array([-20., 12., 0., 1.5])
    Xp, Yp = observed_points(truth, refracted_scene)
    result = fit_eye_pose(Xp, Yp, refracted_scene)
    assert result.is_valid
    assert result.rmse < 1e-2
    npt.assert_allclose(result.eye_pose[:2], truth[:2], atol=0.1)
    assert abs(result.eye_pose[3] - truth[3]) < 0.01
    assert not result.fit_at_bound


def test_fit_at_bound(scene):
    Xp, Yp = observed_points([25., 0., 0., 2.], scene)
    result = fit_eye_pose(Xp, Yp, scene, eye_pose_ub=(15., 89., 0., 4.),
                          n_max_searches=1, max_iter=200)
    assert result.fit_at_bound
    assert result.eye_pose[0] <= 15.
    assert result.eye_pose[0] == pytest.approx(15., abs=1e-3)


def test_restart_keeps_best(scene):
    Xp, Yp = observed_points([10., -5., 0., 2.5], scene)
    kwargs = dict(x0=[[60., -60., 0., 3.5]], max_iter=3)
    single = fit_eye_pose(Xp, Yp, scene, n_max_searches=1, **kwargs)
    repeated = fit_eye_pose(Xp, Yp, scene, n_max_searches=5, **kwargs)
    assert single.n_searches == 1
    assert single.rmse > 1.0
    assert repeated.n_searches >= 2
    assert repeated.rmse <= single.rmse


class FitInputTestCase(unittest.TestCase):
    def setUp(self):
        self.scene = create_scene_geometry(do_refraction=False)
        self.Xp, self.Yp = observed_points([5., 5., 0., 2.], self.scene)

    def test_nan_bounds(self):
        result = fit_eye_pose(self.Xp, self.Yp, self.scene,
                              eye_pose_lb=(np.nan, -89., 0., 0.1))
        assert not result.is_valid
        assert np.all(np.isnan(result.eye_pose))
        assert result.n_searches == 0

        result = fit_eye_pose(self.Xp, self.Yp, self.scene,
                              x0=[np.nan, 0., 0., 2.])
        assert np.isnan(result.rmse)

    def test_malformed_bounds(self):
        with pytest.raises(ValueError):
            fit_eye_pose(self.Xp, self.Yp, self.scene,
                         eye_pose_lb=(-89., -89., 0.))
        with pytest.raises(ValueError):
            fit_eye_pose(self.Xp, self.Yp, self.scene,
                         eye_pose_lb=(10., -89., 0., 0.1),
                         eye_pose_ub=(5., 89., 0., 4.))

    def test_underconstrained_warning(self):
        with pytest.warns(UnderconstrainedSearchWarning):
            fit_eye_pose(self.Xp, self.Yp, self.scene,
                         eye_pose_lb=(-89., -89., -30., 0.1),
                         eye_pose_ub=(89., 89., 30., 4.),
                         n_max_searches=1, max_iter=2)

    def test_guesses(self):
        lb = np.array(DEFAULT_LB)
        ub = np.array(DEFAULT_UB)
        guess = analytic_guess(self.Xp, self.Yp, self.scene, lb, ub)
        # rotation is underestimated by the refraction allowance
        assert 2. < guess[0] < 5.
        assert 2. < guess[1] < 5.
        assert guess[2] == 0.
        assert guess[3] == pytest.approx(2., rel=0.1)

        guesses = initial_guesses(self.Xp, self.Yp, self.scene,
                                  [[1., 2., 0., 3.], [4., 5., 0., 6.]], lb, ub)
        assert len(guesses) == 3
        npt.assert_allclose(guesses[0], [1., 2., 0., 3.])
        # explicit guesses are kept inside the bounds
        assert guesses[1][3] < 4.
