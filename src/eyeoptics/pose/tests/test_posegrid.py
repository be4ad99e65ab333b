#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for eye pose grids and the guesses drawn from them

.. Created on Thu Mar 28 10:12:30 2024

.. codeauthor: eyeoptics developers
"""

import pytest
import attr
import numpy as np
import numpy.testing as npt

from eyeoptics.eye.scene import create_scene_geometry
from eyeoptics.pose.posefit import fit_eye_pose, initial_guesses
from eyeoptics.pose.posegrid import EyePoseGrid, calc_eye_pose_grid
from eyeoptics.pose.projection import pupil_projection


@pytest.fixture(scope='module')
def scene():
    return create_scene_geometry(do_refraction=False)


@pytest.fixture(scope='module')
def grid(scene):
    grid_def = (np.linspace(-20., 20., 5), np.linspace(-20., 20., 5),
                [0.], [1., 2., 3.])
    return calc_eye_pose_grid(scene, grid_def)


def test_grid_shape(grid):
    assert len(grid) == 75
    assert grid.eye_poses.shape == (75, 4)
    assert grid.pupil_ellipses.shape == (75, 5)
    npt.assert_allclose(grid.max_ellipse_vals,
                        np.max(np.abs(grid.pupil_ellipses), axis=0))


def test_exact_match_guesses(grid):
    k = 37
    guesses = grid.x0_guesses(grid.pupil_ellipses[k])
    assert guesses.shape == (5, 4)
    # an exact match dominates every neighborhood; radius is not matched
    for g in guesses:
        npt.assert_allclose(g[:3], grid.eye_poses[k][:3], atol=1e-6)
        assert 1. <= g[3] <= 3.


def test_weighted_guesses():
    poses = np.array([[0., 0., 0., 2.], [10., 0., 0., 2.], [20., 0., 0., 2.]])
    ellipses = np.array([[0., 0., 100., 0., 0.],
                         [10., 0., 100., 0., 0.],
                         [30., 0., 100., 0., 0.]])
    grid = EyePoseGrid(poses, ellipses, [30., 1., 100., 1., 1.])
    guesses = grid.x0_guesses([4., 0., 100., 0., 0.], neighborhoods=(2, 1))
    # errors 4/30 and 6/30 weight the first two poses 0.6 and 0.4
    npt.assert_allclose(guesses[0], [4., 0., 0., 2.])
    npt.assert_allclose(guesses[1], poses[0])
    # more neighbors than grid rows
    assert grid.x0_guesses([4., 0., 100., 0., 0.],
                           neighborhoods=(10,)).shape == (1, 4)


def test_grid_def_validation(scene):
    with pytest.raises(ValueError):
        calc_eye_pose_grid(scene, ([0.], [0.], [0.]))


def test_grid_guesses_used_by_fit(scene, grid):
    grid_scene = attr.evolve(scene, eye_pose_grid=grid)
    truth = np.array([-8., 6., 0., 1.8])
    pts, ellipse = pupil_projection(truth, scene, n_points=16)
    Xp, Yp = pts[:, 0], pts[:, 1]

    lb = np.array([-89., -89., 0., 0.1])
    ub = np.array([89., 89., 0., 4.])
    guesses = initial_guesses(Xp, Yp, grid_scene, None, lb, ub)
    assert len(guesses) == 5

    result = fit_eye_pose(Xp, Yp, grid_scene)
    assert result.rmse < 0.5
    npt.assert_allclose(result.eye_pose[:2], truth[:2], atol=0.5)
