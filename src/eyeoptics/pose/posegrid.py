#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" A precomputed table of eye poses and their projected pupil ellipses

    The table is used to supply initial guesses to :func:`~.posefit.fit_eye_pose`:
    the pupil ellipse fit to the observed boundary points is matched against
    the table and the poses of the best matches are blended.

.. Created on Tue Mar 26 11:27:40 2024

.. codeauthor: eyeoptics developers
"""

import logging
from concurrent.futures import ProcessPoolExecutor
from functools import partial

import attr
import numpy as np

from .projection import pupil_projection

logger = logging.getLogger(__name__)

# ellipse parameters compared when matching: center and tilt
MATCH_COLUMNS = [0, 1, 4]
NEIGHBORHOODS = (10, 7, 5, 2, 1)


def _as_float_array(a):
    return np.array(a, dtype=float)


@attr.s(frozen=True)
class EyePoseGrid():
    """ Eye poses and the transparent ellipses they project to.

    Attributes:
        eye_poses: (M, 4) array of eye poses
        pupil_ellipses: (M, 5) array of transparent ellipses
        max_ellipse_vals: largest magnitude of each ellipse parameter, used
                          to normalize the match error
    """
    eye_poses = attr.ib(converter=_as_float_array, eq=False)
    pupil_ellipses = attr.ib(converter=_as_float_array, eq=False)
    max_ellipse_vals = attr.ib(converter=_as_float_array, eq=False)

    def __len__(self):
        return len(self.eye_poses)

    def x0_guesses(self, pupil_ellipse, neighborhoods=NEIGHBORHOODS):
        """ Initial pose guesses for an observed pupil ellipse.

        For each neighborhood size n, the poses of the n closest ellipses
        are averaged with weights inversely proportional to their match
        error.

        Returns:
            an array with one guess per neighborhood size
        """
        pe = np.asarray(pupil_ellipse, dtype=float)
        scale = self.max_ellipse_vals[MATCH_COLUMNS]
        scale = np.where(scale > 0.0, scale, 1.0)
        match_error = np.sum(
            np.abs(self.pupil_ellipses[:, MATCH_COLUMNS] - pe[MATCH_COLUMNS])
            / scale, axis=1)
        order = np.argsort(match_error)
        # an exact match takes all of the weight
        sort_error = np.maximum(match_error[order], 1.0e-12)

        guesses = []
        for nn in neighborhoods:
            nn = min(nn, len(order))
            w = 1.0/sort_error[:nn]
            w /= w.sum()
            guesses.append(w.dot(self.eye_poses[order[:nn]]))
        return np.array(guesses)


def _grid_ellipse(eye_pose, scene=None):
    return pupil_projection(eye_pose, scene)[1]


def calc_eye_pose_grid(scene, grid_def, workers=None):
    """ Evaluate the pupil projection over a grid of eye poses.

    Args:
        scene: the :class:`~.scene.SceneGeometry`
        grid_def: four sequences of values, for azimuth, elevation, torsion
                  and radius; the grid is their outer product
        workers: if greater than 1, the number of processes the projections
                 are distributed over

    Returns:
        an :class:`EyePoseGrid`, without the poses that failed to project
    """
    if len(grid_def) != 4:
        raise ValueError("grid_def needs values for all 4 pose parameters")
    axes = [np.atleast_1d(np.asarray(g, dtype=float)) for g in grid_def]
    poses = np.stack(np.meshgrid(*axes, indexing='ij'), axis=-1).reshape(-1, 4)

    project = partial(_grid_ellipse, scene=scene)
    if workers is not None and workers > 1:
        chunksize = max(1, len(poses)//(4*workers))
        with ProcessPoolExecutor(max_workers=workers) as executor:
            ellipses = list(executor.map(project, poses, chunksize=chunksize))
    else:
        ellipses = [project(pose) for pose in poses]
    ellipses = np.array(ellipses).reshape(-1, 5)

    valid = np.all(np.isfinite(ellipses), axis=1)
    if not np.any(valid):
        raise ValueError("no pose in the grid projects to a pupil ellipse")
    logger.info("eye pose grid: %d of %d poses projected",
                np.count_nonzero(valid), len(poses))
    ellipses = ellipses[valid]
    return EyePoseGrid(poses[valid], ellipses,
                       np.max(np.abs(ellipses), axis=0))
