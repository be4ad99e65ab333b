#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Fit the pose of the eye to observed pupil boundary points

    :func:`fit_eye_pose` searches for the eye pose [azimuth, elevation,
    torsion, radius] whose forward projected pupil ellipse best fits the
    boundary points observed in the camera image. Each search is a bounded
    local minimization started from one initial guess; searches are repeated
    from further guesses while the fit error stays large.

.. Created on Wed Mar 27 09:51:36 2024

.. codeauthor: eyeoptics developers
"""

import logging
import warnings

import attr
import numpy as np
from numpy import sqrt
from scipy.optimize import minimize, Bounds, BFGS

from .ellipse import (ellipse_distance, fit_transparent_ellipse,
                      transparent_to_explicit, nan_ellipse, EllipseFitError)
from .projection import pupil_projection

logger = logging.getLogger(__name__)

DEFAULT_LB = (-89., -89., 0., 0.1)
DEFAULT_UB = (89., 89., 0., 4.)

# the RMSE is scaled up for the optimizer
OBJECTIVE_SCALE = 1.0e6
# objective value for poses that do not project to an ellipse
INVALID_OBJECTIVE = 1.0e10
AT_BOUND_TOL = 1.0e-4
BOUND_HEADROOM = 0.001
REFERENCE_RADIUS = 2.0


class UnderconstrainedSearchWarning(UserWarning):
    """ None of the eye rotation axes is pinned by the bounds """


@attr.s(frozen=True)
class FitResult():
    """ The outcome of :func:`fit_eye_pose`.

    Attributes:
        eye_pose: the best fitting [azimuth, elevation, torsion, radius]
        rmse: RMS distance, in pixels, of the observed points to the fitted
              ellipse
        fitted_ellipse: the transparent ellipse projected by `eye_pose`
        fit_at_bound: True if a free parameter ended at one of its bounds
        n_searches: number of local searches run
    """
    eye_pose = attr.ib()
    rmse = attr.ib()
    fitted_ellipse = attr.ib()
    fit_at_bound = attr.ib(default=False)
    n_searches = attr.ib(default=0)

    @property
    def restarts(self):
        return max(self.n_searches - 1, 0)

    @property
    def is_valid(self):
        return bool(np.isfinite(self.rmse))


def invalid_fit_result():
    return FitResult(np.full(4, np.nan), np.nan, nan_ellipse(), False, 0)


class SearchContext():
    """ State of one local search.

    The context is the objective function of the search and its iteration
    callback. Every evaluation is checked against the best pose seen so far,
    so the search result is the best pose visited, not the last one.
    """

    def __init__(self, xp, yp, scene, lb, ub, rmse_thresh):
        self.xp = xp
        self.yp = yp
        self.scene = scene
        self.lb = lb
        self.free = lb != ub
        self.rmse_thresh = rmse_thresh
        self.n_evals = 0
        self.best_rmse = np.nan
        self.best_pose = np.full(4, np.nan)
        self.best_ellipse = nan_ellipse()

    def eye_pose(self, z):
        """ the full eye pose for a vector of the free parameters """
        pose = self.lb.copy()
        pose[self.free] = z
        return pose

    def rmse(self, eye_pose):
        """ fit error of the observed points for `eye_pose`, and the
        projected ellipse
        """
        image_pts, ellipse = pupil_projection(eye_pose, self.scene)
        if not np.all(np.isfinite(ellipse)):
            return np.nan, ellipse
        try:
            explicit = transparent_to_explicit(ellipse)
        except EllipseFitError:
            return np.nan, ellipse
        d = ellipse_distance(self.xp, self.yp, explicit)
        return sqrt(np.nanmean(d**2)), ellipse

    def __call__(self, z):
        self.n_evals += 1
        eye_pose = self.eye_pose(z)
        rmse, ellipse = self.rmse(eye_pose)
        if not np.isfinite(rmse):
            return INVALID_OBJECTIVE
        if np.isnan(self.best_rmse) or rmse < self.best_rmse:
            self.best_rmse = rmse
            self.best_pose = eye_pose
            self.best_ellipse = ellipse
        return rmse*OBJECTIVE_SCALE

    def callback(self, xk, state):
        """ stop the search once the fit is good enough """
        return bool(self.best_rmse < self.rmse_thresh)


def _check_bounds(eye_pose_lb, eye_pose_ub):
    lb = np.array(eye_pose_lb, dtype=float)
    ub = np.array(eye_pose_ub, dtype=float)
    if lb.shape != (4,) or ub.shape != (4,):
        raise ValueError(f"eye pose bounds must have 4 values, not "
                         f"{lb.shape} and {ub.shape}")
    if np.any(lb > ub):
        raise ValueError(f"lower eye pose bound {lb} exceeds upper {ub}")
    return lb, ub


def _clamp(x0, lb, ub, headroom=BOUND_HEADROOM):
    room = (ub - lb)*headroom
    return np.minimum(np.maximum(x0, lb + room), ub - room)


def analytic_guess(xp, yp, scene, lb, ub):
    """ Guess the eye pose from the centroid and size of the boundary points.

    The forward model is sampled to find the image center of projection and
    the image displacement per degree of rotation. The rotation estimate is
    scaled to 75% to allow for corneal refraction.
    """
    center = pupil_projection([0., 0., 0., REFERENCE_RADIUS], scene)[1]
    sample = pupil_projection([1., 0., 0., REFERENCE_RADIUS], scene)[1]
    pixels_per_deg = sample[0] - center[0]

    x0 = np.zeros(4)
    x0[0] = 0.75*(np.mean(xp) - center[0])/pixels_per_deg
    x0[1] = 0.75*(center[1] - np.mean(yp))/pixels_per_deg
    x0[:3] = np.minimum(np.maximum(x0[:3], lb[:3]), ub[:3])

    radius_pixels = max(np.ptp(xp), np.ptp(yp))/2.0
    sample = pupil_projection([x0[0], x0[1], x0[2], REFERENCE_RADIUS],
                              scene)[1]
    pixels_per_mm = sqrt(sample[2]/np.pi)/REFERENCE_RADIUS
    x0[3] = radius_pixels/pixels_per_mm

    if not np.all(np.isfinite(x0)):
        logger.debug("analytic pose guess failed: %s", x0)
        x0 = np.where(np.isfinite(x0), x0, (lb + ub)/2.0)
    return _clamp(x0, lb, ub)


def initial_guesses(xp, yp, scene, x0, lb, ub):
    """ The initial guesses for the searches, in the order they are used.

    Explicit guesses come first, then the guesses derived from the eye pose
    grid of the scene when it has one, otherwise the analytic guess.
    """
    guesses = []
    if x0 is not None:
        guesses.extend(np.atleast_2d(x0))

    grid = scene.eye_pose_grid
    if grid is not None:
        try:
            pe = fit_transparent_ellipse(xp, yp)
            guesses.extend(grid.x0_guesses(pe))
        except EllipseFitError as err:
            logger.debug("no pupil ellipse for grid guesses: %s", err)
            grid = None
    if grid is None:
        guesses.append(analytic_guess(xp, yp, scene, lb, ub))

    return [_clamp(g, lb, ub) for g in guesses]


def local_search(ctx, x0, lb, ub, max_iter):
    """ Run one bounded local search from `x0`, folding into `ctx`. """
    free = ctx.free
    z0 = x0[free]
    ctx(z0)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            res = minimize(ctx, z0, method='trust-constr', jac='2-point',
                           hess=BFGS(),
                           bounds=Bounds(lb[free], ub[free],
                                         keep_feasible=True),
                           callback=ctx.callback,
                           options={'maxiter': max_iter,
                                    'finite_diff_rel_step': 1e-6})
        except (ValueError, np.linalg.LinAlgError) as err:
            logger.debug("search from %s stopped: %s", x0, err)
        else:
            ctx(np.clip(res.x, lb[free], ub[free]))
            logger.debug("search from %s: %s, %d evaluations", x0,
                         res.message, ctx.n_evals)


def fit_eye_pose(Xp, Yp, scene, x0=None, eye_pose_lb=DEFAULT_LB,
                 eye_pose_ub=DEFAULT_UB, rmse_thresh=1e-2,
                 repeat_search_thresh=1.0, n_max_searches=5, max_iter=500):
    """ Find the eye pose that best accounts for observed pupil boundary
    points.

    Args:
        Xp, Yp: image coordinates of the pupil boundary points
        scene: the :class:`~.scene.SceneGeometry`
        x0: an eye pose, or rows of eye poses, to start the search from
        eye_pose_lb: lower bounds of [azimuth, elevation, torsion, radius]
        eye_pose_ub: upper bounds; parameters with equal bounds are fixed
        rmse_thresh: a search stops once the fit RMSE, in pixels, is below
                     this value
        repeat_search_thresh: another search is run while the best RMSE is
                              above this value
        n_max_searches: the largest number of searches run
        max_iter: iteration limit of each search

    Returns:
        a :class:`FitResult`; all NaN if the bounds or guesses contain NaN

    Raises:
        ValueError: if the bounds are malformed
    """
    lb, ub = _check_bounds(eye_pose_lb, eye_pose_ub)
    if np.any(np.isnan(lb)) or np.any(np.isnan(ub)) or \
            (x0 is not None and np.any(np.isnan(np.asarray(x0, dtype=float)))):
        logger.warning("eye pose fit: NaN in bounds or initial guess")
        return invalid_fit_result()

    xp = np.asarray(Xp, dtype=float).ravel()
    yp = np.asarray(Yp, dtype=float).ravel()

    free = lb != ub
    if np.count_nonzero(~free[:3]) < 1:
        warnings.warn("no eye rotation axis is fixed; the eye pose may be "
                      "underdetermined", UnderconstrainedSearchWarning,
                      stacklevel=2)

    guesses = initial_guesses(xp, yp, scene, x0, lb, ub)

    best = None
    n_searches = 0
    for guess in guesses[:n_max_searches]:
        n_searches += 1
        ctx = SearchContext(xp, yp, scene, lb, ub, rmse_thresh)
        local_search(ctx, guess, lb, ub, max_iter)
        logger.info("search %d: RMSE %g at %s", n_searches, ctx.best_rmse,
                    ctx.best_pose)
        if best is None or np.isnan(best.best_rmse) or \
                ctx.best_rmse < best.best_rmse:
            best = ctx
        if np.isfinite(best.best_rmse) and \
                best.best_rmse <= repeat_search_thresh:
            break

    eye_pose = np.clip(best.best_pose, lb, ub)
    at_lb = np.abs(eye_pose - lb) < AT_BOUND_TOL
    at_ub = np.abs(eye_pose - ub) < AT_BOUND_TOL
    fit_at_bound = bool(np.any((at_lb | at_ub) & free))
    return FitResult(eye_pose, best.best_rmse, best.best_ellipse,
                     fit_at_bound, n_searches)
