#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Ellipse fitting and ellipse parameter conversions

    Three parameterizations of an image ellipse are used:

        - implicit: coefficients [A, B, C, D, E, F] of
          A*x² + B*x*y + C*y² + D*x + E*y + F = 0
        - explicit: [cx, cy, a, b, phi], the center, the semi-major and
          semi-minor axes and the tilt of the major axis in radians
        - transparent: [cx, cy, area, eccentricity, theta], with theta the
          tilt of the major axis in [0, pi)

.. Created on Mon Mar 25 09:18:52 2024

.. codeauthor: eyeoptics developers
"""

import logging

import numpy as np
from numpy import sqrt

logger = logging.getLogger(__name__)


class EllipseFitError(ValueError):
    """ The points do not determine an ellipse """


class InsufficientBoundaryPoints(EllipseFitError):
    """ Fewer than 5 points are available to fit an ellipse """
    def __init__(self, n_points):
        super().__init__(f"{n_points} points cannot define an ellipse")
        self.n_points = n_points


def nan_ellipse():
    """ the transparent ellipse reported when no ellipse can be fit """
    return np.full(5, np.nan)


def fit_ellipse(x, y):
    """ Direct least squares fit of an ellipse to the points (x, y).

    The method of Halir and Flusser, applied to coordinates normalized to
    zero mean and unit scale. The ellipse constraint 4AC - B² > 0 is
    enforced, so the result is always an ellipse.

    Returns:
        the implicit coefficients [A, B, C, D, E, F], of unit norm

    Raises:
        InsufficientBoundaryPoints: if fewer than 5 finite points are given
        EllipseFitError: if the points do not determine an ellipse
    """
    x = np.asarray(x, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()
    valid = np.isfinite(x) & np.isfinite(y)
    x = x[valid]
    y = y[valid]
    if len(x) < 5:
        raise InsufficientBoundaryPoints(len(x))

    xm = x.mean()
    ym = y.mean()
    s = sqrt(np.mean((x - xm)**2 + (y - ym)**2)/2.0)
    if s == 0.0:
        raise EllipseFitError("boundary points are coincident")
    xn = (x - xm)/s
    yn = (y - ym)/s

    D1 = np.column_stack((xn*xn, xn*yn, yn*yn))
    D2 = np.column_stack((xn, yn, np.ones_like(xn)))
    S1 = D1.T.dot(D1)
    S2 = D1.T.dot(D2)
    S3 = D2.T.dot(D2)
    try:
        T = -np.linalg.solve(S3, S2.T)
    except np.linalg.LinAlgError:
        raise EllipseFitError("boundary points are collinear")
    M = S1 + S2.dot(T)
    # premultiply by the inverse of the constraint matrix
    M = np.array([M[2]/2.0, -M[1], M[0]/2.0])
    evals, evecs = np.linalg.eig(M)
    evecs = np.real(evecs)
    cond = 4.0*evecs[0]*evecs[2] - evecs[1]**2
    candidates = np.flatnonzero(cond > 0.0)
    if len(candidates) == 0:
        raise EllipseFitError("no elliptical solution for boundary points")
    a1 = evecs[:, candidates[0]]
    A, B, C, D, E, F = np.concatenate((a1, T.dot(a1)))

    # undo the normalization
    coefs = np.array([
        A, B, C,
        -2.0*A*xm - B*ym + D*s,
        -B*xm - 2.0*C*ym + E*s,
        A*xm*xm + B*xm*ym + C*ym*ym - D*s*xm - E*s*ym + F*s*s])
    coefs /= np.linalg.norm(coefs)
    if coefs[0] < 0.0:
        coefs = -coefs
    return coefs


def implicit_to_explicit(p):
    """ convert implicit coefficients to [cx, cy, a, b, phi]

    Raises:
        EllipseFitError: if the coefficients do not describe a real ellipse
    """
    A, B, C, D, E, F = p
    denom = B*B - 4.0*A*C
    if not denom < 0.0:
        raise EllipseFitError("conic is not an ellipse")
    cx = (2.0*C*D - B*E)/denom
    cy = (2.0*A*E - B*D)/denom
    num = 2.0*(A*E*E + C*D*D - B*D*E + denom*F)
    root = sqrt((A - C)**2 + B*B)
    a2 = num*((A + C) + root)
    b2 = num*((A + C) - root)
    if not (a2 > 0.0 and b2 > 0.0):
        raise EllipseFitError("conic is an imaginary ellipse")
    a = -sqrt(a2)/denom
    b = -sqrt(b2)/denom
    phi = 0.5*np.arctan2(-B, C - A)
    return np.array([cx, cy, a, b, phi])


def explicit_to_implicit(e):
    """ convert [cx, cy, a, b, phi] to implicit coefficients """
    cx, cy, a, b, phi = e
    s = np.sin(phi)
    c = np.cos(phi)
    A = a*a*s*s + b*b*c*c
    B = 2.0*(b*b - a*a)*s*c
    C = a*a*c*c + b*b*s*s
    D = -2.0*A*cx - B*cy
    E = -B*cx - 2.0*C*cy
    F = A*cx*cx + B*cx*cy + C*cy*cy - a*a*b*b
    return np.array([A, B, C, D, E, F])


def explicit_to_transparent(e):
    cx, cy, a, b, phi = e
    if b > a:
        a, b = b, a
        phi += np.pi/2
    ecc = sqrt(1.0 - (b/a)**2)
    return np.array([cx, cy, np.pi*a*b, ecc, np.mod(phi, np.pi)])


def transparent_to_explicit(t):
    cx, cy, area, ecc, theta = t
    if not (area > 0.0 and 0.0 <= ecc < 1.0):
        raise EllipseFitError(f"invalid transparent ellipse {t}")
    a = sqrt(area/(np.pi*sqrt(1.0 - ecc*ecc)))
    b = a*sqrt(1.0 - ecc*ecc)
    return np.array([cx, cy, a, b, theta])


def implicit_to_transparent(p):
    return explicit_to_transparent(implicit_to_explicit(p))


def transparent_to_implicit(t):
    return explicit_to_implicit(transparent_to_explicit(t))


def fit_transparent_ellipse(x, y):
    """ fit an ellipse to the points (x, y) and return it as a transparent
    ellipse
    """
    return implicit_to_transparent(fit_ellipse(x, y))


def ellipse_distance(x, y, e, max_iter=20, tol=1e-12):
    """ Perpendicular distance from the points (x, y) to an ellipse.

    The closest point on the ellipse is found by Newton's method on the
    parametric angle, in the frame of the ellipse axes.

    Args:
        x, y: point coordinates
        e: explicit ellipse, [cx, cy, a, b, phi]

    Returns:
        array of distances, one per point
    """
    cx, cy, a, b, phi = e
    x = np.asarray(x, dtype=float) - cx
    y = np.asarray(y, dtype=float) - cy
    c = np.cos(phi)
    s = np.sin(phi)
    u = c*x + s*y
    v = -s*x + c*y

    t = np.arctan2(a*v, b*u)
    for i in range(max_iter):
        st = np.sin(t)
        ct = np.cos(t)
        g = (b*b - a*a)*st*ct + u*a*st - v*b*ct
        dg = (b*b - a*a)*(ct*ct - st*st) + u*a*ct + v*b*st
        dt = np.divide(g, dg, out=np.zeros_like(g), where=dg != 0.0)
        t = t - dt
        if np.all(np.abs(dt) < tol):
            break
    return np.hypot(a*np.cos(t) - u, b*np.sin(t) - v)
