#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Geodetic coordinates on triaxial ellipsoids

    Conversions between Cartesian points and (latitude, longitude,
    elevation) on a centered, axis aligned ellipsoid, following

        Bektas, Sebahattin. "Geodetic computations on triaxial ellipsoid."
        International Journal of Mining Science (IJMS) 1.1 (2015): 25-34.

    using atan2 for the angles so that all octants invert. The radii are
    given in ascending order, a <= b <= c, matching
    :meth:`~.quadric.Quadric.radii`. Bektas' formulation expects the largest
    semi-axis first, so internally the coordinates are handled as [z, y, x].

.. Created on Wed Mar 13 09:30:52 2024

.. codeauthor: eyeoptics developers
"""

import logging

import numpy as np
from math import sqrt, atan2, sin, cos, copysign

logger = logging.getLogger(__name__)


def _sign(x):
    return 0.0 if x == 0.0 else copysign(1.0, x)


def _on_surface(x, y, z, E, F, G):
    """ scale (x, y, z) along its ray from the center onto the ellipsoid """
    s = 1.0/sqrt(E*x*x + F*y*y + G*z*z)
    return s*x, s*y, s*z


def _projected_start(x, y, z, E, F, G, n_steps=10):
    """ foot point estimate from repeated normal projection.

    Starting at the radial projection of X, X is moved back along the
    surface normal by its elevation and projected onto the surface again.
    """
    xo, yo, zo = _on_surface(x, y, z, E, F, G)
    for i in range(n_steps):
        n = np.array([E*xo, F*yo, G*zo])
        n /= np.linalg.norm(n)
        h = np.dot([x - xo, y - yo, z - zo], n)
        xo, yo, zo = _on_surface(x - h*n[0], y - h*n[1], z - h*n[2], E, F, G)
    return xo, yo, zo


def _newton_foot(x, y, z, E, F, G, start, eps, max_iter):
    """ Newton iteration on the collinearity and on-surface conditions.

    Returns:
        the foot point (xo, yo, zo) and whether the iteration converged
    """
    xo, yo, zo = start
    for i in range(max_iter):
        j11 = F*yo - (yo - y)*E
        j12 = (xo - x)*F - E*xo
        j21 = G*zo - (zo - z)*E
        j23 = (xo - x)*G - E*xo

        A = np.array([[j11, j12, 0.0],
                      [j21, 0.0, j23],
                      [2*E*xo, 2*F*yo, 2*G*zo]])
        sa = (xo - x)*F*yo - (yo - y)*E*xo
        sb = (xo - x)*G*zo - (zo - z)*E*xo
        se = E*xo**2 + F*yo**2 + G*zo**2 - 1.0

        try:
            delta = -np.linalg.solve(A, np.array([sa, sb, se]))
        except np.linalg.LinAlgError:
            return (xo, yo, zo), False
        xo += delta[0]
        yo += delta[1]
        zo += delta[2]

        if np.max(np.abs(delta)) < eps:
            return (xo, yo, zo), True
    return (xo, yo, zo), False


def cart_to_geodetic(X, radii, eps=5.0e-4, max_iter=20):
    """ Convert a Cartesian point to geodetic coordinates.

    The foot point of X on the ellipsoid is found by Newton iteration on the
    collinearity and on-surface conditions, starting from the radial
    projection of X. Newton's method can settle on a far stationary point of
    the distance; a foot point farther from X than the starting point is
    rejected and the iteration is repeated from a start refined by normal
    projection.

    Exact zero coordinates are replaced by 1e-6 as the foot point equations
    are singular there. Points on a coordinate plane therefore convert with
    an error of the order of 1e-5 mm in a round trip.

    Args:
        X: point [x, y, z] relative to the ellipsoid center
        radii: semi-axes in ascending order
        eps: convergence threshold on the Newton step
        max_iter: iteration limit

    Returns:
        numpy array [latitude, longitude, elevation], angles in degrees
    """
    X = np.array(X, dtype=float)
    X[X == 0.0] = 1.0e-6

    c, b, a = radii
    x, y, z = X[2], X[1], X[0]

    ex2 = (a**2 - c**2)/a**2
    ee2 = (a**2 - b**2)/a**2

    E = 1.0/a**2
    F = 1.0/b**2
    G = 1.0/c**2

    def dist(p):
        return sqrt((x - p[0])**2 + (y - p[1])**2 + (z - p[2])**2)

    rho = sqrt(x**2 + y**2 + z**2)
    starts = [(a*x/rho, b*y/rho, c*z/rho),
              _projected_start(x, y, z, E, F, G)]
    candidates = []
    for start in starts:
        foot, converged = _newton_foot(x, y, z, E, F, G, start, eps, max_iter)
        # the nearest point can be no farther than any surface point
        if converged and dist(foot) <= dist(start) + eps:
            break
        candidates.append(foot)
    else:
        foot = min(candidates, key=dist)
        logger.warning("foot point iteration did not converge for %s", X)
    xo, yo, zo = foot

    lat = np.rad2deg(atan2(zo*(1 - ee2)/(1 - ex2),
                           sqrt((1 - ee2)**2*xo**2 + yo**2)))
    lon = np.rad2deg(atan2(yo/(1 - ee2), xo))
    h = (_sign(z - zo)*_sign(zo)
         * sqrt((x - xo)**2 + (y - yo)**2 + (z - zo)**2))

    return np.array([lat, lon, h])


def geodetic_to_cart(geodetic, radii):
    """ Convert geodetic coordinates to a Cartesian point.

    Args:
        geodetic: [latitude, longitude, elevation], angles in degrees
        radii: semi-axes in ascending order

    Returns:
        numpy array [x, y, z] relative to the ellipsoid center
    """
    c, b, a = radii
    fi, lam = np.deg2rad(geodetic[0]), np.deg2rad(geodetic[1])
    h = geodetic[2]

    ex2 = (a**2 - c**2)/a**2
    ee2 = (a**2 - b**2)/a**2
    V = a/sqrt(1 - ex2*sin(fi)**2 - ee2*cos(fi)**2*sin(lam)**2)

    x = (V + h)*cos(fi)*cos(lam)
    y = (V*(1 - ee2) + h)*cos(fi)*sin(lam)
    z = (V*(1 - ex2) + h)*sin(fi)

    return np.array([z, y, x])


def surface_to_geodetic(quadric, X):
    """ geodetic coordinates of world point X on an ellipsoidal quadric.

    The quadric may be translated and rotated; X is first expressed in the
    ellipsoid's canonical frame.
    """
    ctr, radii, axes = quadric.canonical_frame()
    return cart_to_geodetic(axes.T.dot(np.asarray(X) - ctr), radii)


def geodetic_to_surface(quadric, geodetic):
    """ world point for geodetic coordinates on an ellipsoidal quadric """
    ctr, radii, axes = quadric.canonical_frame()
    return axes.dot(geodetic_to_cart(geodetic, radii)) + ctr
