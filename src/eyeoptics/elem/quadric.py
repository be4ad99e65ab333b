#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Quadric surfaces in homogeneous coordinates

    A :class:`Quadric` is the zero set of the implicit function

    .. math::

        F(x) = x_h^T M x_h = 0,\\quad x_h = [p_1, p_2, p_3, 1]

    with `M` a symmetric 4x4 matrix. The compact form is the 10-vector
    ``[A B C D E F G H I J]`` where::

        M = [[A, D, E, G],
             [D, B, F, H],
             [E, F, C, I],
             [G, H, I, J]]

    Geometric operations (scale, rotate, translate) never modify a quadric,
    they return a new one. Ray intersection selects one of the two roots of
    the ray/quadric quadratic with a `side` flag, subject to an axis aligned
    bounding box; flipping `side` selects the same point for the reversed
    ray.

.. Created on Tue Mar 12 10:12:33 2024

.. codeauthor: eyeoptics developers
"""

import numpy as np
from numpy.linalg import norm
from math import sqrt

from eyeoptics.raytr.traceerror import TraceMissedSurfaceError
from eyeoptics.util.misc_math import normalize, euler2rot3d


def in_bounding_box(X, bounding_box, tol=1e-2):
    """ True if X lies inside `bounding_box`, within `tol`.

    Args:
        X: point, [p1, p2, p3]
        bounding_box: [p1min, p1max, p2min, p2max, p3min, p3max] or None.
                      NaN entries leave that side unbounded.
        tol: tolerance applied to each face of the box
    """
    if bounding_box is None:
        return True
    bb = np.asarray(bounding_box, dtype=float).reshape(3, 2)
    lo_ok = np.isnan(bb[:, 0]) | (X >= bb[:, 0] - tol)
    hi_ok = np.isnan(bb[:, 1]) | (X <= bb[:, 1] + tol)
    return bool(np.all(lo_ok & hi_ok))


class Quadric:
    """ A quadric surface defined by a symmetric 4x4 matrix.

    Attributes:
        mat: the symmetric 4x4 numpy array
    """

    def __init__(self, mat):
        mat = np.array(mat, dtype=float)
        if mat.shape != (4, 4):
            raise ValueError(f"quadric matrix must be 4x4, not {mat.shape}")
        self.mat = 0.5*(mat + mat.T)

    def __repr__(self):
        return "{!s}({!r})".format(type(self).__name__, self.vec().tolist())

    @classmethod
    def from_vec(cls, v):
        """ create a Quadric from the 10-vector ``[A B C D E F G H I J]`` """
        v = np.asarray(v, dtype=float).ravel()
        if v.size != 10:
            raise ValueError(f"quadric vector must have 10 entries, "
                             f"not {v.size}")
        A, B, C, D, E, F, G, H, I, J = v
        return cls([[A, D, E, G],
                    [D, B, F, H],
                    [E, F, C, I],
                    [G, H, I, J]])

    def vec(self):
        """ return the 10-vector form of the quadric """
        m = self.mat
        return np.array([m[0, 0], m[1, 1], m[2, 2],
                         m[0, 1], m[0, 2], m[1, 2],
                         m[0, 3], m[1, 3], m[2, 3], m[3, 3]])

    @classmethod
    def unit_sphere(cls):
        return cls(np.diag([1., 1., 1., -1.]))

    @classmethod
    def unit_two_sheet_hyperboloid(cls):
        """ the hyperboloid -p1² + p2² + p3² + 1 = 0, sheets at p1 = ±1 """
        return cls(np.diag([-1., 1., 1., 1.]))

    @classmethod
    def plane(cls, point, normal):
        """ the plane through `point` perpendicular to `normal` """
        n = normalize(np.asarray(normal, dtype=float))
        pt = np.asarray(point, dtype=float)
        mat = np.zeros((4, 4))
        mat[:3, 3] = 0.5*n
        mat[3, :3] = 0.5*n
        mat[3, 3] = -np.dot(n, pt)
        return cls(mat)

    def _transform(self, t_inv):
        """ apply the inverse point transform t_inv: M' = t_inv^T M t_inv """
        return Quadric(t_inv.T.dot(self.mat).dot(t_inv))

    def scale(self, factors):
        """ return the quadric stretched by `factors` along p1, p2, p3 """
        f = np.broadcast_to(np.asarray(factors, dtype=float), (3,))
        t_inv = np.diag(np.append(1.0/f, 1.0))
        return self._transform(t_inv)

    def rotate(self, euler):
        """ return the quadric rotated about the origin.

        `euler` is a vector of static rotations, in degrees, about the p1, p2
        and p3 axes.
        """
        rot_mat = euler2rot3d(euler)
        t_inv = np.identity(4)
        t_inv[:3, :3] = rot_mat.T
        return self._transform(t_inv)

    def translate(self, offset):
        """ return the quadric shifted by the vector `offset` """
        t_inv = np.identity(4)
        t_inv[:3, 3] = -np.asarray(offset, dtype=float)
        return self._transform(t_inv)

    def f(self, p):
        """ the implicit function value at point p """
        h = np.append(p, 1.0)
        return h.dot(self.mat).dot(h)

    def df(self, p):
        """ the gradient of the implicit function at point p """
        return 2.0*(self.mat[:3, :3].dot(p) + self.mat[:3, 3])

    def normal(self, p, u=None):
        """ return the unit surface normal at point p.

        If a ray direction `u` is given, the normal is oriented to oppose it.
        """
        n = normalize(self.df(p))
        if u is not None and np.dot(n, u) > 0.0:
            n = -n
        return n

    def intersect_ray(self, p, u, side=1, bounding_box=None, bb_tol=1e-2,
                      eps=1.0e-12, t_tol=1.0e-6):
        """ Intersect the ray p + t*u with the quadric.

        The ray substituted into the implicit function gives
        a*t² + b*t + c = 0, with roots t± = (-b ± √(b² - 4ac))/2a. `side`
        +1 prefers t+ and -1 prefers t-. If the preferred point falls outside
        the bounding box, the other root is tried. Roots behind the ray origin
        are never accepted.

        Args:
            p: ray origin
            u: unit ray direction
            side: +1 or -1, root selection
            bounding_box: [p1min, p1max, p2min, p2max, p3min, p3max] or None
            bb_tol: bounding box tolerance
            eps: below this magnitude of `a` the equation is solved as linear
            t_tol: roots down to -t_tol count as the ray origin itself

        Returns:
            (t, X): distance along the ray and the intersection point

        Raises:
            TraceMissedSurfaceError: if there is no acceptable intersection
        """
        Q = self.mat[:3, :3]
        q = self.mat[:3, 3]
        Qu = Q.dot(u)
        a = u.dot(Qu)
        b = 2.0*(p.dot(Qu) + q.dot(u))
        c = self.f(p)

        if abs(a) < eps:
            if b == 0.0:
                raise TraceMissedSurfaceError(self, p, u)
            roots = [-c/b]
        else:
            try:
                sq = sqrt(b*b - 4.0*a*c)
            except ValueError:
                raise TraceMissedSurfaceError(self, p, u)
            t_plus = (-b + sq)/(2.0*a)
            t_minus = (-b - sq)/(2.0*a)
            roots = [t_plus, t_minus] if side >= 0 else [t_minus, t_plus]

        for t in roots:
            if t < -t_tol:
                continue
            X = p + t*u
            if in_bounding_box(X, bounding_box, bb_tol):
                return t, X
        raise TraceMissedSurfaceError(self, p, u)

    def center(self):
        """ the center of a central quadric (ellipsoid, hyperboloid) """
        return -np.linalg.solve(self.mat[:3, :3], self.mat[:3, 3])

    def canonical_frame(self):
        """ return the center, radii and axes of an ellipsoidal quadric.

        The radii are returned in ascending order and the columns of the axes
        matrix are the matching unit axis directions.

        Raises:
            ValueError: if the quadric is not a real ellipsoid
        """
        ctr = self.center()
        k = self.f(ctr)
        evals, evecs = np.linalg.eigh(self.mat[:3, :3])
        r2 = -k/evals
        if np.any(r2 <= 0.0):
            raise ValueError("quadric is not an ellipsoid")
        radii = np.sqrt(r2)
        order = np.argsort(radii)
        return ctr, radii[order], evecs[:, order]

    def radii(self):
        """ ellipsoid semi-axis lengths, ascending """
        return self.canonical_frame()[1]

    def normal_curvature(self, p, tangent):
        """ curvature of the surface at p along the tangent direction.

        The sign follows the gradient: positive when the surface bends away
        from the direction of increasing F.
        """
        grad = self.df(p)
        n = grad/norm(grad)
        t = normalize(tangent - np.dot(tangent, n)*n)
        return 2.0*t.dot(self.mat[:3, :3]).dot(t)/norm(grad)
