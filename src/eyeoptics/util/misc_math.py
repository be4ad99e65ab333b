#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" miscellaneous functions for working with numpy vectors and rotations

.. Created on Tue Mar 12 09:41:17 2024

.. codeauthor: eyeoptics developers
"""
import numpy as np
from numpy.linalg import norm
import transforms3d as t3d
from transforms3d.axangles import axangle2mat


def normalize(v):
    """ return normalized version of input vector v """
    length = norm(v)
    if length == 0.0:
        return v
    else:
        return v/length


def isanumber(a):
    """ returns true if input a can be converted to floating point number """
    try:
        float(a)
        bool_a = True
    except (ValueError, TypeError):
        bool_a = False
    return bool_a


def euler2rot3d(euler):
    """ convert euler angle vector to a rotation matrix.

    The angles, in degrees, are static rotations about the p1, p2 and p3
    axes, applied in that order.
    """
    rot_mat = t3d.euler.euler2mat(*np.deg2rad(euler), axes='sxyz')
    return rot_mat


def axis_rotation(axis, angle):
    """ rotation matrix for a right handed rotation of `angle` degrees about
    `axis`
    """
    return axangle2mat(axis, np.deg2rad(angle))


def orthonormal_basis(w):
    """ return two unit vectors that complete an orthonormal frame with w """
    w = normalize(np.asarray(w, dtype=float))
    # pick the coordinate axis least aligned with w as a seed
    seed = np.zeros(3)
    seed[np.argmin(np.abs(w))] = 1.0
    e1 = normalize(np.cross(w, seed))
    e2 = np.cross(w, e1)
    return e1, e2
