#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Support for ray trace exception handling

.. Created on Wed Mar 13 15:22:40 2024

.. codeauthor: eyeoptics developers
"""


class TraceError(Exception):
    """ Exception raised when ray tracing an optical system

    `surf` is the index of the surface where the trace failed and `ray_path`
    the list of RaySegs accumulated before the failure. Both are filled in by
    the tracing routine.
    """
    surf = None
    ray_path = None


class TraceMissedSurfaceError(TraceError):
    """ Exception raised when ray misses a quadric surface """
    def __init__(self, quadric=None, p=None, d=None):
        self.quadric = quadric
        self.p = p
        self.d = d


class TraceMandatorySurfaceError(TraceMissedSurfaceError):
    """ Exception raised when ray misses a surface it must intersect """
    def __init__(self, quadric=None, p=None, d=None, label=''):
        super().__init__(quadric, p, d)
        self.label = label


class TraceTIRError(TraceError):
    """ Exception raised when ray TIRs at an interface """
    def __init__(self, inc_dir, normal, prev_indx, follow_indx):
        self.int_pt = None
        self.inc_dir = inc_dir
        self.normal = normal
        self.prev_indx = prev_indx
        self.follow_indx = follow_indx
