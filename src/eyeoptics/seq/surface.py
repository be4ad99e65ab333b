#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" The record for one surface of a sequential optical system

.. Created on Thu Mar 14 14:12:50 2024

.. codeauthor: eyeoptics developers
"""

import attr
import numpy as np

from eyeoptics.elem.quadric import Quadric


def _bounding_box(bbox):
    if bbox is None:
        return np.full(6, np.nan)
    bbox = np.array(bbox, dtype=float).ravel()
    if bbox.size != 6:
        raise ValueError(f"bounding box needs 6 values, not {bbox.size}")
    return bbox


def _side(side):
    side = int(side)
    if side not in (-1, 1):
        raise ValueError(f"side must be +1 or -1, not {side}")
    return side


@attr.s(frozen=True)
class SurfaceRecord():
    """ A quadric surface and the medium the ray enters at it.

    Attributes:
        quadric: the :class:`~.quadric.Quadric` surface
        side: +1 or -1, selects which intersection of the ray is used
        bounding_box: [p1min p1max p2min p2max p3min p3max], NaN unbounded
        mandatory: if True, a ray that misses the surface fails the trace
        index: refractive index after the surface; negative for a mirror
        label: the surface name
        medium: the name of the medium after the surface
    """
    quadric = attr.ib(validator=attr.validators.instance_of(Quadric))
    side = attr.ib(default=1, converter=_side)
    bounding_box = attr.ib(default=None, converter=_bounding_box,
                           eq=False)
    mandatory = attr.ib(default=True, converter=bool)
    index = attr.ib(default=1.0, converter=float)
    label = attr.ib(default='')
    medium = attr.ib(default='')

    @property
    def is_reflective(self):
        return self.index < 0.0

    def listobj_str(self):
        o_str = (f"{self.label}: side={self.side:+d} "
                 f"mandatory={self.mandatory} n={self.index:.4f}")
        if self.medium:
            o_str += f" ({self.medium})"
        return o_str + "\n"
