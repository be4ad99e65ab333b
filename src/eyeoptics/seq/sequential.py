#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" The sequential optical system traced by the ray propagator

.. Created on Thu Mar 14 15:31:08 2024

.. codeauthor: eyeoptics developers
"""

import logging

import attr
import numpy as np

from eyeoptics.elem.quadric import Quadric
from .surface import SurfaceRecord

logger = logging.getLogger(__name__)

# width of one row of the fixed size matrix form: quadric vector, side,
# bounding box, mandatory flag, refractive index
ROW_WIDTH = 19


@attr.s(frozen=True)
class OpticalSystem():
    """ An ordered sequence of surfaces with the media between them.

    The optical system has this structure
    ::

        n0   Srf1   Srf2   Srf3  ...  Srfk
             n1     n2     n3         nk

    where n0, the index of the medium the ray starts in, carries no
    geometry, and each surface record holds the index of the medium
    entered at that surface. A negative index marks a reflecting surface:
    the ray stays in the medium it arrived in.

    Attributes:
        initial_index: refractive index of the starting medium
        surfaces: tuple of :class:`~.surface.SurfaceRecord`
        initial_label: name of the starting medium
    """
    initial_index = attr.ib(converter=float)
    surfaces = attr.ib(factory=tuple, converter=tuple)
    initial_label = attr.ib(default='')

    def __len__(self):
        return len(self.surfaces)

    def __iter__(self):
        return iter(self.surfaces)

    def __getitem__(self, key):
        return self.surfaces[key]

    def indices(self):
        """ refractive indices of all media, starting medium first """
        return [self.initial_index] + [s.index for s in self.surfaces]

    def labels(self):
        return [s.label for s in self.surfaces]

    def append(self, *surfaces):
        """ return a new system with `surfaces` added at the end """
        return attr.evolve(self, surfaces=self.surfaces + tuple(surfaces))

    def with_index(self, i, index, medium=None):
        """ return a new system with surface i entering a different medium """
        srfs = list(self.surfaces)
        medium = srfs[i].medium if medium is None else medium
        srfs[i] = attr.evolve(srfs[i], index=index, medium=medium)
        return attr.evolve(self, surfaces=srfs)

    def reverse(self):
        """ return the optical system traversed in the opposite direction.

        The surface order is inverted, every side flag flips, and each
        surface takes the index of the medium that preceded it in the
        forward direction. The new starting medium is the one that followed
        the last surface.

        A reflective surface returns the ray into the medium it arrived in.
        It keeps its side flag and reflects into that same medium in the
        reversed system.
        """
        # medium the ray travels in after each surface
        travel = [(abs(self.initial_index), self.initial_label)]
        for s in self.surfaces:
            travel.append(travel[-1] if s.is_reflective
                          else (s.index, s.medium))
        srfs = []
        for i in range(len(self.surfaces) - 1, -1, -1):
            s = self.surfaces[i]
            n, medium = travel[i]
            if s.is_reflective:
                srfs.append(attr.evolve(s, index=-abs(n), medium=medium))
            else:
                srfs.append(attr.evolve(s, side=-s.side, index=n,
                                        medium=medium))
        n, medium = travel[-1]
        return OpticalSystem(n, srfs, initial_label=medium)

    def padded(self, num_rows):
        """ return the fixed size matrix form, padded with NaN rows.

        Each row holds the 10 quadric coefficients, side, the bounding box,
        the mandatory flag and the index. The first row is NaN except for
        the starting index.

        Raises:
            ValueError: if the system does not fit into `num_rows`
        """
        if num_rows < len(self.surfaces) + 1:
            raise ValueError(f"{len(self.surfaces) + 1} rows do not fit "
                             f"into {num_rows}")
        rows = np.full((num_rows, ROW_WIDTH), np.nan)
        rows[0, -1] = self.initial_index
        for i, s in enumerate(self.surfaces, start=1):
            rows[i, :10] = s.quadric.vec()
            rows[i, 10] = s.side
            rows[i, 11:17] = s.bounding_box
            rows[i, 17] = s.mandatory
            rows[i, 18] = s.index
        return rows

    @classmethod
    def from_padded(cls, rows, labels=None):
        """ create an OpticalSystem from the matrix form, dropping padding """
        rows = np.asarray(rows, dtype=float)
        if rows.ndim != 2 or rows.shape[1] != ROW_WIDTH:
            raise ValueError(f"expected rows of width {ROW_WIDTH}, "
                             f"not shape {rows.shape}")
        rows = rows[~np.all(np.isnan(rows), axis=1)]
        labels = [''] * (len(rows) - 1) if labels is None else labels
        srfs = [SurfaceRecord(Quadric.from_vec(r[:10]), side=r[10],
                              bounding_box=r[11:17], mandatory=r[17],
                              index=r[18], label=lbl)
                for r, lbl in zip(rows[1:], labels)]
        return cls(rows[0, -1], srfs)

    def listobj_str(self):
        o_str = f"start n={self.initial_index:.4f}"
        if self.initial_label:
            o_str += f" ({self.initial_label})"
        o_str += "\n"
        for i, s in enumerate(self.surfaces, start=1):
            o_str += f"{i:3d}: " + s.listobj_str()
        return o_str
