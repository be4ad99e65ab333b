#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for OpticalSystem records and ocular media

.. Created on Thu Mar 21 09:12:44 2024

.. codeauthor: eyeoptics developers
"""

import pytest
from pytest import approx
import numpy as np

from opticalglass import opticalmedium as om

from eyeoptics.elem.quadric import Quadric
from eyeoptics.seq.medium import (decode_medium, refractive_index,
                                  spectral_wavelength)
from eyeoptics.seq.sequential import OpticalSystem
from eyeoptics.seq.surface import SurfaceRecord


@pytest.fixture
def three_surfaces():
    srfs = [SurfaceRecord(Quadric.unit_sphere().translate([x, 0., 0.]),
                          side=s, index=n, label=lbl, medium=med)
            for x, s, n, lbl, med in ((-10., -1, 1.33, 's1', 'm1'),
                                      (-5., 1, 1.40, 's2', 'm2'),
                                      (0., 1, 1.00, 's3', 'm3'))]
    return OpticalSystem(1.35, srfs, initial_label='m0')


def test_reverse(three_surfaces):
    rev = three_surfaces.reverse()
    assert rev.labels() == ['s3', 's2', 's1']
    assert [s.side for s in rev] == [-1, -1, 1]
    assert rev.indices() == [1.00, 1.40, 1.33, 1.35]
    assert rev.initial_label == 'm3'
    assert [s.medium for s in rev] == ['m2', 'm1', 'm0']


def test_double_reverse_is_identity(three_surfaces):
    twice = three_surfaces.reverse().reverse()
    assert twice.labels() == three_surfaces.labels()
    assert twice.indices() == three_surfaces.indices()
    assert [s.side for s in twice] == [s.side for s in three_surfaces]


def test_reverse_does_not_modify(three_surfaces):
    three_surfaces.reverse()
    assert three_surfaces.indices() == [1.35, 1.33, 1.40, 1.00]
    assert three_surfaces.with_index(-1, 1.33)[-1].index == 1.33
    assert three_surfaces[-1].index == 1.00


def test_surface_record_validation():
    q = Quadric.unit_sphere()
    with pytest.raises(ValueError):
        SurfaceRecord(q, side=0)
    with pytest.raises(ValueError):
        SurfaceRecord(q, bounding_box=[0., 1.])
    with pytest.raises(TypeError):
        SurfaceRecord(np.identity(4))
    assert np.all(np.isnan(SurfaceRecord(q).bounding_box))
    assert SurfaceRecord(q, index=-1.33).is_reflective


def test_listobj_str(three_surfaces):
    o_str = three_surfaces.listobj_str()
    assert o_str.startswith('start n=1.3500 (m0)')
    assert len(o_str.splitlines()) == 4


def test_media():
    assert refractive_index('aqueous', 'nir') == approx(1.3335)
    assert refractive_index('cornea', 'vis') == approx(1.376)
    assert refractive_index('air', 'vis') == 1.0
    assert refractive_index(1.52) == approx(1.52)
    assert spectral_wavelength('nir') == 950.0

    assert isinstance(decode_medium('air'), om.Air)
    assert isinstance(decode_medium('water'), om.ConstantIndex)
    glass = om.ConstantIndex(1.6, 'glass')
    assert decode_medium(glass) is glass

    with pytest.raises(ValueError):
        refractive_index('unobtainium')
    with pytest.raises(ValueError):
        refractive_index('aqueous', 'uv')

    # names are decoded from the index table, not taken as media instances
    vitreous = decode_medium('vitreous', 'nir')
    assert isinstance(vitreous, om.ConstantIndex)
    assert refractive_index('vitreous', 'nir') == approx(1.3571)
    assert refractive_index('vitreous', 'vis') == approx(1.336)
    assert refractive_index(' Aqueous ') == approx(1.3335)
    assert isinstance(decode_medium(1.0), om.Air)
    assert isinstance(decode_medium(np.float64(1.41)), om.ConstantIndex)
    with pytest.raises(ValueError):
        decode_medium(object())
    with pytest.raises(ValueError):
        decode_medium(None)
