#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" tests for geodetic coordinates on ellipsoids

.. Created on Wed Mar 13 14:40:26 2024

.. codeauthor: eyeoptics developers
"""

import itertools
import pytest
from pytest import approx
import numpy as np
import numpy.testing as npt
from math import tan, radians

from eyeoptics.elem.quadric import Quadric
from eyeoptics.elem.geodetic import (cart_to_geodetic, geodetic_to_cart,
                                     surface_to_geodetic, geodetic_to_surface)
from eyeoptics.util.misc_math import normalize


@pytest.fixture
def ellipsoid():
    return Quadric.unit_sphere().scale([2., 4., 5.])


def surface_point(quadric, direction):
    u = normalize(np.array(direction, dtype=float))
    t, X = quadric.intersect_ray(np.zeros(3), u)
    return X


def test_round_trip(ellipsoid):
    X = surface_point(ellipsoid, [1., tan(radians(15)), tan(radians(-15))])
    radii = ellipsoid.radii()
    geodetic = cart_to_geodetic(X, radii)
    assert geodetic[2] == approx(0., abs=1e-6)
    npt.assert_allclose(geodetic_to_cart(geodetic, radii), X, atol=1e-6)


def test_round_trip_all_octants(ellipsoid):
    X = surface_point(ellipsoid, [1., tan(radians(15)), tan(radians(15))])
    radii = ellipsoid.radii()
    for octant in itertools.product((-1., 1.), repeat=3):
        Xo = X*np.array(octant)
        geodetic = cart_to_geodetic(Xo, radii)
        assert -90. <= geodetic[0] <= 90.
        assert -180. <= geodetic[1] <= 180.
        npt.assert_allclose(geodetic_to_cart(geodetic, radii), Xo, atol=1e-6)


def test_near_umbilic(ellipsoid):
    # the umbilics lie in the plane of the shortest and longest axes
    X = surface_point(ellipsoid, [1., 1e-3, 1.])
    radii = ellipsoid.radii()
    geodetic = cart_to_geodetic(X, radii)
    npt.assert_allclose(geodetic_to_cart(geodetic, radii), X, atol=1e-5)


def test_zero_coordinates(ellipsoid):
    radii = ellipsoid.radii()
    X = np.array([0., 0., 5.])
    geodetic = cart_to_geodetic(X, radii)
    assert geodetic[0] == approx(0., abs=1e-3)
    npt.assert_allclose(geodetic_to_cart(geodetic, radii), X, atol=1e-5)


def test_elevation(ellipsoid):
    X0 = surface_point(ellipsoid, [1., tan(radians(15)), tan(radians(-15))])
    radii = ellipsoid.radii()
    outside = X0 + 0.5*ellipsoid.normal(X0)
    geodetic = cart_to_geodetic(outside, radii)
    assert geodetic[2] == approx(0.5, abs=1e-5)
    npt.assert_allclose(geodetic_to_cart(geodetic, radii), outside, atol=1e-5)

    inside = X0 - 0.25*ellipsoid.normal(X0)
    assert cart_to_geodetic(inside, radii)[2] == approx(-0.25, abs=1e-5)


@pytest.mark.parametrize("depth", [0.1, 0.25, 0.5])
@pytest.mark.parametrize("direction", [[1., 0.27, -0.27], [0.3, 1., 0.5],
                                       [-0.2, 0.4, 1.], [-1., -0.6, 0.1]])
def test_elevation_inside(ellipsoid, direction, depth):
    X0 = surface_point(ellipsoid, direction)
    radii = ellipsoid.radii()
    inside = X0 - depth*ellipsoid.normal(X0)
    geodetic = cart_to_geodetic(inside, radii)
    assert geodetic[2] == approx(-depth, abs=1e-5)
    npt.assert_allclose(geodetic_to_cart(geodetic[:2].tolist() + [0.], radii),
                        X0, atol=1e-5)


def test_transformed_surface():
    q = (Quadric.unit_sphere().scale([11.4, 10.2, 11.3])
         .rotate([0., 0., 5.]).translate([-13.4, 0.5, -0.2]))
    X = q.intersect_ray(np.array([-13.4, 0.5, -0.2]),
                        normalize(np.array([-1., 0.2, 0.3])))[1]
    geodetic = surface_to_geodetic(q, X)
    assert geodetic[2] == approx(0., abs=1e-5)
    npt.assert_allclose(geodetic_to_surface(q, geodetic), X, atol=1e-5)
