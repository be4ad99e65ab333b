#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Contact and spectacle lenses added in front of the eye

    Lens powers are back vertex powers, in diopters, rated in air. Surface
    radii follow the sign convention: positive when the center of curvature
    lies towards the eye (negative p1).

.. Created on Tue Mar 19 09:47:15 2024

.. codeauthor: eyeoptics developers
"""

import logging

import numpy as np

from eyeoptics.elem.quadric import Quadric
from .medium import refractive_index
from .surface import SurfaceRecord

logger = logging.getLogger(__name__)

CONTACT_LENS_THICKNESS = 0.1
POST_LENS_TEAR_THICKNESS = 0.005
CONTACT_LENS_BBOX = (-4., 1., -8., 8., -8., 8.)

SPECTACLE_THICKNESS = 2.0
SPECTACLE_VERTEX_DISTANCE = 12.0
SPECTACLE_HALF_WIDTH = 30.0


def decode_descriptor(descriptor, max_len, name):
    """ return the lens descriptor as a list of 1 to max_len floats

    Raises:
        ValueError: for a descriptor of the wrong length or type
    """
    try:
        values = np.atleast_1d(np.asarray(descriptor, dtype=float))
    except (TypeError, ValueError):
        raise ValueError(f"{name} descriptor must be numeric: {descriptor!r}")
    if values.ndim != 1 or not 1 <= values.size <= max_len:
        raise ValueError(f"{name} descriptor must have 1 to {max_len} "
                         f"elements: {descriptor!r}")
    if not np.all(np.isfinite(values)):
        raise ValueError(f"{name} descriptor must be finite: {descriptor!r}")
    return values.tolist()


def vogel_base_curve(diopters):
    """ front surface power for a spectacle lens, by Vogel's rule """
    if diopters >= 0.0:
        return diopters + 6.0
    else:
        return diopters/2.0 + 6.0


def _surface_radius(n_diff, power):
    """ radius, in mm, of a surface with `power` in 1/mm """
    if power == 0.0:
        return np.inf
    return n_diff/power


def spherical_surface(apex, radius, bounding_box, index, label, medium):
    """ a SurfaceRecord for a sphere (or plane) with its apex on the p1 axis
    """
    if np.isinf(radius):
        q = Quadric.plane([apex, 0., 0.], [1., 0., 0.])
        side = 1
    else:
        q = (Quadric.unit_sphere().scale(abs(radius))
             .translate([apex - radius, 0., 0.]))
        side = 1 if radius > 0.0 else -1
    return SurfaceRecord(q, side=side, bounding_box=bounding_box,
                         mandatory=True, index=index, label=label,
                         medium=medium)


def add_contact_lens(optical_system, descriptor, spectral_domain='nir'):
    """ return the optical system with a contact lens on its last surface

    The back surface of the lens follows the outermost surface of the eye,
    separated by a thin layer of tears. The front surface is a sphere
    chosen to give the requested power.

    Args:
        optical_system: system assembled in the eye to camera direction
        descriptor: [diopters] or [diopters, refractive index]
        spectral_domain: for the default index of the hydrogel lens
    """
    values = decode_descriptor(descriptor, 2, 'contact lens')
    diopters = values[0]
    if len(values) > 1:
        n_lens = values[1]
    else:
        n_lens = refractive_index('hydrogel', spectral_domain)
    n_tears = refractive_index('tears', spectral_domain)

    last = optical_system.surfaces[-1]
    n_medium, medium = last.index, last.medium

    t, apex_pt = last.quadric.intersect_ray(np.array([-30., 0., 0.]),
                                            np.array([1., 0., 0.]),
                                            side=last.side,
                                            bounding_box=last.bounding_box)
    offset = np.array([POST_LENS_TEAR_THICKNESS, 0., 0.])
    back = last.quadric.translate(offset)
    back_apex = apex_pt + offset
    r_back = 1.0/back.normal_curvature(back_apex, np.array([0., 1., 0.]))

    # back vertex power P = F1/(1 - t*F1/n) + F2
    f_back = (1.0 - n_lens)/r_back
    q = diopters/1000.0 - f_back
    f_front = q/(1.0 + CONTACT_LENS_THICKNESS*q/n_lens)
    r_front = _surface_radius(n_lens - 1.0, f_front)
    logger.debug("contact lens %.2f D: back radius %.3f, front radius %.3f",
                 diopters, r_back, r_front)

    back_srf = SurfaceRecord(back, side=last.side,
                             bounding_box=CONTACT_LENS_BBOX, mandatory=True,
                             index=n_lens, label='contactLens.back',
                             medium='contactLens')
    front_srf = spherical_surface(back_apex[0] + CONTACT_LENS_THICKNESS,
                                  r_front, CONTACT_LENS_BBOX, n_medium,
                                  'contactLens.front', medium)
    system = optical_system.with_index(-1, n_tears, medium='tears')
    return system.append(back_srf, front_srf)


def add_spectacle_lens(optical_system, descriptor, spectral_domain='nir'):
    """ return the optical system with a spectacle lens in front of the eye

    Args:
        optical_system: system assembled in the eye to camera direction
        descriptor: [diopters, refractive index, vertex distance, base curve]
                    with all but the power optional. The defaults are a
                    polycarbonate lens 12 mm from the corneal apex, with the
                    base curve given by Vogel's rule.
        spectral_domain: for the default index of the polycarbonate lens
    """
    values = decode_descriptor(descriptor, 4, 'spectacle lens')
    diopters = values[0]
    if len(values) > 1:
        n_lens = values[1]
    else:
        n_lens = refractive_index('polycarbonate', spectral_domain)
    vertex = values[2] if len(values) > 2 else SPECTACLE_VERTEX_DISTANCE
    base_curve = values[3] if len(values) > 3 else vogel_base_curve(diopters)

    last = optical_system.surfaces[-1]
    n_medium, medium = last.index, last.medium

    t = SPECTACLE_THICKNESS
    f_front = base_curve/1000.0
    f_back = diopters/1000.0 - f_front/(1.0 - t*f_front/n_lens)
    r_front = _surface_radius(n_lens - 1.0, f_front)
    r_back = _surface_radius(1.0 - n_lens, f_back)
    logger.debug("spectacle lens %.2f D: back radius %.3f, front radius %.3f",
                 diopters, r_back, r_front)

    w = SPECTACLE_HALF_WIDTH
    bbox = (vertex - w, vertex + t + w, -w, w, -w, w)
    back_srf = spherical_surface(vertex, r_back, bbox, n_lens,
                                 'spectacleLens.back', 'spectacleLens')
    front_srf = spherical_surface(vertex + t, r_front, bbox, n_medium,
                                  'spectacleLens.front', medium)
    return optical_system.append(back_srf, front_srf)
