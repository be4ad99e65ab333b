#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Module building on :mod:`opticalglass` for ocular media support

    Refractive indices of the ocular media, tear film, immersion media and
    corrective lens materials. Dispersion is not modeled; each medium has a
    constant index within a spectral domain:

        - **vis**: visible light, evaluated at 555 nm
        - **nir**: near infrared light, evaluated at 950 nm

.. Created on Thu Mar 14 11:05:37 2024

.. codeauthor: eyeoptics developers
"""
import logging

from opticalglass import opticalmedium as om

from eyeoptics.util.misc_math import isanumber

logger = logging.getLogger(__name__)

spectral_wavelengths = {
    'vis': 555.0,
    'nir': 950.0,
    }

# medium name: (vis, nir)
_medium_indices = {
    'air': (1.0, 1.0),
    'water': (1.3330, 1.3270),
    'tears': (1.3361, 1.3303),
    'cornea': (1.3760, 1.3747),
    'aqueous': (1.3360, 1.3335),
    'lens.cortex': (1.3860, 1.3710),
    'lens.nucleus': (1.4060, 1.4180),
    'vitreous': (1.3360, 1.3571),
    'hydrogel': (1.4280, 1.4190),
    'polycarbonate': (1.5860, 1.5700),
    'cr39': (1.4980, 1.4900),
    }


def medium_names():
    """ the list of media with known indices """
    return list(_medium_indices.keys())


def spectral_wavelength(spectral_domain):
    """ return the wavelength, in nm, that stands for `spectral_domain` """
    try:
        return spectral_wavelengths[spectral_domain]
    except KeyError:
        raise ValueError(f"unknown spectral domain: {spectral_domain}")


def decode_medium(medium, spectral_domain='nir') -> om.OpticalMedium:
    """ Input utility for parsing the forms of medium input.

    The **medium** can be:

        - a medium name from the index table, e.g. 'aqueous' or 'hydrogel'
        - **air**: str -> :class:`opticalglass.opticalmedium.Air`
        - **refractive_index**: float ->
          :class:`opticalglass.opticalmedium.ConstantIndex`
        - an instance with a `rindex` attribute, returned as is
    """
    if isanumber(medium):
        n = float(medium)
        logger.debug("medium given as refractive index %f", n)
        if n == 1.0:
            return om.Air()
        return om.ConstantIndex(n, f"n:{n:.4f}")

    elif isinstance(medium, str):
        name = medium.strip().lower()
        if name == 'air':
            return om.Air()
        spectral_wavelength(spectral_domain)
        domain = 1 if spectral_domain == 'nir' else 0
        if name not in _medium_indices:
            raise ValueError(f"unknown medium: {medium!r}, known media are "
                             f"{', '.join(medium_names())}")
        return om.ConstantIndex(_medium_indices[name][domain], name)

    # medium instances. if they respond to `rindex`, they're in
    elif hasattr(medium, 'rindex'):
        return medium

    raise ValueError(f"cannot decode medium: {medium!r}")


def refractive_index(medium, spectral_domain='nir'):
    """ return the refractive index of `medium` in `spectral_domain` """
    wvl = spectral_wavelength(spectral_domain)
    return float(decode_medium(medium, spectral_domain).rindex(wvl))
