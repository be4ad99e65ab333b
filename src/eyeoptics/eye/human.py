#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" A reference model of the emmetropic adult human eye

    Surface shapes and positions are literature values for an emmetropic
    adult eye. The crystalline lens is represented by front and back
    hyperboloids with nested iso-index shells between them that approximate
    its gradient index.

.. Created on Mon Mar 18 14:51:03 2024

.. codeauthor: eyeoptics developers
"""

import logging

import numpy as np
from math import sqrt

from eyeoptics.elem.quadric import Quadric
from eyeoptics.seq.medium import refractive_index
from eyeoptics.seq.surface import SurfaceRecord
from .eyemodel import (EyeModel, Pupil, RotationCenters, SigmoidEccentricity)

logger = logging.getLogger(__name__)

AXIAL_LENGTH = 23.58
TEAR_FILM_THICKNESS = 0.005

CORNEA_FRONT_RADII = (14.26, 10.43, 10.27)
CORNEA_BACK_RADII = (13.7716, 9.3027, 9.3027)
CORNEA_THICKNESS = 0.55
CORNEA_TILT = 1.5
CORNEA_BBOX = (-4., 0.1, -8., 8., -8., 8.)

RETINA_RADII = (10.1760, 11.4558, 11.3771)
RETINA_BBOX = (-24., -10., -12., 12., -12., 12.)

LENS_BACK_APEX = -7.3
LENS_FRONT_APEX = -3.7
LENS_BACK_RADII = (1.9667, 3.4064, 3.4064)
LENS_FRONT_RADII = (1.9133, 4.6867, 4.6867)
# iso-index shells: full size semi-axes and centers of the back and front
# halves of the lens nucleus
LENS_BACK_SHELL = ((2.16, 4.8, 4.8), -5.14)
LENS_FRONT_SHELL = ((1.44, 4.8, 4.8), -5.2053)
LENS_NUM_SHELLS = 5
LENS_BACK_BBOX = (-7.3, -5.14, -4., 4., -4., 4.)
LENS_FRONT_BBOX = (-5.14, -3.7, -4., 4., -4., 4.)

PUPIL_CENTER = (-3.7, 0., 0.)

ROTATION_CENTERS = {
    'azimuth': (-14.7, 0.79, 0.),
    'elevation': (-12.0, 0., 0.33),
    'torsion': (0., 0., 0.),
    }


def _mirror(lateral, vec):
    """ flip the horizontal coordinate for a left eye """
    vec = np.array(vec, dtype=float)
    if lateral == 'Left':
        vec[1] = -vec[1]
    return vec


def _retina(domain):
    n_vitreous = refractive_index('vitreous', domain)
    ctr = -(AXIAL_LENGTH - RETINA_RADII[0])
    q = Quadric.unit_sphere().scale(RETINA_RADII).translate([ctr, 0., 0.])
    return (SurfaceRecord(q, side=-1, bounding_box=RETINA_BBOX,
                          mandatory=True, index=n_vitreous,
                          label='retina', medium='vitreous'),)


def _lens(domain):
    n_cortex = refractive_index('lens.cortex', domain)
    n_nucleus = refractive_index('lens.nucleus', domain)
    n_aqueous = refractive_index('aqueous', domain)

    back = (Quadric.unit_two_sheet_hyperboloid().scale(LENS_BACK_RADII)
            .translate([LENS_BACK_APEX - LENS_BACK_RADII[0], 0., 0.]))
    srfs = [SurfaceRecord(back, side=-1, bounding_box=LENS_BACK_BBOX,
                          mandatory=True, index=n_cortex,
                          label='lens.back', medium='lens')]

    n_vals = np.linspace(n_cortex, n_nucleus, LENS_NUM_SHELLS + 2)
    radii, ctr = LENS_BACK_SHELL
    for i in range(1, LENS_NUM_SHELLS + 1):
        frac = 1.0 - i/(LENS_NUM_SHELLS + 1)
        q = (Quadric.unit_sphere().scale(sqrt(frac)*np.array(radii))
             .translate([ctr, 0., 0.]))
        srfs.append(SurfaceRecord(q, side=-1, bounding_box=LENS_BACK_BBOX,
                                  mandatory=False, index=n_vals[i+1],
                                  label=f'lens.back.shell{i}', medium='lens'))

    n_vals = n_vals[::-1]
    radii, ctr = LENS_FRONT_SHELL
    for i in range(1, LENS_NUM_SHELLS + 1):
        frac = i/(LENS_NUM_SHELLS + 1)
        q = (Quadric.unit_sphere().scale(sqrt(frac)*np.array(radii))
             .translate([ctr, 0., 0.]))
        srfs.append(SurfaceRecord(q, side=1, bounding_box=LENS_FRONT_BBOX,
                                  mandatory=False, index=n_vals[i],
                                  label=f'lens.front.shell{i}',
                                  medium='lens'))

    front = (Quadric.unit_two_sheet_hyperboloid().scale(LENS_FRONT_RADII)
             .translate([LENS_FRONT_APEX + LENS_FRONT_RADII[0], 0., 0.]))
    srfs.append(SurfaceRecord(front, side=1, bounding_box=LENS_FRONT_BBOX,
                              mandatory=True, index=n_aqueous,
                              label='lens.front', medium='aqueous'))
    return tuple(srfs)


def _cornea(domain, lateral):
    n_cornea = refractive_index('cornea', domain)
    n_tears = refractive_index('tears', domain)
    tilt = [0., 0., CORNEA_TILT if lateral == 'Right' else -CORNEA_TILT]

    back = (Quadric.unit_sphere().scale(CORNEA_BACK_RADII).rotate(tilt)
            .translate([-CORNEA_THICKNESS - CORNEA_BACK_RADII[0], 0., 0.]))
    front = (Quadric.unit_sphere().scale(CORNEA_FRONT_RADII).rotate(tilt)
             .translate([-CORNEA_FRONT_RADII[0], 0., 0.]))
    tear = front.translate([TEAR_FILM_THICKNESS, 0., 0.])

    return (SurfaceRecord(back, side=1, bounding_box=CORNEA_BBOX,
                          mandatory=True, index=n_cornea,
                          label='cornea.back', medium='cornea'),
            SurfaceRecord(front, side=1, bounding_box=CORNEA_BBOX,
                          mandatory=True, index=n_tears,
                          label='cornea.front', medium='tears'),
            SurfaceRecord(tear, side=1, bounding_box=CORNEA_BBOX,
                          mandatory=True, index=1.0,
                          label='cornea.tearfilm', medium='air'))


def human_eye(spectral_domain='nir', laterality='Right', **kwargs):
    """ create the reference human :class:`~.eyemodel.EyeModel`

    Args:
        spectral_domain: 'nir' or 'vis'
        laterality: 'Right' or 'Left'
        pupil_eccentricity: callable replacing the default
                            :class:`~.eyemodel.SigmoidEccentricity`
        pupil_center: replaces the default aperture center
    """
    unknown = set(kwargs) - {'pupil_eccentricity', 'pupil_center'}
    if unknown:
        raise TypeError(f"unexpected eye keywords: {sorted(unknown)}")
    if laterality not in ('Right', 'Left'):
        raise ValueError(f"laterality must be 'Right' or 'Left', "
                         f"not {laterality!r}")
    if laterality == 'Right':
        thetas = (0.0, 3.0*np.pi/7.0)
    else:
        thetas = (np.pi, 4.0*np.pi/7.0)

    eccentricity = kwargs.get('pupil_eccentricity', SigmoidEccentricity())
    center = kwargs.get('pupil_center', PUPIL_CENTER)
    pupil = Pupil(_mirror(laterality, center), eccentricity, thetas)

    ctrs = RotationCenters(
        *(_mirror(laterality, ROTATION_CENTERS[k])
          for k in ('azimuth', 'elevation', 'torsion')))

    logger.debug("building %s %s human eye", laterality, spectral_domain)
    return EyeModel(retina=_retina(spectral_domain),
                    lens=_lens(spectral_domain),
                    cornea=_cornea(spectral_domain, laterality),
                    pupil=pupil,
                    rotation_centers=ctrs,
                    spectral_domain=spectral_domain,
                    laterality=laterality,
                    label='human')
