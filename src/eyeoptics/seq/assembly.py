#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Assemble the sequential optical system for a path through the eye

    The surface sets available are:

        - **retinaToCamera**, **cameraToRetina**: the whole eye, with any
          corrective lenses
        - **retinaToStop**, **stopToRetina**: retina and crystalline lens,
          ending in the aqueous humor at the aperture stop
        - **stopToCamera**, **cameraToStop**: the cornea, with any
          corrective lenses
        - **glint**: from the camera to the tear film, reflected there, and
          back out to the camera

    Every set is built in the eye to camera direction and then reversed if
    the name calls for it.

.. Created on Tue Mar 19 14:20:32 2024

.. codeauthor: eyeoptics developers
"""

import logging

from .medium import refractive_index
from .sequential import OpticalSystem
from .lenses import add_contact_lens, add_spectacle_lens

logger = logging.getLogger(__name__)

surface_sets = ('retinaToCamera', 'cameraToRetina',
                'retinaToStop', 'stopToRetina',
                'stopToCamera', 'cameraToStop',
                'glint')


def _medium_label(medium):
    return medium if isinstance(medium, str) else 'medium'


def _outward(srfs, start, n_medium, medium):
    """ eye to camera system over `srfs`, starting in surface `start`'s
    medium and ending in the camera medium
    """
    system = OpticalSystem(start.index, srfs, initial_label=start.medium)
    return system.with_index(-1, n_medium, medium=medium)


def _add_lenses(system, contact_lens, spectacle_lens, spectral_domain):
    if contact_lens is not None:
        system = add_contact_lens(system, contact_lens, spectral_domain)
    if spectacle_lens is not None:
        system = add_spectacle_lens(system, spectacle_lens, spectral_domain)
    return system


def assemble_optical_system(eye, surface_set_name='stopToCamera',
                            camera_medium='air', contact_lens=None,
                            spectacle_lens=None, num_rows=None):
    """ create the :class:`~.sequential.OpticalSystem` for a path.

    Args:
        eye: the :class:`~eyeoptics.eye.eyemodel.EyeModel`
        surface_set_name: one of :data:`surface_sets`
        camera_medium: name or index of the medium between eye and camera,
                       default 'air'
        contact_lens: [diopters] or [diopters, index], default None
        spectacle_lens: [diopters, index, vertex distance, base curve], all
                        but diopters optional, default None
        num_rows: if given, return the fixed size matrix form padded to
                  this many rows instead of the OpticalSystem

    Raises:
        ValueError: for an unknown surface set or a bad lens descriptor
    """
    domain = eye.spectral_domain
    n_medium = refractive_index(camera_medium, domain)
    medium = _medium_label(camera_medium)

    if surface_set_name in ('retinaToCamera', 'cameraToRetina'):
        srfs = eye.retina + eye.lens + eye.cornea
        system = _outward(srfs, eye.retina[0], n_medium, medium)
        system = _add_lenses(system, contact_lens, spectacle_lens, domain)
        if surface_set_name == 'cameraToRetina':
            system = system.reverse()

    elif surface_set_name in ('retinaToStop', 'stopToRetina'):
        if contact_lens is not None or spectacle_lens is not None:
            logger.debug("corrective lenses do not apply to %s",
                         surface_set_name)
        srfs = eye.retina + eye.lens
        system = OpticalSystem(eye.retina[0].index, srfs,
                               initial_label=eye.retina[0].medium)
        if surface_set_name == 'stopToRetina':
            system = system.reverse()

    elif surface_set_name in ('stopToCamera', 'cameraToStop'):
        system = _outward(eye.cornea, eye.lens[-1], n_medium, medium)
        system = _add_lenses(system, contact_lens, spectacle_lens, domain)
        if surface_set_name == 'cameraToStop':
            system = system.reverse()

    elif surface_set_name == 'glint':
        tear_film = eye.cornea[-1:]
        outward = _outward(tear_film, eye.cornea[-2], n_medium, medium)
        outward = _add_lenses(outward, contact_lens, spectacle_lens, domain)
        inward = outward.reverse()
        # the ray reflects from the tear film back into the medium it came in
        if len(inward) > 1:
            n_arrive, arrive_medium = inward[-2].index, inward[-2].medium
        else:
            n_arrive, arrive_medium = (inward.initial_index,
                                       inward.initial_label)
        system = inward.with_index(-1, -abs(n_arrive), medium=arrive_medium)
        system = system.append(*outward.surfaces[1:])

    else:
        raise ValueError(f"unknown surface set: {surface_set_name!r}")

    logger.debug("assembled %s with %d surfaces", surface_set_name,
                 len(system))
    if num_rows is not None:
        return system.padded(num_rows)
    return system
