#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 eyeoptics developers
""" Records describing a model eye

    An :class:`EyeModel` holds the anatomical surfaces of the eye, each a
    tuple of :class:`~.surface.SurfaceRecord` ordered from the back of the
    eye towards the camera, together with the aperture stop (pupil) and the
    centers of rotation.

    Coordinates are [p1, p2, p3] = [depth, horizontal, vertical] in mm, with
    the corneal apex at depth 0 and the eye at negative depth.

.. Created on Mon Mar 18 10:22:41 2024

.. codeauthor: eyeoptics developers
"""

import attr
import numpy as np
from math import sqrt

from eyeoptics.util.misc_math import axis_rotation


@attr.s(frozen=True)
class ConstantEccentricity():
    """ aperture eccentricity that does not vary with radius """
    value = attr.ib(default=0.0, converter=float)

    def __call__(self, radius):
        return self.value


@attr.s(frozen=True)
class SigmoidEccentricity():
    """ aperture eccentricity as a sigmoidal function of radius

    e(r) = (tanh((r + p0)*p1) + p2)*p3

    The sign of the result selects the orientation of the aperture ellipse,
    see :attr:`Pupil.thetas`.
    """
    params = attr.ib(default=(-1.749, -4.770, 0.099, -0.145),
                     converter=tuple)

    def __call__(self, radius):
        p0, p1, p2, p3 = self.params
        return (np.tanh((radius + p0)*p1) + p2)*p3


def _vec3(v):
    v = np.array(v, dtype=float)
    if v.shape != (3,):
        raise ValueError(f"expected a 3 vector, not shape {v.shape}")
    return v


@attr.s(frozen=True)
class Pupil():
    """ The aperture stop of the eye.

    Attributes:
        center: center of the aperture, [p1, p2, p3]
        eccentricity: callable returning the signed eccentricity for a radius
        thetas: tilt of the aperture ellipse major axis, in radians, used
                for negative and for positive eccentricity
    """
    center = attr.ib(converter=_vec3, eq=False)
    eccentricity = attr.ib(factory=ConstantEccentricity)
    thetas = attr.ib(default=(0.0, 0.0), converter=tuple)

    def ellipse(self, radius):
        """ semi-axes and tilt of an aperture of area pi*radius² """
        e = float(self.eccentricity(radius))
        theta = self.thetas[0] if e < 0 else self.thetas[1]
        e = abs(e)
        if e >= 1.0:
            raise ValueError(f"aperture eccentricity {e} is not elliptical")
        a = radius/(1.0 - e*e)**0.25
        b = a*sqrt(1.0 - e*e)
        return a, b, theta

    def boundary_points(self, radius, n_points=8):
        """ return n_points on the aperture boundary, as an (n, 3) array """
        a, b, theta = self.ellipse(radius)
        phi = np.linspace(0.0, 2.0*np.pi, n_points, endpoint=False)
        u = a*np.cos(phi)
        v = b*np.sin(phi)
        pts = np.zeros((n_points, 3))
        pts[:, 1] = u*np.cos(theta) - v*np.sin(theta)
        pts[:, 2] = u*np.sin(theta) + v*np.cos(theta)
        return pts + self.center


@attr.s(frozen=True)
class RotationCenters():
    """ the points the eye rotates about for each rotation axis """
    azimuth = attr.ib(converter=_vec3, eq=False)
    elevation = attr.ib(converter=_vec3, eq=False)
    torsion = attr.ib(converter=_vec3, eq=False)


@attr.s(frozen=True)
class EyeModel():
    """ The optical surfaces, aperture and rotation centers of an eye.

    Attributes:
        retina: tuple with the retinal surface record, entering vitreous
        lens: tuple of lens surface records, the last entering aqueous
        cornea: tuple of corneal surface records, the last one the tear film
        pupil: the :class:`Pupil`
        rotation_centers: the :class:`RotationCenters`
        spectral_domain: 'nir' or 'vis'
        laterality: 'Right' or 'Left'
        label: name of the eye model
    """
    retina = attr.ib(converter=tuple)
    lens = attr.ib(converter=tuple)
    cornea = attr.ib(converter=tuple)
    pupil = attr.ib()
    rotation_centers = attr.ib()
    spectral_domain = attr.ib(default='nir')
    laterality = attr.ib(default='Right')
    label = attr.ib(default='')

    def pose_transform(self, eye_pose):
        """ rigid motion of the eye for `eye_pose`.

        The eye turns by torsion about the p1 axis, then elevation about the
        p2 axis (positive up), then azimuth about the p3 axis (positive
        towards +p2), each about its own center of rotation.

        Returns:
            (rot, trns), so a point x of the eye moves to rot.dot(x) + trns
        """
        azi, ele, tor = eye_pose[0], eye_pose[1], eye_pose[2]
        ctrs = self.rotation_centers
        steps = ((axis_rotation([1., 0., 0.], tor), ctrs.torsion),
                 (axis_rotation([0., 1., 0.], -ele), ctrs.elevation),
                 (axis_rotation([0., 0., 1.], azi), ctrs.azimuth))
        rot = np.identity(3)
        trns = np.zeros(3)
        for r, c in steps:
            # x -> r.(x - c) + c
            rot = r.dot(rot)
            trns = r.dot(trns - c) + c
        return rot, trns
