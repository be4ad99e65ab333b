""" package supplying vector math and rotation helpers

    The :mod:`~.util` subpackage provides the shared vector helpers used by
    the geometry, ray trace and pose modules, in :mod:`~.misc_math`.
"""
