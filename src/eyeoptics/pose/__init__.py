""" Package for estimating the pose of an eye from its imaged pupil

    The :mod:`~.pose` subpackage provides:

        - Ellipse fitting, distances and parameter conversions,
          :mod:`~.ellipse`
        - Forward projection of the pupil into the camera image,
          :mod:`~.projection`
        - Precomputed eye pose grids for initial guesses, :mod:`~.posegrid`
        - The inverse estimator, :func:`~.posefit.fit_eye_pose`
"""
