# Adapted from PuRe / PupilEXT. Copyright (c) 2018, Thiago Santini / University of Tuebingen.
# Free for academic use; the full license terms are in the NOTICE file.
"""Discrete outline sampling of an elliptical pupil hypothesis."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pupil_eval.detection.pupil_types import Pupil
from pupil_eval.detection.trig_table import SIN_TABLE, sincos
from pupil_eval.utilities.logger_setup import setup_logger

logger = setup_logger("EllipseSampler")


def round_half_away(values: ArrayLike) -> NDArray[np.float64]:
    """Round to the nearest integer, ties away from zero (np.round ties to even)."""
    values = np.asarray(values, dtype=np.float64)
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def normalize_angle(angle: float) -> int:
    """Truncate to whole degrees and shift by full turns into [0, 360]."""
    deg = int(angle)
    while deg < 0:
        deg += 360
    while deg > 360:
        deg -= 360
    return deg


def ellipse_to_points(pupil: Pupil, delta: int = 1) -> NDArray[np.int32]:
    """Sample the outline of the hypothesis every `delta` degrees.

    Args:
        pupil: Ellipse to sample; its size holds the full axes lengths.
        delta: Angular step in degrees, a positive integer.

    Returns:
        (360 / delta, 2) int32 array of (x, y) pixel coordinates, ordered by
        increasing parametric angle starting at 0 degrees.

    A degenerate ellipse (zero axis) collapses to coincident points; check
    `pupil.has_outline()` before relying on the result.
    """
    if int(delta) != delta or delta <= 0:
        error = f"Sampling step must be a positive integer, got {delta!r}"
        logger.error(error)
        raise ValueError(error)

    alpha, beta = sincos(normalize_angle(pupil.angle))

    steps = np.arange(0, 360, int(delta))
    x = 0.5 * pupil.size[0] * SIN_TABLE[450 - steps].astype(np.float64)
    y = 0.5 * pupil.size[1] * SIN_TABLE[steps].astype(np.float64)

    px = round_half_away(pupil.center[0] + x * alpha - y * beta)
    py = round_half_away(pupil.center[1] + x * beta + y * alpha)
    return np.stack((px, py), axis=1).astype(np.int32)
