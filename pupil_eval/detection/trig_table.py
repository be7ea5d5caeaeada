# Adapted from PuRe / PupilEXT. Copyright (c) 2018, Thiago Santini / University of Tuebingen.
# Free for academic use; the full license terms are in the NOTICE file.
"""Precomputed sine samples for integer degrees.

Indices 0..450 are stored so that the cosine of any angle in [0, 360] can be
read as SIN_TABLE[450 - angle] (cos(a) == sin(90 + a) == sin(450 - a)).
"""

import numpy as np

TABLE_SIZE = 451

SIN_TABLE = np.round(np.sin(np.deg2rad(np.arange(TABLE_SIZE))), 7).astype(np.float32)
SIN_TABLE.flags.writeable = False


def sincos(angle: int) -> tuple[float, float]:
    """Return (cos, sin) of an integer angle in degrees, within [-360, 360]."""
    if angle < 0:
        angle += 360
    return float(SIN_TABLE[450 - angle]), float(SIN_TABLE[angle])
