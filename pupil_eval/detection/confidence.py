# Adapted from PuRe / PupilEXT. Copyright (c) 2018, Thiago Santini / University of Tuebingen.
# Free for academic use; the full license terms are in the NOTICE file.
"""Confidence estimators scoring a pupil hypothesis against the image.

Every estimator is a pure function of its inputs and returns a score in
[0, 1], or NO_CONFIDENCE when the hypothesis cannot be evaluated.
"""

from __future__ import annotations

from typing import Optional

import cv2
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pupil_eval.detection.coarse_localizer import check_frame
from pupil_eval.detection.ellipse_sampler import ellipse_to_points, round_half_away
from pupil_eval.detection.pupil_types import NO_CONFIDENCE, ConfidenceValue, Pupil, Rect
from pupil_eval.ports.interfaces import IOutlineObserver
from pupil_eval.utilities.logger_setup import setup_logger

logger = setup_logger("Confidence")

# Half length of the contrast segments relative to the minor axis
SEGMENT_FRACTION = 0.15


def _side_mean(frame: NDArray[np.uint8], ys: NDArray, xs: NDArray, delta: int) -> float:
    return float(round_half_away(frame[ys, xs].sum(dtype=np.int64) / float(delta)))


def _outline_done(
    observer: Optional[IOutlineObserver],
    frame: NDArray[np.uint8],
    pupil: Pupil,
    score: float,
) -> float:
    if observer is not None:
        observer.on_outline_done(frame, pupil, score)
    return score


def outline_contrast_confidence(
    frame: NDArray[np.uint8],
    pupil: Pupil,
    bias: int = 5,
    step: int = 10,
    observer: Optional[IOutlineObserver] = None,
) -> ConfidenceValue:
    """Fraction of outline points with a darker inside than outside.

    Follows the inner-outer contrast measure of PuRe (Santini, Fuhl and
    Kasneci, "PuRe: Robust pupil detection for real-time pervasive eye
    tracking"). For each sampled outline point a short segment along the ray
    from the center is read; the point supports the hypothesis when the
    mean on the outer side exceeds the inner one by more than `bias`.
    Segments leaving the frame are not evaluated.
    """
    check_frame(frame)
    if not pupil.has_outline():
        logger.debug("No outline, contrast not applicable.")
        return NO_CONFIDENCE

    rows, cols = frame.shape
    boundaries = Rect(0, 0, cols, rows)
    minor_axis = int(pupil.minor_axis)
    delta = int(SEGMENT_FRACTION * minor_axis)
    if delta == 0:
        logger.debug("Minor axis %d too short for contrast segments.", minor_axis)
        return _outline_done(observer, frame, pupil, 0.0)
    cx = round(pupil.center[0])
    cy = round(pupil.center[1])

    evaluated = 0
    valid_count = 0

    for px, py in ellipse_to_points(pupil, step):
        px = int(px)
        py = int(py)
        dx = px - cx
        dy = py - cy

        a = dy / dx if dx != 0 else 0.0
        b = cy - a * cx

        # Points straight above/below or beside the center
        if a == 0:
            continue

        if abs(dx) > abs(dy):
            sx = px - delta
            ex = px + delta
            start = (sx, int(round_half_away(a * sx + b)))
            end = (ex, int(round_half_away(a * ex + b)))
            if not boundaries.contains(start) or not boundaries.contains(end):
                continue
            evaluated += 1

            before = np.arange(sx, px)
            after = np.arange(px + 1, ex + 1)
            m1 = _side_mean(frame, round_half_away(a * before + b).astype(np.intp), before, delta)
            m2 = _side_mean(frame, round_half_away(a * after + b).astype(np.intp), after, delta)
            outer_first = px < cx  # left of the center
        else:
            sy = py - delta
            ey = py + delta
            start = (int(round_half_away((sy - b) / a)), sy)
            end = (int(round_half_away((ey - b) / a)), ey)
            if not boundaries.contains(start) or not boundaries.contains(end):
                continue
            evaluated += 1

            before = np.arange(sy, py)
            after = np.arange(py + 1, ey + 1)
            m1 = _side_mean(frame, before, round_half_away((before - b) / a).astype(np.intp), delta)
            m2 = _side_mean(frame, after, round_half_away((after - b) / a).astype(np.intp), delta)
            outer_first = py < cy  # above the center

        if outer_first:
            is_valid = m1 > m2 + bias
        else:
            is_valid = m2 > m1 + bias
        if is_valid:
            valid_count += 1

        if observer is not None:
            observer.on_outline_segment(start, end, is_valid)

    score = valid_count / float(evaluated) if evaluated else 0.0
    return _outline_done(observer, frame, pupil, score)


def angular_spread_confidence(points: ArrayLike, center: tuple[float, float]) -> float:
    """Fraction of the four quadrants around `center` holding at least one point."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if pts.shape[0] == 0:
        return 0.0

    left = (pts[:, 0] - center[0]) < 0
    top = (pts[:, 1] - center[1]) < 0

    quadrants = (
        left & top,     # Q0
        ~left & top,    # Q1
        ~left & ~top,   # Q2
        left & ~top,    # Q3
    )
    return sum(bool(q.any()) for q in quadrants) / float(len(quadrants))


def aspect_ratio_confidence(pupil: Pupil) -> ConfidenceValue:
    """Minor over major axis: 1 for a circle, towards 0 as it elongates."""
    if not pupil.has_outline():
        return NO_CONFIDENCE
    return pupil.minor_axis / float(pupil.major_axis)


def edge_ratio_confidence(
    edges: NDArray,
    pupil: Pupil,
    band: int = 5,
) -> tuple[ConfidenceValue, NDArray[np.int32]]:
    """Share of the outline covered by edge pixels.

    Args:
        edges: Binary edge image (non-zero or True marks an edge).
        pupil: Hypothesis to score.
        band: Thickness of the band drawn around the outline (px).

    Returns:
        (score, points): score is min(edge pixels in band / circumference, 1),
        points the (N, 2) int32 (x, y) coordinates of those edge pixels.
    """
    no_points = np.empty((0, 2), dtype=np.int32)

    if not isinstance(edges, np.ndarray) or edges.ndim != 2 or edges.size == 0:
        error = "Edge map must be a non-empty 2D numpy array."
        logger.error(error)
        raise ValueError(error)

    if not pupil.valid(edges.shape):
        logger.debug("Invalid hypothesis, edge ratio not applicable.")
        return NO_CONFIDENCE, no_points

    if edges.dtype == np.bool_:
        edges = edges.astype(np.uint8) * 255
    elif edges.dtype != np.uint8:
        edges = (edges != 0).astype(np.uint8) * 255

    outline_mask = np.zeros(edges.shape, dtype=np.uint8)
    cv2.ellipse(outline_mask, pupil.to_rotated_rect(), 255, int(band))

    in_band = edges.copy()
    in_band[outline_mask != 255] = 0
    found = cv2.findNonZero(in_band)
    points = no_points if found is None else found.reshape(-1, 2).astype(np.int32)

    return min(points.shape[0] / pupil.circumference, 1.0), points
