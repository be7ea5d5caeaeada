# Adapted from PuRe / PupilEXT. Copyright (c) 2018, Thiago Santini / University of Tuebingen.
# Free for academic use; the full license terms are in the NOTICE file.
"""Coarse pupil localization with a multi-scale Haar-like center-surround scan.

The feature follows Swirski et al., "Robust real-time pupil tracking in highly
off-axis images" (ETRA 2012), but per-pixel maxima are collected instead of a
single global one and merged into a region of interest.
"""

from __future__ import annotations

import math
from typing import Optional

import cv2
import numpy as np
from numpy.typing import NDArray

from pupil_eval.detection.pupil_types import Rect
from pupil_eval.ports.interfaces import ICoarseObserver
from pupil_eval.utilities.logger_setup import setup_logger

logger = setup_logger("CoarseLocalizer")

# Pupil radius bounds as fractions of the image diagonal
MIN_RADIUS_FRACTION = 0.5 * 0.07
MAX_RADIUS_FRACTION = 0.5 * 0.29
# Candidates weaker than this fraction of the best response so far are dropped
PRUNE_RATIO = 0.5


def check_frame(frame: NDArray[np.uint8]) -> None:
    """Reject frames that are not non-empty 2D uint8 images."""
    if not isinstance(frame, np.ndarray) or frame.ndim != 2:
        error = "Frame must be a 2D grayscale numpy array."
        logger.error(error)
        raise ValueError(error)
    if frame.size == 0:
        error = f"Frame must not be empty, got shape {frame.shape}."
        logger.error(error)
        raise ValueError(error)
    if frame.dtype != np.uint8:
        error = f"Frame must be uint8, got {frame.dtype}."
        logger.error(error)
        raise ValueError(error)


def _downscale(frame: NDArray[np.uint8], working_width: int, working_height: int):
    """Shrink uniformly so the image fits the working size; returns (image, factor)."""
    rows, cols = frame.shape
    fr = max(cols / float(working_width), rows / float(working_height))
    size = (max(1, round(cols / fr)), max(1, round(rows / fr)))
    return cv2.resize(frame, size, interpolation=cv2.INTER_LINEAR), fr


def _scan(downscaled: NDArray[np.uint8]) -> list[tuple[Rect, float]]:
    """Collect per-pixel maxima of the center-surround response, in scan order."""
    rows, cols = downscaled.shape

    ystep = int(max(0.01 * rows, 1.0))
    xstep = int(max(0.01 * cols, 1.0))

    d = math.sqrt(rows ** 2 + cols ** 2)
    min_r = int(MIN_RADIUS_FRACTION * d)
    max_r = int(MAX_RADIUS_FRACTION * d)
    r_step = int(max(0.2 * (max_r + min_r), 1.0))

    # TODO: pad the image so windows touching the border get evaluated too.
    itg = cv2.integral(downscaled, sdepth=cv2.CV_32S).astype(np.int64)
    res = np.zeros((rows, cols), dtype=np.float64)
    best_response = float(np.finfo(np.float32).tiny)

    candidates: list[tuple[Rect, float]] = []

    for r in range(min_r, max_r + 1, r_step):
        if r < 1:
            continue  # no pixels in the inner window
        step = 3 * r

        ys = np.arange(step, rows - step, ystep)
        xs = np.arange(step, cols - step, xstep)
        if ys.size == 0 or xs.size == 0:
            continue
        yy, xx = np.meshgrid(ys, xs, indexing="ij")
        yy = yy.ravel()
        xx = xx.ravel()

        inner = (itg[yy + r, xx + r] + itg[yy - r, xx - r]
                 - itg[yy - r, xx + r] - itg[yy + r, xx - r])
        outer = (itg[yy + step, xx + step] + itg[yy - step, xx - step]
                 - itg[yy - step, xx + step] - itg[yy + step, xx - step] - inner)

        inner_count = (2 * r) * (2 * r)
        outer_count = (2 * step) * (2 * step) - inner_count
        response = outer / (255.0 * outer_count) - inner / (255.0 * inner_count)

        # Running best seen before each position, in raster order
        running = np.maximum.accumulate(response)
        previous_best = np.empty_like(response)
        previous_best[0] = best_response
        previous_best[1:] = np.maximum(running[:-1], best_response)
        best_response = max(best_response, float(running[-1]))

        keep = response >= PRUNE_RATIO * previous_best
        improved = keep & (response > res[yy, xx])
        res[yy[improved], xx[improved]] = response[improved]

        # Half way between the inner and the outer window
        half = 2 * r
        for idx in np.flatnonzero(improved):
            x = int(xx[idx])
            y = int(yy[idx])
            candidates.append((Rect(x - half, y - half, 2 * half, 2 * half), float(response[idx])))

    logger.debug("Scan on %dx%d: radii %d..%d step %d, best %.4f, %d candidates",
                 cols, rows, min_r, max_r, r_step, best_response, len(candidates))
    return candidates


def coarse_pupil_detection(
    frame: NDArray[np.uint8],
    min_coverage: float = 0.5,
    working_width: int = 60,
    working_height: int = 40,
    observer: Optional[ICoarseObserver] = None,
) -> Rect:
    """Narrow a frame down to the region most likely holding the pupil.

    Args:
        frame: 2D uint8 grayscale image.
        min_coverage: Merge candidates until the region spans more than this
            fraction of the (downscaled) width and height.
        working_width: Width of the image the scan runs on.
        working_height: Height of the image the scan runs on.
        observer: Optional receiver of the intermediate scan results.

    Returns:
        A non-empty rectangle inside the frame; the full frame when no
        candidate region was found.
    """
    check_frame(frame)
    if working_width <= 0 or working_height <= 0:
        error = f"Working size must be positive, got {working_width}x{working_height}."
        logger.error(error)
        raise ValueError(error)

    downscaled, fr = _downscale(frame, working_width, working_height)
    candidates = _scan(downscaled)
    candidates.sort(key=lambda c: c[1], reverse=True)

    rows, cols = downscaled.shape
    min_width = int(min_coverage * cols)
    min_height = int(min_coverage * rows)

    coarse = Rect()
    used = 0
    for rect, _ in candidates:
        coarse = rect if coarse.area == 0 else coarse | rect
        used += 1
        if coarse.width > min_width and coarse.height > min_height:
            break

    if observer is not None:
        observer.on_coarse_result(downscaled, candidates, used, coarse, fr)

    im_roi = Rect.from_shape(frame.shape)
    coarse = coarse.scaled(fr) & im_roi
    if coarse.area == 0:
        logger.info("No coarse pupil region found, using the full frame.")
        return im_roi

    return coarse
