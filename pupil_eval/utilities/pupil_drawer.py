# ruff: noqa: BLE001, TRY400
"""Debug overlays for the coarse scan and the outline contrast estimator."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import cv2

from pupil_eval.detection.pupil_types import Pupil, Rect
from pupil_eval.ports.interfaces import ICoarseObserver, IOutlineObserver
from pupil_eval.utilities.logger_setup import setup_logger

logger = setup_logger("PupilDrawer")

# BGR
red = (0, 0, 255)
green = (0, 255, 0)
yellow = (0, 255, 255)


def _to_bgr(source: np.ndarray) -> np.ndarray:
    if source.ndim == 2:
        return cv2.cvtColor(source, cv2.COLOR_GRAY2BGR)
    return source.copy()


def draw_pupil(source: np.ndarray, pupil: Pupil, color=yellow, thickness: int = 1) -> np.ndarray:
    """Draw the hypothesis outline and a cross at its center."""
    canvas = _to_bgr(source)
    if not pupil.has_outline():
        return canvas
    try:
        cv2.ellipse(canvas, pupil.to_rotated_rect(), color, thickness)
        place_cross(canvas, pupil.center, color, 1, 6)
    except Exception as e:
        logger.error("Pupil mark error: %s", e)
    return canvas


def place_cross(
    source: np.ndarray,
    center: tuple[float, float],
    color: tuple[int, int, int],
    thickness: int,
    size: int,
) -> None:
    """Place a cross at the specified center on the source image."""
    cx, cy = int(round(center[0])), int(round(center[1]))
    cv2.line(source, (cx - size, cy), (cx + size, cy), color, thickness)
    cv2.line(source, (cx, cy - size), (cx, cy + size), color, thickness)


class CoarseDebugDrawer(ICoarseObserver):
    """Renders the merged candidates of the coarse scan, upscaled to the frame size."""

    def __init__(self) -> None:
        self.image: np.ndarray | None = None

    def on_coarse_result(
        self,
        downscaled: np.ndarray,
        candidates: Sequence[tuple[Rect, float]],
        used: int,
        coarse: Rect,
        scale: float,
    ) -> None:
        dbg = _to_bgr(downscaled)
        try:
            for rect, _ in candidates[:used]:
                cv2.rectangle(dbg, (rect.x, rect.y), rect.br, yellow)
            if not coarse.empty:
                cv2.rectangle(dbg, (coarse.x, coarse.y), coarse.br, green)
            dbg = cv2.resize(dbg, None, fx=scale, fy=scale, interpolation=cv2.INTER_NEAREST)
        except Exception as e:
            logger.error("Coarse overlay error: %s", e)
        self.image = dbg


class OutlineDebugDrawer(IOutlineObserver):
    """Collects contrast segments, green if they support the outline, red otherwise."""

    def __init__(self) -> None:
        self.segments: list[tuple[tuple[int, int], tuple[int, int], bool]] = []
        self.image: np.ndarray | None = None

    def on_outline_segment(self, start, end, valid) -> None:
        self.segments.append((start, end, valid))

    def on_outline_done(self, frame: np.ndarray, pupil: Pupil, score: float) -> None:
        canvas = draw_pupil(frame, pupil)
        try:
            for start, end, valid in self.segments:
                cv2.line(canvas, start, end, green if valid else red)
        except Exception as e:
            logger.error("Segment overlay error: %s", e)
        logger.debug("Outline contrast %.3f over %d segments", score, len(self.segments))
        self.segments = []
        self.image = canvas
