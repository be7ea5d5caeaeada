"""Datatypes for the detection module."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Optional

import numpy as np

# Typed "not applicable" result of a confidence estimator.
NO_CONFIDENCE = None

ConfidenceValue = Optional[float]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned integer rectangle (top-left corner, width, height)."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @classmethod
    def from_shape(cls, shape: tuple[int, ...]) -> Rect:
        """Rectangle covering a whole image of the given numpy shape."""
        return cls(0, 0, int(shape[1]), int(shape[0]))

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def br(self) -> tuple[int, int]:
        """Bottom-right corner (exclusive)."""
        return (self.x + self.width, self.y + self.height)

    def contains(self, point: tuple[float, float]) -> bool:
        """Half-open containment, same as cv::Rect::contains."""
        return (self.x <= point[0] < self.x + self.width
                and self.y <= point[1] < self.y + self.height)

    def scaled(self, factor: float) -> Rect:
        """Every field multiplied by factor and truncated toward zero."""
        return Rect(int(self.x * factor), int(self.y * factor),
                    int(self.width * factor), int(self.height * factor))

    def __or__(self, other: Rect) -> Rect:
        if self.empty:
            return other
        if other.empty:
            return self
        x1 = min(self.x, other.x)
        y1 = min(self.y, other.y)
        x2 = max(self.x + self.width, other.x + other.width)
        y2 = max(self.y + self.height, other.y + other.height)
        return Rect(x1, y1, x2 - x1, y2 - y1)

    def __and__(self, other: Rect) -> Rect:
        x1 = max(self.x, other.x)
        y1 = max(self.y, other.y)
        x2 = min(self.x + self.width, other.x + other.width)
        y2 = min(self.y + self.height, other.y + other.height)
        if x2 <= x1 or y2 <= y1:
            return Rect()
        return Rect(x1, y1, x2 - x1, y2 - y1)


@dataclass
class Pupil:
    """Elliptical pupil hypothesis.

    `size` holds the full axes lengths (width, height) like cv2.RotatedRect;
    `angle` is the rotation in degrees.
    """

    center: tuple[float, float] = (-1.0, -1.0)
    size: tuple[float, float] = (-1.0, -1.0)
    angle: float = -1.0
    confidence: ConfidenceValue = NO_CONFIDENCE

    def to_rotated_rect(self) -> tuple[tuple[float, float], tuple[float, float], float]:
        return (tuple(self.center), tuple(self.size), self.angle)

    @property
    def minor_axis(self) -> float:
        return min(self.size[0], self.size[1])

    @property
    def major_axis(self) -> float:
        return max(self.size[0], self.size[1])

    @property
    def circumference(self) -> float:
        """Ramanujan's approximation of the ellipse perimeter."""
        a = 0.5 * self.major_axis
        b = 0.5 * self.minor_axis
        return math.pi * abs(3 * (a + b) - math.sqrt(10 * a * b + 3 * (a ** 2 + b ** 2)))

    def has_outline(self) -> bool:
        return self.size[0] > 0 and self.size[1] > 0

    def valid(self, frame_shape: tuple[int, ...] | None = None) -> bool:
        """True if the center is positive, both axes are positive and,
        when a frame shape is given, the center lies inside the frame."""
        if not (self.center[0] > 0 and self.center[1] > 0 and self.has_outline()):
            return False
        if frame_shape is not None:
            return self.center[0] < frame_shape[1] and self.center[1] < frame_shape[0]
        return True

    def shifted(self, dx: float, dy: float) -> Pupil:
        """Copy of the hypothesis translated by (dx, dy)."""
        return replace(self, center=(self.center[0] + dx, self.center[1] + dy))


@dataclass
class ConfidenceReport:
    """Scores of the confidence estimator ensemble for one hypothesis."""

    outline_contrast: ConfidenceValue = NO_CONFIDENCE
    angular_spread: ConfidenceValue = NO_CONFIDENCE
    aspect_ratio: ConfidenceValue = NO_CONFIDENCE
    edge_ratio: ConfidenceValue = NO_CONFIDENCE
    edge_points: np.ndarray = field(
        default_factory=lambda: np.empty((0, 2), dtype=np.int32))

    def scores(self) -> dict[str, float]:
        """Available scores by estimator name."""
        named = {
            "outline_contrast": self.outline_contrast,
            "angular_spread": self.angular_spread,
            "aspect_ratio": self.aspect_ratio,
            "edge_ratio": self.edge_ratio,
        }
        return {k: v for k, v in named.items() if v is not NO_CONFIDENCE}

    def combined(self) -> ConfidenceValue:
        """Product of the available scores, NO_CONFIDENCE if there are none."""
        available = self.scores()
        if not available:
            return NO_CONFIDENCE
        return float(np.prod(list(available.values())))
