"""Pupil localization and confidence estimators."""

from pupil_eval.detection.coarse_localizer import coarse_pupil_detection
from pupil_eval.detection.confidence import (
    angular_spread_confidence,
    aspect_ratio_confidence,
    edge_ratio_confidence,
    outline_contrast_confidence,
)
from pupil_eval.detection.detection_method import PupilDetectionMethod, evaluate_confidence
from pupil_eval.detection.ellipse_sampler import ellipse_to_points
from pupil_eval.detection.pupil_types import NO_CONFIDENCE, ConfidenceReport, Pupil, Rect

__all__ = [
    "NO_CONFIDENCE",
    "ConfidenceReport",
    "Pupil",
    "PupilDetectionMethod",
    "Rect",
    "angular_spread_confidence",
    "aspect_ratio_confidence",
    "coarse_pupil_detection",
    "edge_ratio_confidence",
    "ellipse_to_points",
    "evaluate_confidence",
    "outline_contrast_confidence",
]
