# Adapted from PuRe / PupilEXT. Copyright (c) 2018, Thiago Santini / University of Tuebingen.
# Free for academic use; the full license terms are in the NOTICE file.
"""Base class for pupil detectors and ensemble confidence evaluation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pupil_eval.config_service.config import Config
from pupil_eval.detection import confidence
from pupil_eval.detection.coarse_localizer import check_frame, coarse_pupil_detection
from pupil_eval.detection.pupil_types import ConfidenceReport, Pupil, Rect
from pupil_eval.ports.interfaces import ICoarseObserver
from pupil_eval.utilities.logger_setup import setup_logger

logger = setup_logger("DetectionMethod")


class PupilDetectionMethod(ABC):
    """Common ground for pupil detectors.

    Subclasses implement `run`; coarse localization and the confidence
    estimators are shared here so every detector scores the same way.
    """

    title: str = "Pupil Detection Method"
    description: str = ""

    # Estimators, usable from subclasses as self.<estimator>(...)
    outline_contrast_confidence = staticmethod(confidence.outline_contrast_confidence)
    angular_spread_confidence = staticmethod(confidence.angular_spread_confidence)
    aspect_ratio_confidence = staticmethod(confidence.aspect_ratio_confidence)
    edge_ratio_confidence = staticmethod(confidence.edge_ratio_confidence)

    def __init__(self, config: Config | None = None) -> None:
        self.cfg = config if config is not None else Config()

    @abstractmethod
    def run(self, frame: NDArray[np.uint8]) -> Pupil:
        """Detect the pupil in a grayscale frame."""

    def has_pupil_outline(self) -> bool:
        """Whether `run` produces a full ellipse rather than just a center."""
        return True

    def has_confidence(self) -> bool:
        """Whether `run` fills `Pupil.confidence`."""
        return False

    def has_coarse_location(self) -> bool:
        """Whether the detector narrows its input with `coarse_location`."""
        return False

    def coarse_location(
        self,
        frame: NDArray[np.uint8],
        observer: Optional[ICoarseObserver] = None,
    ) -> Rect:
        """Coarse pupil region using the configured coverage and working size."""
        cfg = self.cfg.coarse
        return coarse_pupil_detection(
            frame, cfg.min_coverage, cfg.working_width, cfg.working_height, observer)

    def run_in_roi(self, frame: NDArray[np.uint8], roi: Rect) -> Pupil:
        """Run on a sub-region and report the pupil in frame coordinates.

        An empty ROI means the whole frame.
        """
        check_frame(frame)
        full = Rect.from_shape(frame.shape)
        roi = roi & full if not roi.empty else full
        if roi.empty:
            logger.warning("ROI lies outside the frame, using the full frame.")
            roi = full

        crop = frame[roi.y:roi.y + roi.height, roi.x:roi.x + roi.width]
        pupil = self.run(crop)
        if not pupil.valid():
            return pupil  # nothing found, keep the marker values
        return pupil.shifted(roi.x, roi.y)

    def evaluate(
        self,
        frame: NDArray[np.uint8],
        pupil: Pupil,
        edges: NDArray | None = None,
        support_points: ArrayLike | None = None,
    ) -> ConfidenceReport:
        """Score a hypothesis with the configured estimator settings."""
        return evaluate_confidence(frame, pupil, edges, support_points, self.cfg)


def evaluate_confidence(  # noqa: PLR0913
    frame: NDArray[np.uint8],
    pupil: Pupil,
    edges: NDArray | None = None,
    support_points: ArrayLike | None = None,
    config: Config | None = None,
    parallel: bool | None = None,
) -> ConfidenceReport:
    """Run every applicable estimator on one hypothesis.

    The edge ratio needs an edge map and the angular spread needs the points
    supporting the hypothesis; they are left at NO_CONFIDENCE otherwise.
    `parallel` (default from config) evaluates the estimators on a thread pool.
    """
    check_frame(frame)
    if edges is not None and edges.shape != frame.shape:
        error = f"Edge map shape {edges.shape} does not match frame shape {frame.shape}."
        logger.error(error)
        raise ValueError(error)

    cfg = (config if config is not None else Config()).confidence
    if parallel is None:
        parallel = cfg.parallel

    tasks = {
        "outline_contrast": lambda: confidence.outline_contrast_confidence(
            frame, pupil, cfg.outline_bias, cfg.outline_step_deg),
        "aspect_ratio": lambda: confidence.aspect_ratio_confidence(pupil),
    }
    if support_points is not None:
        tasks["angular_spread"] = lambda: confidence.angular_spread_confidence(
            support_points, pupil.center)
    if edges is not None:
        tasks["edge_ratio"] = lambda: confidence.edge_ratio_confidence(
            edges, pupil, cfg.edge_band)

    if parallel:
        with ThreadPoolExecutor(max_workers=len(tasks)) as pool:
            futures = {name: pool.submit(task) for name, task in tasks.items()}
            results = {name: fut.result() for name, fut in futures.items()}
    else:
        results = {name: task() for name, task in tasks.items()}

    report = ConfidenceReport(
        outline_contrast=results["outline_contrast"],
        aspect_ratio=results["aspect_ratio"],
        angular_spread=results.get("angular_spread"),
    )
    if "edge_ratio" in results:
        report.edge_ratio, report.edge_points = results["edge_ratio"]
    return report
