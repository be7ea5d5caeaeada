"""Observer interfaces for inspecting intermediate detection geometry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from pupil_eval.detection.pupil_types import Pupil, Rect


class ICoarseObserver(ABC):
    """Receives the intermediate results of the coarse pupil scan."""

    @abstractmethod
    def on_coarse_result(
        self,
        downscaled: NDArray[np.uint8],
        candidates: Sequence[tuple[Rect, float]],
        used: int,
        coarse: Rect,
        scale: float,
    ) -> None:
        """Called once per scan.

        Args:
            downscaled: The image the scan ran on.
            candidates: All candidates sorted by descending response.
            used: Number of leading candidates merged into `coarse`.
            coarse: Merged rectangle in downscaled coordinates.
            scale: Factor that maps downscaled to frame coordinates.
        """


class IOutlineObserver(ABC):
    """Receives the sampled segments of the outline contrast estimator."""

    @abstractmethod
    def on_outline_segment(
        self,
        start: tuple[int, int],
        end: tuple[int, int],
        valid: bool,
    ) -> None:
        """Called for every in-bounds segment, with its classification."""

    @abstractmethod
    def on_outline_done(self, frame: NDArray[np.uint8], pupil: Pupil, score: float) -> None:
        """Called after all segments of one hypothesis were evaluated."""
