"""Config module dataclasses."""

from dataclasses import dataclass, field


@dataclass
class CoarseDetection:
    """Coarse pupil localization settings."""

    # Minimum ROI extent, as a fraction of the downscaled width/height
    min_coverage: float = 0.5
    # Size of the image the Haar-like scan works on (aspect ratio is kept)
    working_width: int = 60
    working_height: int = 40


@dataclass
class Confidence:
    """Confidence estimator settings."""

    outline_bias: int = 5      # Minimum inside/outside intensity gap for a valid outline point
    outline_step_deg: int = 10 # Angular step between contrast samples (in degrees)
    edge_band: int = 5         # Thickness of the band around the outline for the edge ratio (px)
    parallel: bool = False     # Run the estimators on a thread pool


@dataclass
class RootConfig:
    """Root configuration holding all modules."""

    coarse: CoarseDetection = field(default_factory=CoarseDetection)
    confidence: Confidence = field(default_factory=Confidence)
