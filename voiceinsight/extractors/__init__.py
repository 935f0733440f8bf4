"""Feature extraction and inference modules."""

from .framing import frame_signal, hann_window
from .pitch import PitchEstimator, estimate_pitch
from .spectral import SpectralAnalyzer, magnitude_spectrum
from .features import FeatureExtractor
from .emotion import EmotionAnalyzer

__all__ = [
    "frame_signal",
    "hann_window",
    "PitchEstimator",
    "estimate_pitch",
    "SpectralAnalyzer",
    "magnitude_spectrum",
    "FeatureExtractor",
    "EmotionAnalyzer",
]
