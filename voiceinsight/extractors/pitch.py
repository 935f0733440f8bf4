"""Fundamental frequency estimation by normalised autocorrelation."""

from typing import Optional
import numpy as np

from ..config import EmotionConfig


def lag_bounds(sample_rate: int, min_pitch: float = 50.0, max_pitch: float = 500.0):
    """Lag search interval in samples for the given pitch range."""
    return int(sample_rate // max_pitch), int(sample_rate // min_pitch)


def estimate_pitch(
    frame: np.ndarray,
    sample_rate: int,
    min_pitch: float = 50.0,
    max_pitch: float = 500.0,
) -> float:
    """
    Estimate F0 of one windowed frame.

    Every lag p in [sr/max_pitch, sr/min_pitch] is scored by
    sum(x[i] x[i+p]) / sum(x[i]^2) over i < W - p; lags whose denominator
    is not positive are skipped. The search is a direct O(W * P) scan.

    Args:
        frame: Windowed frame
        sample_rate: Sample rate in Hz
        min_pitch: Lowest pitch searched in Hz
        max_pitch: Highest pitch searched in Hz

    Returns:
        Pitch in Hz, or 0.0 when no lag qualified (unvoiced)
    """
    min_lag, max_lag = lag_bounds(sample_rate, min_pitch, max_pitch)
    min_lag = max(min_lag, 1)
    n = len(frame)

    best_corr = -1.0
    best_lag = 0
    for lag in range(min_lag, min(max_lag, n - 1) + 1):
        head = frame[: n - lag]
        norm = float(np.dot(head, head))
        if norm <= 0:
            continue
        corr = float(np.dot(head, frame[lag:])) / norm
        if corr > best_corr:
            best_corr = corr
            best_lag = lag

    return sample_rate / best_lag if best_lag > 0 else 0.0


class PitchEstimator:
    """Per-frame pitch tracker."""

    def __init__(self, config: Optional[EmotionConfig] = None):
        self.config = config or EmotionConfig()

    def contour(self, frames: np.ndarray, sample_rate: int) -> np.ndarray:
        """Pitch per frame (0 = unvoiced). Empty input gives an empty contour."""
        return np.array(
            [
                estimate_pitch(frame, sample_rate, self.config.min_pitch, self.config.max_pitch)
                for frame in frames
            ],
            dtype=np.float64,
        )
