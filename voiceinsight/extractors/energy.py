"""Loudness, clipping and silence measurements."""

from typing import List, Sequence
import numpy as np


SILENCE_FACTOR = 0.2
MIN_DYNAMIC_ENTRIES = 10


def rms_energy(frames: np.ndarray) -> np.ndarray:
    """RMS energy ``sqrt(mean(x^2))`` of each frame."""
    frames = np.asarray(frames, dtype=np.float64)
    if frames.size == 0:
        return np.empty(0, dtype=np.float64)
    return np.sqrt(np.mean(frames ** 2, axis=-1))


def volume_level(samples: np.ndarray) -> float:
    """RMS level scaled to 0-100, where a full-scale sine reads 100."""
    if len(samples) == 0:
        return 0.0
    rms = float(np.sqrt(np.mean(np.square(samples))))
    return min(100.0, rms * np.sqrt(2.0) * 100.0)


def peak_volume(samples: np.ndarray, center: float = 0.0) -> float:
    """Largest absolute deviation from ``center``, scaled to 0-100."""
    if len(samples) == 0:
        return 0.0
    return min(100.0, float(np.max(np.abs(np.asarray(samples) - center))) * 100.0)


def distortion_ratio(samples: np.ndarray, margin: float = 0.047) -> float:
    """Percentage of samples within ``margin`` of either rail (+/-1.0)."""
    if len(samples) == 0:
        return 0.0
    clipped = np.abs(np.asarray(samples)) >= 1.0 - margin
    return float(np.count_nonzero(clipped)) / len(samples) * 100.0


def zero_crossing_rate(samples: np.ndarray) -> float:
    """Sign changes per sample."""
    if len(samples) < 2:
        return 0.0
    positive = np.asarray(samples) >= 0
    return float(np.count_nonzero(positive[1:] != positive[:-1])) / len(samples)


def silence_ratio(volume_history: Sequence[float]) -> float:
    """
    Percentage of history entries at or below an adaptive threshold.

    The threshold is ``0.2 x mean(history)``, so an all-zero history counts
    as entirely silent.
    """
    if len(volume_history) == 0:
        return 0.0
    levels = np.asarray(volume_history, dtype=np.float64)
    threshold = SILENCE_FACTOR * float(np.mean(levels))
    return float(np.count_nonzero(levels <= threshold)) / len(levels) * 100.0


def dynamic_range(peak_history: Sequence[float], min_entries: int = MIN_DYNAMIC_ENTRIES) -> float:
    """Spread of retained peak levels; 0 until ``min_entries`` exist."""
    if len(peak_history) < min_entries:
        return 0.0
    return float(max(peak_history) - min(peak_history))


def find_peaks(series: Sequence[float]) -> List[int]:
    """Indices i with x[i] > x[i-1] and x[i] > x[i+1]."""
    values = np.asarray(series, dtype=np.float64)
    if len(values) < 3:
        return []
    mid = values[1:-1]
    mask = (mid > values[:-2]) & (mid > values[2:])
    return [int(i) + 1 for i in np.flatnonzero(mask)]
