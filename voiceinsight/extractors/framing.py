"""Slicing sample buffers into overlapping, tapered analysis frames."""

from functools import lru_cache
import numpy as np


@lru_cache(maxsize=8)
def hann_window(size: int) -> np.ndarray:
    """Hann taper ``0.5 - 0.5 cos(2 pi i / (size - 1))``."""
    if size < 2:
        raise ValueError(f"window size must be at least 2, got {size}")
    i = np.arange(size, dtype=np.float64)
    window = 0.5 - 0.5 * np.cos(2 * np.pi * i / (size - 1))
    window.flags.writeable = False
    return window


def frame_count(n_samples: int, frame_length: int, hop_length: int) -> int:
    """Number of whole frames that fit in ``n_samples``."""
    if n_samples < frame_length:
        return 0
    return (n_samples - frame_length) // hop_length + 1


def frame_signal(
    samples: np.ndarray,
    frame_length: int,
    hop_length: int,
    window: bool = True,
) -> np.ndarray:
    """
    Slice a signal into frames at offsets 0, H, 2H, ... while offset + W <= len.

    Args:
        samples: Mono signal
        frame_length: Frame length W in samples
        hop_length: Hop H in samples (H <= W)
        window: Multiply each frame by the Hann taper

    Returns:
        Array of shape (n_frames, W). A signal shorter than W gives zero frames.
    """
    if frame_length < 2:
        raise ValueError(f"frame_length must be at least 2, got {frame_length}")
    if not 0 < hop_length <= frame_length:
        raise ValueError(f"hop_length must be in (0, {frame_length}], got {hop_length}")

    samples = np.asarray(samples, dtype=np.float64)
    n = frame_count(len(samples), frame_length, hop_length)
    if n == 0:
        return np.empty((0, frame_length), dtype=np.float64)

    offsets = np.arange(n) * hop_length
    frames = samples[offsets[:, None] + np.arange(frame_length)[None, :]]
    if window:
        frames = frames * hann_window(frame_length)
    return frames
