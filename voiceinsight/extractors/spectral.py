"""Magnitude spectrum and spectral shape descriptors.

The spectrum is a direct discrete Fourier transform restricted to the
first W/2 bins. It costs O(W^2) per frame, which is why frame sizes are
kept small (2048 samples by default); the cos/sin basis is cached per
frame size so a realtime tick only pays for the matrix product.

Cepstral features sum magnitude over equal-width linear bands (not
mel-warped), take ``log(band + 1e-10)`` and apply a DCT-II.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple
import numpy as np

from ..config import EmotionConfig


LOG_EPSILON = 1e-10
VOICE_BAND_HZ = (300.0, 3400.0)
NOISE_BAND_START = 0.7


@lru_cache(maxsize=4)
def _dft_basis(size: int) -> Tuple[np.ndarray, np.ndarray]:
    k = np.arange(size // 2, dtype=np.float64)[:, None]
    n = np.arange(size, dtype=np.float64)[None, :]
    angle = -2.0 * np.pi * k * n / size
    cos, sin = np.cos(angle), np.sin(angle)
    cos.flags.writeable = False
    sin.flags.writeable = False
    return cos, sin


def magnitude_spectrum(frames: np.ndarray) -> np.ndarray:
    """
    Magnitude of the first W/2 DFT bins.

    Args:
        frames: One frame of shape (W,) or a stack of shape (n_frames, W)

    Returns:
        Array of shape (W/2,) or (n_frames, W/2)
    """
    frames = np.asarray(frames, dtype=np.float64)
    size = frames.shape[-1]
    if frames.ndim == 2 and frames.shape[0] == 0:
        return np.empty((0, size // 2), dtype=np.float64)
    cos, sin = _dft_basis(size)
    real = frames @ cos.T
    imag = frames @ sin.T
    return np.sqrt(real ** 2 + imag ** 2)


def bin_frequencies(n_bins: int, sample_rate: int) -> np.ndarray:
    """Frequency of bin k: ``k * sr / (2 * n_bins)``."""
    return np.arange(n_bins, dtype=np.float64) * sample_rate / (2 * n_bins)


def spectral_centroid(magnitude: np.ndarray, sample_rate: int) -> float:
    total = float(np.sum(magnitude))
    if total <= 0:
        return 0.0
    freqs = bin_frequencies(len(magnitude), sample_rate)
    return float(np.dot(freqs, magnitude)) / total


def spectral_rolloff(magnitude: np.ndarray, sample_rate: int, ratio: float = 0.85) -> float:
    """Lowest bin frequency whose cumulative energy reaches ``ratio`` of the total."""
    energy = np.square(magnitude)
    total = float(np.sum(energy))
    if total <= 0:
        return 0.0
    cumulative = np.cumsum(energy)
    reached = np.flatnonzero(cumulative >= ratio * total)
    if len(reached) == 0:
        return sample_rate / 2
    return float(reached[0]) * sample_rate / (2 * len(magnitude))


def spectral_bandwidth(magnitude: np.ndarray, sample_rate: int) -> float:
    """Magnitude-weighted RMS deviation of bin frequency from the centroid."""
    total = float(np.sum(magnitude))
    if total <= 0:
        return 0.0
    freqs = bin_frequencies(len(magnitude), sample_rate)
    centroid = float(np.dot(freqs, magnitude)) / total
    return float(np.sqrt(np.dot((freqs - centroid) ** 2, magnitude) / total))


def spectral_contrast(magnitude: np.ndarray) -> float:
    """``20 log10(max / min)`` over non-zero bins; 0 when every bin is zero."""
    nonzero = magnitude[magnitude > 0]
    if len(nonzero) == 0:
        return 0.0
    return float(20.0 * np.log10(np.max(nonzero) / np.min(nonzero)))


def band_energies(magnitude: np.ndarray, n_bands: int) -> np.ndarray:
    """Summed magnitude over ``n_bands`` equal-width linear bands."""
    n = len(magnitude)
    edges = (np.arange(n_bands + 1) * n) // n_bands
    return np.array(
        [float(np.sum(magnitude[edges[i]:edges[i + 1]])) for i in range(n_bands)],
        dtype=np.float64,
    )


@lru_cache(maxsize=8)
def _dct_basis(n_coefficients: int, n_bands: int) -> np.ndarray:
    k = np.arange(n_coefficients, dtype=np.float64)[:, None]
    n = np.arange(n_bands, dtype=np.float64)[None, :]
    basis = np.cos(np.pi * k * (n + 0.5) / n_bands)
    basis.flags.writeable = False
    return basis


def cepstral_coefficients(
    magnitude: np.ndarray,
    n_bands: int = 26,
    n_coefficients: int = 13,
) -> np.ndarray:
    """Cosine transform of log band energies."""
    log_bands = np.log(band_energies(magnitude, n_bands) + LOG_EPSILON)
    return _dct_basis(n_coefficients, n_bands) @ log_bands


def dominant_frequency(magnitude: np.ndarray, sample_rate: int) -> float:
    if len(magnitude) == 0 or float(np.max(magnitude)) <= 0:
        return 0.0
    return float(np.argmax(magnitude)) * sample_rate / (2 * len(magnitude))


def noise_ratio(magnitude: np.ndarray) -> float:
    """Percentage of total magnitude in the top 30% of bins."""
    total = float(np.sum(magnitude))
    if total <= 0:
        return 0.0
    start = int(len(magnitude) * NOISE_BAND_START)
    return float(np.sum(magnitude[start:])) / total * 100.0


def clarity_ratio(magnitude: np.ndarray, sample_rate: int) -> float:
    """Percentage of total magnitude inside the 300-3400 Hz voice band."""
    total = float(np.sum(magnitude))
    if total <= 0:
        return 0.0
    n = len(magnitude)
    start = int(VOICE_BAND_HZ[0] / sample_rate * n * 2)
    end = int(VOICE_BAND_HZ[1] / sample_rate * n * 2)
    return float(np.sum(magnitude[start:end])) / total * 100.0


@dataclass(frozen=True)
class SpectralAnalysis:
    """Per-frame spectral series of one pass."""
    centroid: np.ndarray
    rolloff: np.ndarray
    bandwidth: np.ndarray
    contrast: np.ndarray
    mfcc: np.ndarray


class SpectralAnalyzer:
    """Spectral descriptors and cepstral vectors for a stack of frames."""

    def __init__(self, config: Optional[EmotionConfig] = None):
        self.config = config or EmotionConfig()

    def analyze(self, frames: np.ndarray, sample_rate: int) -> SpectralAnalysis:
        """
        Compute every spectral series of a framed signal.

        Args:
            frames: Windowed frames, shape (n_frames, W)
            sample_rate: Sample rate in Hz

        Returns:
            SpectralAnalysis with one entry (or row) per frame
        """
        cfg = self.config
        spectra = magnitude_spectrum(frames)
        n = len(spectra)

        centroid = np.zeros(n)
        rolloff = np.zeros(n)
        bandwidth = np.zeros(n)
        contrast = np.zeros(n)
        mfcc = np.zeros((n, cfg.n_coefficients))
        for i, magnitude in enumerate(spectra):
            centroid[i] = spectral_centroid(magnitude, sample_rate)
            rolloff[i] = spectral_rolloff(magnitude, sample_rate, cfg.rolloff_ratio)
            bandwidth[i] = spectral_bandwidth(magnitude, sample_rate)
            contrast[i] = spectral_contrast(magnitude)
            mfcc[i] = cepstral_coefficients(magnitude, cfg.n_bands, cfg.n_coefficients)

        return SpectralAnalysis(
            centroid=centroid,
            rolloff=rolloff,
            bandwidth=bandwidth,
            contrast=contrast,
            mfcc=mfcc,
        )
