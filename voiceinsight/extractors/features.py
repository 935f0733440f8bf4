"""Feature aggregation: per-frame series reduced to one FeatureVector."""

from typing import Optional, Tuple
import numpy as np

from ..config import EmotionConfig
from ..errors import InsufficientDataError
from ..models.schemas import (
    SampleBuffer,
    FeatureVector,
    PitchStats,
    EnergyStats,
    SpectralSeries,
)
from .capabilities import resolve_capabilities
from .energy import rms_energy, find_peaks
from .framing import frame_signal, frame_count
from .pitch import PitchEstimator
from .spectral import SpectralAnalyzer


SPEECH_ONSET_FACTOR = 0.3
PAUSE_FACTOR = 0.2


def mean_and_variance(values: np.ndarray) -> Tuple[float, float]:
    """Population mean and variance; (0, 0) for an empty series."""
    if len(values) == 0:
        return 0.0, 0.0
    return float(np.mean(values)), float(np.var(values))


def pitch_statistics(contour: np.ndarray) -> PitchStats:
    """Statistics over voiced frames; the contour keeps unvoiced zeros."""
    voiced = contour[contour > 0]
    if len(voiced) == 0:
        return PitchStats(mean=0.0, variance=0.0, range=0.0, contour=contour.tolist())
    mean, variance = mean_and_variance(voiced)
    return PitchStats(
        mean=mean,
        variance=variance,
        range=float(np.max(voiced) - np.min(voiced)),
        contour=contour.tolist(),
    )


def energy_statistics(energy: np.ndarray) -> EnergyStats:
    mean, variance = mean_and_variance(energy)
    return EnergyStats(
        mean=mean,
        variance=variance,
        peaks=find_peaks(energy),
        contour=energy.tolist(),
    )


def speaking_rate(energy: np.ndarray, hop_length: int, sample_rate: int) -> float:
    """Upward crossings of 0.3 x mean energy per second of analysed audio."""
    if len(energy) == 0:
        return 0.0
    threshold = float(np.mean(energy)) * SPEECH_ONSET_FACTOR
    segments = 0
    in_speech = False
    for e in energy:
        if e > threshold and not in_speech:
            segments += 1
            in_speech = True
        elif e <= threshold:
            in_speech = False
    duration = len(energy) * hop_length / sample_rate
    return segments / duration if duration > 0 else 0.0


def pause_ratio(energy: np.ndarray) -> float:
    """Fraction of frames at or below 0.2 x mean energy."""
    if len(energy) == 0:
        return 0.0
    threshold = float(np.mean(energy)) * PAUSE_FACTOR
    return float(np.count_nonzero(energy <= threshold)) / len(energy)


def jitter(contour: np.ndarray) -> float:
    """Mean relative pitch change over consecutive voiced frame pairs."""
    if len(contour) < 2:
        return 0.0
    prev, curr = contour[:-1], contour[1:]
    voiced = (prev > 0) & (curr > 0)
    if not np.any(voiced):
        return 0.0
    return float(np.mean(np.abs(curr[voiced] - prev[voiced]) / prev[voiced]))


def shimmer(energy: np.ndarray) -> float:
    """Mean relative energy change; pairs after a zero frame contribute 0."""
    if len(energy) < 2:
        return 0.0
    prev, curr = energy[:-1], energy[1:]
    nonzero = prev > 0
    total = float(np.sum(np.abs(curr[nonzero] - prev[nonzero]) / prev[nonzero]))
    return total / (len(energy) - 1)


class FeatureExtractor:
    """Turn a SampleBuffer into a FeatureVector."""

    def __init__(
        self,
        config: Optional[EmotionConfig] = None,
        pitch_estimator: Optional[PitchEstimator] = None,
        spectral_analyzer: Optional[SpectralAnalyzer] = None,
    ):
        self.config = config or EmotionConfig()
        self.pitch_estimator = pitch_estimator or PitchEstimator(self.config)
        self.spectral_analyzer = spectral_analyzer or SpectralAnalyzer(self.config)
        self.capabilities = resolve_capabilities(self.pitch_estimator, self.spectral_analyzer)

    def require_frames(self, buffer: SampleBuffer) -> int:
        """Return the frame count, raising InsufficientDataError when it is zero."""
        n = frame_count(len(buffer), self.config.frame_length, self.config.hop_length)
        if n == 0:
            raise InsufficientDataError(
                f"{len(buffer)} samples is shorter than one {self.config.frame_length}-sample frame"
            )
        return n

    def extract(self, buffer: SampleBuffer) -> FeatureVector:
        """
        Extract summary features from a sample buffer.

        Buffers shorter than one frame give an all-zero FeatureVector with
        ``frame_count == 0`` rather than an error.

        Args:
            buffer: Decoded audio

        Returns:
            FeatureVector whose per-frame series share one frame count
        """
        cfg = self.config
        sr = buffer.sample_rate
        samples = buffer.mono()

        windowed = frame_signal(samples, cfg.frame_length, cfg.hop_length, window=True)
        raw = frame_signal(samples, cfg.frame_length, cfg.hop_length, window=False)
        n = len(windowed)

        if self.capabilities.pitch:
            contour = self.pitch_estimator.contour(windowed, sr)
        else:
            contour = np.zeros(n)
        energy = rms_energy(raw)

        if self.capabilities.spectral:
            spectral = self.spectral_analyzer.analyze(windowed, sr)
            series = SpectralSeries(
                centroid=spectral.centroid.tolist(),
                rolloff=spectral.rolloff.tolist(),
                bandwidth=spectral.bandwidth.tolist(),
                contrast=spectral.contrast.tolist(),
            )
            mfcc = spectral.mfcc.tolist()
        else:
            zeros = [0.0] * n
            series = SpectralSeries(centroid=zeros, rolloff=zeros, bandwidth=zeros, contrast=zeros)
            mfcc = [[0.0] * cfg.n_coefficients for _ in range(n)]

        return FeatureVector(
            pitch=pitch_statistics(contour),
            energy=energy_statistics(energy),
            spectral=series,
            mfcc=mfcc,
            speaking_rate=speaking_rate(energy, cfg.hop_length, sr),
            pause_ratio=pause_ratio(energy),
            jitter=jitter(contour),
            shimmer=shimmer(energy),
            frame_count=n,
            frame_length=cfg.frame_length,
            hop_length=cfg.hop_length,
            sample_rate=sr,
        )
