"""Pydantic schemas for data models."""

from typing import Dict, List, Optional
import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


EMOTION_LABELS = [
    "happiness", "sadness", "anger", "fear",
    "surprise", "disgust", "neutral",
]


class SampleBuffer(BaseModel):
    """Decoded audio samples. Read-only once constructed."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    samples: np.ndarray = Field(description="Samples, shape (n,) or (n, channels)")
    sample_rate: int = Field(gt=0, description="Sample rate in Hz")
    channels: int = Field(default=1, ge=1, description="Number of audio channels")

    @field_validator("samples", mode="before")
    @classmethod
    def freeze_samples(cls, v):
        arr = np.array(v, dtype=np.float64)
        if arr.ndim not in (1, 2):
            raise ValueError("samples must be 1-D or (n, channels)")
        arr.flags.writeable = False
        return arr

    @model_validator(mode="after")
    def check_channels(self):
        found = 1 if self.samples.ndim == 1 else self.samples.shape[1]
        if found != self.channels:
            raise ValueError(f"samples carry {found} channel(s), declared {self.channels}")
        return self

    def mono(self) -> np.ndarray:
        """Return a mono view of the samples (channels averaged)."""
        if self.samples.ndim == 1:
            return self.samples
        return self.samples.mean(axis=1)

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate

    def __len__(self) -> int:
        return len(self.samples)


class PitchStats(BaseModel):
    """Pitch statistics over voiced frames."""
    mean: float = Field(description="Mean F0 of voiced frames in Hz")
    variance: float = Field(description="Population variance of voiced F0")
    range: float = Field(description="max - min of voiced F0")
    contour: List[float] = Field(description="Per-frame F0 (0 = unvoiced)")


class EnergyStats(BaseModel):
    """Frame energy statistics."""
    mean: float
    variance: float
    peaks: List[int] = Field(description="Frame indices of local energy maxima")
    contour: List[float] = Field(description="Per-frame RMS energy")


class SpectralSeries(BaseModel):
    """Per-frame spectral shape descriptors."""
    centroid: List[float]
    rolloff: List[float]
    bandwidth: List[float]
    contrast: List[float]


class FeatureVector(BaseModel):
    """Summary features of one sample."""
    model_config = ConfigDict(frozen=True)

    pitch: PitchStats
    energy: EnergyStats
    spectral: SpectralSeries
    mfcc: List[List[float]] = Field(description="Cepstral coefficients, one row per frame")
    speaking_rate: float = Field(description="Speech onsets per second")
    pause_ratio: float = Field(description="Fraction of low-energy frames")
    jitter: float = Field(description="Mean relative frame-to-frame pitch change")
    shimmer: float = Field(description="Mean relative frame-to-frame energy change")
    frame_count: int = Field(ge=0)
    frame_length: int = Field(gt=0)
    hop_length: int = Field(gt=0)
    sample_rate: int = Field(gt=0)

    @model_validator(mode="after")
    def check_frame_alignment(self):
        series = {
            "pitch.contour": self.pitch.contour,
            "energy.contour": self.energy.contour,
            "spectral.centroid": self.spectral.centroid,
            "spectral.rolloff": self.spectral.rolloff,
            "spectral.bandwidth": self.spectral.bandwidth,
            "spectral.contrast": self.spectral.contrast,
            "mfcc": self.mfcc,
        }
        for name, values in series.items():
            if len(values) != self.frame_count:
                raise ValueError(
                    f"{name} has {len(values)} entries, expected {self.frame_count}"
                )
        return self

    @property
    def is_silent(self) -> bool:
        """True when no frame carries any energy."""
        return self.frame_count == 0 or max(self.energy.contour) <= 0.0


class EmotionResult(BaseModel):
    """Emotion inference result."""
    model_config = ConfigDict(frozen=True)

    emotions: Dict[str, float] = Field(description="Distribution over the 7 emotion classes")
    dominant_emotion: str = Field(description="Arg-max class")
    confidence: float = Field(ge=0.0, le=1.0)
    arousal: float = Field(ge=0.0, le=1.0, description="Excitement level")
    valence: float = Field(ge=0.0, le=1.0, description="Positivity level")
    timestamp: float = Field(description="Unix time of the inference")
    features: FeatureVector

    @field_validator("emotions")
    @classmethod
    def check_distribution(cls, v: Dict[str, float]) -> Dict[str, float]:
        if set(v) != set(EMOTION_LABELS):
            raise ValueError(f"emotions must have exactly the keys {EMOTION_LABELS}")
        if any(score < 0 for score in v.values()):
            raise ValueError("emotion scores must be non-negative")
        if abs(sum(v.values()) - 1.0) > 1e-6:
            raise ValueError("emotion scores must sum to 1")
        return v


class QualityMetricSample(BaseModel):
    """One realtime measurement of the input signal."""
    model_config = ConfigDict(frozen=True)

    volume: float = Field(description="RMS level, 0-100 (full-scale sine = 100)")
    frequency: float = Field(description="Dominant frequency in Hz")
    noise_ratio: float = Field(description="Share of magnitude in the top 30% of bins, 0-100")
    clarity: float = Field(description="Share of magnitude in the 300-3400 Hz band, 0-100")
    peak_volume: float = Field(description="Max absolute deviation from centre, 0-100")
    average_volume: float = Field(description="Mean volume over the retained level history")
    dynamic_range: float = Field(description="max - min peak volume over the retained history")
    silence_ratio: float = Field(description="Share of quiet entries in the level history, 0-100")
    distortion_ratio: float = Field(description="Share of samples near either rail, 0-100")
    spectral_centroid: float
    spectral_rolloff: float
    zero_crossing_rate: float
    mfcc: List[float]
    timestamp: float


class TechnicalDetails(BaseModel):
    """Raw measurements echoed in a quality report."""
    peak_volume: float = 0.0
    average_volume: float = 0.0
    dynamic_range: float = 0.0
    silence_ratio: float = 0.0
    distortion_ratio: float = 0.0
    spectral_centroid: float = 0.0


class QualityReport(BaseModel):
    """Recording quality assessment."""
    overall_score: int = Field(ge=0, le=100)
    volume_score: float
    clarity_score: float
    noise_score: float
    dynamic_score: float
    distortion_score: float
    tier: str = Field(description="excellent / very_good / good / fair / could_improve / needs_major_improvement / pending")
    recommendation: str
    issues: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    technical_details: TechnicalDetails = Field(default_factory=TechnicalDetails)

    @field_validator("overall_score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        return int(min(100, max(0, round(v))))


class AudioEnvironment(BaseModel):
    """Background noise classification of the recording environment."""
    type: str = Field(description="quiet / normal / noisy / very_noisy")
    noise_level: float
    recommendation: str


class RecordingSettings(BaseModel):
    """Capture settings recommended from recent metrics."""
    sample_rate: int = 44100
    echo_cancellation: bool = True
    noise_suppression: bool = True
    auto_gain_control: bool = True
    channel_count: int = 1
    gain: float = 1.0
