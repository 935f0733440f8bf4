"""Data models for the voice insight engine."""

from .schemas import (
    EMOTION_LABELS,
    SampleBuffer,
    PitchStats,
    EnergyStats,
    SpectralSeries,
    FeatureVector,
    EmotionResult,
    QualityMetricSample,
    QualityReport,
    TechnicalDetails,
    AudioEnvironment,
    RecordingSettings,
)

__all__ = [
    "EMOTION_LABELS",
    "SampleBuffer",
    "PitchStats",
    "EnergyStats",
    "SpectralSeries",
    "FeatureVector",
    "EmotionResult",
    "QualityMetricSample",
    "QualityReport",
    "TechnicalDetails",
    "AudioEnvironment",
    "RecordingSettings",
]
