"""Configuration settings for the voice insight engine."""

import os
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(f"VOICEINSIGHT_{name}", str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(f"VOICEINSIGHT_{name}", str(default)))


class EmotionConfig(BaseModel):
    """One-shot feature extraction and emotion inference configuration."""
    frame_length: int = Field(
        default_factory=lambda: _env_int("FRAME_LENGTH", 2048),
        description="Analysis frame length in samples (bounds the direct DFT cost)"
    )
    hop_length: int = Field(
        default_factory=lambda: _env_int("HOP_LENGTH", 1024),
        description="Hop between frame offsets in samples"
    )
    n_bands: int = Field(default=26, description="Linear bands summed before the cepstral transform")
    n_coefficients: int = Field(default=13, description="Cepstral coefficients kept per frame")
    rolloff_ratio: float = Field(default=0.85, description="Cumulative energy share for spectral rolloff")
    min_pitch: float = Field(default=50.0, description="Lowest pitch searched in Hz")
    max_pitch: float = Field(default=500.0, description="Highest pitch searched in Hz")
    target_sample_rate: Optional[int] = Field(
        default=None,
        description="Resample decoded input to this rate (None keeps the native rate)"
    )


class RealtimeConfig(BaseModel):
    """Live sampling controller configuration."""
    sample_rate: int = Field(
        default_factory=lambda: _env_int("SAMPLE_RATE", 44100),
        description="Sample rate requested from the input device"
    )
    capture_size: int = Field(
        default_factory=lambda: _env_int("CAPTURE_SIZE", 2048),
        description="Samples analysed per capture tick"
    )
    sample_interval: float = Field(
        default_factory=lambda: _env_float("SAMPLE_INTERVAL", 0.1),
        description="Capture tick interval in seconds"
    )
    quality_interval: float = Field(
        default_factory=lambda: _env_float("QUALITY_INTERVAL", 1.0),
        description="Quality check interval in seconds"
    )
    history_capacity: int = Field(default=200, description="Metric samples retained (oldest evicted)")
    level_history_capacity: int = Field(default=300, description="Volume/peak levels retained")
    n_bands: int = Field(default=13, description="Linear bands for the realtime cepstral vector")
    n_coefficients: int = Field(default=13, description="Cepstral coefficients per capture")
    clipping_margin: float = Field(default=0.047, description="Distance from +/-1.0 counted as clipped")
    low_quality_threshold: int = Field(default=60, description="Quality checks below this log suggestions")


class EngineConfig(BaseModel):
    """Main engine configuration."""
    emotion: EmotionConfig = Field(default_factory=EmotionConfig)
    realtime: RealtimeConfig = Field(default_factory=RealtimeConfig)
    verbose: bool = Field(
        default_factory=lambda: os.getenv("VOICEINSIGHT_VERBOSE", "0") == "1",
        description="Print status messages to stderr"
    )


def load_config() -> EngineConfig:
    """Load configuration from environment and defaults."""
    return EngineConfig()
