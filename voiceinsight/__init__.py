"""Voice insight engine: recording quality and emotion estimates from audio."""

from .config import EngineConfig, load_config
from .engine import VoiceEngine
from .errors import (
    VoiceInsightError,
    DecodeError,
    DeviceUnavailableError,
    InsufficientDataError,
)

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "load_config",
    "VoiceEngine",
    "VoiceInsightError",
    "DecodeError",
    "DeviceUnavailableError",
    "InsufficientDataError",
]
