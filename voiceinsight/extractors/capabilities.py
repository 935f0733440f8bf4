"""Analysis capabilities, resolved once when an extractor is built."""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable
import numpy as np


@runtime_checkable
class HasPitchSupport(Protocol):
    def contour(self, frames: np.ndarray, sample_rate: int) -> np.ndarray: ...


@runtime_checkable
class HasSpectralSupport(Protocol):
    def analyze(self, frames: np.ndarray, sample_rate: int) -> Any: ...


@dataclass(frozen=True)
class Capabilities:
    pitch: bool
    spectral: bool


def resolve_capabilities(pitch_component: Any, spectral_component: Any) -> Capabilities:
    """Check the supplied components against the capability protocols."""
    return Capabilities(
        pitch=isinstance(pitch_component, HasPitchSupport),
        spectral=isinstance(spectral_component, HasSpectralSupport),
    )
