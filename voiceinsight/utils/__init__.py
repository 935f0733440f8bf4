"""Utility functions."""

from .audio import load_audio, load_sample, resample_audio, to_sample_buffer

__all__ = [
    "load_audio",
    "load_sample",
    "resample_audio",
    "to_sample_buffer",
]
