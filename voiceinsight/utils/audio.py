"""Audio decoding utilities."""

import io
from pathlib import Path
from typing import BinaryIO, Optional, Union
import numpy as np
import librosa

from ..errors import DecodeError
from ..models.schemas import SampleBuffer


AudioSource = Union[SampleBuffer, str, Path, bytes, bytearray, BinaryIO]


def load_audio(
    source: Union[str, Path, bytes, bytearray, BinaryIO],
    target_sr: Optional[int] = None,
) -> SampleBuffer:
    """
    Decode an audio file into a SampleBuffer.

    Args:
        source: Path, encoded bytes or a binary file object
        target_sr: Target sample rate (None keeps the native rate)

    Returns:
        SampleBuffer with samples shaped (n,) or (n, channels)
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        audio, sr = librosa.load(source, sr=target_sr, mono=False)
    except Exception as e:
        raise DecodeError(f"Could not decode audio: {e}") from e

    if audio.size == 0:
        raise DecodeError("Decoded audio contains no samples")
    if audio.ndim == 2:
        audio = audio.T
        channels = audio.shape[1]
    else:
        channels = 1
    return SampleBuffer(samples=audio, sample_rate=int(sr), channels=channels)


def resample_audio(
    audio: np.ndarray,
    orig_sr: int,
    target_sr: int,
) -> np.ndarray:
    """Resample audio to target sample rate."""
    if orig_sr == target_sr:
        return audio
    return librosa.resample(audio, orig_sr=orig_sr, target_sr=target_sr)


def to_sample_buffer(audio: np.ndarray, sample_rate: int) -> SampleBuffer:
    """Wrap an in-memory mono or (n, channels) array."""
    audio = np.asarray(audio, dtype=np.float64)
    channels = 1 if audio.ndim == 1 else audio.shape[1]
    return SampleBuffer(samples=audio, sample_rate=sample_rate, channels=channels)


def load_sample(source: AudioSource, target_sr: Optional[int] = None) -> SampleBuffer:
    """Return ``source`` as a SampleBuffer, decoding it if needed."""
    if isinstance(source, SampleBuffer):
        if target_sr is None or target_sr == source.sample_rate:
            return source
        mono = resample_audio(np.array(source.mono()), source.sample_rate, target_sr)
        return to_sample_buffer(mono, target_sr)
    if isinstance(source, (str, Path)) and not Path(source).exists():
        raise DecodeError(f"Audio file not found: {source}")
    return load_audio(source, target_sr)
