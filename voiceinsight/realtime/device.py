"""Live and replayed audio input devices."""

import threading
from typing import Optional, Protocol, Union
import numpy as np

from ..errors import DeviceUnavailableError
from ..models.schemas import SampleBuffer


class InputDevice(Protocol):
    """Audio source polled by the realtime controller."""

    sample_rate: int

    def read(self, n: int) -> np.ndarray:
        """Return the most recent ``n`` mono samples."""
        ...

    def close(self) -> None: ...


class SoundDeviceInput:
    """Microphone capture through a sounddevice ``InputStream``.

    The stream callback keeps a rolling buffer of the latest samples;
    ``read`` copies the tail of it.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        capacity: int = 8192,
        device: Optional[Union[int, str]] = None,
        blocksize: int = 0,
    ):
        try:
            import sounddevice as sd
        except Exception as e:
            raise DeviceUnavailableError(f"sounddevice is not usable: {e}") from e

        self.sample_rate = int(sample_rate)
        self._buffer = np.zeros(capacity, dtype=np.float64)
        self._lock = threading.Lock()
        self._closed = False

        def _callback(indata, frames, time_info, status):  # pragma: no cover - real-time callback
            block = np.asarray(indata, dtype=np.float64)
            if block.ndim == 2:
                block = block.mean(axis=1)
            block = block[-capacity:]
            with self._lock:
                self._buffer = np.roll(self._buffer, -len(block))
                self._buffer[-len(block):] = block

        try:
            self._stream = sd.InputStream(
                channels=1,
                samplerate=self.sample_rate,
                blocksize=blocksize,
                device=device,
                callback=_callback,
                dtype="float32",
            )
            self._stream.start()
        except Exception as e:
            raise DeviceUnavailableError(f"Could not open input device: {e}") from e

    def read(self, n: int) -> np.ndarray:
        with self._lock:
            tail = self._buffer[-n:].copy()
        if len(tail) < n:
            tail = np.concatenate([np.zeros(n - len(tail)), tail])
        return tail

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stream.stop()
        self._stream.close()


class ArrayInputDevice:
    """Replay a SampleBuffer as if it were captured live.

    Each ``read`` moves the cursor forward by ``step`` samples and returns
    the ``n`` samples ending at the cursor, front-padded with zeros only
    when fewer than ``n`` samples have been played.
    """

    def __init__(self, buffer: SampleBuffer, step: int):
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        self.sample_rate = buffer.sample_rate
        self._samples = np.asarray(buffer.mono(), dtype=np.float64)
        self._step = step
        self._cursor = 0
        self.closed = False

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self._samples)

    def read(self, n: int) -> np.ndarray:
        end = min(self._cursor + self._step, len(self._samples))
        self._cursor = end
        chunk = self._samples[max(0, end - n):end]
        if len(chunk) < n:
            chunk = np.concatenate([np.zeros(n - len(chunk)), chunk])
        return chunk

    def close(self) -> None:
        self.closed = True


def acquire_input_device(
    sample_rate: int = 44100,
    capacity: int = 8192,
    device: Optional[Union[int, str]] = None,
) -> SoundDeviceInput:
    """Open the system microphone, raising DeviceUnavailableError on failure."""
    return SoundDeviceInput(sample_rate=sample_rate, capacity=capacity, device=device)
