"""Realtime sampling controller.

Idle -> Sampling -> Idle. While sampling, a capture tick (100 ms) appends one
QualityMetricSample to a bounded history and a slower quality check
(1000 ms) scores the latest sample. ``stop()`` cancels both timers and
releases the device before returning.
"""

import math
import time
from collections import deque
from enum import Enum
from typing import Callable, Deque, List, Optional, Tuple
import numpy as np
from rich.console import Console

from ..config import RealtimeConfig
from ..models.schemas import (
    AudioEnvironment,
    QualityMetricSample,
    QualityReport,
    RecordingSettings,
    SampleBuffer,
)
from ..extractors.energy import (
    volume_level,
    peak_volume,
    distortion_ratio,
    zero_crossing_rate,
    silence_ratio,
    dynamic_range,
)
from ..extractors.framing import hann_window
from ..extractors.spectral import (
    magnitude_spectrum,
    spectral_centroid,
    spectral_rolloff,
    cepstral_coefficients,
    dominant_frequency,
    noise_ratio,
    clarity_ratio,
)
from ..quality.scorer import score_quality, analyze_environment, recommend_settings
from .device import InputDevice, ArrayInputDevice, acquire_input_device
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle, VirtualScheduler


console = Console(stderr=True)


class ControllerState(str, Enum):
    IDLE = "idle"
    SAMPLING = "sampling"


class CaptureGraph:
    """Per-session analysis chain: device -> taper -> spectrum."""

    def __init__(self, device: InputDevice, config: RealtimeConfig):
        self.device = device
        self.config = config
        self.window = hann_window(config.capture_size)
        # warm the DFT basis so the first tick does not pay for it
        magnitude_spectrum(np.zeros(config.capture_size))

    def capture(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (raw samples, magnitude spectrum) of the latest block."""
        samples = np.asarray(self.device.read(self.config.capture_size), dtype=np.float64)
        return samples, magnitude_spectrum(samples * self.window)


class RealtimeController:
    """Drive live quality analysis of one input device."""

    def __init__(
        self,
        config: Optional[RealtimeConfig] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.time,
        verbose: bool = False,
    ):
        self.config = config or RealtimeConfig()
        self.scheduler = scheduler or AsyncioScheduler()
        self.verbose = verbose
        self._clock = clock

        self._state = ControllerState.IDLE
        self._graph: Optional[CaptureGraph] = None
        self._timers: List[TimerHandle] = []
        self._metrics: Deque[QualityMetricSample] = deque(maxlen=self.config.history_capacity)
        self._volume_history: Deque[float] = deque(maxlen=self.config.level_history_capacity)
        self._peak_history: Deque[float] = deque(maxlen=self.config.level_history_capacity)
        self.quality_checks = 0

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def is_sampling(self) -> bool:
        return self._state is ControllerState.SAMPLING

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, device: Optional[InputDevice] = None) -> "RealtimeController":
        """
        Acquire ``device`` (the system microphone when None) and begin sampling.

        Raises:
            DeviceUnavailableError: the microphone could not be opened; the
                controller stays idle
            RuntimeError: the controller is already sampling
        """
        if self.is_sampling:
            raise RuntimeError("controller is already sampling")

        if device is None:
            device = acquire_input_device(
                sample_rate=self.config.sample_rate,
                capacity=self.config.capture_size * 4,
            )

        try:
            self._graph = CaptureGraph(device, self.config)
            self._metrics.clear()
            self._volume_history.clear()
            self._peak_history.clear()
            self._timers = [
                self.scheduler.call_every(self.config.sample_interval, self.tick),
                self.scheduler.call_every(self.config.quality_interval, self._quality_check),
            ]
        except BaseException:
            self._release(device)
            raise

        self._state = ControllerState.SAMPLING
        if self.verbose:
            console.print(
                f"[dim]Realtime analysis started (capture {self.config.capture_size} samples "
                f"@ {device.sample_rate} Hz)[/dim]"
            )
        return self

    def stop(self) -> None:
        """Cancel both timers and release the device. Safe from any state."""
        for timer in self._timers:
            timer.cancel()
        self._timers = []

        graph, self._graph = self._graph, None
        try:
            if graph is not None:
                self._release(graph.device)
        finally:
            self._volume_history.clear()
            self._peak_history.clear()
            was_sampling = self.is_sampling
            self._state = ControllerState.IDLE
            if was_sampling and self.verbose:
                console.print("[dim]Realtime analysis stopped[/dim]")

    def _release(self, device: InputDevice) -> None:
        device.close()

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def tick(self) -> Optional[QualityMetricSample]:
        """Capture one block and append its metrics to the history."""
        if not self.is_sampling or self._graph is None:
            return None

        samples, magnitude = self._graph.capture()
        sr = self._graph.device.sample_rate

        volume = volume_level(samples)
        peak = peak_volume(samples)
        self._volume_history.append(volume)
        self._peak_history.append(peak)

        metrics = QualityMetricSample(
            volume=volume,
            frequency=dominant_frequency(magnitude, sr),
            noise_ratio=noise_ratio(magnitude),
            clarity=clarity_ratio(magnitude, sr),
            peak_volume=peak,
            average_volume=float(np.mean(self._volume_history)),
            dynamic_range=dynamic_range(self._peak_history),
            silence_ratio=silence_ratio(self._volume_history),
            distortion_ratio=distortion_ratio(samples, self.config.clipping_margin),
            spectral_centroid=spectral_centroid(magnitude, sr),
            spectral_rolloff=spectral_rolloff(magnitude, sr),
            zero_crossing_rate=zero_crossing_rate(samples),
            mfcc=cepstral_coefficients(
                magnitude, self.config.n_bands, self.config.n_coefficients
            ).tolist(),
            timestamp=self._clock(),
        )
        self._metrics.append(metrics)
        return metrics

    def _quality_check(self) -> None:
        if not self.is_sampling:
            return
        self.quality_checks += 1
        report = self.detailed_quality()
        if self.verbose and report.overall_score < self.config.low_quality_threshold:
            console.print(
                f"[yellow]Quality {report.overall_score}/100:[/yellow] "
                + "; ".join(report.suggestions)
            )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def current_metrics(self) -> Optional[QualityMetricSample]:
        return self._metrics[-1] if self._metrics else None

    def history(self) -> Tuple[QualityMetricSample, ...]:
        """Time-ordered snapshot of the retained metrics."""
        return tuple(self._metrics)

    def detailed_quality(self) -> QualityReport:
        return score_quality(self.current_metrics())

    def quality_score(self) -> int:
        return self.detailed_quality().overall_score

    def environment(self) -> AudioEnvironment:
        return analyze_environment(self.current_metrics())

    def recommended_settings(self) -> RecordingSettings:
        return recommend_settings(self._metrics)


def measure_buffer(buffer: SampleBuffer, config: Optional[RealtimeConfig] = None) -> RealtimeController:
    """
    Replay a recording through a controller on a virtual clock.

    Every capture interval of audio becomes one tick, so the returned
    (stopped) controller holds the same history a live session over the
    recording would have produced.
    """
    config = config or RealtimeConfig()
    scheduler = VirtualScheduler()
    step = max(1, int(round(buffer.sample_rate * config.sample_interval)))
    device = ArrayInputDevice(buffer, step=step)
    controller = RealtimeController(config, scheduler=scheduler, clock=scheduler.now)

    controller.start(device)
    try:
        ticks = max(1, math.ceil(len(buffer) / step))
        for _ in range(ticks):
            scheduler.advance(config.sample_interval)
    finally:
        controller.stop()
    return controller
