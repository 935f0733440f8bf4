"""Tests for realtime sampling."""

import asyncio
import pytest
import numpy as np


class ConstantDevice:
    """Input device that always returns the same block."""

    def __init__(self, level=0.25, sample_rate=16000):
        self.sample_rate = sample_rate
        self.level = level
        self.reads = 0
        self.closed = False

    def read(self, n):
        self.reads += 1
        t = np.arange(n) / self.sample_rate
        return self.level * np.sin(2 * np.pi * 440 * t)

    def close(self):
        self.closed = True


def small_config(**overrides):
    from voiceinsight.config import RealtimeConfig
    return RealtimeConfig(capture_size=512, **overrides)


def virtual_controller(**overrides):
    from voiceinsight.realtime import RealtimeController, VirtualScheduler

    scheduler = VirtualScheduler()
    controller = RealtimeController(small_config(**overrides), scheduler=scheduler, clock=scheduler.now)
    return controller, scheduler


class TestVirtualScheduler:
    """Tests for the manually advanced clock."""

    def test_fires_in_order(self):
        from voiceinsight.realtime import VirtualScheduler

        scheduler = VirtualScheduler()
        fired = []
        scheduler.call_every(0.1, lambda: fired.append(("fast", scheduler.now())))
        scheduler.call_every(0.25, lambda: fired.append(("slow", scheduler.now())))

        assert scheduler.advance(0.5) == 7
        times = [t for _, t in fired]
        assert times == sorted(times)
        assert [name for name, _ in fired].count("slow") == 2
        assert scheduler.now() == pytest.approx(0.5)

    def test_cancel(self):
        from voiceinsight.realtime import VirtualScheduler

        scheduler = VirtualScheduler()
        fired = []
        timer = scheduler.call_every(0.1, lambda: fired.append(1))
        scheduler.advance(0.3)
        timer.cancel()
        scheduler.advance(1.0)

        assert len(fired) == 3
        assert scheduler.active_timers == 0

    def test_invalid_interval(self):
        from voiceinsight.realtime import VirtualScheduler

        with pytest.raises(ValueError):
            VirtualScheduler().call_every(0, lambda: None)


class TestRealtimeController:
    """Tests for the sampling state machine."""

    def test_stop_when_idle_is_noop(self):
        from voiceinsight.realtime import ControllerState, RealtimeController

        controller = RealtimeController(small_config())
        controller.stop()
        controller.stop()
        assert controller.state is ControllerState.IDLE

    def test_ticks_and_quality_checks(self):
        from voiceinsight.realtime import ControllerState

        controller, scheduler = virtual_controller()
        device = ConstantDevice()
        controller.start(device)
        assert controller.state is ControllerState.SAMPLING

        scheduler.advance(2.0)

        assert len(controller.history()) == 20
        assert controller.quality_checks == 2
        assert device.reads == 20
        current = controller.current_metrics()
        assert current.volume == pytest.approx(25.0, abs=1.0)
        assert abs(current.frequency - 440) < 40

    def test_history_is_bounded(self):
        """Oldest samples are evicted past 200 entries."""
        controller, scheduler = virtual_controller()
        controller.start(ConstantDevice())
        scheduler.advance(25.0)

        history = controller.history()
        assert len(history) == 200
        assert history[0].timestamp == pytest.approx(5.1)
        timestamps = [m.timestamp for m in history]
        assert all(a < b for a, b in zip(timestamps, timestamps[1:]))

    def test_stop_cancels_timers_and_releases_device(self):
        from voiceinsight.realtime import ControllerState

        controller, scheduler = virtual_controller()
        device = ConstantDevice()
        controller.start(device)
        scheduler.advance(0.5)
        controller.stop()

        assert controller.state is ControllerState.IDLE
        assert device.closed
        assert scheduler.active_timers == 0
        assert scheduler.advance(5.0) == 0
        # metrics survive stop
        assert len(controller.history()) == 5

    def test_restart_clears_history(self):
        controller, scheduler = virtual_controller()
        controller.start(ConstantDevice())
        scheduler.advance(1.0)
        controller.stop()
        controller.start(ConstantDevice())

        assert controller.history() == ()
        assert controller.detailed_quality().tier == "pending"

    def test_start_twice(self):
        controller, _ = virtual_controller()
        controller.start(ConstantDevice())
        with pytest.raises(RuntimeError):
            controller.start(ConstantDevice())

    def test_unavailable_device_leaves_controller_idle(self, monkeypatch):
        from voiceinsight.errors import DeviceUnavailableError
        from voiceinsight.realtime import ControllerState, controller as controller_module

        def refuse(**kwargs):
            raise DeviceUnavailableError("no microphone")

        monkeypatch.setattr(controller_module, "acquire_input_device", refuse)
        controller, scheduler = virtual_controller()

        with pytest.raises(DeviceUnavailableError):
            controller.start()
        assert controller.state is ControllerState.IDLE
        assert scheduler.active_timers == 0

    def test_failed_start_releases_device(self):
        from voiceinsight.realtime import ControllerState, RealtimeController

        class BrokenScheduler:
            def call_every(self, interval, callback):
                raise RuntimeError("no loop")

        device = ConstantDevice()
        controller = RealtimeController(small_config(), scheduler=BrokenScheduler())
        with pytest.raises(RuntimeError):
            controller.start(device)
        assert device.closed
        assert controller.state is ControllerState.IDLE

    def test_snapshots_before_first_tick(self):
        controller, _ = virtual_controller()
        controller.start(ConstantDevice())

        assert controller.current_metrics() is None
        assert controller.quality_score() == 50
        assert controller.environment().recommendation == "Analyzing environment..."

    def test_recommended_settings(self):
        controller, scheduler = virtual_controller()
        controller.start(ConstantDevice(level=0.05))
        scheduler.advance(1.0)

        settings = controller.recommended_settings()
        assert settings.auto_gain_control
        assert settings.gain == pytest.approx(1.5)

    def test_asyncio_scheduler(self):
        """Real loop timers tick until stop()."""
        from voiceinsight.realtime import RealtimeController

        async def run():
            controller = RealtimeController(small_config(sample_interval=0.01, quality_interval=0.05))
            controller.start(ConstantDevice())
            await asyncio.sleep(0.2)
            controller.stop()
            ticks = len(controller.history())
            await asyncio.sleep(0.05)
            return ticks, len(controller.history())

        ticks, after = asyncio.run(run())
        assert ticks > 0
        assert after == ticks


class TestMeasureBuffer:
    """Tests for replaying a recording through a controller."""

    def test_tone_quality(self):
        from voiceinsight.realtime import measure_buffer
        from voiceinsight.utils.audio import to_sample_buffer

        sample_rate = 44100
        t = np.arange(2 * sample_rate) / sample_rate
        buffer = to_sample_buffer(0.25 * np.sin(2 * np.pi * 440 * t), sample_rate)

        controller = measure_buffer(buffer)
        report = controller.detailed_quality()

        assert not controller.is_sampling
        assert len(controller.history()) == 20
        assert report.tier == "good"
        assert 70 <= report.overall_score < 80

    def test_silence_quality(self):
        from voiceinsight.realtime import measure_buffer
        from voiceinsight.utils.audio import to_sample_buffer

        buffer = to_sample_buffer(np.zeros(44100), 44100)
        controller = measure_buffer(buffer)
        report = controller.detailed_quality()

        assert report.overall_score == 35
        assert report.tier == "needs_major_improvement"
        assert controller.current_metrics().silence_ratio == 100.0

    def test_array_device(self):
        from voiceinsight.realtime import ArrayInputDevice
        from voiceinsight.utils.audio import to_sample_buffer

        device = ArrayInputDevice(to_sample_buffer(np.arange(10, dtype=float), 10), step=4)
        assert device.read(3).tolist() == [1, 2, 3]
        assert device.read(6).tolist() == [2, 3, 4, 5, 6, 7]
        assert device.read(3).tolist() == [7, 8, 9]
        assert device.exhausted


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
