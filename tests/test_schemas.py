"""Tests for data schemas."""

import pytest
import numpy as np
from pydantic import ValidationError


def make_features(frame_count=2, energy=0.1, **overrides):
    from voiceinsight.models.schemas import (
        FeatureVector, PitchStats, EnergyStats, SpectralSeries,
    )

    values = dict(
        pitch=PitchStats(mean=200.0, variance=0.0, range=0.0, contour=[200.0] * frame_count),
        energy=EnergyStats(mean=energy, variance=0.0, peaks=[], contour=[energy] * frame_count),
        spectral=SpectralSeries(
            centroid=[1000.0] * frame_count,
            rolloff=[2000.0] * frame_count,
            bandwidth=[500.0] * frame_count,
            contrast=[10.0] * frame_count,
        ),
        mfcc=[[0.0] * 13 for _ in range(frame_count)],
        speaking_rate=3.0,
        pause_ratio=0.1,
        jitter=0.0,
        shimmer=0.0,
        frame_count=frame_count,
        frame_length=2048,
        hop_length=1024,
        sample_rate=44100,
    )
    values.update(overrides)
    return FeatureVector(**values)


class TestSampleBuffer:
    """Tests for the decoded audio container."""

    def test_samples_are_read_only(self):
        from voiceinsight.models.schemas import SampleBuffer

        buffer = SampleBuffer(samples=[0.0, 0.5, -0.5], sample_rate=16000)
        assert buffer.samples.dtype == np.float64
        with pytest.raises(ValueError):
            buffer.samples[0] = 1.0
        with pytest.raises(ValidationError):
            buffer.sample_rate = 8000

    def test_source_array_is_not_aliased(self):
        """Mutating the caller's array does not reach the buffer."""
        from voiceinsight.models.schemas import SampleBuffer

        source = np.zeros(4)
        buffer = SampleBuffer(samples=source, sample_rate=8000)
        source[0] = 1.0
        assert buffer.samples[0] == 0.0

    def test_channel_mismatch(self):
        from voiceinsight.models.schemas import SampleBuffer

        with pytest.raises(ValidationError):
            SampleBuffer(samples=np.zeros((10, 2)), sample_rate=8000, channels=1)

    def test_mono_and_duration(self):
        from voiceinsight.models.schemas import SampleBuffer

        stereo = np.column_stack([np.ones(8000), np.zeros(8000)])
        buffer = SampleBuffer(samples=stereo, sample_rate=8000, channels=2)

        assert buffer.duration == pytest.approx(1.0)
        assert len(buffer) == 8000
        assert np.allclose(buffer.mono(), 0.5)

    def test_invalid_sample_rate(self):
        from voiceinsight.models.schemas import SampleBuffer

        with pytest.raises(ValidationError):
            SampleBuffer(samples=[0.0], sample_rate=0)


class TestFeatureVector:
    """Tests for frame-aligned feature vectors."""

    def test_valid(self):
        features = make_features()
        assert features.frame_count == 2
        assert not features.is_silent

    def test_misaligned_series(self):
        from voiceinsight.models.schemas import SpectralSeries

        with pytest.raises(ValidationError):
            make_features(
                spectral=SpectralSeries(centroid=[1.0], rolloff=[1.0], bandwidth=[1.0], contrast=[1.0])
            )

    def test_silent(self):
        assert make_features(energy=0.0).is_silent
        assert make_features(frame_count=0).is_silent


class TestEmotionResult:
    """Tests for emotion result validation."""

    def test_distribution_must_sum_to_one(self):
        from voiceinsight.models.schemas import EmotionResult, EMOTION_LABELS

        uniform = {label: 1.0 / len(EMOTION_LABELS) for label in EMOTION_LABELS}
        result = EmotionResult(
            emotions=uniform,
            dominant_emotion="happiness",
            confidence=0.0,
            arousal=0.5,
            valence=0.5,
            timestamp=0.0,
            features=make_features(),
        )
        assert result.dominant_emotion == "happiness"

        skewed = dict(uniform, happiness=0.9)
        with pytest.raises(ValidationError):
            EmotionResult(
                emotions=skewed,
                dominant_emotion="happiness",
                confidence=0.0,
                arousal=0.5,
                valence=0.5,
                timestamp=0.0,
                features=make_features(),
            )

    def test_missing_label(self):
        from voiceinsight.models.schemas import EmotionResult

        with pytest.raises(ValidationError):
            EmotionResult(
                emotions={"happiness": 1.0},
                dominant_emotion="happiness",
                confidence=0.5,
                arousal=0.5,
                valence=0.5,
                timestamp=0.0,
                features=make_features(),
            )


class TestQualityReport:
    """Tests for quality report schema."""

    def test_overall_score_clamped(self):
        from voiceinsight.models.schemas import QualityReport

        report = QualityReport(
            overall_score=130,
            volume_score=100,
            clarity_score=100,
            noise_score=100,
            dynamic_score=100,
            distortion_score=100,
            tier="excellent",
            recommendation="",
        )
        assert report.overall_score == 100
        assert report.issues == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
