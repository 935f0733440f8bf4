"""Tests for feature extractors."""

import pytest
import numpy as np


def sine(frequency, duration, sample_rate, amplitude=0.5):
    t = np.arange(int(sample_rate * duration)) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


class TestFraming:
    """Tests for frame slicing and the Hann taper."""

    def test_frame_offsets(self):
        """Frames start every hop while offset + W fits."""
        from voiceinsight.extractors.framing import frame_signal

        samples = np.arange(10, dtype=float)
        frames = frame_signal(samples, frame_length=4, hop_length=2, window=False)

        assert frames.shape == (4, 4)
        assert frames[0].tolist() == [0, 1, 2, 3]
        assert frames[-1].tolist() == [6, 7, 8, 9]

    def test_short_input_gives_no_frames(self):
        """A signal shorter than one frame is not an error."""
        from voiceinsight.extractors.framing import frame_signal

        frames = frame_signal(np.ones(100), frame_length=256, hop_length=128)
        assert frames.shape == (0, 256)

    def test_hann_window_shape(self):
        """Taper is zero at both ends and one in the middle."""
        from voiceinsight.extractors.framing import hann_window

        window = hann_window(5)
        assert window[0] == pytest.approx(0.0)
        assert window[-1] == pytest.approx(0.0)
        assert window[2] == pytest.approx(1.0)

    def test_invalid_hop(self):
        """Hop longer than the frame is rejected."""
        from voiceinsight.extractors.framing import frame_signal

        with pytest.raises(ValueError):
            frame_signal(np.ones(100), frame_length=16, hop_length=32)


class TestPitchEstimator:
    """Tests for autocorrelation pitch estimation."""

    def test_pure_tone(self):
        """A 440 Hz tone is tracked within a few Hz."""
        from voiceinsight.extractors.framing import frame_signal
        from voiceinsight.extractors.pitch import estimate_pitch

        sample_rate = 44100
        frames = frame_signal(sine(440, 0.2, sample_rate), 2048, 1024)
        pitch = estimate_pitch(frames[0], sample_rate)

        assert abs(pitch - 440) < 3

    def test_silent_frame_is_unvoiced(self):
        """No positive denominator means no pitch."""
        from voiceinsight.extractors.pitch import estimate_pitch

        assert estimate_pitch(np.zeros(2048), 16000) == 0.0

    def test_lag_bounds(self):
        """Lag search covers the 50-500 Hz voice range."""
        from voiceinsight.extractors.pitch import lag_bounds

        assert lag_bounds(44100) == (88, 882)
        assert lag_bounds(16000) == (32, 320)


class TestEnergy:
    """Tests for energy, clipping and silence helpers."""

    def test_rms(self):
        from voiceinsight.extractors.energy import rms_energy

        frames = np.array([[1.0, -1.0, 1.0, -1.0], [0.0, 0.0, 0.0, 0.0]])
        assert rms_energy(frames).tolist() == [1.0, 0.0]

    def test_volume_and_peak(self):
        """Full-scale sine reads 100 on both scales."""
        from voiceinsight.extractors.energy import volume_level, peak_volume

        tone = sine(441, 0.1, 44100, amplitude=1.0)
        assert volume_level(tone) == pytest.approx(100.0, abs=0.5)
        assert peak_volume(tone) == pytest.approx(100.0, abs=0.5)
        assert volume_level(np.zeros(10)) == 0.0

    def test_distortion_ratio(self):
        """Samples near either rail count as clipped."""
        from voiceinsight.extractors.energy import distortion_ratio

        assert distortion_ratio(np.array([1.0, -0.96, 0.5, 0.0])) == pytest.approx(50.0)

    def test_zero_crossing_rate(self):
        from voiceinsight.extractors.energy import zero_crossing_rate

        assert zero_crossing_rate(np.array([1.0, -1.0, 1.0, -1.0])) == pytest.approx(0.75)

    def test_silence_ratio_is_adaptive(self):
        """Threshold follows 0.2 x mean of the history."""
        from voiceinsight.extractors.energy import silence_ratio

        assert silence_ratio([]) == 0.0
        assert silence_ratio([0.0, 0.0, 0.0]) == 100.0
        assert silence_ratio([50.0] * 10) == 0.0
        assert silence_ratio([50.0] * 8 + [0.0, 0.0]) == pytest.approx(20.0)

    def test_dynamic_range_needs_ten_entries(self):
        from voiceinsight.extractors.energy import dynamic_range

        assert dynamic_range(list(range(9))) == 0.0
        assert dynamic_range(list(range(10))) == 9.0

    def test_find_peaks(self):
        """Only strict local maxima are peaks."""
        from voiceinsight.extractors.energy import find_peaks

        assert find_peaks([0, 1, 0, 2, 2, 0, 3, 1]) == [1, 6]
        assert find_peaks([1, 2]) == []


class TestSpectral:
    """Tests for the spectral analyzer."""

    def test_spectrum_peak_bin(self):
        """Direct DFT puts a bin-centred tone in its bin."""
        from voiceinsight.extractors.spectral import magnitude_spectrum

        n = 256
        frame = np.cos(2 * np.pi * 10 * np.arange(n) / n)
        magnitude = magnitude_spectrum(frame)

        assert magnitude.shape == (128,)
        assert int(np.argmax(magnitude)) == 10
        assert magnitude[10] == pytest.approx(n / 2)

    def test_centroid_of_tone(self):
        from voiceinsight.extractors.framing import frame_signal
        from voiceinsight.extractors.spectral import magnitude_spectrum, spectral_centroid

        sample_rate = 44100
        frames = frame_signal(sine(440, 0.1, sample_rate), 2048, 1024)
        magnitude = magnitude_spectrum(frames[0])

        assert abs(spectral_centroid(magnitude, sample_rate) - 440) < 100

    def test_all_zero_spectrum(self):
        """Every descriptor is guarded against an empty spectrum."""
        from voiceinsight.extractors import spectral

        magnitude = np.zeros(64)
        assert spectral.spectral_centroid(magnitude, 16000) == 0.0
        assert spectral.spectral_rolloff(magnitude, 16000) == 0.0
        assert spectral.spectral_bandwidth(magnitude, 16000) == 0.0
        assert spectral.spectral_contrast(magnitude) == 0.0
        assert spectral.noise_ratio(magnitude) == 0.0
        assert spectral.clarity_ratio(magnitude, 16000) == 0.0

    def test_rolloff_and_contrast(self):
        from voiceinsight.extractors.spectral import spectral_rolloff, spectral_contrast

        magnitude = np.array([0.0, 1.0, 0.0, 0.0])
        # bin 1 holds all the energy: 1 * 8000 / (2 * 4)
        assert spectral_rolloff(magnitude, 8000) == pytest.approx(1000.0)
        assert spectral_contrast(np.array([0.0, 10.0, 1.0])) == pytest.approx(20.0)

    def test_band_energies_cover_spectrum(self):
        from voiceinsight.extractors.spectral import band_energies

        magnitude = np.arange(100, dtype=float)
        bands = band_energies(magnitude, 13)
        assert len(bands) == 13
        assert bands.sum() == pytest.approx(magnitude.sum())

    def test_cepstral_vector_length(self):
        from voiceinsight.extractors.spectral import cepstral_coefficients

        coeffs = cepstral_coefficients(np.ones(26 * 40), n_bands=26, n_coefficients=13)
        assert coeffs.shape == (13,)
        # equal bands of a flat spectrum: only the zeroth coefficient survives
        assert np.allclose(coeffs[1:], 0.0, atol=1e-9)

    def test_analyze_frames(self):
        """One entry per frame in every series."""
        from voiceinsight.extractors.framing import frame_signal
        from voiceinsight.extractors.spectral import SpectralAnalyzer

        frames = frame_signal(sine(300, 0.5, 16000), 1024, 512)
        result = SpectralAnalyzer().analyze(frames, 16000)

        assert len(result.centroid) == len(frames)
        assert result.mfcc.shape == (len(frames), 13)


class TestFeatureExtractor:
    """Tests for feature aggregation."""

    def test_pure_tone_features(self):
        """Steady 440 Hz tone: stable pitch, no jitter."""
        from voiceinsight.extractors.features import FeatureExtractor
        from voiceinsight.utils.audio import to_sample_buffer

        sample_rate = 44100
        buffer = to_sample_buffer(sine(440, 2.0, sample_rate), sample_rate)
        features = FeatureExtractor().extract(buffer)

        assert abs(features.pitch.mean - 440) < 3
        assert features.jitter < 0.01
        assert features.frame_count == (len(buffer) - 2048) // 1024 + 1
        assert len(features.mfcc) == features.frame_count
        assert len(features.spectral.centroid) == features.frame_count

    def test_short_buffer_is_insufficient(self):
        """Shorter than one frame: zeros, not an exception."""
        from voiceinsight.errors import InsufficientDataError
        from voiceinsight.extractors.features import FeatureExtractor
        from voiceinsight.utils.audio import to_sample_buffer

        extractor = FeatureExtractor()
        buffer = to_sample_buffer(np.ones(500) * 0.1, 16000)
        features = extractor.extract(buffer)

        assert features.frame_count == 0
        assert features.pitch.mean == 0.0
        assert features.speaking_rate == 0.0
        with pytest.raises(InsufficientDataError):
            extractor.require_frames(buffer)

    def test_jitter_and_shimmer(self):
        from voiceinsight.extractors.features import jitter, shimmer

        assert jitter(np.array([100.0, 110.0, 0.0, 200.0])) == pytest.approx(0.1)
        assert shimmer(np.array([1.0, 2.0, 1.0])) == pytest.approx((1.0 + 0.5) / 2)
        assert jitter(np.array([0.0, 0.0])) == 0.0

    def test_speaking_rate_and_pauses(self):
        """Two bursts over one second of frames."""
        from voiceinsight.extractors.features import speaking_rate, pause_ratio

        energy = np.array([1.0, 1.0, 0.0, 0.0, 1.0, 1.0, 0.0, 0.0])
        # 8 frames * 2000 hop / 16000 Hz = 1 second
        assert speaking_rate(energy, hop_length=2000, sample_rate=16000) == pytest.approx(2.0)
        assert pause_ratio(energy) == pytest.approx(0.5)

    def test_capabilities_resolved_once(self):
        from voiceinsight.extractors.features import FeatureExtractor

        extractor = FeatureExtractor()
        assert extractor.capabilities.pitch
        assert extractor.capabilities.spectral


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
