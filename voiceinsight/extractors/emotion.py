"""Emotion inference from acoustic summary features.

Features are normalised against fixed physiological ranges, weighted per
class with a hand-tuned table, squashed to [0, 1] and softmaxed. The weights
and ranges are empirical calibration constants tuned against the
autocorrelation pitch tracker; changing them is a behaviour change.
"""

import asyncio
import time
from typing import Callable, Dict, Optional
import numpy as np

from ..config import EmotionConfig
from ..models.schemas import EMOTION_LABELS, EmotionResult, FeatureVector, SampleBuffer
from ..utils.audio import AudioSource, load_sample
from .features import FeatureExtractor


# (min, max) used to map each feature to [-1, 1]
FEATURE_RANGES = {
    "pitch_mean": (50.0, 500.0),
    "pitch_variance": (0.0, 10000.0),
    "pitch_range": (0.0, 450.0),
    "energy_mean": (0.0, 1.0),
    "energy_variance": (0.0, 0.1),
    "speaking_rate": (1.0, 10.0),
    "spectral_centroid": (0.0, 8000.0),
    "spectral_bandwidth": (0.0, 4000.0),
}

# Disgust carries no weights, so its raw score stays 0.
EMOTION_WEIGHTS = {
    "happiness": {
        "pitch_mean": 0.3, "pitch_variance": 0.2, "pitch_range": 0.2,
        "energy_mean": 0.4, "energy_variance": 0.1,
        "speaking_rate": 0.3,
        "spectral_centroid": 0.2, "spectral_bandwidth": 0.1,
    },
    "sadness": {
        "pitch_mean": -0.4, "pitch_variance": -0.2, "pitch_range": -0.1,
        "energy_mean": -0.3, "energy_variance": -0.1,
        "speaking_rate": -0.3,
        "spectral_centroid": -0.2, "spectral_bandwidth": -0.1,
    },
    "anger": {
        "pitch_mean": 0.2, "pitch_variance": 0.4, "pitch_range": 0.3,
        "energy_mean": 0.5, "energy_variance": 0.3,
        "speaking_rate": 0.4,
        "spectral_centroid": 0.3, "spectral_bandwidth": 0.2,
    },
    "fear": {
        "pitch_mean": 0.3, "pitch_variance": 0.3, "pitch_range": 0.2,
        "energy_mean": 0.2, "energy_variance": 0.4,
        "speaking_rate": 0.2,
        "spectral_centroid": 0.2, "spectral_bandwidth": 0.2,
    },
    "surprise": {
        "pitch_mean": 0.4, "pitch_variance": 0.2, "pitch_range": 0.3,
        "energy_mean": 0.3, "energy_variance": 0.2,
        "speaking_rate": 0.1,
        "spectral_centroid": 0.3, "spectral_bandwidth": 0.1,
    },
    "neutral": {
        "pitch_mean": 0.0, "pitch_variance": 0.0, "pitch_range": 0.0,
        "energy_mean": 0.0, "energy_variance": 0.0,
        "speaking_rate": 0.0,
        "spectral_centroid": 0.0, "spectral_bandwidth": 0.0,
    },
}

AROUSAL_WEIGHTS = {
    "anger": 0.8, "fear": 0.7, "surprise": 0.6, "happiness": 0.5,
    "disgust": 0.4, "sadness": 0.2, "neutral": 0.0,
}

VALENCE_WEIGHTS = {
    "happiness": 1.0, "surprise": 0.3, "neutral": 0.0, "disgust": -0.3,
    "fear": -0.5, "sadness": -0.8, "anger": -0.6,
}


def normalize_value(value: float, low: float, high: float) -> float:
    """Map [low, high] onto [-1, 1]; values outside the range extrapolate."""
    return 2.0 * (value - low) / (high - low) - 1.0


def normalize_features(features: FeatureVector) -> Dict[str, float]:
    """Normalised inputs of the weight table."""
    raw = {
        "pitch_mean": features.pitch.mean,
        "pitch_variance": features.pitch.variance,
        "pitch_range": features.pitch.range,
        "energy_mean": features.energy.mean,
        "energy_variance": features.energy.variance,
        "speaking_rate": features.speaking_rate,
        "spectral_centroid": float(np.mean(features.spectral.centroid)) if features.frame_count else 0.0,
        "spectral_bandwidth": float(np.mean(features.spectral.bandwidth)) if features.frame_count else 0.0,
    }
    return {
        name: normalize_value(value, *FEATURE_RANGES[name])
        for name, value in raw.items()
    }


def softmax(scores: Dict[str, float]) -> Dict[str, float]:
    values = np.array([scores[label] for label in EMOTION_LABELS], dtype=np.float64)
    exp = np.exp(values - np.max(values))
    probs = exp / np.sum(exp)
    return {label: float(p) for label, p in zip(EMOTION_LABELS, probs)}


def raw_emotion_scores(features: FeatureVector) -> Dict[str, float]:
    """Clamped per-class scores before the softmax."""
    if features.is_silent:
        return {label: (1.0 if label == "neutral" else 0.0) for label in EMOTION_LABELS}

    normalized = normalize_features(features)
    scores = {label: 0.0 for label in EMOTION_LABELS}
    for label, weights in EMOTION_WEIGHTS.items():
        score = sum(weight * normalized[name] for name, weight in weights.items())
        scores[label] = min(1.0, max(0.0, (score + 1.0) / 2.0))
    return scores


def dominant_emotion(emotions: Dict[str, float]) -> str:
    """Arg-max; ties go to the earliest label in EMOTION_LABELS."""
    best = EMOTION_LABELS[0]
    for label in EMOTION_LABELS[1:]:
        if emotions[label] > emotions[best]:
            best = label
    return best


def signal_quality(features: FeatureVector) -> float:
    quality = 1.0
    if features.energy.mean < 0.01:
        quality *= 0.5
    if features.jitter > 0.1:
        quality *= 0.8
    if features.shimmer > 0.1:
        quality *= 0.7
    return max(0.1, quality)


def compute_confidence(emotions: Dict[str, float], quality: float) -> float:
    """``min(1, 2 * (top1 - top2) * quality)``."""
    ranked = sorted(emotions.values(), reverse=True)
    gap = ranked[0] - (ranked[1] if len(ranked) > 1 else 0.0)
    return min(1.0, max(0.0, gap * 2.0 * quality))


def compute_arousal_valence(emotions: Dict[str, float]):
    arousal = sum(AROUSAL_WEIGHTS[label] * emotions[label] for label in EMOTION_LABELS)
    valence = sum(VALENCE_WEIGHTS[label] * emotions[label] for label in EMOTION_LABELS)
    return (
        min(1.0, max(0.0, arousal)),
        min(1.0, max(0.0, (valence + 1.0) / 2.0)),
    )


class EmotionAnalyzer:
    """Infer a 7-class emotion estimate from a recording."""

    def __init__(
        self,
        config: Optional[EmotionConfig] = None,
        feature_extractor: Optional[FeatureExtractor] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or EmotionConfig()
        self.feature_extractor = feature_extractor or FeatureExtractor(self.config)
        self._clock = clock

    def infer(self, features: FeatureVector) -> EmotionResult:
        """
        Score a feature vector.

        Args:
            features: Summary features of one sample

        Returns:
            EmotionResult derived from ``features``
        """
        emotions = softmax(raw_emotion_scores(features))
        arousal, valence = compute_arousal_valence(emotions)
        return EmotionResult(
            emotions=emotions,
            dominant_emotion=dominant_emotion(emotions),
            confidence=compute_confidence(emotions, signal_quality(features)),
            arousal=arousal,
            valence=valence,
            timestamp=self._clock(),
            features=features,
        )

    def analyze(self, buffer: SampleBuffer) -> EmotionResult:
        """Extract features from a decoded buffer and score them."""
        return self.infer(self.feature_extractor.extract(buffer))

    async def analyze_emotion(self, source: AudioSource) -> EmotionResult:
        """
        Decode ``source`` and analyze it.

        Decoding runs in a worker thread; everything after it is synchronous.
        A source that cannot be decoded raises DecodeError and no result is
        produced.
        """
        buffer = await asyncio.to_thread(load_sample, source, self.config.target_sample_rate)
        return self.analyze(buffer)
