"""Recording quality scoring, issue detection and capture recommendations.

Reports are recomputed from the latest metric sample on every call.
"""

from typing import List, Optional, Sequence, Tuple

from ..models.schemas import (
    AudioEnvironment,
    QualityMetricSample,
    QualityReport,
    RecordingSettings,
    TechnicalDetails,
)


# ── Weights of the overall score ───────────────────────────────────────

SCORE_WEIGHTS = {
    "volume": 0.25,
    "noise": 0.20,
    "clarity": 0.25,
    "dynamic": 0.10,
    "distortion": 0.15,
    "silence": 0.05,
}

IDEAL_VOLUME = 50.0

# ── Score → tier mapping ───────────────────────────────────────────────

QUALITY_TIERS: List[Tuple[int, str, str]] = [
    (90, "excellent", "Excellent sound quality."),
    (80, "very_good", "Very good sound quality."),
    (70, "good", "Good sound quality."),
    (60, "fair", "Acceptable sound quality."),
    (50, "could_improve", "Sound quality could be improved."),
    (0, "needs_major_improvement", "Sound quality needs major improvement."),
]

PENDING_RECOMMENDATION = "Collecting audio data..."

# ── Issue rules: (predicate, issue, suggestion) ────────────────────────

ISSUE_RULES = [
    (lambda m: m.volume < 20, "Volume is too quiet", "Move closer to the microphone"),
    (lambda m: m.volume > 80, "Volume is too loud", "Move back from the microphone"),
    (lambda m: m.noise_ratio > 30, "High background noise", "Record in a quieter place"),
    (lambda m: m.clarity < 60, "Speech clarity is low", "Speak clearly and articulate"),
    (lambda m: m.distortion_ratio > 25, "Audio is distorted", "Lower the microphone input level"),
    (lambda m: m.silence_ratio > 40, "Too much silence", "Speak continuously"),
    (lambda m: m.dynamic_range < 10, "Volume barely varies", "Speak with natural intonation"),
]


def quality_tier(score: float) -> Tuple[str, str]:
    """Return (tier, recommendation text) for a 0-100 score."""
    for floor, tier, text in QUALITY_TIERS:
        if score >= floor:
            return tier, text
    return QUALITY_TIERS[-1][1], QUALITY_TIERS[-1][2]


def volume_score(metrics: QualityMetricSample) -> float:
    deviation = abs(metrics.volume - IDEAL_VOLUME)
    return max(0.0, 100.0 - deviation * 2) + min(20.0, metrics.dynamic_range)


def detect_issues(metrics: QualityMetricSample) -> Tuple[List[str], List[str]]:
    """Paired issues and suggestions that apply to ``metrics``."""
    issues, suggestions = [], []
    for applies, issue, suggestion in ISSUE_RULES:
        if applies(metrics):
            issues.append(issue)
            suggestions.append(suggestion)
    return issues, suggestions


def placeholder_report() -> QualityReport:
    """Neutral report used before any metric has been captured."""
    return QualityReport(
        overall_score=50,
        volume_score=50,
        clarity_score=50,
        noise_score=50,
        dynamic_score=50,
        distortion_score=50,
        tier="pending",
        recommendation=PENDING_RECOMMENDATION,
    )


def score_quality(current: Optional[QualityMetricSample]) -> QualityReport:
    """
    Build a quality report from the latest metric sample.

    Args:
        current: Latest measurement, or None when nothing was captured yet

    Returns:
        QualityReport; the placeholder report when ``current`` is None
    """
    if current is None:
        return placeholder_report()

    scores = {
        "volume": volume_score(current),
        "clarity": current.clarity,
        "noise": max(0.0, 100.0 - current.noise_ratio),
        "dynamic": min(100.0, current.dynamic_range * 2),
        "distortion": max(0.0, 100.0 - current.distortion_ratio * 2),
        "silence": 100.0 - current.silence_ratio,
    }
    overall = round(sum(SCORE_WEIGHTS[name] * value for name, value in scores.items()))
    tier, recommendation = quality_tier(overall)
    issues, suggestions = detect_issues(current)

    return QualityReport(
        overall_score=overall,
        volume_score=round(scores["volume"], 2),
        clarity_score=round(scores["clarity"], 2),
        noise_score=round(scores["noise"], 2),
        dynamic_score=round(scores["dynamic"], 2),
        distortion_score=round(scores["distortion"], 2),
        tier=tier,
        recommendation=recommendation,
        issues=issues,
        suggestions=suggestions,
        technical_details=TechnicalDetails(
            peak_volume=current.peak_volume,
            average_volume=current.average_volume,
            dynamic_range=current.dynamic_range,
            silence_ratio=current.silence_ratio,
            distortion_ratio=current.distortion_ratio,
            spectral_centroid=current.spectral_centroid,
        ),
    )


def analyze_environment(current: Optional[QualityMetricSample]) -> AudioEnvironment:
    """Classify background noise of the latest measurement."""
    if current is None:
        return AudioEnvironment(type="normal", noise_level=0.0, recommendation="Analyzing environment...")

    noise = current.noise_ratio
    if noise < 10:
        env, text = "quiet", "Very quiet environment, ideal for recording."
    elif noise < 25:
        env, text = "normal", "Good recording environment."
    elif noise < 50:
        env, text = "noisy", "Some background noise, recording is still possible."
    else:
        env, text = "very_noisy", "Noisy environment, a quieter place is recommended."
    return AudioEnvironment(type=env, noise_level=noise, recommendation=text)


def _optimal_gain(volume: float, noise: float) -> float:
    gain = 1.0
    if volume < 20:
        gain = 1.5
    elif volume > 80:
        gain = 0.7
    if noise > 50:
        gain = min(gain * 1.2, 2.0)
    return gain


def recommend_settings(history: Sequence[QualityMetricSample], window: int = 10) -> RecordingSettings:
    """
    Recommend capture settings from the last ``window`` measurements.

    Fewer than ``window`` measurements give the default settings.
    """
    if len(history) < window:
        return RecordingSettings()

    recent = list(history)[-window:]
    avg_noise = sum(m.noise_ratio for m in recent) / window
    avg_volume = sum(m.volume for m in recent) / window
    avg_clarity = sum(m.clarity for m in recent) / window

    return RecordingSettings(
        sample_rate=48000 if avg_clarity < 40 else 44100,
        echo_cancellation=True,
        noise_suppression=avg_noise > 30,
        auto_gain_control=avg_volume < 20 or avg_volume > 80,
        channel_count=1,
        gain=_optimal_gain(avg_volume, avg_noise),
    )
