"""Engine facade: one-shot emotion/quality analysis and realtime sessions."""

from typing import Optional, Union
from rich.console import Console

from .config import EngineConfig, load_config
from .models.schemas import EmotionResult, QualityMetricSample, QualityReport
from .extractors import EmotionAnalyzer, FeatureExtractor
from .realtime import InputDevice, RealtimeController, measure_buffer
from .utils.audio import AudioSource, load_sample


console = Console(stderr=True)


class VoiceEngine:
    """
    Entry point for collaborators.

    Each engine owns its analyzers; every realtime session gets its own
    controller, so no state is shared between sessions or engines.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or load_config()
        self._feature_extractor: Optional[FeatureExtractor] = None
        self._emotion_analyzer: Optional[EmotionAnalyzer] = None

    @property
    def feature_extractor(self) -> FeatureExtractor:
        if self._feature_extractor is None:
            self._feature_extractor = FeatureExtractor(self.config.emotion)
        return self._feature_extractor

    @property
    def emotion_analyzer(self) -> EmotionAnalyzer:
        if self._emotion_analyzer is None:
            self._emotion_analyzer = EmotionAnalyzer(
                self.config.emotion,
                feature_extractor=self.feature_extractor,
            )
        return self._emotion_analyzer

    # ------------------------------------------------------------------
    # One-shot analysis
    # ------------------------------------------------------------------

    async def analyze_emotion(self, source: AudioSource) -> EmotionResult:
        """
        Infer the emotional state of a recording.

        Args:
            source: SampleBuffer, file path, encoded bytes or binary file object

        Returns:
            EmotionResult

        Raises:
            DecodeError: ``source`` could not be decoded
        """
        result = await self.emotion_analyzer.analyze_emotion(source)
        if self.config.verbose:
            console.print(
                f"[dim]Emotion: {result.dominant_emotion} "
                f"(confidence={result.confidence:.2f}, frames={result.features.frame_count})[/dim]"
            )
        return result

    def analyze_quality(self, source: Union[AudioSource, RealtimeController]) -> QualityReport:
        """
        Score recording quality.

        A controller is scored on its current rolling window; anything else
        is decoded and replayed through a controller on a virtual clock.
        """
        if isinstance(source, RealtimeController):
            return source.detailed_quality()
        buffer = load_sample(source)
        controller = measure_buffer(buffer, self.config.realtime)
        return controller.detailed_quality()

    # ------------------------------------------------------------------
    # Realtime sessions
    # ------------------------------------------------------------------

    def start_realtime(
        self,
        device: Optional[InputDevice] = None,
        scheduler=None,
    ) -> RealtimeController:
        """Start sampling ``device`` (the system microphone when None)."""
        controller = RealtimeController(
            self.config.realtime,
            scheduler=scheduler,
            verbose=self.config.verbose,
        )
        return controller.start(device)

    def stop_realtime(self, handle: RealtimeController) -> None:
        handle.stop()

    def get_current_metrics(self, handle: RealtimeController) -> Optional[QualityMetricSample]:
        return handle.current_metrics()

    def get_detailed_quality_analysis(self, handle: RealtimeController) -> QualityReport:
        return handle.detailed_quality()
