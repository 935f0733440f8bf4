#!/usr/bin/env python3
"""
Voice Insight command line

Analyzes recordings for emotional state and recording quality, or monitors
the system microphone live.

Supports:
  - Single audio file or folder of audio files (recursive)
  - Emotion and quality reports as rich tables or JSON
  - Live microphone quality monitoring
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List

from rich.console import Console
from rich.table import Table

from voiceinsight import DecodeError, DeviceUnavailableError, VoiceEngine, load_config
from voiceinsight.models.schemas import EmotionResult, QualityReport


AUDIO_EXTENSIONS = {".wav", ".mp3", ".m4a", ".flac", ".ogg", ".webm", ".aac"}
console = Console()


# ---------------------------------------------------------------------------
# Audio discovery
# ---------------------------------------------------------------------------

def find_audio_files(folder: Path, recursive: bool = True) -> List[Path]:
    """Find all audio files in a folder."""
    audio_files = []
    pattern = "**/*" if recursive else "*"
    for ext in AUDIO_EXTENSIONS:
        audio_files.extend(folder.glob(f"{pattern}{ext}"))
        audio_files.extend(folder.glob(f"{pattern}{ext.upper()}"))
    return sorted(set(audio_files))


def collect_inputs(paths: List[str]) -> List[Path]:
    files: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            files.extend(find_audio_files(path))
        else:
            files.append(path)
    return files


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def print_emotion(path: Path, result: EmotionResult):
    table = Table(title=f"Emotion: {path.name}")
    table.add_column("Emotion")
    table.add_column("Score", justify="right")
    for label, score in sorted(result.emotions.items(), key=lambda kv: kv[1], reverse=True):
        style = "bold green" if label == result.dominant_emotion else ""
        table.add_row(label, f"{score:.3f}", style=style)
    console.print(table)
    console.print(
        f"  dominant: [bold]{result.dominant_emotion}[/bold]  "
        f"confidence: {result.confidence:.2f}  arousal: {result.arousal:.2f}  valence: {result.valence:.2f}"
    )
    f = result.features
    console.print(
        f"  [dim]pitch {f.pitch.mean:.1f} Hz, energy {f.energy.mean:.4f}, "
        f"jitter {f.jitter:.3f}, shimmer {f.shimmer:.3f}, frames {f.frame_count}[/dim]"
    )


def print_quality(title: str, report: QualityReport):
    table = Table(title=f"Quality: {title}")
    table.add_column("Metric")
    table.add_column("Score", justify="right")
    table.add_row("overall", str(report.overall_score), style="bold")
    table.add_row("volume", f"{report.volume_score:.1f}")
    table.add_row("clarity", f"{report.clarity_score:.1f}")
    table.add_row("noise", f"{report.noise_score:.1f}")
    table.add_row("dynamic", f"{report.dynamic_score:.1f}")
    table.add_row("distortion", f"{report.distortion_score:.1f}")
    console.print(table)
    console.print(f"  {report.recommendation}")
    for issue, suggestion in zip(report.issues, report.suggestions):
        console.print(f"  [yellow]- {issue}[/yellow] → {suggestion}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_emotion(engine: VoiceEngine, args) -> int:
    files = collect_inputs(args.inputs)
    results = {}
    failures = 0
    for path in files:
        try:
            result = asyncio.run(engine.analyze_emotion(path))
        except DecodeError as e:
            console.print(f"[red]{path}: {e}[/red]")
            failures += 1
            continue
        if args.json:
            results[str(path)] = result.model_dump(exclude={"features"} if not args.features else None)
        else:
            print_emotion(path, result)
    if args.json:
        print(json.dumps(results, indent=2))
    return 1 if failures else 0


def cmd_quality(engine: VoiceEngine, args) -> int:
    files = collect_inputs(args.inputs)
    results = {}
    failures = 0
    for path in files:
        try:
            report = engine.analyze_quality(path)
        except DecodeError as e:
            console.print(f"[red]{path}: {e}[/red]")
            failures += 1
            continue
        if args.json:
            results[str(path)] = report.model_dump()
        else:
            print_quality(path.name, report)
    if args.json:
        print(json.dumps(results, indent=2))
    return 1 if failures else 0


async def _monitor(engine: VoiceEngine, seconds: float, every: float):
    handle = engine.start_realtime()
    try:
        elapsed = 0.0
        while elapsed < seconds:
            await asyncio.sleep(every)
            elapsed += every
            metrics = engine.get_current_metrics(handle)
            report = engine.get_detailed_quality_analysis(handle)
            if metrics is None:
                continue
            console.print(
                f"{elapsed:5.1f}s  volume {metrics.volume:5.1f}  peak {metrics.peak_volume:5.1f}  "
                f"freq {metrics.frequency:7.1f} Hz  score {report.overall_score:3d}  {report.tier}"
            )
        print_quality("microphone", engine.get_detailed_quality_analysis(handle))
        env = handle.environment()
        console.print(f"  environment: {env.type}, {env.recommendation}")
    finally:
        engine.stop_realtime(handle)


def cmd_monitor(engine: VoiceEngine, args) -> int:
    try:
        asyncio.run(_monitor(engine, args.seconds, args.every))
    except DeviceUnavailableError as e:
        console.print(f"[red]{e}[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("[dim]Interrupted[/dim]")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Recording quality and emotion analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py emotion interview.wav
  python main.py quality recordings/ --json
  python main.py monitor --seconds 15
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Print engine status messages")
    sub = parser.add_subparsers(dest="command", required=True)

    p_emotion = sub.add_parser("emotion", help="Infer emotional state of recordings")
    p_emotion.add_argument("inputs", nargs="+", help="Audio files or folders")
    p_emotion.add_argument("--json", action="store_true", help="Print JSON instead of tables")
    p_emotion.add_argument("--features", action="store_true", help="Include the feature vector in JSON")

    p_quality = sub.add_parser("quality", help="Score recording quality")
    p_quality.add_argument("inputs", nargs="+", help="Audio files or folders")
    p_quality.add_argument("--json", action="store_true", help="Print JSON instead of tables")

    p_monitor = sub.add_parser("monitor", help="Monitor microphone quality live")
    p_monitor.add_argument("--seconds", type=float, default=10.0, help="Monitoring duration")
    p_monitor.add_argument("--every", type=float, default=1.0, help="Status line interval in seconds")

    args = parser.parse_args()

    config = load_config()
    if args.verbose:
        config.verbose = True
    engine = VoiceEngine(config)

    commands = {
        "emotion": cmd_emotion,
        "quality": cmd_quality,
        "monitor": cmd_monitor,
    }
    sys.exit(commands[args.command](engine, args))


if __name__ == "__main__":
    main()
