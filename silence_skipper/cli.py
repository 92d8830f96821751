"""Command-line interface for inspecting and simulating silence skipping.

WHY: The engine normally runs inside a player host, which makes its
decisions hard to inspect. The CLI exposes each stage on its own —
estimate a word, list the skip zones of a caption file, replay a whole
video against a virtual clock, or download a caption payload — so a
caption file can be debugged from the terminal.

HOW: argparse with one subcommand per stage. ``simulate`` builds a
SkipEngine on a VirtualClock and SimulatedPlayback, plays the video to
the end, and prints every seek the engine issued. ``fetch`` runs the
async TimedTextClient via asyncio.run().

RULES:
- Subcommands: zones, estimate, simulate, fetch
- Results go to stdout; status and notifications go to stderr
- Unreadable files, malformed payloads, unsupported languages and
  failed fetches exit with status 1
- --language defaults to the language in the caption URL (fetch) or
  English (everything else)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from silence_skipper.core.ir import CaptionKind
from silence_skipper.core.schema import CaptionPayloadError
from silence_skipper.core.timeline import build_skip_zones, classify, parse_events
from silence_skipper.engine import SkipEngine
from silence_skipper.estimators import EstimatorRegistry, UnsupportedLanguageError
from silence_skipper.notifications import LogNotifier
from silence_skipper.scheduler.simulation import SimulatedPlayback, VirtualClock
from silence_skipper.settings import LogLevel, SkipSettings
from silence_skipper.sources import CaptionFetchError, TimedTextClient

# Playback continues this long past the last caption when --duration is omitted.
_TAIL_MS = 1000


def _status(msg: str) -> None:
    """Print a status message to stderr.

    RULES:
    - All status messages go to stderr
    - Always flush after writing
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _load_payload(path: str) -> Any:
    file_path = Path(path)
    if not file_path.is_file():
        _fail("File not found: {}".format(file_path))
    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except ValueError as e:
        _fail("{} is not valid JSON: {}".format(file_path, e))


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_zones(args: argparse.Namespace) -> None:
    payload = _load_payload(args.file)
    try:
        events = parse_events(payload)
    except CaptionPayloadError as e:
        _fail(str(e))

    if classify(events) == CaptionKind.MANUAL:
        _status("Manual captions: {} events, no word-level zones.".format(len(events)))
        return

    try:
        estimator = EstimatorRegistry().require(args.language)
    except UnsupportedLanguageError as e:
        _fail(str(e))

    zones = build_skip_zones(estimator.extract_word_events(events))
    for zone in zones:
        print("{:>4}  {:>9.1f} → {:>9.1f} ms  ({:>7.1f} ms)  {} → {}".format(
            zone.index, zone.from_ms, zone.to_ms, zone.gap_ms,
            zone.from_word, zone.to_word,
        ))
    _status("{} skip zones, {:.2f} s of silence".format(
        len(zones), sum(zone.gap_ms for zone in zones) / 1000,
    ))


def _cmd_estimate(args: argparse.Namespace) -> None:
    try:
        estimator = EstimatorRegistry().require(args.language)
    except UnsupportedLanguageError as e:
        _fail(str(e))

    for word in args.words:
        estimate = estimator.estimate(word)
        print("{}\t{:.1f} ms".format(word, estimate.total_ms))
        if args.verbose and estimate.details:
            for key, value in sorted(estimate.details.items()):
                print("  {}: {}".format(key, value))


def _settings_from_args(args: argparse.Namespace) -> SkipSettings:
    update = {
        "min_skip_seconds": args.min_skip,
        "skip_after_seek": args.skip_after_seek,
        "skip_cc_captions": args.skip_cc_captions,
        "pre_speech_offset_seconds": args.pre_speech_offset,
        "post_silence_delay_seconds": args.post_silence_delay,
        "log_level": args.log_level,
    }
    return SkipSettings.from_env().apply(
        {key: value for key, value in update.items() if value is not None}
    )


def _default_duration_ms(payload: Any) -> float:
    events = parse_events(payload)
    if not events:
        return float(_TAIL_MS)
    return float(max(event.end_ms for event in events) + _TAIL_MS)


def _cmd_simulate(args: argparse.Namespace) -> None:
    payload = _load_payload(args.file)
    settings = _settings_from_args(args)

    if args.duration is not None:
        duration_ms = args.duration * 1000
    else:
        try:
            duration_ms = _default_duration_ms(payload)
        except CaptionPayloadError as e:
            _fail(str(e))

    clock = VirtualClock()
    player = SimulatedPlayback(clock, duration_ms=duration_ms)
    engine = SkipEngine(
        timers=clock,
        playback_provider=lambda: player,
        settings=settings,
        notifier=LogNotifier(settings.log_level, on_message=_status),
    )

    player.play()
    if not engine.load_captions(payload, args.language):
        _fail("Nothing to simulate for {}".format(args.file))

    clock.advance_to(duration_ms)
    engine.on_video_changed()

    total_ms = 0.0
    for seek in player.seeks:
        total_ms += seek.skipped_ms
        print("{:>9.2f} s  {:>9.2f} → {:>9.2f} s  (+{:.2f} s)".format(
            seek.at_ms / 1000, seek.from_ms / 1000, seek.to_ms / 1000,
            seek.skipped_ms / 1000,
        ))
    print("Skipped {} gap(s), {:.2f} s of {:.2f} s".format(
        len(player.seeks), total_ms / 1000, duration_ms / 1000,
    ))


async def _fetch(args: argparse.Namespace) -> None:
    async with TimedTextClient() as client:
        url = client.register_url(args.video_id, args.url)
        _status("Fetching {}".format(url))
        payload = await client.fetch(args.video_id)
        language = client.language_for(args.video_id)

    _status("  Language: {}".format(language or "unknown"))
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        _status("  Saved: {}".format(args.output))
    else:
        print(text)


def _cmd_fetch(args: argparse.Namespace) -> None:
    try:
        asyncio.run(_fetch(args))
    except CaptionFetchError as e:
        _fail(str(e))


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running anything.
    """
    parser = argparse.ArgumentParser(
        prog="silence_skipper",
        description="Inspect caption timing and simulate skipping the "
                    "silence between captions.",
    )
    parser.add_argument(
        "--verbose-log",
        action="store_true",
        help="Enable debug logging on stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    zones = sub.add_parser("zones", help="List the skip zones of a timedtext JSON file.")
    zones.add_argument("file", help="Path to a timedtext JSON file.")
    zones.add_argument("--language", default=None, help="Caption language code (default: en).")
    zones.set_defaults(handler=_cmd_zones)

    estimate = sub.add_parser("estimate", help="Estimate how long words take to speak.")
    estimate.add_argument("words", nargs="+", help="Words to estimate.")
    estimate.add_argument("--language", default=None, help="Language code (default: en).")
    estimate.add_argument("-v", "--verbose", action="store_true", help="Show estimator details.")
    estimate.set_defaults(handler=_cmd_estimate)

    simulate = sub.add_parser("simulate", help="Play a caption file against a virtual clock.")
    simulate.add_argument("file", help="Path to a timedtext JSON file.")
    simulate.add_argument("--language", default=None, help="Caption language code (default: en).")
    simulate.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Video duration in seconds (default: last caption end + 1 s).",
    )
    simulate.add_argument("--min-skip", type=float, default=None, help="Minimum gap in seconds.")
    simulate.add_argument(
        "--skip-after-seek",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Keep skipping right after a user seek.",
    )
    simulate.add_argument(
        "--skip-cc-captions",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Treat [Music]-style caption markers as silence.",
    )
    simulate.add_argument("--pre-speech-offset", type=float, default=None, help="Seconds.")
    simulate.add_argument("--post-silence-delay", type=float, default=None, help="Seconds.")
    simulate.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=None,
        help="Notification verbosity.",
    )
    simulate.set_defaults(handler=_cmd_simulate)

    fetch = sub.add_parser("fetch", help="Download a timedtext JSON payload.")
    fetch.add_argument("url", help="Timedtext URL (tlang is removed).")
    fetch.add_argument("--video-id", default="video", help="Cache key for the video.")
    fetch.add_argument("--output", default=None, help="Write the payload here instead of stdout.")
    fetch.set_defaults(handler=_cmd_fetch)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose_log else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args.handler(args)


if __name__ == "__main__":
    main()
