"""Silence Skipper — caption-synchronized silence skipping for video playback.

WHY: Lectures, talks and tutorials are full of pauses. Caption tracks
already say when someone is speaking, so the gaps between captions can
be skipped automatically while the video plays.

HOW: Three-stage pipeline — parse (timedtext payload into caption
events), estimate (per-language word durations turn auto-generated
captions into skip zones), schedule (a reactive strategy arms one timer
at a time and seeks past each gap). SkipEngine wires the stages to a
playback handle, a timer source and a notifier.

RULES:
- Manual captions skip between caption events; auto-generated captions
  skip between estimated words
- Adding a language = one new estimator module, no core changes
- The engine never crashes on bad input; it reports once and disarms
"""

__version__ = "0.1.0"
