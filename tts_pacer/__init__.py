"""TTS word pacer: estimated word highlighting for synthesized speech.

WHY: The speech engine that narrates lesson text reports only "playing"
and "stopped". The UI still wants to highlight the word being spoken.
This package estimates per-word timing from the text alone and advances
a "current word" index while playback is active.

HOW: Three layers: timing (tokenize + per-language pacing table), the
session pacer (frame-driven index updates over a pluggable scheduler),
and consumers (highlight renderer, export formatters, HTTP service, CLI).

RULES:
- Pacing and rendering never raise on bad input; they degrade silently
- The Narration IR is the contract between timing and every consumer
- The per-language pacing table is read-only after import
"""

__version__ = "0.1.0"
