"""Intermediate representation dataclasses for paced narration.

WHY: The pacer, the highlight renderer, the export formatters and the
HTTP layer all need the same view of a text: its words, where they sit
in the string, and when each one is estimated to be spoken. The IR
provides one well-typed form that every consumer shares.

HOW: Four frozen dataclasses:
  Word: one whitespace-delimited word and its character span
  TimedWord: a Word with estimated start/end milliseconds
  PacerState: the mutable-by-replacement state of one pacing session
  Narration: a text, its language and its timed words

RULES:
- start_offset/end_offset are a half-open range into the original text
- index is the 0-based position among words in the text
- All times are integer milliseconds relative to the start of speech
- PacerState.current_index is -1 (no word) or a valid word index
- PacerState is replaced, never mutated in place
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Word:
    """A maximal run of non-whitespace characters in the source text."""

    text: str
    start_offset: int
    end_offset: int
    index: int


@dataclass(frozen=True)
class TimedWord(Word):
    """A Word with its estimated speaking window.

    RULES:
    - start_ms includes the inter-word pause before this word
    - end_ms = start_ms + len(text) * ms_per_char
    """

    start_ms: int = 0
    end_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dict (camelCase keys, as the web client expects)."""
        return {
            "text": self.text,
            "index": self.index,
            "startOffset": self.start_offset,
            "endOffset": self.end_offset,
            "startMs": self.start_ms,
            "endMs": self.end_ms,
        }


@dataclass(frozen=True)
class PacerState:
    """State of one pacing session.

    Lifecycle: IDLE ({-1, None}) → start() sets the start time once and
    the index to 0 → ticks move the index forward → reset() returns to IDLE.
    """

    current_index: int = -1
    playback_start_time: Optional[float] = None

    @property
    def is_idle(self) -> bool:
        return self.current_index == -1 and self.playback_start_time is None


IDLE_STATE = PacerState()


@dataclass(frozen=True)
class Narration:
    """A text with its estimated word timings.

    WHY: Formatters and the HTTP layer receive this single object instead
    of re-tokenizing and re-pacing the text themselves.

    RULES:
    - words are ordered by index, with non-decreasing start_ms/end_ms
    - language is the code the caller supplied (may be unlisted)
    - duration_ms is the end of the last word, 0 for an empty text
    """

    text: str
    language: str
    words: Tuple[TimedWord, ...]
    duration_ms: int

    @property
    def total_words(self) -> int:
        return len(self.words)
