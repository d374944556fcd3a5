"""Tokenization, per-word timing estimation, and Narration construction.

WHY: The speech engine exposes no word timestamps. To highlight words
in step with the audio we estimate when each word is spoken from its
length alone, using a per-language speaking rate.

HOW: tokenize() scans the text for maximal runs of non-whitespace.
estimate_timings() walks the words in order, adding a fixed pause
before every word but the first and a duration of
len(word) * ms_per_char(language). The running total carries forward,
so the sequence is monotonic. find_word_index() maps an elapsed time
back onto the timings with a forward scan.

RULES:
- None, empty and whitespace-only text yield no words
- Punctuation stays attached to its word ("hola," is one word)
- Unknown language codes use the config's default rate
- Equal start times favour the later word (<=, not <)
- Nothing here raises on bad input
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from tts_pacer.config import PacingConfig
from tts_pacer.core.ir import Narration, TimedWord, Word

_WORD_RE = re.compile(r"\S+")

_DEFAULT_CONFIG = PacingConfig()


def tokenize(text: Optional[str]) -> List[Word]:
    """Split text into words with their character offsets.

    Args:
        text: The text to split. None or a non-string is treated as empty.

    Returns:
        Words in left-to-right order, indexed from 0.
    """
    if not isinstance(text, str) or not text:
        return []
    return [
        Word(text=match.group(0), start_offset=match.start(), end_offset=match.end(), index=i)
        for i, match in enumerate(_WORD_RE.finditer(text))
    ]


def estimate_timings(
    words: Sequence[Word],
    language_code: Optional[str],
    config: Optional[PacingConfig] = None,
) -> List[TimedWord]:
    """Estimate start/end milliseconds for each word.

    Args:
        words: Words from tokenize(), in order.
        language_code: Short language code ("es", "en", ...); selects the
                       ms-per-character rate.
        config: Pacing parameters. Defaults to the built-in constants.

    Returns:
        One TimedWord per input word with cumulative timings.
    """
    config = config or _DEFAULT_CONFIG
    ms_per_char = config.ms_per_char(language_code)

    timed: List[TimedWord] = []
    current_ms = 0
    for position, word in enumerate(words):
        pause_ms = config.word_pause_ms if position > 0 else 0
        duration_ms = len(word.text) * ms_per_char
        start_ms = current_ms + pause_ms
        timed.append(TimedWord(
            text=word.text,
            start_offset=word.start_offset,
            end_offset=word.end_offset,
            index=word.index,
            start_ms=start_ms,
            end_ms=start_ms + duration_ms,
        ))
        current_ms = start_ms + duration_ms
    return timed


def build_narration(
    text: Optional[str],
    language_code: Optional[str],
    config: Optional[PacingConfig] = None,
) -> Narration:
    """Tokenize and pace a text in one step."""
    words = tuple(estimate_timings(tokenize(text), language_code, config))
    return Narration(
        text=text if isinstance(text, str) else "",
        language=language_code or "",
        words=words,
        duration_ms=words[-1].end_ms if words else 0,
    )


def find_word_index(words: Sequence[TimedWord], elapsed_ms: float) -> int:
    """Return the greatest index whose start_ms <= elapsed_ms.

    The scan stops at the first word that starts after elapsed_ms.
    Returns -1 when no word has started (or there are no words).
    """
    index = -1
    for word in words:
        if word.start_ms > elapsed_ms:
            break
        index = word.index
    return index
