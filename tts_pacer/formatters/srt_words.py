"""SRT formatter with one cue per word.

WHY: Video tools import SRT. One cue per word gives editors the same
word-by-word reveal the app shows while the voice plays.

RULES:
- Cue N shows word N-1 from its start_ms to its end_ms
- Timestamps are HH:MM:SS,mmm relative to the start of speech
- An empty narration produces an empty file
- Output suffix: "-words.srt"; media type "application/x-subrip"
"""

from __future__ import annotations

from typing import List

from tts_pacer.core.ir import Narration
from tts_pacer.formatters.base import BaseFormatter, FormatterOutput, format_timestamp


class SRTWordsFormatter(BaseFormatter):
    """Formatter producing word-level SRT cues."""

    @property
    def name(self) -> str:
        return "SRT Word Cues"

    def format(self, narration: Narration) -> List[FormatterOutput]:
        blocks = []
        for seq, word in enumerate(narration.words, start=1):
            blocks.append("{}\n{} --> {}\n{}\n".format(
                seq,
                format_timestamp(word.start_ms, ","),
                format_timestamp(word.end_ms, ","),
                word.text,
            ))
        return [FormatterOutput(
            suffix="-words.srt",
            content="\n".join(blocks),
            media_type="application/x-subrip",
        )]
