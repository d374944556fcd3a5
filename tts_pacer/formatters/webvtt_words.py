"""WebVTT formatter with one cue per word.

WHY: Browsers play WebVTT tracks natively. A word-level track lets a
plain <audio>/<video> element drive highlighting with cuechange events.

HOW: Writes the "WEBVTT" signature with a Language header, a blank line,
then one cue per word identified by "w<index>".

RULES:
- Timestamps are HH:MM:SS.mmm relative to the start of speech
- Cue identifiers are "w0", "w1", ... matching word indices
- The Language header carries the BCP-47 tag of the voice
- Output suffix: "-words.vtt"; media type "text/vtt"
"""

from __future__ import annotations

from typing import List

from tts_pacer.config import map_language
from tts_pacer.core.ir import Narration
from tts_pacer.formatters.base import BaseFormatter, FormatterOutput, format_timestamp


class WebVTTWordsFormatter(BaseFormatter):
    """Formatter producing word-level WebVTT cues."""

    @property
    def name(self) -> str:
        return "WebVTT Word Cues"

    def format(self, narration: Narration) -> List[FormatterOutput]:
        lines = ["WEBVTT", "Language: {}".format(map_language(narration.language)), ""]
        for word in narration.words:
            lines.append("w{}".format(word.index))
            lines.append("{} --> {}".format(
                format_timestamp(word.start_ms, "."),
                format_timestamp(word.end_ms, "."),
            ))
            lines.append(word.text)
            lines.append("")
        return [FormatterOutput(
            suffix="-words.vtt",
            content="\n".join(lines),
            media_type="text/vtt",
        )]
