"""Export formatter registry: pluggable format hub.

WHY: The CLI and the HTTP layer need a single lookup to find the right
formatter by name. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["webvtt_words"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and request bodies)
- Values are BaseFormatter subclasses constructible with no arguments
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tts_pacer.formatters.srt_words import SRTWordsFormatter
from tts_pacer.formatters.timings_json import TimingsJSONFormatter
from tts_pacer.formatters.webvtt_words import WebVTTWordsFormatter

if TYPE_CHECKING:
    from tts_pacer.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "timings_json": TimingsJSONFormatter,
    "srt_words": SRTWordsFormatter,
    "webvtt_words": WebVTTWordsFormatter,
}
