"""Abstract base formatter, output container, and timestamp helpers.

WHY: Every export consumes the same Narration IR but produces different
file content. This base class enforces a consistent interface so the CLI
and the HTTP layer can work with any formatter generically.

HOW: BaseFormatter is an ABC with two requirements: a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list of outputs
- ``suffix`` starts with a hyphen, e.g. ``"-timings.json"``
- The caller is responsible for prepending the output stem
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Union

from tts_pacer.core.ir import Narration


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the stem,
                e.g. ``"-words.vtt"`` → ``"lesson-words.vtt"``.
        content: The file content.
        media_type: MIME type for the content.
    """

    suffix: str
    content: Union[str, bytes]
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all export formatters.

    To add a new export:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'WebVTT word cues'."""

    @abstractmethod
    def format(self, narration: Narration) -> List[FormatterOutput]:
        """Convert the Narration IR into one or more output files."""


def format_timestamp(ms: int, decimal_separator: str) -> str:
    """Render milliseconds as HH:MM:SS<sep>mmm.

    SRT uses "," as the separator, WebVTT uses ".".
    """
    ms = max(int(ms), 0)
    hours, rest = divmod(ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, millis = divmod(rest, 1000)
    return "{:02d}:{:02d}:{:02d}{}{:03d}".format(
        hours, minutes, seconds, decimal_separator, millis
    )
