"""Split narrated text into parts with the current word marked.

WHY: A view rendering "hola mundo" with "mundo" highlighted needs three
parts: the word "hola", the space, and the highlighted word "mundo".
Keeping the whitespace as its own parts means the view reproduces the
text exactly, line breaks included.

HOW: Walk the tokenizer's words left to right, emitting a TextPart for
any gap before each word, then the WordPart itself, then a trailing
TextPart for whatever follows the last word.

RULES:
- Concatenating every part's content reproduces the text exactly
- Parts never overlap and leave no gaps
- Exactly one WordPart is highlighted when 0 <= index < word count,
  none otherwise
- Karaoke mode also marks every earlier word as spoken
- None or empty text yields no parts; nothing here raises
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from tts_pacer.core.timing import tokenize


@dataclass(frozen=True)
class TextPart:
    """Whitespace (or any other non-word content) between words."""

    content: str

    @property
    def type(self) -> str:
        return "text"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "content": self.content}


@dataclass(frozen=True)
class WordPart:
    """One word of the text."""

    content: str
    index: int
    is_highlighted: bool = False
    is_spoken: bool = False

    @property
    def type(self) -> str:
        return "word"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "content": self.content,
            "index": self.index,
            "isHighlighted": self.is_highlighted,
            "isSpoken": self.is_spoken,
        }


Part = Union[TextPart, WordPart]


def _split(text: Optional[str], current_index: int, karaoke: bool) -> List[Part]:
    if not isinstance(text, str) or not text:
        return []

    words = tokenize(text)
    in_range = (
        isinstance(current_index, int)
        and not isinstance(current_index, bool)
        and 0 <= current_index < len(words)
    )
    parts: List[Part] = []
    last_end = 0
    for word in words:
        if word.start_offset > last_end:
            parts.append(TextPart(text[last_end:word.start_offset]))
        parts.append(WordPart(
            content=word.text,
            index=word.index,
            is_highlighted=in_range and word.index == current_index,
            is_spoken=karaoke and in_range and word.index < current_index,
        ))
        last_end = word.end_offset
    if last_end < len(text):
        parts.append(TextPart(text[last_end:]))
    return parts


def highlight_parts(text: Optional[str], current_index: int) -> List[Part]:
    """Split text into parts with only the current word highlighted."""
    return _split(text, current_index, karaoke=False)


def karaoke_parts(text: Optional[str], current_index: int) -> List[Part]:
    """Split text into parts; the current word is highlighted, earlier ones spoken."""
    return _split(text, current_index, karaoke=True)


def parts_to_text(parts: Sequence[Part]) -> str:
    """Join parts back into the original text."""
    return "".join(part.content for part in parts)
