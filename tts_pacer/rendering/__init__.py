"""Highlight rendering: split a text into plain and word parts.

WHY: Views draw the narrated text with the current word highlighted.
They need the text cut into parts that reproduce it exactly, with the
words marked.

HOW: highlight.py derives the parts from the same tokenizer the pacer
uses, so word indices always agree with the pacer's current index.
"""

from tts_pacer.rendering.highlight import (
    TextPart,
    WordPart,
    highlight_parts,
    karaoke_parts,
    parts_to_text,
)

__all__ = ["TextPart", "WordPart", "highlight_parts", "karaoke_parts", "parts_to_text"]
