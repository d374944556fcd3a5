"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint pair (request + response) has its own model. Enums
represent closed sets such as highlight modes. All models include Field
descriptions for rich OpenAPI docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Export format keys are checked against FORMATTERS by the endpoint
- Text fields accept empty strings; pacing degrades, it never rejects
- Response keys mirror the IR field names in snake_case
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from tts_pacer.config import DEFAULT_LANGUAGE


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class HighlightMode(str, Enum):
    """How earlier words are marked in highlight parts."""

    single = "single"
    karaoke = "karaoke"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class NarrationRequest(BaseModel):
    """Text to pace."""

    text: str = Field(default="", description="Text exactly as it will be spoken.")
    language: str = Field(
        default=DEFAULT_LANGUAGE,
        description="Short language code (e.g. 'es', 'en'). Unlisted codes use the default rate.",
    )


class HighlightRequest(BaseModel):
    """Text and the pacer's current word index."""

    text: str = Field(default="", description="Text being displayed.")
    current_index: int = Field(
        default=-1,
        description="Current word index from the pacer; -1 (or out of range) highlights nothing.",
    )
    mode: HighlightMode = Field(
        default=HighlightMode.single,
        description="'single' marks only the current word; 'karaoke' also marks earlier words as spoken.",
    )


class ExportRequest(NarrationRequest):
    """Text to pace plus the export format to render."""

    format: str = Field(
        description="Export format key (see GET /formats), e.g. 'webvtt_words'.",
    )


class RealtimeOffer(BaseModel):
    """JSON form of a realtime SDP offer."""

    sdp: str = Field(default="", description="SDP offer from the browser's RTCPeerConnection.")
    model: Optional[str] = Field(default=None, description="Realtime model; defaults to the configured model.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TimedWordModel(BaseModel):
    """One word with its estimated speaking window."""

    text: str = Field(description="Word text, punctuation included.")
    index: int = Field(description="0-based word index.")
    start_offset: int = Field(description="Character offset where the word starts.")
    end_offset: int = Field(description="Character offset just past the word.")
    start_ms: int = Field(description="Estimated start, ms after speech begins.")
    end_ms: int = Field(description="Estimated end, ms after speech begins.")


class NarrationResponse(BaseModel):
    """Estimated timings for a text."""

    text: str = Field(description="The paced text.")
    language: str = Field(description="Language code used for pacing.")
    ms_per_char: int = Field(description="Pacing rate applied.")
    total_words: int = Field(description="Number of words.")
    duration_ms: int = Field(description="End of the last word in ms (0 for empty text).")
    startup_delay_ms: int = Field(description="Delay the pacer waits after playback starts.")
    words: List[TimedWordModel] = Field(description="Timed words in order.")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "text": "hola mundo",
                "language": "es",
                "ms_per_char": 62,
                "total_words": 2,
                "duration_ms": 593,
                "startup_delay_ms": 300,
                "words": [
                    {"text": "hola", "index": 0, "start_offset": 0, "end_offset": 4,
                     "start_ms": 0, "end_ms": 248},
                    {"text": "mundo", "index": 1, "start_offset": 5, "end_offset": 10,
                     "start_ms": 283, "end_ms": 593},
                ],
            }
        ]
    }}


class PartModel(BaseModel):
    """One highlight part."""

    type: str = Field(description="'text' for inter-word content, 'word' for a word.")
    content: str = Field(description="Exact slice of the original text.")
    index: Optional[int] = Field(default=None, description="Word index (word parts only).")
    is_highlighted: bool = Field(default=False, description="True for the current word.")
    is_spoken: bool = Field(default=False, description="True for earlier words in karaoke mode.")


class HighlightResponse(BaseModel):
    """Parts covering the whole text."""

    total_words: int = Field(description="Number of words in the text.")
    parts: List[PartModel] = Field(description="Ordered parts; contents concatenate to the text.")


class FormatInfo(BaseModel):
    """Description of an available export format."""

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '-words.vtt').")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
    upstream_configured: bool = Field(description="Whether the upstream API key is set.")
    generate_configured: bool = Field(description="Whether the Gemini API key for /generate is set.")
