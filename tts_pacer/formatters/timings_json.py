"""Timings JSON formatter: the web client's word-timing payload.

WHY: Clients that cannot run the pacer themselves (or want to cache it)
need the estimated word timings as data: the text, each word's character
span and its start/end milliseconds.

HOW: Serialises the Narration IR with camelCase keys and validates the
result against the bundled narration.schema.json before returning it.

RULES:
- Output suffix: "-timings.json"; media type "application/json"
- Words appear in index order with startOffset/endOffset into "text"
- "locale" is the BCP-47 tag of the voice ("und" when unknown)
- "msPerChar" is the rate that produced the timings
- Output is validated; a schema violation raises jsonschema.ValidationError
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from tts_pacer.config import PacingConfig, load_pacing_config, map_language
from tts_pacer.core.ir import Narration
from tts_pacer.formatters.base import BaseFormatter, FormatterOutput

_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "narration.schema.json"

_CACHED_SCHEMA: Optional[dict] = None


def _get_schema() -> dict:
    """Load and cache the narration JSON schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def narration_to_dict(narration: Narration, config: PacingConfig) -> Dict[str, Any]:
    """Build the JSON-ready dict for a narration."""
    return {
        "text": narration.text,
        "language": narration.language,
        "locale": map_language(narration.language),
        "msPerChar": config.ms_per_char(narration.language),
        "durationMs": narration.duration_ms,
        "words": [word.to_dict() for word in narration.words],
    }


class TimingsJSONFormatter(BaseFormatter):
    """Formatter producing the word-timing JSON payload."""

    def __init__(self, config: Optional[PacingConfig] = None) -> None:
        self.config = config or load_pacing_config()

    @property
    def name(self) -> str:
        return "Word Timings JSON"

    def format(self, narration: Narration) -> List[FormatterOutput]:
        """Serialise and validate the narration.

        Raises:
            jsonschema.ValidationError: If the payload does not conform
                to narration.schema.json.
        """
        payload = narration_to_dict(narration, self.config)
        jsonschema.validate(instance=payload, schema=_get_schema())
        return [FormatterOutput(
            suffix="-timings.json",
            content=json.dumps(payload, indent=2, ensure_ascii=False),
            media_type="application/json",
        )]
