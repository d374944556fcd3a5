"""Configuration constants, pacing tables, and .env loading.

WHY: Centralizes all tunable values so they are easy to find, update,
and override. The pacing table, timing constants, and upstream proxy
settings are plain data structures, not buried in logic, so they can
be adjusted without touching the pacer.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level dicts, sets, and numbers. PacingConfig bundles the
pacing values into one immutable object that is injected into the
pacer, so tests can supply deterministic tables.

RULES:
- MS_PER_CHAR_BY_LANG is read-only after import (MappingProxyType)
- Unlisted language codes fall back to DEFAULT_MS_PER_CHAR
- Region-tagged codes ("es-MX", "pt_BR") use their primary subtag
- API key is loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    """Read an integer override from the environment.

    Raises ValueError naming the variable when the value is not an
    integer or is below ``minimum``.
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            "{} must be an integer number of milliseconds, got {!r}".format(name, raw)
        )
    if value < minimum:
        raise ValueError("{} must be at least {}, got {}".format(name, minimum, value))
    return value


# ---------------------------------------------------------------------------
# Pacing table: milliseconds of speech per character, by language
# ---------------------------------------------------------------------------

MS_PER_CHAR_BY_LANG: Mapping[str, int] = MappingProxyType({
    "en": 58,   # English is faster
    "es": 62,
    "pt": 62,
    "fr": 68,
    "it": 63,
    "nl": 60,
    "nah": 72,  # Nahuatl is voiced with the Spanish voice, slower
    "ru": 68,
    "de": 63,
    "el": 70,
    "ja": 95,   # syllable-timed
})

DEFAULT_MS_PER_CHAR = _env_int("TTS_PACER_DEFAULT_MS_PER_CHAR", 65)
WORD_PAUSE_MS = _env_int("TTS_PACER_WORD_PAUSE_MS", 35)
STARTUP_DELAY_MS = _env_int("TTS_PACER_STARTUP_DELAY_MS", 300)
"""Lag between "playback started" and audio actually becoming audible."""
TRAILING_GRACE_MS = _env_int("TTS_PACER_TRAILING_GRACE_MS", 1000)
FRAME_INTERVAL_MS = _env_int("TTS_PACER_FRAME_INTERVAL_MS", 16, minimum=1)
DEFAULT_LANGUAGE = os.getenv("TTS_PACER_DEFAULT_LANGUAGE", "es")


def normalize_language(code: Optional[str]) -> str:
    """Reduce a language tag to its lowercase primary subtag.

    "es-MX" → "es", "pt_BR" → "pt", None → "".
    """
    if not code:
        return ""
    return str(code).strip().replace("_", "-").split("-")[0].lower()


@dataclass(frozen=True)
class PacingConfig:
    """Immutable pacing parameters injected into the pacer.

    WHY: The pacer must not reach for hidden globals; tests construct
    their own config with a deterministic table.

    RULES:
    - ms_per_char_by_lang keys are lowercase primary subtags
    - All durations are integer milliseconds
    """

    ms_per_char_by_lang: Mapping[str, int] = field(
        default_factory=lambda: MS_PER_CHAR_BY_LANG
    )
    default_ms_per_char: int = 65
    word_pause_ms: int = 35
    startup_delay_ms: int = 300
    trailing_grace_ms: int = 1000
    frame_interval_ms: int = 16

    def ms_per_char(self, language_code: Optional[str]) -> int:
        """Look up the pacing constant, falling back to the default."""
        return self.ms_per_char_by_lang.get(
            normalize_language(language_code), self.default_ms_per_char
        )


def load_pacing_config() -> PacingConfig:
    """Build a PacingConfig from the module-level (env-overridable) values."""
    return PacingConfig(
        ms_per_char_by_lang=MS_PER_CHAR_BY_LANG,
        default_ms_per_char=DEFAULT_MS_PER_CHAR,
        word_pause_ms=WORD_PAUSE_MS,
        startup_delay_ms=STARTUP_DELAY_MS,
        trailing_grace_ms=TRAILING_GRACE_MS,
        frame_interval_ms=FRAME_INTERVAL_MS,
    )


# ---------------------------------------------------------------------------
# Language tags for exports: short code → BCP-47
# ---------------------------------------------------------------------------

TTS_LANG_TAG: dict[str, str] = {
    "en": "en-US",
    "es": "es-ES",
    "pt": "pt-BR",
    "fr": "fr-FR",
    "it": "it-IT",
    "nl": "nl-NL",
    "nah": "es-ES",
    "ru": "ru-RU",
    "de": "de-DE",
    "el": "el-GR",
    "ja": "ja-JP",
}

UNKNOWN_LANGUAGE_TAG = "und"
"""BCP-47 tag for an undetermined language."""


def map_language(code: Optional[str]) -> str:
    """Map a short language code to the BCP-47 tag the voice speaks.

    Nahuatl is narrated with the Spanish voice, so it maps to "es-ES".
    Unknown codes return "und".
    """
    return TTS_LANG_TAG.get(normalize_language(code), UNKNOWN_LANGUAGE_TAG)


# ---------------------------------------------------------------------------
# Upstream generative-AI proxy
# ---------------------------------------------------------------------------

OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
DEFAULT_REALTIME_MODEL = os.getenv("DEFAULT_REALTIME_MODEL", "gpt-realtime-mini")
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)

ALLOWED_RESPONSE_MODELS: frozenset = frozenset({"gpt-4o-mini", "gpt-4o", "o4-mini"})
"""Models the /responses proxy will forward; anything else is rejected."""

CORS_ORIGINS: list[str] = [
    origin
    for origin in (
        "http://localhost:5173",
        "http://localhost:3000",
        os.getenv("DEPLOYED_URL", ""),
    )
    if origin
]


def load_api_key() -> str:
    """Load the upstream API key from the environment.

    WHY: The proxy endpoints authenticate upstream with a server-held key.
    Loading it from the environment (via .env) keeps it out of source code.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "OpenAI API key not configured. "
            "Add OPENAI_API_KEY to the .env file or the environment."
        )
    return key


def api_key_configured() -> bool:
    """Return True when OPENAI_API_KEY is set (without raising)."""
    return bool(os.getenv("OPENAI_API_KEY", "").strip())


def load_gemini_key() -> str:
    """Load the key for the /generate passthrough.

    Same rules as load_api_key(): ValueError when unset, no placeholder.
    """
    key = os.getenv("GEMINI_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Gemini API key not configured. "
            "Add GEMINI_API_KEY to the .env file or the environment."
        )
    return key


def gemini_key_configured() -> bool:
    return bool(os.getenv("GEMINI_API_KEY", "").strip())
