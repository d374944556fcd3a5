"""Shared test fixtures for the tts_pacer test suite.

WHY: Most test modules need the same pacing setup: the "hola mundo"
sample in Spanish, a deterministic frame scheduler, and small custom
pacing tables for exact boundary checks.

HOW: Pytest fixtures provide the configs, the sample narration and a
ManualScheduler whose clock starts at 0 ms.

RULES:
- default_config uses the built-in constants (es = 62 ms/char, 35 ms pause,
  300 ms startup delay, 1000 ms trailing grace)
- flat_config has 10 ms/char for every language and no pause or delay,
  so word boundaries fall on round numbers
- Expected values for "hola mundo" are hola 0–248, mundo 283–593
"""

from types import MappingProxyType

import pytest

from tts_pacer.config import PacingConfig
from tts_pacer.core.scheduling import ManualScheduler
from tts_pacer.core.timing import build_narration

SAMPLE_TEXT = "hola mundo"
SAMPLE_LANGUAGE = "es"


@pytest.fixture(autouse=True)
def _no_api_key(monkeypatch):
    """Keep a developer's real keys out of the tests."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def default_config():
    return PacingConfig()


@pytest.fixture
def flat_config():
    return PacingConfig(
        ms_per_char_by_lang=MappingProxyType({"xx": 10}),
        default_ms_per_char=10,
        word_pause_ms=0,
        startup_delay_ms=0,
        trailing_grace_ms=1000,
        frame_interval_ms=16,
    )


@pytest.fixture
def fast_config():
    """Tiny timings so live asyncio runs finish in milliseconds."""
    return PacingConfig(
        ms_per_char_by_lang=MappingProxyType({}),
        default_ms_per_char=1,
        word_pause_ms=0,
        startup_delay_ms=0,
        trailing_grace_ms=0,
        frame_interval_ms=1,
    )


@pytest.fixture
def scheduler():
    return ManualScheduler(frame_interval_ms=16)


@pytest.fixture
def sample_narration(default_config):
    return build_narration(SAMPLE_TEXT, SAMPLE_LANGUAGE, default_config)
