"""Unit tests for tokenization and timing estimation.

WHY: Every consumer (pacer, renderer, exports, server) trusts the word
spans and timings computed here. A wrong offset breaks highlighting; a
non-monotonic timing makes the pacer jump backwards.

HOW: Tests cover:
  - Word spans, ordering and text reconstruction
  - Empty / None / whitespace-only input
  - Per-language rates, region tags and the default fallback
  - The "hola mundo" reference timings
  - Monotonicity and determinism across varied texts
  - find_word_index tie-break and bounds
"""

from types import MappingProxyType

import pytest

from tts_pacer.config import MS_PER_CHAR_BY_LANG, PacingConfig, map_language, normalize_language
from tts_pacer.core.ir import TimedWord, Word
from tts_pacer.core.timing import build_narration, estimate_timings, find_word_index, tokenize

VARIED_TEXTS = [
    "hola mundo",
    "  leading and trailing  ",
    "tabs\tand\nnewlines\r\nmixed",
    "¿Dónde está la biblioteca?",
    "一 二 三",
    "single",
    "a  b   c    d",
    "punctuation, stays. attached!",
]


def _reconstruct(text, words):
    parts = []
    last_end = 0
    for word in words:
        parts.append(text[last_end:word.start_offset])
        parts.append(word.text)
        last_end = word.end_offset
    parts.append(text[last_end:])
    return "".join(parts)


class TestTokenize:
    """Words are maximal runs of non-whitespace with half-open offsets."""

    def test_hola_mundo(self):
        assert tokenize("hola mundo") == [
            Word(text="hola", start_offset=0, end_offset=4, index=0),
            Word(text="mundo", start_offset=5, end_offset=10, index=1),
        ]

    @pytest.mark.parametrize("text", [None, "", "   ", "\t\n  \r\n"])
    def test_empty_input_yields_no_words(self, text):
        assert tokenize(text) == []

    @pytest.mark.parametrize("text", [123, 4.5, b"hola mundo", ["hola"]])
    def test_non_string_input_yields_no_words(self, text):
        assert tokenize(text) == []  # type: ignore[arg-type]

    def test_punctuation_stays_attached(self):
        words = tokenize("¡Hola, amigo!")
        assert [w.text for w in words] == ["¡Hola,", "amigo!"]

    @pytest.mark.parametrize("text", VARIED_TEXTS)
    def test_spans_sorted_and_non_overlapping(self, text):
        words = tokenize(text)
        for prev, cur in zip(words, words[1:]):
            assert prev.end_offset < cur.start_offset
        for i, word in enumerate(words):
            assert word.index == i
            assert text[word.start_offset:word.end_offset] == word.text

    @pytest.mark.parametrize("text", VARIED_TEXTS)
    def test_reconstructs_original_text(self, text):
        assert _reconstruct(text, tokenize(text)) == text


class TestEstimateTimings:
    """Durations are len(word) * rate, with a pause before every word but the first."""

    def test_hola_mundo_reference(self, default_config):
        timed = estimate_timings(tokenize("hola mundo"), "es", default_config)
        assert timed == [
            TimedWord(text="hola", start_offset=0, end_offset=4, index=0, start_ms=0, end_ms=248),
            TimedWord(text="mundo", start_offset=5, end_offset=10, index=1, start_ms=283, end_ms=593),
        ]

    def test_first_word_has_no_pause(self, default_config):
        timed = estimate_timings(tokenize("abc"), "en", default_config)
        assert timed[0].start_ms == 0
        assert timed[0].end_ms == 3 * 58

    def test_pause_carries_forward(self, default_config):
        timed = estimate_timings(tokenize("a b c"), "es", default_config)
        assert [(w.start_ms, w.end_ms) for w in timed] == [
            (0, 62), (97, 159), (194, 256),
        ]

    def test_unknown_language_uses_default(self, default_config):
        timed = estimate_timings(tokenize("abcd"), "zz", default_config)
        assert timed[0].end_ms == 4 * 65

    def test_missing_language_uses_default(self, default_config):
        timed = estimate_timings(tokenize("abcd"), None, default_config)
        assert timed[0].end_ms == 4 * 65

    def test_region_tag_uses_primary_subtag(self, default_config):
        timed = estimate_timings(tokenize("abcd"), "es-MX", default_config)
        assert timed[0].end_ms == 4 * 62

    def test_injected_table(self):
        config = PacingConfig(
            ms_per_char_by_lang=MappingProxyType({"es": 100}),
            default_ms_per_char=1,
            word_pause_ms=5,
        )
        timed = estimate_timings(tokenize("ab cd"), "es", config)
        assert [(w.start_ms, w.end_ms) for w in timed] == [(0, 200), (205, 405)]

    def test_empty_words(self, default_config):
        assert estimate_timings([], "es", default_config) == []

    @pytest.mark.parametrize("text", VARIED_TEXTS)
    @pytest.mark.parametrize("language", ["es", "en", "ja", "zz", ""])
    def test_monotonic(self, text, language, default_config):
        timed = estimate_timings(tokenize(text), language, default_config)
        for prev, cur in zip(timed, timed[1:]):
            assert prev.start_ms <= cur.start_ms
            assert prev.end_ms <= cur.end_ms
            assert prev.end_ms <= cur.start_ms
        for word in timed:
            assert word.start_ms <= word.end_ms

    @pytest.mark.parametrize("text", VARIED_TEXTS)
    def test_deterministic(self, text, default_config):
        first = estimate_timings(tokenize(text), "fr", default_config)
        second = estimate_timings(tokenize(text), "fr", default_config)
        assert first == second


class TestBuildNarration:

    def test_sample(self, sample_narration):
        assert sample_narration.text == "hola mundo"
        assert sample_narration.language == "es"
        assert sample_narration.total_words == 2
        assert sample_narration.duration_ms == 593

    def test_none_text(self, default_config):
        narration = build_narration(None, None, default_config)
        assert narration.text == ""
        assert narration.language == ""
        assert narration.words == ()
        assert narration.duration_ms == 0

    def test_non_string_text(self, default_config):
        narration = build_narration(123, "es", default_config)  # type: ignore[arg-type]
        assert narration.text == ""
        assert narration.words == ()
        assert narration.total_words == 0


class TestFindWordIndex:
    """Greatest index with start_ms <= elapsed; forward scan."""

    def test_before_first_word(self, sample_narration):
        assert find_word_index(sample_narration.words, -1) == -1

    def test_inside_pause_stays_on_previous_word(self, sample_narration):
        assert find_word_index(sample_narration.words, 260) == 0

    def test_exact_start_favours_later_word(self, sample_narration):
        assert find_word_index(sample_narration.words, 283) == 1

    def test_just_before_start(self, sample_narration):
        assert find_word_index(sample_narration.words, 282.9) == 0

    def test_past_the_end(self, sample_narration):
        assert find_word_index(sample_narration.words, 10_000) == 1

    def test_no_words(self):
        assert find_word_index((), 100) == -1


class TestLanguageConfig:

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            MS_PER_CHAR_BY_LANG["es"] = 1  # type: ignore[index]

    @pytest.mark.parametrize("code, expected", [
        ("es", "es"), ("ES", "es"), ("pt_BR", "pt"), ("es-MX", "es"), (None, ""), ("", ""),
    ])
    def test_normalize_language(self, code, expected):
        assert normalize_language(code) == expected

    @pytest.mark.parametrize("code, expected", [
        ("es", "es-ES"), ("nah", "es-ES"), ("en-GB", "en-US"), ("zz", "und"), (None, "und"),
    ])
    def test_map_language(self, code, expected):
        assert map_language(code) == expected
