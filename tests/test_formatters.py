"""Tests for the export formatters.

WHY: Exports are consumed by other tools (browsers, video editors, the
web client's cache). A malformed timestamp or a missing cue breaks them
silently.

HOW: Each formatter runs on the "hola mundo" sample (hola 0–248 ms,
mundo 283–593 ms) and on an empty narration. The JSON export is also
parsed back and checked against the bundled schema.
"""

import json

import jsonschema
import pytest

from tts_pacer.core.ir import Narration, TimedWord
from tts_pacer.core.timing import build_narration
from tts_pacer.formatters import FORMATTERS
from tts_pacer.formatters.base import BaseFormatter, FormatterOutput, format_timestamp
from tts_pacer.formatters.srt_words import SRTWordsFormatter
from tts_pacer.formatters.timings_json import TimingsJSONFormatter, _get_schema
from tts_pacer.formatters.webvtt_words import WebVTTWordsFormatter


@pytest.fixture
def empty_narration(default_config):
    return build_narration("", "es", default_config)


class TestRegistry:

    def test_keys(self):
        assert set(FORMATTERS) == {"timings_json", "srt_words", "webvtt_words"}

    @pytest.mark.parametrize("key", sorted(FORMATTERS))
    def test_each_is_constructible_formatter(self, key):
        formatter = FORMATTERS[key]()
        assert isinstance(formatter, BaseFormatter)
        assert formatter.name

    @pytest.mark.parametrize("key", sorted(FORMATTERS))
    def test_each_returns_one_output(self, key, sample_narration):
        outputs = FORMATTERS[key]().format(sample_narration)
        assert len(outputs) == 1
        assert isinstance(outputs[0], FormatterOutput)
        assert outputs[0].suffix.startswith("-")


class TestFormatTimestamp:

    def test_zero(self):
        assert format_timestamp(0, ",") == "00:00:00,000"

    def test_hours_minutes_seconds(self):
        assert format_timestamp(3_723_456, ",") == "01:02:03,456"

    def test_vtt_separator(self):
        assert format_timestamp(593, ".") == "00:00:00.593"

    def test_negative_clamps_to_zero(self):
        assert format_timestamp(-5, ".") == "00:00:00.000"


class TestTimingsJSON:

    def test_payload(self, sample_narration, default_config):
        output = TimingsJSONFormatter(default_config).format(sample_narration)[0]
        assert output.suffix == "-timings.json"
        assert output.media_type == "application/json"
        payload = json.loads(output.content)
        assert payload == {
            "text": "hola mundo",
            "language": "es",
            "locale": "es-ES",
            "msPerChar": 62,
            "durationMs": 593,
            "words": [
                {"text": "hola", "index": 0, "startOffset": 0, "endOffset": 4,
                 "startMs": 0, "endMs": 248},
                {"text": "mundo", "index": 1, "startOffset": 5, "endOffset": 10,
                 "startMs": 283, "endMs": 593},
            ],
        }

    def test_output_validates_against_schema(self, sample_narration):
        output = TimingsJSONFormatter().format(sample_narration)[0]
        jsonschema.validate(instance=json.loads(output.content), schema=_get_schema())

    def test_empty_narration(self, empty_narration):
        payload = json.loads(TimingsJSONFormatter().format(empty_narration)[0].content)
        assert payload["words"] == []
        assert payload["durationMs"] == 0

    def test_non_ascii_kept_readable(self, default_config):
        narration = build_narration("¿Qué tal?", "es", default_config)
        content = TimingsJSONFormatter(default_config).format(narration)[0].content
        assert "¿Qué" in content

    def test_invalid_payload_raises(self):
        bad = Narration(
            text="x",
            language="es",
            words=(TimedWord(text="", start_offset=0, end_offset=0, index=0),),
            duration_ms=0,
        )
        with pytest.raises(jsonschema.ValidationError):
            TimingsJSONFormatter().format(bad)


class TestSRTWords:

    def test_cues(self, sample_narration):
        output = SRTWordsFormatter().format(sample_narration)[0]
        assert output.suffix == "-words.srt"
        assert output.media_type == "application/x-subrip"
        assert output.content == (
            "1\n00:00:00,000 --> 00:00:00,248\nhola\n"
            "\n"
            "2\n00:00:00,283 --> 00:00:00,593\nmundo\n"
        )

    def test_empty(self, empty_narration):
        assert SRTWordsFormatter().format(empty_narration)[0].content == ""


class TestWebVTTWords:

    def test_cues(self, sample_narration):
        output = WebVTTWordsFormatter().format(sample_narration)[0]
        assert output.suffix == "-words.vtt"
        assert output.media_type == "text/vtt"
        assert output.content == (
            "WEBVTT\nLanguage: es-ES\n\n"
            "w0\n00:00:00.000 --> 00:00:00.248\nhola\n\n"
            "w1\n00:00:00.283 --> 00:00:00.593\nmundo\n"
        )

    def test_unknown_language_tag(self, default_config):
        narration = build_narration("hi", "zz", default_config)
        content = WebVTTWordsFormatter().format(narration)[0].content
        assert content.startswith("WEBVTT\nLanguage: und\n")

    def test_empty(self, empty_narration):
        assert WebVTTWordsFormatter().format(empty_narration)[0].content == (
            "WEBVTT\nLanguage: es-ES\n"
        )
