"""Command-line interface for the TTS word pacer.

WHY: Lesson authors want to check how a text will be paced before it
ships, and to export word timings for other tools. The CLI wires
together pacing, the export formatters and file saving behind a single
command, and can replay the highlighting live in the terminal.

HOW: Uses argparse to accept the text (positional or --file), a language
code, export selection and an output directory. --print writes a timing
table to stdout. --preview runs a real WordPacer on an AsyncioScheduler
and prints each word as it becomes current. Status messages go to stderr.

RULES:
- Text comes from the positional argument or --file, not both
- --formats: comma-separated formatter keys; no exports unless given
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-words-2.vtt)
- Status output goes to stderr (not stdout)
- Errors print "Error: ..." to stderr and exit with status 1
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from tts_pacer.config import DEFAULT_LANGUAGE, PacingConfig, load_pacing_config
from tts_pacer.core.ir import Narration
from tts_pacer.core.pacer import WordPacer
from tts_pacer.core.scheduling import AsyncioScheduler
from tts_pacer.core.timing import build_narration
from tts_pacer.formatters import FORMATTERS
from tts_pacer.formatters.base import FormatterOutput


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. lesson-words.vtt)
    - Conflict: insert a counter before the extension (lesson-words-2.vtt)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name, suffix_ext = suffix[:dot_idx], suffix[dot_idx:]
    else:
        suffix_name, suffix_ext = suffix, ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    """Write one formatter output to a conflict-free path and return it."""
    path = _resolve_output_path(stem, output.suffix, output_dir)
    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")
    return path


def _format_table(narration: Narration) -> str:
    """Render the timing table printed by --print."""
    lines = ["{:>4}  {:>7}  {:>7}  {}".format("#", "start", "end", "word")]
    for word in narration.words:
        lines.append("{:>4}  {:>7}  {:>7}  {}".format(
            word.index, word.start_ms, word.end_ms, word.text
        ))
    lines.append("{} words, {} ms".format(narration.total_words, narration.duration_ms))
    return "\n".join(lines)


async def preview(
    text: str,
    language: str,
    config: PacingConfig,
    out=None,
) -> int:
    """Replay the pacing live, writing each newly current word to ``out``.

    Returns the final word index. The pacer is driven by an
    AsyncioScheduler exactly as a UI would drive it per frame.
    """
    out = out or sys.stdout
    scheduler = AsyncioScheduler(frame_interval_ms=config.frame_interval_ms)
    with WordPacer(text, language, config=config, scheduler=scheduler) as pacer:
        if not pacer.total_words:
            return -1
        pacer.set_playback_active(True)
        shown = -1
        while True:
            index = pacer.current_index
            if index > shown:
                for word in pacer.words[shown + 1:index + 1]:
                    print(word.text, file=out, flush=True)
                shown = index
            if not pacer.is_ticking:
                break
            await asyncio.sleep(config.frame_interval_ms / 1000.0)
        return pacer.current_index


def _read_text(args: argparse.Namespace) -> str:
    if args.text is not None and args.file:
        _fail("Give the text or --file, not both.")
    if args.file:
        path = Path(args.file)
        if not path.is_file():
            _fail("File not found: {}".format(path))
        return path.read_text(encoding="utf-8")
    if args.text is None:
        _fail("No text given. Pass the text or --file.")
    return args.text


def run(args: argparse.Namespace) -> None:
    """Execute the CLI with parsed arguments."""
    text = _read_text(args)
    config = load_pacing_config()
    narration = build_narration(text, args.language, config)
    _status("Paced {} words in '{}' at {} ms/char ({} ms)".format(
        narration.total_words,
        args.language,
        config.ms_per_char(args.language),
        narration.duration_ms,
    ))

    format_keys: List[str] = []
    if args.formats:
        format_keys = [f.strip() for f in args.formats.split(",") if f.strip()]
        for key in format_keys:
            if key not in FORMATTERS:
                _fail("Unknown format '{}'. Available formats: {}".format(
                    key, ", ".join(sorted(FORMATTERS.keys()))
                ))

    if format_keys:
        output_dir = Path(args.output_dir).resolve() if args.output_dir else Path.cwd()
        if not output_dir.is_dir():
            _fail("Output directory does not exist: {}".format(output_dir))
        stem = args.stem or (Path(args.file).stem if args.file else "narration")
        for key in format_keys:
            formatter = FORMATTERS[key]()
            _status("  Running {} formatter...".format(formatter.name))
            for output in formatter.format(narration):
                saved = _save_output(output, stem, output_dir)
                _status("  Saved: {}".format(saved))

    if args.print:
        print(_format_table(narration))

    if args.preview:
        asyncio.run(preview(text, args.language, config))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="tts_pacer",
        description="Estimate per-word speech timings for a text and export "
                    "or preview the word highlighting.",
    )

    parser.add_argument(
        "text",
        nargs="?",
        default=None,
        help="Text to pace. Use --file to read it from a file instead.",
    )

    parser.add_argument(
        "--file",
        default=None,
        help="Path to a UTF-8 text file to pace.",
    )

    parser.add_argument(
        "--language",
        default=DEFAULT_LANGUAGE,
        help="Short language code selecting the pacing rate (default: %(default)s).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of exports to write. "
             "Available: {}.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save exports (default: current directory).",
    )

    parser.add_argument(
        "--stem",
        default=None,
        help="Output filename stem (default: input file stem or 'narration').",
    )

    parser.add_argument(
        "--print",
        action="store_true",
        help="Print the timing table to stdout.",
    )

    parser.add_argument(
        "--preview",
        action="store_true",
        help="Replay the highlighting live, one word per line.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m tts_pacer`` and the ``tts-pacer`` script.

    argv=None means use sys.argv; explicit argv is for testing.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    run(args)


if __name__ == "__main__":
    main()
