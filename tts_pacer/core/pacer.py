"""Session pacer: turns "audio is playing" into a current word index.

WHY: The speech engine only reports that playback started or stopped.
The UI wants the word being spoken right now. WordPacer estimates it by
comparing elapsed time since playback began against the precomputed
word timings, re-evaluating once per display frame.

HOW: advance() is the pure transition: given a PacerState, the session's
timings, the current time and the config it returns the next state and
whether another frame is needed. WordPacer owns one PacerState, asks the
injected Scheduler for the next frame while advance() says so, and
cancels the pending frame whenever the session is reset or closed.

RULES:
- start() captures the start time once; repeat calls are no-ops
- While elapsed (minus the startup delay) is negative the index stays 0
- The index never decreases within a session
- Frames keep coming until elapsed passes the last word's end plus the
  trailing grace period; state is kept after that until reset()
- reset() cancels the pending frame before returning
- A frame scheduled for an older session never touches a newer one
- An empty text never leaves index -1
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from tts_pacer.config import PacingConfig, load_pacing_config
from tts_pacer.core.ir import IDLE_STATE, Narration, PacerState, TimedWord
from tts_pacer.core.scheduling import Scheduler, TickHandle, monotonic_ms
from tts_pacer.core.timing import build_narration, find_word_index

logger = logging.getLogger(__name__)


def advance(
    state: PacerState,
    words: Sequence[TimedWord],
    now: float,
    config: PacingConfig,
) -> Tuple[PacerState, bool]:
    """Compute the next pacer state for time ``now``.

    Args:
        state: Current session state.
        words: The session's timed words.
        now: Current clock reading in milliseconds.
        config: Pacing parameters (startup delay, trailing grace).

    Returns:
        (next_state, keep_ticking). A state with no start time, or an
        empty word list, is returned unchanged with keep_ticking False.
    """
    if state.playback_start_time is None or not words:
        return state, False

    elapsed = (now - state.playback_start_time) - config.startup_delay_ms
    if elapsed < 0:
        index = max(state.current_index, 0)
    else:
        index = max(state.current_index, find_word_index(words, elapsed))

    keep_ticking = elapsed < words[-1].end_ms + config.trailing_grace_ms
    if index != state.current_index:
        state = replace(state, current_index=index)
    return state, keep_ticking


class WordPacer:
    """One text-highlighting session.

    WHY: A UI component needs a single object that it feeds text and the
    playback flag, reads the current word index from, and tears down.

    HOW: Holds the text's Narration, the session's PacerState, and at
    most one pending frame handle from the Scheduler. Without a scheduler
    the host drives tick() itself.

    Usage::

        scheduler = ManualScheduler()
        with WordPacer("hola mundo", "es", scheduler=scheduler) as pacer:
            pacer.set_playback_active(True)
            scheduler.advance(600)
            pacer.current_index  # 1
    """

    def __init__(
        self,
        text: Optional[str] = None,
        language_code: Optional[str] = None,
        *,
        config: Optional[PacingConfig] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._config = config or load_pacing_config()
        self._scheduler = scheduler
        if clock is None:
            clock = getattr(scheduler, "now", None) or monotonic_ms
        self._clock = clock
        self._language = language_code or ""
        self._narration: Narration = build_narration(text, self._language, self._config)

        self._state: PacerState = IDLE_STATE
        self._session_words: Tuple[TimedWord, ...] = ()
        self._active = False
        self._closed = False
        self._handle: Optional[TickHandle] = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def config(self) -> PacingConfig:
        return self._config

    @property
    def narration(self) -> Narration:
        return self._narration

    @property
    def words(self) -> Tuple[TimedWord, ...]:
        return self._narration.words

    @property
    def total_words(self) -> int:
        return self._narration.total_words

    @property
    def state(self) -> PacerState:
        return self._state

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def playback_start_time(self) -> Optional[float]:
        return self._state.playback_start_time

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_ticking(self) -> bool:
        """True while a frame is scheduled."""
        return self._handle is not None

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_text(self, text: Optional[str], language_code: Optional[str] = None) -> None:
        """Replace the text (and optionally the language).

        While inactive this resets the session. A running session keeps
        the timings it started with; the new text applies to the next one.
        """
        language = self._language if language_code is None else language_code
        if (text or "") == self._narration.text and language == self._language:
            return
        self._language = language
        self._narration = build_narration(text, language, self._config)
        if not self._active:
            self.reset()

    def set_playback_active(self, active: bool) -> None:
        """Follow the audio player's "is outputting sound" flag."""
        if active:
            self.start()
        else:
            self.reset()

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin a session at the current clock reading. Idempotent while active."""
        if self._closed or self._active:
            return
        self._active = True
        self._generation += 1
        self._session_words = self._narration.words
        if not self._session_words:
            logger.debug("Playback started with no words; nothing to pace")
            return

        self._state = PacerState(current_index=0, playback_start_time=self._clock())
        logger.debug(
            "Pacing %d words (%d ms estimated)",
            len(self._session_words), self._session_words[-1].end_ms,
        )
        self._schedule_next()

    def tick(self, now: Optional[float] = None) -> int:
        """Recompute the current word index and return it.

        Scheduled frames call this; hosts without a scheduler call it
        themselves. Outside an active session it changes nothing.
        """
        if not self._active or self._state.playback_start_time is None:
            return self._state.current_index

        if now is None:
            now = self._clock()
        self._state, keep_ticking = advance(
            self._state, self._session_words, now, self._config
        )

        if keep_ticking:
            if self._handle is None:
                self._schedule_next()
        elif self._handle is not None:
            self._cancel_pending()
            logger.debug("Past trailing grace at word %d; frames stopped", self._state.current_index)
        return self._state.current_index

    def reset(self) -> None:
        """Return to {-1, None} and cancel any pending frame."""
        self._cancel_pending()
        self._generation += 1
        if self._active:
            logger.debug("Pacing session reset at word %d", self._state.current_index)
        self._active = False
        self._state = IDLE_STATE
        self._session_words = ()

    def close(self) -> None:
        """Tear down: reset and refuse further sessions."""
        self.reset()
        self._closed = True

    def __enter__(self) -> WordPacer:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    # ------------------------------------------------------------------
    # Frame plumbing
    # ------------------------------------------------------------------

    def _schedule_next(self) -> None:
        if self._scheduler is None:
            return
        generation = self._generation
        self._handle = self._scheduler.schedule(lambda: self._on_frame(generation))

    def _on_frame(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._handle = None
        self.tick()

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
