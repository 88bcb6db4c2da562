"""Unit tests for utterance settling."""

from __future__ import annotations

import queue
import time

from okchef.core.utterances import UtteranceDebouncer


def test_flush_queues_latest_revision_once() -> None:
    debouncer = UtteranceDebouncer(settle_timeout=60.0)
    debouncer.feed("ok")
    debouncer.feed("ok chef")
    debouncer.feed("ok chef étape suivante")

    assert debouncer.flush() == "ok chef étape suivante"
    assert debouncer.queue.get_nowait() == "ok chef étape suivante"
    assert debouncer.queue.empty()
    assert debouncer.flush() is None


def test_timeout_settles_sentence() -> None:
    debouncer = UtteranceDebouncer(settle_timeout=0.05)
    debouncer.feed("ok chef la suite")

    assert debouncer.queue.get(timeout=2.0) == "ok chef la suite"


def test_blank_transcription_is_not_queued() -> None:
    debouncer = UtteranceDebouncer(settle_timeout=60.0)
    debouncer.feed("   ")
    assert debouncer.flush() is None
    assert debouncer.queue.empty()


def test_reset_drops_pending_sentence() -> None:
    out: "queue.Queue[str]" = queue.Queue()
    debouncer = UtteranceDebouncer(settle_timeout=60.0, out_queue=out)
    debouncer.feed("ok chef")
    debouncer.reset()

    assert debouncer.flush() is None
    assert out.empty()


def test_final_result_repeating_settled_sentence_is_dropped() -> None:
    debouncer = UtteranceDebouncer(settle_timeout=0.05)
    debouncer.feed("ok chef étape suivante")
    assert debouncer.queue.get(timeout=2.0) == "ok chef étape suivante"

    debouncer.feed("ok chef étape suivante")
    time.sleep(0.3)

    assert debouncer.queue.empty()
    assert debouncer.flush() is None


def test_new_sentence_after_settle_is_queued() -> None:
    debouncer = UtteranceDebouncer(settle_timeout=60.0)
    debouncer.feed("ok chef étape suivante")
    debouncer.flush()
    debouncer.feed("ok chef répète")
    debouncer.feed("ok chef étape suivante")

    assert debouncer.flush() == "ok chef étape suivante"
    assert debouncer.queue.get_nowait() == "ok chef étape suivante"
    assert debouncer.queue.get_nowait() == "ok chef étape suivante"


def test_repeated_command_is_queued_after_reset() -> None:
    debouncer = UtteranceDebouncer(settle_timeout=60.0)
    debouncer.feed("ok chef la suite")
    debouncer.flush()
    debouncer.reset()
    debouncer.feed("ok chef la suite")

    assert debouncer.flush() == "ok chef la suite"


def test_superseded_timer_does_not_settle_early() -> None:
    debouncer = UtteranceDebouncer(settle_timeout=0.05)
    with debouncer._lock:
        debouncer._last_sentence = "ok chef"
        debouncer._restart_timer()
        # first timer fires and blocks on the lock
        time.sleep(0.2)
        debouncer.settle_timeout = 10.0
        debouncer._last_sentence = "ok chef étape suivante"
        debouncer._restart_timer()

    time.sleep(0.2)
    try:
        assert debouncer.queue.empty()
    finally:
        debouncer.reset()
