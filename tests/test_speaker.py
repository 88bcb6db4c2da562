"""Unit tests for the queued text-to-speech speaker."""

from __future__ import annotations

import threading
import time

from okchef.core.speaker import Speaker


def test_speaks_in_order_and_signals_finish() -> None:
    spoken = []
    finished = threading.Event()
    speaker = Speaker(sink=spoken.append, on_finished=finished.set)
    try:
        speaker.speak("Étape 1.")
        speaker.speak("")
        speaker.speak("Étape 2.")

        assert speaker.wait_until_idle(timeout=5.0)
        assert finished.wait(timeout=5.0)
        assert spoken == ["Étape 1.", "Étape 2."]
        assert speaker.pending == 0
    finally:
        speaker.shutdown()


def test_failing_sink_does_not_stop_worker() -> None:
    spoken = []

    def sink(text: str) -> None:
        if text == "boom":
            raise RuntimeError("audio device lost")
        spoken.append(text)

    speaker = Speaker(sink=sink)
    try:
        speaker.speak("boom")
        speaker.speak("encore")
        assert speaker.wait_until_idle(timeout=5.0)
        assert spoken == ["encore"]
    finally:
        speaker.shutdown()


def test_speak_after_shutdown_is_ignored() -> None:
    spoken = []
    speaker = Speaker(sink=spoken.append)
    speaker.shutdown()
    speaker.speak("trop tard")
    assert speaker.pending == 0
    assert spoken == []


def test_shutdown_releases_waiters_with_sentences_queued() -> None:
    gate = threading.Event()
    started = threading.Event()
    spoken = []

    def sink(text: str) -> None:
        started.set()
        gate.wait(timeout=5.0)
        spoken.append(text)

    speaker = Speaker(sink=sink)
    speaker.speak("a")
    speaker.speak("b")
    speaker.speak("c")
    assert started.wait(timeout=5.0)

    stopper = threading.Thread(target=speaker.shutdown)
    stopper.start()
    deadline = time.monotonic() + 5.0
    while speaker._running and time.monotonic() < deadline:
        time.sleep(0.01)
    gate.set()
    stopper.join(timeout=5.0)

    assert speaker.wait_until_idle(timeout=1.0)
    assert speaker.pending == 0
    assert spoken == ["a"]
