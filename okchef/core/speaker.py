# okchef/core/speaker.py

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional


class Speaker:
    """
    Queue in front of a text-to-speech sink.

    - One worker thread owns all calls to ``sink`` (blocking: returns when the
      sentence has been rendered)
    - speak() never blocks
    - on_finished fires each time the last pending sentence is done
    """

    def __init__(
        self,
        sink: Optional[Callable[[str], None]] = None,
        on_spoken: Optional[Callable[[str], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ):
        self.logger = logging.getLogger("okchef.speaker")
        self.sink = sink or self._log_sink
        self.on_spoken = on_spoken
        self.on_finished = on_finished

        self._queue: "queue.Queue[str]" = queue.Queue()
        self._pending = 0
        self._pending_lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()
        self._running = True

        self._thread = threading.Thread(target=self._worker_loop, name="okchef-speaker", daemon=True)
        self._thread.start()

    # ---------- public API ----------

    def speak(self, text: str):
        """Queue text to be spoken. Non-blocking."""
        if not text or not self._running:
            return
        with self._pending_lock:
            self._pending += 1
            self._idle.clear()
        self._queue.put(text)

    @property
    def pending(self) -> int:
        with self._pending_lock:
            return self._pending

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        return self._idle.wait(timeout)

    def shutdown(self):
        """Stop worker thread."""
        self._running = False
        self._queue.put("")
        if self._thread.is_alive():
            self._thread.join(timeout=2.0)

    # ---------- internal ----------

    def _log_sink(self, text: str):
        self.logger.info(f"[say] {text}")

    def _worker_loop(self):
        while self._running:
            try:
                text = self._queue.get(timeout=0.5)
            except queue.Empty:
                continue

            if not text:
                continue

            try:
                if self.on_spoken is not None:
                    self.on_spoken(text)
                self.sink(text)
            except Exception as e:
                # A failing sink must not kill the worker
                self.logger.error(f"TTS sink failed: {e}", exc_info=True)
            finally:
                self._done_one()

        self._drain()

    def _drain(self):
        """Drop sentences still queued at shutdown so waiters are released."""
        dropped = 0
        while True:
            try:
                text = self._queue.get_nowait()
            except queue.Empty:
                break
            if text:
                dropped += 1
        with self._pending_lock:
            self._pending = 0
            self._idle.set()
        if dropped:
            self.logger.info(f"Dropped {dropped} unspoken sentence(s) at shutdown")

    def _done_one(self):
        with self._pending_lock:
            self._pending -= 1
            finished = self._pending == 0
            if finished:
                self._idle.set()
        if finished and self.on_finished is not None:
            try:
                self.on_finished()
            except Exception as e:
                self.logger.error(f"on_finished callback error: {e}", exc_info=True)
