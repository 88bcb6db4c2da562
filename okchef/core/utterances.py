# okchef/core/utterances.py

"""
Utterance settling.

Speech-to-text hands back partial transcriptions that keep being revised
while the user talks. Every change restarts a timer; when the timer expires
the latest sentence is put on the output queue once. Consumers read
"settled" sentences from that queue and resolve them.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Optional


class UtteranceDebouncer:
    def __init__(
        self,
        settle_timeout: float = 2.0,
        out_queue: "Optional[queue.Queue[str]]" = None,
    ):
        self.logger = logging.getLogger("okchef.utterances")
        self.settle_timeout = settle_timeout
        self.queue: "queue.Queue[str]" = out_queue if out_queue is not None else queue.Queue()

        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._last_sentence: Optional[str] = None
        self._settled: Optional[str] = None

    # ---------- public API ----------

    def feed(self, sentence: str):
        """Receive the latest (possibly revised) transcription."""
        with self._lock:
            if sentence == self._last_sentence:
                return
            if self._last_sentence is None and sentence == self._settled:
                # final result repeating what was already settled
                return
            self._settled = None
            self._last_sentence = sentence
            self._restart_timer()

    def flush(self) -> Optional[str]:
        """Settle immediately, e.g. when recording stops."""
        with self._lock:
            self._cancel_timer()
            return self._settle()

    def reset(self):
        with self._lock:
            self._cancel_timer()
            self._last_sentence = None
            self._settled = None

    # ---------- internal ----------

    def _restart_timer(self):
        self._cancel_timer()
        self._timer = threading.Timer(self.settle_timeout, self._on_timeout)
        self._timer.daemon = True
        self._timer.start()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timeout(self):
        with self._lock:
            # a timer that fired while feed() held the lock has been replaced
            if threading.current_thread() is not self._timer:
                return
            self._timer = None
            self.logger.info("Speaking timeout reached")
            self._settle()

    def _settle(self) -> Optional[str]:
        sentence = self._last_sentence
        self._last_sentence = None
        if not sentence or not sentence.strip():
            return None
        self._settled = sentence
        self.queue.put(sentence)
        return sentence
