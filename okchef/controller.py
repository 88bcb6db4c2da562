# okchef/controller.py

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional

from .core.config import Config
from .core.errors import FetchError
from .core.importer import HttpPatternSource
from .core.moves import NavigationMove
from .core.nlu import ApiAiMoveResolver
from .core.patterns import PatternTable
from .core.recipes import Recipe
from .core.resolver import PatternMoveResolver, ResolverOptions
from .core.speaker import Speaker
from .core.timeline import TimelineManager
from .core.utterances import UtteranceDebouncer
from .core.walkthrough import RecipeWalkthrough, StepOutcome


class WalkthroughController:
    """
    Main orchestrator for a voice-driven recipe walkthrough:
    - partial transcriptions -> debouncer -> queue of settled sentences
    - one worker resolves each sentence and applies the move
    - the resulting sentence goes to the speaker
    """

    def __init__(
        self,
        recipe: Recipe,
        config: Optional[Config] = None,
        table: Optional[PatternTable] = None,
        resolver=None,
        sink: Optional[Callable[[str], None]] = None,
        on_outcome: Optional[Callable[[StepOutcome], None]] = None,
    ):
        self.logger = logging.getLogger("okchef.controller")
        self.config = config or Config(config_path=None)
        self.on_outcome = on_outcome

        # ---- Core components ----
        self.options = ResolverOptions.from_config(self.config)
        self.table = table
        if self.table is None:
            self.table = PatternTable()
            self.table.load()
        self.resolver = resolver or self._build_resolver()

        self.walkthrough = RecipeWalkthrough(recipe, out_of_range=self.options.out_of_range)
        self.timeline = TimelineManager()
        self.speaker = Speaker(sink=sink, on_spoken=lambda text: self._add_timeline("say", text))
        self.debouncer = UtteranceDebouncer(settle_timeout=self.config.settle_timeout)

        self._running = False
        self._worker: Optional[threading.Thread] = None

    def _build_resolver(self):
        backend = self.config.backend
        if backend == "apiai":
            self.logger.info("Using cloud intent backend.")
            return ApiAiMoveResolver.from_config(self.config)
        if backend != "patterns":
            self.logger.warning(f"Unknown resolver backend '{backend}', using patterns.")
        return PatternMoveResolver(self.table, self.options)

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def start(self, refresh: Optional[bool] = None):
        """Start the utterance worker and read the recipe intro."""
        if self._running:
            return
        self._running = True
        self._worker = threading.Thread(target=self._worker_loop, name="okchef-utterances", daemon=True)
        self._worker.start()

        if refresh is None:
            refresh = self.config.refresh_on_start
        if refresh and self.config.patterns_url:
            self.refresh_patterns_async()

        intro = self.walkthrough.intro()
        self._add_timeline("system", intro)
        self.speaker.speak(intro)

    def shutdown(self):
        """Clean shutdown when the app is closing."""
        self._running = False
        self.debouncer.reset()
        self.debouncer.queue.put("")
        if self._worker is not None and self._worker.is_alive():
            self._worker.join(timeout=2.0)
        self.speaker.shutdown()
        self.logger.info("okchef shutting down.")

    # -------------------------------------------------------------------------
    # SPEECH INPUT
    # -------------------------------------------------------------------------

    def on_transcription(self, sentence: str):
        """Latest partial transcription from the speech-to-text source."""
        self.debouncer.feed(sentence)

    def _worker_loop(self):
        while self._running:
            try:
                sentence = self.debouncer.queue.get(timeout=0.5)
            except queue.Empty:
                continue
            if not sentence:
                continue
            try:
                self.handle_sentence(sentence)
            except Exception as e:
                self.logger.error(f"Failed to handle {sentence!r}: {e}", exc_info=True)

    # -------------------------------------------------------------------------
    # COMMAND PROCESSING
    # -------------------------------------------------------------------------

    def handle_sentence(self, sentence: str) -> StepOutcome:
        """Resolve one settled sentence, move, and speak the result."""
        self._add_timeline("voice", sentence)

        move: NavigationMove = self.resolver.resolve(sentence, self.walkthrough.context())
        outcome = self.walkthrough.apply(move)
        self._add_timeline("move", f"{move} -> step index {outcome.index}")
        self.logger.info(f"{sentence!r}: {move} (moved={outcome.moved}, index={outcome.index})")

        self.speaker.speak(outcome.text)
        if self.on_outcome is not None:
            self.on_outcome(outcome)
        return outcome

    # -------------------------------------------------------------------------
    # PATTERNS
    # -------------------------------------------------------------------------

    def _pattern_source(self):
        return HttpPatternSource(self.config.patterns_url, timeout=self.config.patterns_timeout)

    def refresh_patterns(self, source=None) -> bool:
        source = source or self._pattern_source()
        try:
            snapshot = self.table.refresh(source)
        except FetchError as e:
            self._add_timeline("patterns", f"Refresh failed ({e.reason}); keeping current patterns.")
            return False
        self._add_timeline("patterns", f"Patterns refreshed: {snapshot.describe()}")
        return True

    def refresh_patterns_async(self, source=None) -> threading.Thread:
        source = source or self._pattern_source()

        def done(error: Optional[FetchError]):
            if error is None:
                self._add_timeline("patterns", f"Patterns refreshed: {self.table.snapshot.describe()}")
            else:
                self._add_timeline("patterns", f"Refresh failed ({error.reason}); keeping current patterns.")

        return self.table.refresh_async(source, on_done=done)

    # -------------------------------------------------------------------------
    # UTILITY HELPERS
    # -------------------------------------------------------------------------

    def _add_timeline(self, kind: str, text: str):
        ev = self.timeline.add_event(kind, text)
        self.logger.debug(ev.pretty())
