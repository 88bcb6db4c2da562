"""Integration tests for the walkthrough controller."""

from __future__ import annotations

import threading

from okchef.controller import WalkthroughController
from okchef.core.config import Config
from okchef.core.errors import FetchError
from okchef.core.importer import TextPatternSource
from okchef.core.moves import MoveKind, NavigationMove
from okchef.core.nlu import ApiAiMoveResolver
from okchef.core.patterns import NEXT, PatternTable
from okchef.core.recipes import BUILTIN_RECIPES


SALMON = BUILTIN_RECIPES[2]  # 7 steps


class FailingSource:
    def fetch(self) -> str:
        raise FetchError(FetchError.PARSE, "bad feed")


def make_controller(**kwargs):
    spoken = []
    config = kwargs.pop("config", None) or Config(config_path=None)
    controller = WalkthroughController(SALMON, config=config, sink=spoken.append, **kwargs)
    return controller, spoken


def test_scenarios_on_seven_step_recipe() -> None:
    controller, spoken = make_controller()
    try:
        outcome = controller.handle_sentence("OK chef, Cinquième étape")
        assert outcome.move == NavigationMove.go_to(5)
        assert outcome.index == 4

        outcome = controller.handle_sentence("OK chef, Étape huit")
        assert outcome.move == NavigationMove.go_to(8)
        assert not outcome.moved
        assert controller.walkthrough.current_index == 4

        outcome = controller.handle_sentence("OK chef, Dernière étape")
        assert outcome.move == NavigationMove.end()
        assert outcome.index == 6

        outcome = controller.handle_sentence("Troisième étape")
        assert outcome.move.kind is MoveKind.UNRECOGNIZED
        assert controller.walkthrough.current_index == 6

        assert controller.speaker.wait_until_idle(timeout=5.0)
        assert spoken[0].startswith("Étape 5. Déposer")
        assert "pas d'étape 8" in spoken[1]
        assert spoken[2].startswith("Étape 7. Fermer")
        assert [ev.kind for ev in controller.timeline.get_events("move")] == ["move"] * 4
    finally:
        controller.shutdown()


def test_transcriptions_flow_through_debouncer() -> None:
    config = Config(config_path=None)
    config.set("speech.settle_timeout", 0.2)
    outcomes = []
    done = threading.Event()

    def on_outcome(outcome):
        outcomes.append(outcome)
        done.set()

    controller, spoken = make_controller(config=config, on_outcome=on_outcome)
    controller.start(refresh=False)
    try:
        controller.on_transcription("ok")
        controller.on_transcription("ok chef")
        controller.on_transcription("ok chef étape suivante")

        assert done.wait(timeout=5.0)
        assert len(outcomes) == 1
        assert outcomes[0].move == NavigationMove.next()
        assert outcomes[0].index == 0

        assert controller.speaker.wait_until_idle(timeout=5.0)
        assert spoken[0] == controller.walkthrough.intro()
        assert spoken[1].startswith("Étape 1.")
    finally:
        controller.shutdown()


def test_refresh_patterns_success_and_failure() -> None:
    feed = "Step(N),Start,End,Next,Previous\n,,,encore une,\n"
    controller, _ = make_controller()
    try:
        before = controller.table.snapshot

        assert controller.refresh_patterns(FailingSource()) is False
        assert controller.table.snapshot is before

        assert controller.refresh_patterns(TextPatternSource(feed)) is True
        assert controller.table.snapshot.get(NEXT).patterns == ["encore une"]
        assert controller.handle_sentence("ok chef encore une").move == NavigationMove.next()

        kinds = [ev.text for ev in controller.timeline.get_events("patterns")]
        assert kinds[0].startswith("Refresh failed (parse)")
        assert kinds[1].startswith("Patterns refreshed")
    finally:
        controller.shutdown()


def test_refresh_patterns_async_records_result() -> None:
    controller, _ = make_controller()
    try:
        thread = controller.refresh_patterns_async(FailingSource())
        thread.join(timeout=5.0)
        events = controller.timeline.get_events("patterns")
        assert len(events) == 1
        assert "keeping current patterns" in events[0].text
    finally:
        controller.shutdown()


def test_shared_table_is_used() -> None:
    table = PatternTable()
    table.load()
    controller, _ = make_controller(table=table)
    try:
        assert controller.table is table
        assert controller.resolver.table is table
    finally:
        controller.shutdown()


def test_apiai_backend_from_config() -> None:
    config = Config(config_path=None)
    config.set("resolver.backend", "apiai")
    config.set("apiai.access_token", "token")
    controller, _ = make_controller(config=config)
    try:
        assert isinstance(controller.resolver, ApiAiMoveResolver)
    finally:
        controller.shutdown()
