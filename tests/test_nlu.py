"""Unit tests for the cloud intent backend."""

from __future__ import annotations

import pytest
import requests

from okchef.core import nlu
from okchef.core.moves import MoveKind, NavigationMove, RecognitionContext
from okchef.core.nlu import ApiAiMoveResolver, move_from_nlu_result


CTX = RecognitionContext(total_steps=7)


class FakeResponse:
    def __init__(self, payload, status_code: int = 200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


@pytest.mark.parametrize(
    "action, expected",
    [
        ("next-step", NavigationMove.next()),
        ("previous-step", NavigationMove.previous()),
        ("last-step", NavigationMove.end()),
        ("reset", NavigationMove.beginning()),
        ("repeat", NavigationMove.repeat()),
    ],
)
def test_action_mapping(action, expected) -> None:
    assert move_from_nlu_result({"action": action}) == expected


@pytest.mark.parametrize("step", [4, "4", " 4 ", 4.0])
def test_step_n_accepts_int_or_numeric_string(step) -> None:
    result = {"action": "step-n", "parameters": {"step": step}}
    assert move_from_nlu_result(result) == NavigationMove.go_to(4)


def test_step_n_without_usable_step_is_unrecognized() -> None:
    result = {
        "action": "step-n",
        "parameters": {"step": "quatre"},
        "fulfillment": {"speech": "Quelle étape ?"},
    }
    assert move_from_nlu_result(result) == NavigationMove.unrecognized("Quelle étape ?")


def test_unknown_action_keeps_fulfillment_speech() -> None:
    result = {"action": "input.unknown", "fulfillment": {"speech": "Je n'ai pas compris."}}
    assert move_from_nlu_result(result) == NavigationMove.unrecognized("Je n'ai pas compris.")
    assert move_from_nlu_result({}) == NavigationMove.unrecognized(None)


def test_resolver_posts_query(monkeypatch) -> None:
    seen = {}

    def fake_post(url, params, json, headers, timeout):
        seen.update(url=url, params=params, json=json, headers=headers)
        return FakeResponse({"result": {"action": "next-step"}})

    monkeypatch.setattr(nlu.requests, "post", fake_post)
    resolver = ApiAiMoveResolver("token-123", base_url="https://nlu.example/v1/", session_id="s1")

    assert resolver.resolve("Étape suivante", CTX) == NavigationMove.next()
    assert seen["url"] == "https://nlu.example/v1/query"
    assert seen["params"] == {"v": nlu.API_VERSION}
    assert seen["json"] == {"query": "Étape suivante", "lang": "fr", "sessionId": "s1"}
    assert seen["headers"] == {"Authorization": "Bearer token-123"}


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse({}, status_code=500),
        FakeResponse(ValueError("not json")),
        FakeResponse({"status": {"code": 200}}),
        FakeResponse(["unexpected"]),
    ],
)
def test_resolver_failures_are_unrecognized(monkeypatch, response) -> None:
    monkeypatch.setattr(nlu.requests, "post", lambda *a, **kw: response)
    move = ApiAiMoveResolver("token").resolve("suivant", CTX)
    assert move.kind is MoveKind.UNRECOGNIZED
    assert move.recovery is None


def test_resolver_network_error_is_unrecognized(monkeypatch) -> None:
    def fake_post(*args, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(nlu.requests, "post", fake_post)
    assert ApiAiMoveResolver("token").resolve("suivant", CTX) == NavigationMove.unrecognized()


def test_resolver_skips_empty_sentence(monkeypatch) -> None:
    def fake_post(*args, **kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr(nlu.requests, "post", fake_post)
    assert ApiAiMoveResolver("token").resolve("  ", CTX) == NavigationMove.unrecognized()


def test_resolver_requires_token() -> None:
    with pytest.raises(ValueError):
        ApiAiMoveResolver("")
