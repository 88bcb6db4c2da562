# okchef/core/nlu.py

"""
Cloud intent backend (api.ai style /query endpoint).

Same contract as PatternMoveResolver: sentence + context -> NavigationMove.
The service classifies the sentence into an action; this module only maps
that answer onto a move. Any transport or payload problem becomes
Unrecognized(None).
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

import requests

from .moves import NavigationMove, RecognitionContext


logger = logging.getLogger("okchef.nlu")


DEFAULT_BASE_URL = "https://api.api.ai/v1"
API_VERSION = "20150910"

ACTION_MOVES = {
    "next-step": NavigationMove.next,
    "previous-step": NavigationMove.previous,
    "last-step": NavigationMove.end,
    "reset": NavigationMove.beginning,
    "repeat": NavigationMove.repeat,
}


def _step_parameter(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def move_from_nlu_result(result: Dict[str, Any]) -> NavigationMove:
    """Map the ``result`` object of a /query response to a move."""
    fulfillment = result.get("fulfillment") or {}
    recovery = fulfillment.get("speech") or None

    action = result.get("action")
    if not isinstance(action, str):
        return NavigationMove.unrecognized(recovery)

    if action == "step-n":
        step = _step_parameter((result.get("parameters") or {}).get("step"))
        if step is None:
            return NavigationMove.unrecognized(recovery)
        return NavigationMove.go_to(step)

    make = ACTION_MOVES.get(action)
    if make is None:
        return NavigationMove.unrecognized(recovery)
    return make()


class ApiAiMoveResolver:
    """
    Resolves sentences by asking the intent service.

    Blocking HTTP call: run it from the utterance worker, never from a
    latency-sensitive thread.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        lang: str = "fr",
        timeout: float = 8.0,
        session_id: Optional[str] = None,
    ):
        if not access_token:
            raise ValueError("api.ai access token is required for ApiAiMoveResolver")
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.lang = lang
        self.timeout = timeout
        self.session_id = session_id or uuid.uuid4().hex

    @classmethod
    def from_config(cls, config) -> "ApiAiMoveResolver":
        return cls(
            access_token=config.get("apiai.access_token", ""),
            base_url=config.get("apiai.base_url", DEFAULT_BASE_URL),
            lang=config.get("apiai.lang", "fr"),
        )

    def resolve(self, sentence: str, context: RecognitionContext) -> NavigationMove:
        if not sentence or not sentence.strip():
            return NavigationMove.unrecognized()

        payload = {
            "query": sentence.strip(),
            "lang": self.lang,
            "sessionId": self.session_id,
        }
        headers = {"Authorization": f"Bearer {self.access_token}"}

        try:
            r = requests.post(
                f"{self.base_url}/query",
                params={"v": API_VERSION},
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Intent request failed for {sentence!r}: {e}")
            return NavigationMove.unrecognized()

        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            logger.warning(f"Intent response has no result: {data!r}")
            return NavigationMove.unrecognized()

        move = move_from_nlu_result(result)
        logger.info(f"Intent {result.get('action')!r} for {sentence!r} -> {move}")
        return move
