"""Intent classification collaborators."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from ..entity_extractor import TIME_ENTITY
from ..errors import ServiceUnavailableError
from ..schemas import IntentResult

logger = logging.getLogger(__name__)

DATETIME_PREFIX = "builtin.datetimeV2."


class IntentRecognizer(ABC):
    @abstractmethod
    async def recognize(self, text: str) -> Optional[IntentResult]:
        """Top-scoring intent for the text, or None when there is none."""


class LuisRecognizer(IntentRecognizer):
    """Client for a LUIS v2 prediction endpoint."""

    def __init__(self, endpoint: str, app_id: str, key: str, timeout: float = 10.0):
        self.url = f"{endpoint.rstrip('/')}/luis/v2.0/apps/{app_id}"
        self.key = key
        self.timeout = timeout

    async def recognize(self, text: str) -> Optional[IntentResult]:
        if not (text or "").strip():
            return None
        data = await asyncio.to_thread(self._query, text)
        return parse_luis_response(data)

    def _query(self, text: str) -> Dict[str, Any]:
        try:
            resp = requests.get(
                self.url,
                params={"q": text, "verbose": "false"},
                headers={"Ocp-Apim-Subscription-Key": self.key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("LUIS request failed: %s", e)
            raise ServiceUnavailableError(f"Intent service unavailable: {e}") from e


def parse_luis_response(data: Dict[str, Any]) -> Optional[IntentResult]:
    top = data.get("topScoringIntent")
    if not top:
        return None
    entities: Dict[str, List[Any]] = {}
    for ent in data.get("entities") or []:
        kind = ent.get("type", "")
        if kind.startswith(DATETIME_PREFIX):
            values = (ent.get("resolution") or {}).get("values") or []
            entities.setdefault(TIME_ENTITY, []).append({
                "type": kind[len(DATETIME_PREFIX):],
                "timex": [v["timex"] for v in values if v.get("timex")],
            })
        elif kind:
            entities.setdefault(kind, []).append(ent.get("entity"))
    score = float(top.get("score") or 0.0)
    return IntentResult(
        label=top.get("intent") or "",
        confidence=min(max(score, 0.0), 1.0),
        entities=entities,
    )
