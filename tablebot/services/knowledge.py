"""Knowledge-base collaborators answering free-text questions."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

import requests

from ..errors import ServiceUnavailableError
from ..schemas import AnswerCandidate

logger = logging.getLogger(__name__)


class KnowledgeBase(ABC):
    @abstractmethod
    async def get_answers(self, text: str) -> List[AnswerCandidate]:
        """Candidate answers ranked by descending score; may be empty."""


class QnAMakerClient(KnowledgeBase):
    """Client for a QnA Maker ``generateAnswer`` endpoint."""

    def __init__(self, host: str, kb_id: str, endpoint_key: str, top: int = 3, timeout: float = 10.0):
        self.url = f"{host.rstrip('/')}/knowledgebases/{kb_id}/generateAnswer"
        self.endpoint_key = endpoint_key
        self.top = top
        self.timeout = timeout

    async def get_answers(self, text: str) -> List[AnswerCandidate]:
        if not (text or "").strip():
            return []
        data = await asyncio.to_thread(self._query, text)
        return parse_qna_response(data)

    def _query(self, text: str) -> Dict[str, Any]:
        try:
            resp = requests.post(
                self.url,
                json={"question": text, "top": self.top},
                headers={"Authorization": f"EndpointKey {self.endpoint_key}"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("QnA Maker request failed: %s", e)
            raise ServiceUnavailableError(f"Knowledge service unavailable: {e}") from e


def parse_qna_response(data: Dict[str, Any]) -> List[AnswerCandidate]:
    # QnA Maker scores are 0-100; a score of 0 is its "no good match" placeholder
    answers = [
        AnswerCandidate(text=a["answer"], score=float(a.get("score", 0)) / 100.0)
        for a in data.get("answers") or []
        if a.get("answer") and float(a.get("score", 0)) > 0
    ]
    return sorted(answers, key=lambda a: a.score, reverse=True)
