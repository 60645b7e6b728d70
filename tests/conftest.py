"""Shared fixtures for the tablebot test suite."""

from collections.abc import Callable
from datetime import date

import pytest

from tablebot.context import TurnContext
from tablebot.dispatcher import TurnDispatcher
from tablebot.schemas import AnswerCandidate, ConversationTurn, IntentResult, TurnKind
from tablebot.services.knowledge import KnowledgeBase
from tablebot.services.recognizer import IntentRecognizer
from tablebot.state import StateStore
from tablebot.storage import MemoryStorage
from tablebot.transport import OutboxTransport

TODAY = date(2026, 10, 19)
SITE = "https://img.example"


class FakeRecognizer(IntentRecognizer):
    """Returns a scripted result and records every call."""

    def __init__(self, result: IntentResult | None = None) -> None:
        self.result = result
        self.calls: list[str] = []

    async def recognize(self, text: str) -> IntentResult | None:
        self.calls.append(text)
        return self.result


class FakeKnowledgeBase(KnowledgeBase):
    def __init__(self, answers: list[AnswerCandidate] | None = None) -> None:
        self.answers = answers or []
        self.calls: list[str] = []

    async def get_answers(self, text: str) -> list[AnswerCandidate]:
        self.calls.append(text)
        return list(self.answers)


def message(text: str, conversation_id: str = "conv-1") -> ConversationTurn:
    return ConversationTurn(kind=TurnKind.MESSAGE, text=text, conversation_id=conversation_id)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def state(storage: MemoryStorage) -> StateStore:
    return StateStore(storage)


@pytest.fixture
def transport() -> OutboxTransport:
    return OutboxTransport()


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def knowledge_base() -> FakeKnowledgeBase:
    return FakeKnowledgeBase()


@pytest.fixture
def make_context(state: StateStore, transport: OutboxTransport) -> Callable[..., TurnContext]:
    """Factory for a TurnContext over the shared state and transport."""

    def _make(text: str = "", conversation_id: str = "conv-1") -> TurnContext:
        transport.begin_turn(conversation_id)
        return TurnContext(
            turn=message(text, conversation_id),
            transport=transport,
            state=state,
            today=lambda: TODAY,
        )

    return _make


@pytest.fixture
def dispatcher(
    recognizer: FakeRecognizer,
    knowledge_base: FakeKnowledgeBase,
    state: StateStore,
    transport: OutboxTransport,
) -> TurnDispatcher:
    return TurnDispatcher(
        recognizer=recognizer,
        knowledge_base=knowledge_base,
        state=state,
        transport=transport,
        site_url=SITE,
        today=lambda: TODAY,
    )
