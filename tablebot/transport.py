from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Set

from .schemas import CarouselMessage, OutboundContent, TextMessage

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Delivers outbound content and remembers who was answered this turn."""

    def __init__(self) -> None:
        self._responded: Set[str] = set()

    def begin_turn(self, conversation_id: str) -> None:
        self._responded.discard(conversation_id)

    def end_turn(self, conversation_id: str) -> None:
        self._responded.discard(conversation_id)

    def has_responded(self, conversation_id: str) -> bool:
        return conversation_id in self._responded

    async def send(self, conversation_id: str, content: OutboundContent | str) -> None:
        if isinstance(content, str):
            content = TextMessage(text=content)
        logger.debug("Sending %s message to %s", content.type, conversation_id)
        await self.deliver(conversation_id, content)
        self._responded.add(conversation_id)

    @abstractmethod
    async def deliver(self, conversation_id: str, content: OutboundContent) -> None:
        """Hand the content to the channel."""


class OutboxTransport(Transport):
    """Keeps outbound messages until the caller drains them."""

    def __init__(self) -> None:
        super().__init__()
        self.outbox: Dict[str, List[OutboundContent]] = {}

    async def deliver(self, conversation_id: str, content: OutboundContent) -> None:
        self.outbox.setdefault(conversation_id, []).append(content)

    def drain(self, conversation_id: str) -> List[OutboundContent]:
        return self.outbox.pop(conversation_id, [])


class ConsoleTransport(Transport):
    """Prints replies for the interactive console."""

    async def deliver(self, conversation_id: str, content: OutboundContent) -> None:
        print(f"\n🤖 {render_text(content)}")


def render_text(content: OutboundContent) -> str:
    if isinstance(content, CarouselMessage):
        lines = [content.text] if content.text else []
        lines += [f"   • {card.title} ({card.image_url})" for card in content.cards]
        return "\n".join(lines)
    return content.text
