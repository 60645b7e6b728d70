from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable

from .schemas import ConversationTurn, OutboundContent, ReservationState
from .state import StateStore
from .transport import Transport

RESERVATION_KIND = "reservation"
DIALOG_STACK_KIND = "dialog_stack"


@dataclass
class TurnContext:
    """Everything a component needs while handling one turn."""

    turn: ConversationTurn
    transport: Transport
    state: StateStore
    today: Callable[[], date] = field(default=date.today)

    @property
    def conversation_id(self) -> str:
        return self.turn.conversation_id

    @property
    def text(self) -> str:
        return (self.turn.text or "").strip()

    @property
    def responded(self) -> bool:
        return self.transport.has_responded(self.conversation_id)

    async def send(self, content: OutboundContent | str) -> None:
        await self.transport.send(self.conversation_id, content)

    async def reservation(self) -> ReservationState:
        return await self.state.get(self.conversation_id, RESERVATION_KIND, ReservationState)

    def save_reservation(self, reservation: ReservationState) -> None:
        self.state.set(self.conversation_id, RESERVATION_KIND, reservation)
