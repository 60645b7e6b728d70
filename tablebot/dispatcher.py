"""Entry point for every inbound turn.

A message first goes to the active dialog, if any. Only when no dialog was
active and nothing has been sent yet is the text classified and routed.
State staged during the turn is committed with a single flush at the end.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable, Optional

from .context import TurnContext
from .dialog_stack import DialogStack, DialogTurnStatus
from .errors import TurnCancelledError
from .fallback import RetrievalFallback
from .reservation_dialog import ReservationDialog
from .router import IntentRouter
from .schemas import ConversationTurn, TurnKind
from .services.knowledge import KnowledgeBase
from .services.recognizer import IntentRecognizer
from .state import StateStore
from .transport import Transport

logger = logging.getLogger(__name__)

WELCOME = "Hi! I'm a restaurant assistant bot. I can help you with your reservation."


class TurnDispatcher:
    def __init__(
        self,
        recognizer: IntentRecognizer,
        knowledge_base: KnowledgeBase,
        state: StateStore,
        transport: Transport,
        site_url: str,
        intent_threshold: float = 0.5,
        today: Callable[[], date] = date.today,
    ):
        self.recognizer = recognizer
        self.state = state
        self.transport = transport
        self.today = today
        self.dialogs = DialogStack([ReservationDialog()])
        self.router = IntentRouter(
            self.dialogs,
            RetrievalFallback(knowledge_base),
            site_url=site_url,
            threshold=intent_threshold,
        )

    async def handle_turn(self, turn: ConversationTurn, cancel_event: Optional[asyncio.Event] = None) -> None:
        self._check_cancelled(turn, cancel_event)
        self.transport.begin_turn(turn.conversation_id)
        try:
            if turn.kind is TurnKind.PARTICIPANT_JOINED:
                if turn.joined_participant_ids and turn.joined_participant_ids[0] == turn.recipient_id:
                    await self.transport.send(turn.conversation_id, WELCOME)
                return
            if turn.kind is not TurnKind.MESSAGE:
                logger.debug("Ignoring %s event for %s", turn.kind.value, turn.conversation_id)
                return

            ctx = TurnContext(turn=turn, transport=self.transport, state=self.state, today=self.today)
            await self._on_message(ctx)

            # Re-save the reservation every turn so it is always persisted
            reservation = await ctx.reservation()
            ctx.save_reservation(reservation)

            self._check_cancelled(turn, cancel_event)
            await self.state.flush(turn.conversation_id)
        finally:
            # No-op after a successful flush; drops staged writes otherwise
            self.state.discard(turn.conversation_id)
            self.transport.end_turn(turn.conversation_id)

    async def _on_message(self, ctx: TurnContext) -> None:
        result = await self.dialogs.continue_dialog(ctx)
        if ctx.responded:
            return
        if result.status is DialogTurnStatus.EMPTY:
            intent = await self.recognizer.recognize(ctx.text)
            await self.router.route(ctx, intent)
        elif result.status is DialogTurnStatus.WAITING:
            # The active dialog is waiting for a response from the user
            pass
        elif result.status is DialogTurnStatus.COMPLETE:
            await self.dialogs.end(ctx)
        else:
            logger.warning(
                "Dialog turn for %s ended with status %s; cancelling all dialogs",
                ctx.conversation_id, result.status.value,
            )
            await self.dialogs.cancel_all(ctx)

    @staticmethod
    def _check_cancelled(turn: ConversationTurn, cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Turn for %s cancelled before commit", turn.conversation_id)
            raise TurnCancelledError(turn.conversation_id)
