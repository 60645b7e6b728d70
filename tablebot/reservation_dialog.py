"""Slot-filling dialog that collects party size and time for a reservation."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict

from .context import TurnContext
from .dialog_stack import Dialog, DialogTurnResult, DialogTurnStatus
from .entity_extractor import format_time, parse_party_size, parse_time_expression
from .errors import MalformedTimeExpression
from .schemas import ReservationState, ReservationStatus

logger = logging.getLogger(__name__)

CANCEL_WORDS = {"cancel", "stop", "never mind", "nevermind", "forget it"}

PROMPTS = {
    "ask_party": "How many people will be joining you?",
    "ask_time": "What time would you like the table for?",
    "retry_party": "Sorry, I need the number of people as a number, for example 4.",
    "retry_time": "Sorry, I didn't get that time. Try something like 7pm or 19:30.",
    "cancelled": "OK, I've cancelled the reservation.",
}


class ReservationStep(str, Enum):
    AWAITING_PARTY_SIZE = "awaiting_party_size"
    AWAITING_TIME = "awaiting_time"
    COMPLETE = "complete"


def next_step(reservation: ReservationState) -> ReservationStep:
    if reservation.party_size is None:
        return ReservationStep.AWAITING_PARTY_SIZE
    if reservation.time is None:
        return ReservationStep.AWAITING_TIME
    return ReservationStep.COMPLETE


def confirmation_text(reservation: ReservationState) -> str:
    return f"Ok. I have a table for {reservation.party_size} people on {reservation.time}."


class ReservationDialog(Dialog):
    dialog_id = "ReservationDialog"

    async def begin(self, ctx: TurnContext) -> DialogTurnResult:
        reservation = await ctx.reservation()
        return await self._advance(ctx, reservation)

    async def resume(self, ctx: TurnContext, state: Dict[str, Any]) -> DialogTurnResult:
        reservation = await ctx.reservation()
        text = ctx.text
        if text.lower() in CANCEL_WORDS:
            ctx.save_reservation(ReservationState())
            await ctx.send(PROMPTS["cancelled"])
            return DialogTurnResult(DialogTurnStatus.CANCELLED)

        step = ReservationStep(state.get("step", next_step(reservation).value))
        if step is ReservationStep.AWAITING_PARTY_SIZE:
            size = parse_party_size(text)
            if size is None:
                logger.info("Unusable party size %r in %s", text, ctx.conversation_id)
                await ctx.send(PROMPTS["retry_party"])
                return self._waiting(step)
            reservation.party_size = size
        elif step is ReservationStep.AWAITING_TIME:
            try:
                reservation.time = format_time(parse_time_expression(text, ctx.today()))
            except MalformedTimeExpression:
                logger.info("Unusable time %r in %s", text, ctx.conversation_id)
                await ctx.send(PROMPTS["retry_time"])
                return self._waiting(step)
        ctx.save_reservation(reservation)
        return await self._advance(ctx, reservation)

    async def _advance(self, ctx: TurnContext, reservation: ReservationState) -> DialogTurnResult:
        step = next_step(reservation)
        if step is ReservationStep.AWAITING_PARTY_SIZE:
            await ctx.send(PROMPTS["ask_party"])
            return self._waiting(step)
        if step is ReservationStep.AWAITING_TIME:
            await ctx.send(PROMPTS["ask_time"])
            return self._waiting(step)

        reservation.status = ReservationStatus.COMPLETE
        ctx.save_reservation(reservation)
        logger.info(
            "Reservation complete for %s: %s people, %s",
            ctx.conversation_id, reservation.party_size, reservation.time,
        )
        await ctx.send(confirmation_text(reservation))
        return DialogTurnResult(DialogTurnStatus.COMPLETE)

    @staticmethod
    def _waiting(step: ReservationStep) -> DialogTurnResult:
        return DialogTurnResult(DialogTurnStatus.WAITING, {"step": step.value})
