"""Maps classifier output onto the bot's handlers."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Optional

from .context import TurnContext
from .dialog_stack import DialogStack
from .entity_extractor import extract_party_size, extract_time
from .errors import MalformedTimeExpression
from .fallback import RetrievalFallback
from .nlp_service import RESERVATION_LABEL, SPECIALTIES_LABEL
from .reservation_dialog import ReservationDialog
from .schemas import CarouselMessage, HeroCard, IntentResult, ReservationState

logger = logging.getLogger(__name__)

SPECIALTIES = ["Carbonara", "Pizza", "Lasagna"]
SPECIALTIES_TEXT = "For today we have:"


class IntentKind(str, Enum):
    SPECIALTIES = "specialties"
    RESERVATION = "reservation"
    UNKNOWN = "unknown"


class RouteOutcome(str, Enum):
    SPECIALTIES = "specialties"
    RESERVATION = "reservation"
    FALLBACK = "fallback"


INTENT_LABELS: Dict[str, IntentKind] = {
    SPECIALTIES_LABEL: IntentKind.SPECIALTIES,
    RESERVATION_LABEL: IntentKind.RESERVATION,
}


def classify(result: Optional[IntentResult], threshold: float = 0.5) -> IntentKind:
    """Apply the confidence threshold and map the label to an IntentKind."""
    if result is None or result.confidence <= threshold:
        return IntentKind.UNKNOWN
    return INTENT_LABELS.get(result.label, IntentKind.UNKNOWN)


def specialties_carousel(site_url: str) -> CarouselMessage:
    base = site_url.rstrip("/")
    cards = [
        HeroCard(title=name, value=name, image_url=f"{base}/{name.lower()}.jpg")
        for name in SPECIALTIES
    ]
    return CarouselMessage(text=SPECIALTIES_TEXT, cards=cards)


class IntentRouter:
    def __init__(self, dialogs: DialogStack, fallback: RetrievalFallback,
                 site_url: str, threshold: float = 0.5):
        self.dialogs = dialogs
        self.fallback = fallback
        self.site_url = site_url
        self.threshold = threshold

    async def route(self, ctx: TurnContext, result: Optional[IntentResult]) -> RouteOutcome:
        kind = classify(result, self.threshold)
        logger.debug(
            "Routing %s: label=%r confidence=%s -> %s",
            ctx.conversation_id,
            result.label if result else None,
            result.confidence if result else None,
            kind.value,
        )
        if kind is IntentKind.SPECIALTIES:
            await ctx.send(specialties_carousel(self.site_url))
            return RouteOutcome.SPECIALTIES
        if kind is IntentKind.RESERVATION:
            await self._reserve(ctx, result)
            return RouteOutcome.RESERVATION
        await self.fallback.answer(ctx)
        return RouteOutcome.FALLBACK

    async def _reserve(self, ctx: TurnContext, result: IntentResult) -> None:
        reservation = ReservationState()
        reservation.party_size = extract_party_size(result.entities)
        try:
            reservation.time = extract_time(result.entities, ctx.today())
        except MalformedTimeExpression as e:
            logger.info("Ignoring time entity for %s: %s", ctx.conversation_id, e)
        ctx.save_reservation(reservation)
        await self.dialogs.begin(ReservationDialog.dialog_id, ctx)
