from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class TurnKind(str, Enum):
    MESSAGE = "message"
    PARTICIPANT_JOINED = "participant_joined"
    OTHER = "other"


class ConversationTurn(BaseModel):
    """One inbound event for a conversation."""

    model_config = ConfigDict(frozen=True)

    kind: TurnKind = TurnKind.MESSAGE
    text: str = ""
    conversation_id: str
    recipient_id: str = "bot"
    joined_participant_ids: List[str] = Field(default_factory=list)


class ReservationStatus(str, Enum):
    COLLECTING = "collecting"
    COMPLETE = "complete"


class ReservationState(BaseModel):
    party_size: Optional[int] = None
    time: Optional[str] = None
    status: ReservationStatus = ReservationStatus.COLLECTING


# Dialog stack: either nothing is active or exactly one dialog is.

class NoDialog(BaseModel):
    kind: Literal["none"] = "none"


class ActiveDialog(BaseModel):
    kind: Literal["active"] = "active"
    dialog_id: str
    state: Dict[str, Any] = Field(default_factory=dict)


class DialogStackRecord(BaseModel):
    entry: Union[NoDialog, ActiveDialog] = Field(default_factory=NoDialog, discriminator="kind")

    @property
    def active(self) -> Optional[ActiveDialog]:
        return self.entry if isinstance(self.entry, ActiveDialog) else None


class IntentResult(BaseModel):
    label: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    entities: Dict[str, List[Any]] = Field(default_factory=dict)


class AnswerCandidate(BaseModel):
    text: str
    score: float


# Outbound content

class HeroCard(BaseModel):
    title: str
    value: str
    image_url: str
    action_type: str = "showImage"


class TextMessage(BaseModel):
    type: Literal["text"] = "text"
    text: str


class CarouselMessage(BaseModel):
    type: Literal["carousel"] = "carousel"
    text: str = ""
    cards: List[HeroCard] = Field(default_factory=list)


OutboundContent = Union[TextMessage, CarouselMessage]


# HTTP surface

class ActivityPayload(BaseModel):
    type: TurnKind = TurnKind.MESSAGE
    conversation_id: str
    text: str = ""
    recipient_id: str = "bot"
    members_added: List[str] = Field(default_factory=list)

    def to_turn(self) -> ConversationTurn:
        return ConversationTurn(
            kind=self.type,
            text=self.text,
            conversation_id=self.conversation_id,
            recipient_id=self.recipient_id,
            joined_participant_ids=self.members_added,
        )


class TurnResponse(BaseModel):
    conversation_id: str
    replies: List[OutboundContent] = Field(default_factory=list)
