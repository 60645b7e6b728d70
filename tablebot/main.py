import logging
from typing import Optional

from fastapi import FastAPI, HTTPException

from .bootstrap import build_dispatcher
from .config import Settings, settings as default_settings
from .dispatcher import TurnDispatcher
from .errors import ServiceUnavailableError, StoreUnavailableError
from .schemas import ActivityPayload, TurnResponse
from .transport import OutboxTransport

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, dispatcher: Optional[TurnDispatcher] = None) -> FastAPI:
    settings = settings or default_settings
    if dispatcher is None:
        dispatcher = build_dispatcher(settings, OutboxTransport())
    if not isinstance(dispatcher.transport, OutboxTransport):
        raise TypeError("The HTTP app needs a dispatcher built with an OutboxTransport")

    app = FastAPI(
        title="Restaurant Assistant Bot",
        description="Turn dispatcher for reservations, specials and FAQ answers",
        version="1.0.0",
    )
    app.state.dispatcher = dispatcher

    @app.post("/api/messages", response_model=TurnResponse)
    async def post_message(payload: ActivityPayload):
        """
        Handle one inbound activity and return every message the bot sent for it.
        Backend outages surface as 503 with no partial state written.
        """
        transport: OutboxTransport = dispatcher.transport
        try:
            await dispatcher.handle_turn(payload.to_turn())
            replies = transport.drain(payload.conversation_id)
        except (ServiceUnavailableError, StoreUnavailableError) as e:
            logger.error("Turn for %s failed: %s", payload.conversation_id, e)
            raise HTTPException(status_code=503, detail=str(e))
        finally:
            # Nothing from a failed turn stays queued
            transport.drain(payload.conversation_id)
        return TurnResponse(conversation_id=payload.conversation_id, replies=replies)

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
