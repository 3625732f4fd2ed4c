"""Inbound WhatsApp webhook."""

from fastapi import APIRouter, Depends, Form
from fastapi.responses import Response

from tractorbot.api.dependencies import get_dispatcher
from tractorbot.api.twiml import render_twiml
from tractorbot.core.dispatcher import Dispatcher, InboundMessage
from tractorbot.core.errors import StoreUnavailableError
from tractorbot.logging import log_error, set_request_context

router = APIRouter(tags=["whatsapp"])


@router.post("/whatsapp")
async def whatsapp_webhook(
    body: str = Form(default="", alias="Body"),
    sender: str = Form(..., alias="From"),
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> Response:
    """Handle one inbound message and answer with TwiML.

    Twilio posts form-encoded fields; ``From`` identifies the user.
    """
    set_request_context(user_id=sender)

    try:
        reply = await dispatcher.handle(InboundMessage(user_id=sender, text=body))
    except StoreUnavailableError as e:
        log_error("StoreUnavailableError", str(e), {"operation": e.operation})
        return Response(
            content="Session storage unavailable",
            status_code=503,
            media_type="text/plain",
        )

    return Response(content=render_twiml(reply), media_type="text/xml")
