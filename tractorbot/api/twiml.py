"""Render replies as Twilio TwiML."""

from typing import Optional

from twilio.twiml.messaging_response import MessagingResponse

from tractorbot.config.settings import settings
from tractorbot.core.replies import Reply, SegmentKind


def render_twiml(reply: Reply, marker: Optional[str] = None) -> str:
    """One ``<Message>`` per segment, in order.

    Text segments are prefixed with the reply marker; image segments are
    sent as media.
    """
    marker = settings.reply_marker if marker is None else marker
    response = MessagingResponse()
    for segment in reply.segments:
        if segment.kind == SegmentKind.IMAGE:
            response.message().media(segment.content)
        else:
            response.message(f"{marker} {segment.content}" if marker else segment.content)
    return str(response)
