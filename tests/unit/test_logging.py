"""Tests for structured logging helpers."""

from structlog.testing import capture_logs

from tractorbot.logging import log_business_event, log_transition, mask_user_id

USER = "whatsapp:+15551234567"


def test_business_event_keeps_its_name():
    with capture_logs() as logs:
        log_business_event("deal_accepted", {"item_id": 2, "amount": 9500})

    assert logs[0]["event"] == "business_event"
    assert logs[0]["business_event"] == "deal_accepted"
    assert logs[0]["data"] == {"item_id": 2, "amount": 9500}


def test_transition_masks_user():
    with capture_logs() as logs:
        log_transition(USER, "collecting_offer", "no_negotiation", "deal_accepted")

    assert logs[0]["user"] == mask_user_id(USER)
    assert USER not in logs[0]["user"]
    assert logs[0]["outcome"] == "deal_accepted"
