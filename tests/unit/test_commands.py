"""Tests for inbound command classification."""

import pytest

from tractorbot.core.commands import CommandKind, classify, normalize
from tractorbot.state.models import Negotiation, NegotiationStage, Session

USER = "whatsapp:+15551234567"


def session_in(stage: NegotiationStage | None) -> Session:
    negotiation = Negotiation(item_id=2, stage=stage) if stage else None
    return Session(user_id=USER, negotiation=negotiation)


class TestStatelessClassification:
    """Classification with no active negotiation."""

    def test_normalize(self):
        assert normalize("  BrOwSe \n") == "browse"
        assert normalize(None) == ""

    @pytest.mark.parametrize(
        "text,token",
        [
            ("start", "start"),
            (" Start ", "start"),
            ("RECOMMEND", "recommend"),
            ("help", "help"),
            ("browse", "browse"),
            ("Farming", "farming"),
            ("landscaping", "landscaping"),
            ("construction", "construction"),
            ("view 3", "view:3"),
            ("View 12", "view:12"),
            ("negotiate 2", "negotiate:2"),
            ("offer 9500", "offer:9500"),
            ("hello there", "unknown"),
            ("", "unknown"),
        ],
    )
    def test_tokens(self, text, token):
        assert classify(text).token == token

    def test_digits_only_is_view(self):
        command = classify("42")
        assert command.kind == CommandKind.VIEW
        assert command.argument == "42"

    def test_view_without_id_keeps_text(self):
        command = classify("view")
        assert command.kind == CommandKind.VIEW
        assert command.argument == "view"

    def test_negotiate_without_id(self):
        command = classify("negotiate")
        assert command.kind == CommandKind.NEGOTIATE
        assert command.argument is None

    def test_no_session_same_as_idle_session(self):
        assert classify("browse", None) == classify("browse", session_in(None))


class TestCollectingName:
    """All input goes to name handling while collecting a name."""

    @pytest.mark.parametrize("text", ["browse", "start", "view 3", "negotiate 1", "offer 500", "7", "Jane Doe"])
    def test_everything_is_a_name(self, text):
        command = classify(text, session_in(NegotiationStage.COLLECTING_NAME))
        assert command.kind == CommandKind.NAME

    def test_name_keeps_original_case(self):
        command = classify("  Jane Doe ", session_in(NegotiationStage.COLLECTING_NAME))
        assert command.argument == "Jane Doe"


class TestCollectingOffer:
    """Commands still win over free-form offers while collecting an offer."""

    @pytest.fixture
    def session(self):
        return session_in(NegotiationStage.COLLECTING_OFFER)

    def test_negotiate_restarts(self, session):
        assert classify("negotiate 3", session).token == "negotiate:3"

    def test_view_and_digits(self, session):
        assert classify("view 1", session).token == "view:1"
        assert classify("9500", session).token == "view:9500"

    def test_offer_prefix(self, session):
        assert classify("Offer 9500", session).token == "offer:9500"

    def test_browse_still_browses(self, session):
        assert classify("browse", session).kind == CommandKind.BROWSE

    def test_free_text_falls_through_to_offer(self, session):
        command = classify("how about a discount", session)
        assert command.kind == CommandKind.OFFER
        assert command.argument == "how about a discount"
