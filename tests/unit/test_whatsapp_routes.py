"""Tests for the WhatsApp webhook and session routes."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tractorbot.api.dependencies import set_dispatcher
from tractorbot.api.routes.sessions import router as sessions_router
from tractorbot.api.routes.whatsapp import router as whatsapp_router
from tractorbot.api.twiml import render_twiml
from tractorbot.core.dispatcher import Dispatcher
from tractorbot.core.errors import StoreUnavailableError
from tractorbot.core.replies import Reply
from tractorbot.state.store import InMemorySessionStore

USER = "whatsapp:+15551234567"


def create_test_app() -> FastAPI:
    """Create a minimal FastAPI app for testing."""
    app = FastAPI()
    app.include_router(whatsapp_router)
    app.include_router(sessions_router)
    return app


@pytest.fixture
def client(dispatcher):
    set_dispatcher(dispatcher)
    yield TestClient(create_test_app())
    set_dispatcher(None)


def send(client: TestClient, body: str, sender: str = USER):
    return client.post("/whatsapp", data={"Body": body, "From": sender})


class TestRenderTwiml:
    def test_marker_on_text_only(self):
        reply = Reply.text("Hello").add_image("https://images.test/a.jpg")

        xml = render_twiml(reply, marker="🤖")

        assert "<Message>🤖 Hello</Message>" in xml
        assert "<Media>https://images.test/a.jpg</Media>" in xml
        assert "🤖 https://" not in xml

    def test_segments_keep_order(self):
        xml = render_twiml(Reply.text("first", "second"), marker="*")
        assert xml.index("* first") < xml.index("* second")
        assert xml.count("<Message>") == 2

    def test_no_marker(self):
        assert "<Message>plain</Message>" in render_twiml(Reply.text("plain"), marker="")


class TestWhatsAppWebhook:
    """Tests for POST /whatsapp."""

    def test_browse_returns_twiml(self, client):
        response = send(client, "Browse")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/xml")
        assert "<Response>" in response.text
        assert "Kubota BX2380 - $10000" in response.text

    def test_view_includes_media(self, client):
        response = send(client, "view 2")

        assert response.status_code == 200
        assert "<Media>https://images.test/kubota-bx2380.jpg</Media>" in response.text
        assert response.text.count("<Message>") == 3

    def test_negotiation_flow(self, client):
        send(client, "negotiate 2")
        send(client, "Jane Doe")

        response = send(client, "offer 8000")
        assert "minimum of $9000.00" in response.text

        response = send(client, "offer 9500")
        assert "Deal accepted, Jane Doe" in response.text

    def test_missing_body_is_unknown(self, client):
        response = client.post("/whatsapp", data={"From": USER})

        assert response.status_code == 200
        assert "Type 'Start' to begin" in response.text

    def test_missing_sender_is_rejected(self, client):
        response = client.post("/whatsapp", data={"Body": "browse"})
        assert response.status_code == 422

    def test_store_failure_returns_503(self, catalog):
        class BrokenStore(InMemorySessionStore):
            async def get(self, user_id):
                raise StoreUnavailableError("get_session", RuntimeError("down"))

        set_dispatcher(Dispatcher(catalog, BrokenStore()))
        try:
            response = send(TestClient(create_test_app()), "browse")
        finally:
            set_dispatcher(None)

        assert response.status_code == 503


class TestSessionRoutes:
    """Tests for /api/sessions."""

    def test_get_unknown_session(self, client):
        response = client.get(f"/api/sessions/{USER}")
        assert response.status_code == 404

    def test_get_session_after_negotiate(self, client):
        send(client, "negotiate 2")

        response = client.get(f"/api/sessions/{USER}")

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == USER
        assert data["state"] == "collecting_name"
        assert data["negotiation"] == {"item_id": 2, "stage": "collecting_name"}

    def test_delete_session(self, client):
        send(client, "negotiate 2")

        assert client.delete(f"/api/sessions/{USER}").status_code == 200
        assert client.get(f"/api/sessions/{USER}").status_code == 404
        assert client.delete(f"/api/sessions/{USER}").status_code == 404
