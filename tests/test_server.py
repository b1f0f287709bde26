"""
Tests for the webhook endpoint
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from marksman.moderation.errors import AuthorizationError, StorageError
from marksman.web.server import SECRET_TOKEN_HEADER, create_app

from conftest import InMemoryWarningStore

UPDATE_PAYLOAD = {
    "update_id": 10,
    "message": {
        "message_id": 5,
        "date": 1700000000,
        "chat": {"id": -100, "type": "supergroup", "title": "Test group"},
        "from": {"id": 1, "is_bot": False, "first_name": "Admin"},
        "text": "/bang @42 spam",
    },
}


@pytest.fixture
def fake_controller():
    controller = MagicMock()
    controller.handle_update = AsyncMock()
    return controller


@pytest.fixture
def health_store():
    return InMemoryWarningStore()


@pytest.fixture
def make_client(fake_controller, health_store, event_loop_thread):
    def _make(secret_token=None):
        app = create_app(
            fake_controller,
            None,
            event_loop_thread,
            health_store,
            secret_token=secret_token,
            request_timeout=5,
        )
        return app.test_client()
    return _make


def test_valid_update_is_handled(make_client, fake_controller):
    response = make_client().post("/", json=UPDATE_PAYLOAD)

    assert response.status_code == 200
    assert response.data == b""
    update = fake_controller.handle_update.await_args.args[0]
    assert update.update_id == 10
    assert update.message.text == "/bang @42 spam"
    assert update.message.chat.id == -100


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b""])
def test_undecodable_body_is_rejected(make_client, fake_controller, body):
    response = make_client().post("/", data=body, content_type="application/json")

    assert response.status_code == 400
    fake_controller.handle_update.assert_not_awaited()


def test_update_without_update_id_is_rejected(make_client, fake_controller):
    response = make_client().post("/", json={"message": UPDATE_PAYLOAD["message"]})

    assert response.status_code == 400
    fake_controller.handle_update.assert_not_awaited()


@pytest.mark.parametrize("error", [AuthorizationError("admins"), StorageError("redis down")])
def test_handling_failure_returns_500(make_client, fake_controller, error):
    fake_controller.handle_update.side_effect = error

    response = make_client().post("/", json=UPDATE_PAYLOAD)

    assert response.status_code == 500


def test_secret_token_is_checked(make_client, fake_controller):
    client = make_client(secret_token="s3cret")

    rejected = client.post("/", json=UPDATE_PAYLOAD, headers={SECRET_TOKEN_HEADER: "wrong"})
    accepted = client.post("/", json=UPDATE_PAYLOAD, headers={SECRET_TOKEN_HEADER: "s3cret"})

    assert rejected.status_code == 403
    assert accepted.status_code == 200
    fake_controller.handle_update.assert_awaited_once()


def test_healthz(make_client, health_store):
    client = make_client()

    assert client.get("/healthz").get_json() == {"status": "ok"}

    health_store.fail = "connection refused"
    response = client.get("/healthz")
    assert response.status_code == 503
    assert response.get_json()["status"] == "unavailable"
