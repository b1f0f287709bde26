"""
Tests for the admin permission check
"""
import pytest

from marksman.moderation.errors import AuthorizationError, ModerationActionError
from marksman.moderation.models import AdminInfo
from marksman.moderation.permissions import AdminChecker

from conftest import ADMIN_ID, make_message


@pytest.mark.asyncio
async def test_private_chat_is_always_denied(client):
    checker = AdminChecker(client)
    client.list_administrators.return_value = [AdminInfo(user_id=ADMIN_ID, is_creator=True)]

    allowed = await checker.is_authorized(make_message("/warn", private=True))

    assert allowed is False
    client.list_administrators.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "admin,expected",
    [
        (AdminInfo(user_id=ADMIN_ID, can_restrict_members=True), True),
        (AdminInfo(user_id=ADMIN_ID, is_creator=True), True),
        (AdminInfo(user_id=ADMIN_ID), False),
        (AdminInfo(user_id=999, can_restrict_members=True, is_creator=True), False),
    ],
)
async def test_admin_rights_decide(client, admin, expected):
    client.list_administrators.return_value = [admin]
    checker = AdminChecker(client)

    assert await checker.is_authorized(make_message("/warn")) is expected


@pytest.mark.asyncio
async def test_admin_list_is_fetched_every_time(client):
    checker = AdminChecker(client)
    message = make_message("/warn")

    await checker.is_authorized(message)
    await checker.is_authorized(message)

    assert client.list_administrators.await_count == 2


@pytest.mark.asyncio
async def test_lookup_failure_raises_instead_of_allowing(client):
    client.list_administrators.side_effect = ModerationActionError("Forbidden")
    checker = AdminChecker(client)

    with pytest.raises(AuthorizationError):
        await checker.is_authorized(make_message("/warn"))
