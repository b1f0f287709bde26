import asyncio
import threading
from collections import defaultdict
from typing import Dict, List, Optional, Tuple
from unittest.mock import create_autospec

import pytest

from marksman.moderation.client import ModerationClient
from marksman.moderation.controller import ModerationController
from marksman.moderation.errors import StorageError
from marksman.moderation.models import (
    AdminInfo,
    ChatInfo,
    Message,
    ReplyContext,
    Sender,
    Update,
    Warn,
)
from marksman.moderation.storage import WarningStore

GROUP_CHAT_ID = -1001234567890
ADMIN_ID = 111
OFFENDER_ID = 222
OFFENDER_USERNAME = "spammer"


class InMemoryWarningStore(WarningStore):
    """Warning store keeping rows in a dict; `fail` makes every call raise."""

    def __init__(self):
        self.rows: Dict[Tuple[str, str], List[Warn]] = defaultdict(list)
        self.fail: Optional[str] = None
        self.create_calls = 0

    def _check(self):
        if self.fail:
            raise StorageError(self.fail)

    def seed(self, user_id: int, chat_id: int, count: int) -> None:
        for i in range(count):
            self.rows[(str(user_id), str(chat_id))].append(
                Warn.create(str(user_id), str(chat_id), f"old reason {i + 1}")
            )

    async def create(self, user_id: str, chat_id: str, reason: str) -> str:
        self.create_calls += 1
        self._check()
        warn = Warn.create(user_id, chat_id, reason)
        self.rows[(user_id, chat_id)].append(warn)
        return warn.id

    async def list_by_user_and_chat(self, user_id: str, chat_id: str) -> List[Warn]:
        self._check()
        return list(self.rows.get((user_id, chat_id), []))

    async def delete_all_by_user_and_chat(self, user_id: str, chat_id: str) -> int:
        self._check()
        return len(self.rows.pop((user_id, chat_id), []))

    async def ping(self) -> None:
        self._check()


def make_message(
    text: str,
    sender_id: int = ADMIN_ID,
    chat_id: int = GROUP_CHAT_ID,
    private: bool = False,
    reply_to_id: Optional[int] = None,
    reply_to_username: Optional[str] = OFFENDER_USERNAME,
    reply_message_id: int = 50,
) -> Message:
    reply_to = None
    if reply_to_id is not None:
        reply_to = ReplyContext(
            message_id=reply_message_id,
            sender=Sender(id=reply_to_id, username=reply_to_username),
        )
    return Message(
        message_id=100,
        sender=Sender(id=sender_id, username="admin"),
        chat=ChatInfo(id=chat_id, is_private=private),
        text=text,
        reply_to=reply_to,
    )


def make_update(text: str, **kwargs) -> Update:
    return Update(update_id=1, message=make_message(text, **kwargs))


@pytest.fixture
def client():
    """ModerationClient mock; ADMIN_ID can restrict members."""
    mock = create_autospec(ModerationClient, instance=True)
    mock.list_administrators.return_value = [
        AdminInfo(user_id=ADMIN_ID, can_restrict_members=True),
    ]
    return mock


@pytest.fixture
def store():
    return InMemoryWarningStore()


@pytest.fixture
def controller(client, store):
    return ModerationController(client, store)


@pytest.fixture
def event_loop_thread():
    """Event loop running in a background thread, as in production."""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    yield loop
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.close()


def sent_texts(client) -> List[str]:
    return [c.args[1] for c in client.send_message.await_args_list]
