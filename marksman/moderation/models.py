# Copyright (c) 2025 sprowii
"""Data models for the moderation core."""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import time
import uuid


@dataclass(frozen=True)
class Sender:
    """Author of a message."""
    id: int
    username: Optional[str] = None


@dataclass(frozen=True)
class ChatInfo:
    id: int
    is_private: bool = False


@dataclass(frozen=True)
class ReplyContext:
    """The message a command replies to."""
    message_id: int
    sender: Sender


@dataclass(frozen=True)
class Message:
    """Inbound message, already decoded from the platform payload."""
    message_id: int
    sender: Sender
    chat: ChatInfo
    text: str = ""
    reply_to: Optional[ReplyContext] = None

    @property
    def is_command(self) -> bool:
        return self.text.startswith("/") and len(self.text) > 1

    def command(self) -> str:
        """Command name without the leading slash and @botname suffix.

        Returns an empty string for non-command messages.
        """
        if not self.is_command:
            return ""
        token = self.text.split(maxsplit=1)[0][1:]
        return token.split("@", 1)[0]


@dataclass(frozen=True)
class Update:
    """One inbound event. Only message updates carry a message."""
    update_id: int
    message: Optional[Message] = None


@dataclass(frozen=True)
class AdminInfo:
    """Administrator entry of a chat, as far as moderation rights go."""
    user_id: int
    can_restrict_members: bool = False
    is_creator: bool = False


@dataclass
class Warn:
    """Warning issued to a user in a chat.

    Ids are kept in string form, matching the stored rows.
    """
    id: str
    user_id: str
    chat_id: str
    reason: str
    created_at: Optional[float] = None

    @classmethod
    def create(cls, user_id: str, chat_id: str, reason: str) -> "Warn":
        """Create a new warning with a generated id and timestamp."""
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            chat_id=chat_id,
            reason=reason,
            created_at=time.time()
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Warn":
        """Build a warning from a stored row; created_at may be missing."""
        created_at = row.get("created_at")
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            chat_id=str(row["chat_id"]),
            reason=str(row.get("reason", "")),
            created_at=float(created_at) if created_at is not None else None
        )
