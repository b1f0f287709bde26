# Copyright (c) 2025 sprouee
"""Warning system with automatic ban escalation.

- Record a warning with reason and timestamp
- Ban the user instead of recording the warning that reaches the threshold
- Display all warnings for a user
- Clear all warnings for a user
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List

from marksman.logging_config import log
from marksman.moderation.models import Warn
from marksman.moderation.storage import WarningStore
from marksman.security.data_protection import pseudonymize_chat_id, pseudonymize_id

DEFAULT_BAN_THRESHOLD = 3


class WarnEscalation(Enum):
    """What a new warning turns into."""
    NONE = "none"
    BAN = "ban"


@dataclass
class WarnDecision:
    """Outcome of checking a new warning against the existing ones.

    Attributes:
        prior_warns: Number of warnings already recorded for the pair
        escalation: NONE to record the warning, BAN to ban instead
    """
    prior_warns: int
    escalation: WarnEscalation

    @property
    def warn_number(self) -> int:
        """Ordinal of the warning being issued."""
        return self.prior_warns + 1


class WarnSystem:
    """Warning bookkeeping on top of a WarningStore."""

    def __init__(self, store: WarningStore, ban_threshold: int = DEFAULT_BAN_THRESHOLD):
        """
        Args:
            store: Warning storage
            ban_threshold: The warning with this ordinal bans the user
        """
        if ban_threshold < 1:
            raise ValueError(f"ban_threshold must be at least 1, got {ban_threshold}")
        self.store = store
        self.ban_threshold = ban_threshold

    def determine_escalation(self, prior_warns: int) -> WarnEscalation:
        """Decide whether the next warning bans the user.

        The check runs before anything is written, so the decision takes a
        single read. The warning that reaches the threshold is never stored.
        """
        if prior_warns + 1 >= self.ban_threshold:
            return WarnEscalation.BAN
        return WarnEscalation.NONE

    async def check(self, user_id: int, chat_id: int) -> WarnDecision:
        warns = await self.store.list_by_user_and_chat(str(user_id), str(chat_id))
        return WarnDecision(
            prior_warns=len(warns),
            escalation=self.determine_escalation(len(warns)),
        )

    async def record(self, user_id: int, chat_id: int, reason: str) -> str:
        warn_id = await self.store.create(str(user_id), str(chat_id), reason)
        log.info(
            f"Warn added: chat={pseudonymize_chat_id(chat_id)}, "
            f"user={pseudonymize_id(user_id)}, id={warn_id}"
        )
        return warn_id

    async def get_warns(self, user_id: int, chat_id: int) -> List[Warn]:
        """All warnings for the user, oldest first."""
        return await self.store.list_by_user_and_chat(str(user_id), str(chat_id))

    async def clear_warns(self, user_id: int, chat_id: int) -> int:
        """Remove all warnings for the user. Returns the number removed."""
        count = await self.store.delete_all_by_user_and_chat(str(user_id), str(chat_id))
        log.info(
            f"Cleared {count} warns for user {pseudonymize_id(user_id)} "
            f"in chat {pseudonymize_chat_id(chat_id)}"
        )
        return count


def format_warn_message(warn: Warn) -> str:
    """Format a single warning as "DD.MM.YYYY HH:MM | reason"."""
    parts = []
    if warn.created_at is not None:
        parts.append(datetime.fromtimestamp(warn.created_at).strftime("%d.%m.%Y %H:%M"))
    parts.append(warn.reason or "No reason provided")
    return " | ".join(parts)


def format_warns_list(warns: List[Warn], handle: str) -> str:
    """Format the warnings of a user for the /crimes reply."""
    if not warns:
        return f"No warnings for @{handle}"

    lines = [f"Crimes for @{handle} ({len(warns)}):"]
    for i, warn in enumerate(warns, 1):
        lines.append(f"{i}. {format_warn_message(warn)}")
    return "\n".join(lines)
