# Copyright (c) 2025 sprowii
"""Admin permission check for moderation commands.

Non-admin users cannot use moderation commands. The administrator list is
fetched on every check; results are not cached between updates.
"""
from marksman.logging_config import log
from marksman.moderation.client import ModerationClient
from marksman.moderation.errors import AuthorizationError, ModerationActionError
from marksman.moderation.models import Message
from marksman.security.data_protection import pseudonymize_chat_id, pseudonymize_id


class AdminChecker:
    """Decides whether the sender of a message may issue moderation commands."""

    def __init__(self, client: ModerationClient):
        self.client = client

    async def is_authorized(self, message: Message) -> bool:
        """Check that the sender can restrict members in this chat.

        Commands work in groups only. A sender is allowed when they are an
        administrator with can_restrict_members, or the chat creator.

        Raises:
            AuthorizationError: the administrator list could not be fetched.
        """
        if message.chat.is_private:
            return False

        try:
            admins = await self.client.list_administrators(message.chat.id)
        except ModerationActionError as exc:
            log.error(
                f"Admin check failed for {pseudonymize_id(message.sender.id)} "
                f"in chat {pseudonymize_chat_id(message.chat.id)}: {exc}"
            )
            raise AuthorizationError(str(exc)) from exc

        for admin in admins:
            if admin.user_id != message.sender.id:
                continue
            if admin.can_restrict_members or admin.is_creator:
                return True

        return False
