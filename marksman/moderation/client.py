# Copyright (c) 2025 sprowii
"""Chat platform operations needed by the moderation core.

ModerationClient is what the controller talks to; TelegramModerationClient
implements it on top of python-telegram-bot. update_from_telegram converts
decoded Bot API updates into the platform-neutral models.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

import telegram
from telegram import Bot, ChatMember
from telegram.constants import ChatType
from telegram.error import TelegramError

from marksman.logging_config import log
from marksman.moderation.errors import ModerationActionError
from marksman.moderation.models import (
    AdminInfo,
    ChatInfo,
    Message,
    ReplyContext,
    Sender,
    Update,
)
from marksman.security.data_protection import pseudonymize_chat_id, pseudonymize_id


class ModerationClient(ABC):
    """Admin lookup, messaging and member management for a chat."""

    @abstractmethod
    async def list_administrators(self, chat_id: int) -> List[AdminInfo]:
        """Return the administrators of a chat."""

    @abstractmethod
    async def send_message(self, chat_id: int, text: str) -> None:
        """Send a plain text message to a chat."""

    @abstractmethod
    async def delete_message(self, chat_id: int, message_id: int) -> None:
        """Delete a message from a chat."""

    @abstractmethod
    async def ban_member(self, chat_id: int, user_id: int, revoke_messages: bool = True) -> None:
        """Ban a member from a chat."""


class TelegramModerationClient(ModerationClient):
    """ModerationClient backed by a telegram.Bot.

    Every TelegramError is re-raised as ModerationActionError.
    """

    def __init__(self, bot: Bot):
        self.bot = bot

    async def list_administrators(self, chat_id: int) -> List[AdminInfo]:
        try:
            members = await self.bot.get_chat_administrators(chat_id=chat_id)
        except TelegramError as exc:
            raise ModerationActionError(f"failed to get chat administrators: {exc}") from exc

        return [
            AdminInfo(
                user_id=member.user.id,
                # only ChatMemberAdministrator carries the restrict right
                can_restrict_members=bool(getattr(member, "can_restrict_members", False)),
                is_creator=member.status == ChatMember.OWNER,
            )
            for member in members
        ]

    async def send_message(self, chat_id: int, text: str) -> None:
        try:
            await self.bot.send_message(chat_id=chat_id, text=text)
        except TelegramError as exc:
            raise ModerationActionError(f"failed to send message: {exc}") from exc

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        try:
            await self.bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramError as exc:
            raise ModerationActionError(f"failed to delete message: {exc}") from exc

    async def ban_member(self, chat_id: int, user_id: int, revoke_messages: bool = True) -> None:
        try:
            await self.bot.ban_chat_member(
                chat_id=chat_id,
                user_id=user_id,
                revoke_messages=revoke_messages
            )
        except TelegramError as exc:
            log.error(
                f"Failed to ban user {pseudonymize_id(user_id)} "
                f"in chat {pseudonymize_chat_id(chat_id)}: {exc}"
            )
            raise ModerationActionError(str(exc)) from exc


def _sender(user: Optional[telegram.User]) -> Optional[Sender]:
    if user is None:
        return None
    return Sender(id=user.id, username=user.username)


def update_from_telegram(update: telegram.Update) -> Update:
    """Convert a decoded Bot API update into an Update.

    Updates without a new message, or whose message has no author, come
    back with message=None and are ignored downstream.
    """
    tg_message = update.message
    if tg_message is None or tg_message.from_user is None:
        return Update(update_id=update.update_id)

    reply_to = None
    replied = tg_message.reply_to_message
    if replied is not None and replied.from_user is not None:
        reply_to = ReplyContext(message_id=replied.message_id, sender=_sender(replied.from_user))

    message = Message(
        message_id=tg_message.message_id,
        sender=_sender(tg_message.from_user),
        chat=ChatInfo(
            id=tg_message.chat.id,
            is_private=tg_message.chat.type == ChatType.PRIVATE
        ),
        text=tg_message.text or "",
        reply_to=reply_to,
    )
    return Update(update_id=update.update_id, message=message)
