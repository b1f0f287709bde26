# Copyright (c) 2025 sprowii
import asyncio
import weakref
from typing import Awaitable, Callable, Dict, Tuple

from marksman.logging_config import log
from marksman.moderation.client import ModerationClient
from marksman.moderation.commands import (
    CommandKind,
    ParsedCommand,
    TargetMode,
    command_kind,
    parse_command,
)
from marksman.moderation.errors import ModerationActionError, StorageError, UsageError
from marksman.moderation.models import Message, Update
from marksman.moderation.permissions import AdminChecker
from marksman.moderation.storage import WarningStore
from marksman.moderation.warns import (
    DEFAULT_BAN_THRESHOLD,
    WarnEscalation,
    WarnSystem,
    format_warns_list,
)
from marksman.security.data_protection import pseudonymize_chat_id, safe_log_action

CommandHandler = Callable[[Message, ParsedCommand], Awaitable[None]]


class ModerationController:
    """Central entry point for moderation updates.

    Ties together admin checks, command parsing, the warn system and the
    platform actions. One instance is created at startup and shared by all
    requests; it keeps no per-update state.
    """

    def __init__(
        self,
        client: ModerationClient,
        store: WarningStore,
        ban_threshold: int = DEFAULT_BAN_THRESHOLD
    ):
        """
        Args:
            client: Chat platform operations
            store: Warning storage
            ban_threshold: The warning with this ordinal bans the user
        """
        self.client = client
        self.admin_checker = AdminChecker(client)
        self.warn_system = WarnSystem(store, ban_threshold)
        self._handlers: Dict[CommandKind, CommandHandler] = {
            CommandKind.WARN: self._handle_warn,
            CommandKind.BANG: self._handle_bang,
            CommandKind.PARDON: self._handle_pardon,
            CommandKind.CRIMES: self._handle_crimes,
        }
        # serializes count-then-write sequences for one (user, chat) in this process
        self._pair_locks: "weakref.WeakValueDictionary[Tuple[int, int], asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    @property
    def ban_threshold(self) -> int:
        return self.warn_system.ban_threshold

    def _pair_lock(self, user_id: int, chat_id: int) -> asyncio.Lock:
        key = (user_id, chat_id)
        lock = self._pair_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._pair_locks[key] = lock
        return lock

    # ========================================================================
    # DISPATCH
    # ========================================================================

    async def handle_update(self, update: Update) -> None:
        """Process one inbound update.

        Non-commands, unauthorized senders and unknown commands are ignored
        silently. Malformed commands get a usage reply.

        Raises:
            AuthorizationError: the admin list could not be fetched
            StorageError: a warning store call failed (already reported to the chat)
            ModerationActionError: a ban or a reply could not be sent
        """
        message = update.message
        if message is None or not message.is_command:
            return

        if not await self.admin_checker.is_authorized(message):
            return

        kind = command_kind(message.command())
        if kind is None:
            return

        try:
            command = parse_command(kind, message)
        except UsageError as exc:
            await self.client.send_message(message.chat.id, exc.message)
            return

        await self._handlers[kind](message, command)

    async def _report_failure(self, chat_id: int, text: str) -> None:
        # the failure being reported is what propagates; a failed report is only logged
        try:
            await self.client.send_message(chat_id, text)
        except ModerationActionError as exc:
            log.warning(f"Failed to report error to chat {pseudonymize_chat_id(chat_id)}: {exc}")

    async def _ban(self, message: Message, command: ParsedCommand) -> None:
        chat_id = message.chat.id
        try:
            await self.client.ban_member(chat_id, command.target.user_id, revoke_messages=True)
        except ModerationActionError as exc:
            await self._report_failure(chat_id, f"Failed to ban user: {exc}")
            raise

        log.info(safe_log_action(
            "ban",
            command.target.user_id,
            chat_id,
            admin_id=message.sender.id,
            reason=command.reason
        ))

    # ========================================================================
    # COMMANDS
    # ========================================================================

    async def _handle_warn(self, message: Message, command: ParsedCommand) -> None:
        chat_id = message.chat.id
        target = command.target

        lock = self._pair_lock(target.user_id, chat_id)
        async with lock:
            try:
                decision = await self.warn_system.check(target.user_id, chat_id)
            except StorageError as exc:
                await self._report_failure(chat_id, f"Failed to get warnings: {exc}")
                raise

            if decision.escalation is WarnEscalation.BAN:
                await self._ban(message, command)
                await self.client.send_message(
                    chat_id,
                    f"User @{target.handle} has been banned due to reaching "
                    f"{self.ban_threshold} warnings. Reason: {command.reason}"
                )
                return

            try:
                await self.warn_system.record(target.user_id, chat_id, command.reason)
            except StorageError as exc:
                await self._report_failure(chat_id, f"Failed to create warning: {exc}")
                raise

        log.info(safe_log_action(
            "warn",
            target.user_id,
            chat_id,
            admin_id=message.sender.id,
            reason=command.reason
        ))
        await self.client.send_message(
            chat_id,
            f"Warning {decision.warn_number}/{self.ban_threshold} "
            f"for @{target.handle}: {command.reason}"
        )

    async def _handle_bang(self, message: Message, command: ParsedCommand) -> None:
        chat_id = message.chat.id
        target = command.target

        if target.mode is TargetMode.BY_REPLY and target.message_id is not None:
            try:
                await self.client.delete_message(chat_id, target.message_id)
            except ModerationActionError as exc:
                # already gone, or the bot lacks delete rights
                log.warning(f"Could not delete message {target.message_id}: {exc}")

        await self._ban(message, command)
        await self.client.send_message(
            chat_id,
            f"User @{target.handle} has been banned. Reason: {command.reason}"
        )

    async def _handle_pardon(self, message: Message, command: ParsedCommand) -> None:
        chat_id = message.chat.id
        target = command.target

        if not target.is_resolved:
            # usernames are not resolved to accounts, nothing to clear
            await self.client.send_message(chat_id, f"Pardoned @{target.handle}")
            return

        lock = self._pair_lock(target.user_id, chat_id)
        async with lock:
            try:
                count = await self.warn_system.clear_warns(target.user_id, chat_id)
            except StorageError as exc:
                await self._report_failure(chat_id, f"Failed to clear warnings: {exc}")
                raise

        log.info(safe_log_action(
            "pardon",
            target.user_id,
            chat_id,
            admin_id=message.sender.id,
            reason=f"cleared {count} warnings"
        ))
        await self.client.send_message(
            chat_id,
            f"Pardoned @{target.handle}. Warnings removed: {count}"
        )

    async def _handle_crimes(self, message: Message, command: ParsedCommand) -> None:
        chat_id = message.chat.id
        target = command.target

        if not target.is_resolved:
            await self.client.send_message(chat_id, f"Crimes for @{target.handle}: ...")
            return

        try:
            warns = await self.warn_system.get_warns(target.user_id, chat_id)
        except StorageError as exc:
            await self._report_failure(chat_id, f"Failed to get warnings: {exc}")
            raise

        await self.client.send_message(chat_id, format_warns_list(warns, target.handle))
