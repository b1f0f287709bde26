# Copyright (c) 2025 sprowii
"""Parsing of moderation commands.

Grammar:
- /warn [reason]               in reply to the offender's message
- /bang [reason]               in reply to the offender's message
- /bang @<user_id> <reason>    without a reply
- /pardon @username
- /crimes @username

Targets are resolved here, so the controller only ever sees a Target with
its mode already decided.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from marksman.moderation.errors import UsageError
from marksman.moderation.models import Message, ReplyContext

DEFAULT_REASON = "No reason provided"

WARN_USAGE = "Usage: Please reply to the user's message with /warn reason"
BANG_USAGE = (
    "Usage: Please reply to the user's message with /bang reason, "
    "or use /bang @<user_id> reason"
)
PARDON_USAGE = "Usage: /pardon @username"
CRIMES_USAGE = "Usage: /crimes @username"

_USER_ID_RE = re.compile(r"[0-9]+")


class CommandKind(str, Enum):
    WARN = "warn"
    BANG = "bang"
    PARDON = "pardon"
    CRIMES = "crimes"


class TargetMode(str, Enum):
    """How the target user was identified."""
    BY_REPLY = "reply"
    BY_EXPLICIT_ID = "explicit_id"
    # literal @username, never resolved to an account
    BY_HANDLE = "handle"


@dataclass(frozen=True)
class Target:
    mode: TargetMode
    handle: str
    user_id: Optional[int] = None
    # replied-to message, set for BY_REPLY only
    message_id: Optional[int] = None

    @classmethod
    def by_reply(cls, reply: ReplyContext) -> "Target":
        sender = reply.sender
        return cls(
            mode=TargetMode.BY_REPLY,
            handle=sender.username or synthetic_handle(sender.id),
            user_id=sender.id,
            message_id=reply.message_id,
        )

    @classmethod
    def by_explicit_id(cls, user_id: int) -> "Target":
        return cls(
            mode=TargetMode.BY_EXPLICIT_ID,
            handle=synthetic_handle(user_id),
            user_id=user_id,
        )

    @classmethod
    def by_handle(cls, handle: str) -> "Target":
        return cls(mode=TargetMode.BY_HANDLE, handle=handle)

    @property
    def is_resolved(self) -> bool:
        return self.user_id is not None


@dataclass(frozen=True)
class ParsedCommand:
    kind: CommandKind
    target: Target
    reason: str = DEFAULT_REASON


def synthetic_handle(user_id: int) -> str:
    return f"user_{user_id}"


def command_kind(name: str) -> Optional[CommandKind]:
    """Map a command name to its kind, None for commands we don't handle."""
    try:
        return CommandKind(name)
    except ValueError:
        return None


def _reason_after_command(text: str) -> str:
    parts = text.split(maxsplit=1)
    if len(parts) < 2 or not parts[1].strip():
        return DEFAULT_REASON
    return parts[1].strip()


def _parse_user_id(token: str) -> Optional[int]:
    raw = token[1:] if token.startswith("@") else token
    if not _USER_ID_RE.fullmatch(raw):
        return None
    return int(raw)


def parse_warn(message: Message) -> ParsedCommand:
    if message.reply_to is None:
        raise UsageError(WARN_USAGE)
    return ParsedCommand(
        kind=CommandKind.WARN,
        target=Target.by_reply(message.reply_to),
        reason=_reason_after_command(message.text),
    )


def parse_bang(message: Message) -> ParsedCommand:
    if message.reply_to is not None:
        return ParsedCommand(
            kind=CommandKind.BANG,
            target=Target.by_reply(message.reply_to),
            reason=_reason_after_command(message.text),
        )

    parts = message.text.split(maxsplit=2)
    if len(parts) != 3 or not parts[2].strip():
        raise UsageError(BANG_USAGE)

    user_id = _parse_user_id(parts[1])
    if user_id is None:
        raise UsageError(f"Invalid user ID: {parts[1]}. Usage: /bang @<user_id> reason")

    return ParsedCommand(
        kind=CommandKind.BANG,
        target=Target.by_explicit_id(user_id),
        reason=parts[2].strip(),
    )


def _parse_handle_argument(message: Message, kind: CommandKind, usage: str) -> ParsedCommand:
    parts = message.text.split()
    if len(parts) < 2:
        raise UsageError(usage)

    handle = parts[1][1:] if parts[1].startswith("@") else parts[1]
    if not handle:
        raise UsageError(usage)

    if _USER_ID_RE.fullmatch(handle):
        target = Target.by_explicit_id(int(handle))
    else:
        target = Target.by_handle(handle)
    return ParsedCommand(kind=kind, target=target)


def parse_pardon(message: Message) -> ParsedCommand:
    return _parse_handle_argument(message, CommandKind.PARDON, PARDON_USAGE)


def parse_crimes(message: Message) -> ParsedCommand:
    return _parse_handle_argument(message, CommandKind.CRIMES, CRIMES_USAGE)


_PARSERS = {
    CommandKind.WARN: parse_warn,
    CommandKind.BANG: parse_bang,
    CommandKind.PARDON: parse_pardon,
    CommandKind.CRIMES: parse_crimes,
}


def parse_command(kind: CommandKind, message: Message) -> ParsedCommand:
    """Parse a message as a command of the given kind.

    Raises:
        UsageError: the invocation is malformed; its message is the reply
            to send back.
    """
    return _PARSERS[kind](message)
