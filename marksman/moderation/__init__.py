# Copyright (c) 2025 sprowii
"""Moderation module for Marksman.

Components:
- ModerationController: single entry point for inbound updates
- AdminChecker: admin permission check for commands
- commands: parsing of /warn, /bang, /pardon and /crimes
- WarnSystem: warnings with automatic ban escalation
- WarningStore / RedisWarningStore: warning persistence
- ModerationClient / TelegramModerationClient: chat platform operations
"""

from marksman.moderation.controller import ModerationController
from marksman.moderation.client import (
    ModerationClient,
    TelegramModerationClient,
    update_from_telegram,
)
from marksman.moderation.commands import (
    CommandKind,
    ParsedCommand,
    Target,
    TargetMode,
    parse_command,
)
from marksman.moderation.errors import (
    AuthorizationError,
    ModerationActionError,
    ModerationError,
    StorageError,
    UsageError,
)
from marksman.moderation.models import AdminInfo, ChatInfo, Message, ReplyContext, Sender, Update, Warn
from marksman.moderation.permissions import AdminChecker
from marksman.moderation.storage import RedisWarningStore, WarningStore
from marksman.moderation.warns import WarnDecision, WarnEscalation, WarnSystem

__all__ = [
    # Controller
    "ModerationController",
    # Client
    "ModerationClient",
    "TelegramModerationClient",
    "update_from_telegram",
    # Commands
    "CommandKind",
    "ParsedCommand",
    "Target",
    "TargetMode",
    "parse_command",
    # Errors
    "AuthorizationError",
    "ModerationActionError",
    "ModerationError",
    "StorageError",
    "UsageError",
    # Models
    "AdminInfo",
    "ChatInfo",
    "Message",
    "ReplyContext",
    "Sender",
    "Update",
    "Warn",
    # Permissions
    "AdminChecker",
    # Storage
    "RedisWarningStore",
    "WarningStore",
    # Warns
    "WarnDecision",
    "WarnEscalation",
    "WarnSystem",
]
