# Copyright (c) 2025 sprowii
"""Exceptions raised by the moderation core and its adapters."""


class ModerationError(Exception):
    """Base class for moderation failures."""


class UsageError(ModerationError):
    """Malformed command invocation.

    The message is user-facing and is sent back to the chat as is.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthorizationError(ModerationError):
    """The chat administrator list could not be fetched."""


class StorageError(ModerationError):
    """A warning store operation failed."""


class ModerationActionError(ModerationError):
    """A platform action (send, delete, ban, admin lookup) failed."""
