# Copyright (c) 2025 sprowii
"""Pseudonymization helpers for application logs.

Moderation logs never carry raw Telegram ids: user and chat ids are replaced
with salted HMAC-SHA256 pseudonyms, and @handles inside free-text reasons are
masked. The same id always maps to the same pseudonym while DATA_HASH_SALT
stays the same, so log lines about one user can still be correlated.
"""
import hashlib
import hmac
import os
import re
import secrets
from typing import Optional, Union

from marksman.logging_config import log


_HASH_SALT = os.getenv("DATA_HASH_SALT")
if not _HASH_SALT:
    log.warning(
        "DATA_HASH_SALT is not set, generating a temporary salt. "
        "Log pseudonyms will change after every restart."
    )
    _HASH_SALT = secrets.token_hex(32)

_HANDLE_RE = re.compile(r"@\w+")


def pseudonymize_id(user_id: Union[int, str], context: str = "default") -> str:
    """Map an id to a stable "u_<hash[:16]>" pseudonym.

    Different contexts produce different pseudonyms for the same id.
    """
    message = f"{context}:{user_id}".encode()
    h = hmac.new(_HASH_SALT.encode(), message, hashlib.sha256)
    return f"u_{h.hexdigest()[:16]}"


def pseudonymize_chat_id(chat_id: Union[int, str]) -> str:
    return pseudonymize_id(chat_id, context="chat")


def safe_log_action(
    action_type: str,
    target_user_id: Union[int, str],
    chat_id: Union[int, str],
    admin_id: Optional[Union[int, str]] = None,
    reason: Optional[str] = None
) -> str:
    """Build a log line for a moderation action without raw ids."""
    target = pseudonymize_id(target_user_id)
    chat = pseudonymize_chat_id(chat_id)
    admin = pseudonymize_id(admin_id) if admin_id else "auto"

    safe_reason = ""
    if reason:
        safe_reason = _HANDLE_RE.sub("@***", reason)[:50]

    return f"[{action_type}] target={target} chat={chat} by={admin} reason={safe_reason}"
