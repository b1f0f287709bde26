# Copyright (c) 2025 sprouee
"""Security-related helpers.

Modules:
- data_protection: pseudonymization of ids in logs
"""
from marksman.security.data_protection import (
    pseudonymize_id,
    pseudonymize_chat_id,
    safe_log_action,
)

__all__ = [
    "pseudonymize_id",
    "pseudonymize_chat_id",
    "safe_log_action",
]
