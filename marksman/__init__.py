# Copyright (c) 2025 sprowii
"""Marksman: admin-only moderation bot for Telegram group chats."""
