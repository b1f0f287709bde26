# Copyright (c) 2025 sprouee
"""Warning storage in Redis.

Keys:
- {namespace}warns:{chat_id}:{user_id} - list of JSON warning rows, oldest first

Each row holds the columns id, user_id, chat_id, reason and created_at.
"""
import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Callable, List, TypeVar

import redis

from marksman.logging_config import log
from marksman.moderation.errors import StorageError
from marksman.moderation.models import Warn

T = TypeVar("T")

WARNS_PREFIX = "warns:"


class WarningStore(ABC):
    """Persistence for warning records, addressed by (user, chat)."""

    @abstractmethod
    async def create(self, user_id: str, chat_id: str, reason: str) -> str:
        """Insert a new warning and return its generated id."""

    @abstractmethod
    async def list_by_user_and_chat(self, user_id: str, chat_id: str) -> List[Warn]:
        """Return all warnings for the pair in insertion order."""

    @abstractmethod
    async def delete_all_by_user_and_chat(self, user_id: str, chat_id: str) -> int:
        """Remove all warnings for the pair and return how many there were."""

    async def ping(self) -> None:
        """Check connectivity. Raises StorageError when the store is down."""


class RedisWarningStore(WarningStore):
    """Warning store backed by one Redis list per (chat, user) pair.

    redis-py is blocking, so every call runs in the event loop's default
    executor.
    """

    def __init__(self, client: redis.Redis, namespace: str = ""):
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = "") -> "RedisWarningStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), namespace)

    def _warns_key(self, user_id: str, chat_id: str) -> str:
        return f"{self._namespace}{WARNS_PREFIX}{chat_id}:{user_id}"

    async def _run(self, func: Callable[..., T], *args) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    # ------------------------------------------------------------------
    # blocking operations
    # ------------------------------------------------------------------

    def save_warn(self, warn: Warn) -> None:
        key = self._warns_key(warn.user_id, warn.chat_id)
        try:
            self._client.rpush(key, json.dumps(asdict(warn), ensure_ascii=False))
        except redis.RedisError as exc:
            log.error(f"Failed to save warning {warn.id}: {exc}")
            raise StorageError(f"failed to save warning: {exc}") from exc

    def load_warns(self, user_id: str, chat_id: str) -> List[Warn]:
        key = self._warns_key(user_id, chat_id)
        try:
            raw_values = self._client.lrange(key, 0, -1)
        except redis.RedisError as exc:
            log.error(f"Failed to load warnings for {key}: {exc}")
            raise StorageError(f"failed to load warnings: {exc}") from exc

        warns = []
        for raw in raw_values:
            try:
                warns.append(Warn.from_row(json.loads(raw)))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
                # every stored row counts toward the ban threshold
                log.error(f"Malformed warning row in {key}: {exc}")
                raise StorageError(f"malformed warning row: {exc}") from exc
        return warns

    def clear_warns(self, user_id: str, chat_id: str) -> int:
        key = self._warns_key(user_id, chat_id)
        try:
            with self._client.pipeline() as pipe:
                pipe.llen(key)
                pipe.delete(key)
                count, _ = pipe.execute()
        except redis.RedisError as exc:
            log.error(f"Failed to clear warnings for {key}: {exc}")
            raise StorageError(f"failed to clear warnings: {exc}") from exc
        return int(count)

    def check_connection(self) -> None:
        try:
            self._client.ping()
        except redis.RedisError as exc:
            raise StorageError(f"health check failed: {exc}") from exc

    # ------------------------------------------------------------------
    # WarningStore
    # ------------------------------------------------------------------

    async def create(self, user_id: str, chat_id: str, reason: str) -> str:
        warn = Warn.create(user_id=user_id, chat_id=chat_id, reason=reason)
        await self._run(self.save_warn, warn)
        return warn.id

    async def list_by_user_and_chat(self, user_id: str, chat_id: str) -> List[Warn]:
        return await self._run(self.load_warns, user_id, chat_id)

    async def delete_all_by_user_and_chat(self, user_id: str, chat_id: str) -> int:
        return await self._run(self.clear_warns, user_id, chat_id)

    async def ping(self) -> None:
        await self._run(self.check_connection)
