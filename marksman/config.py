# Copyright (c) 2025 sprouee
import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True))


def _resolve_redis_url(raw_url: str) -> str:
    if ".upstash.io" in raw_url and raw_url.startswith("redis://"):
        return "rediss" + raw_url[len("redis") :]
    return raw_url


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Environment variable {name} must be set")
    return value


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}")


TELEGRAM_TOKEN = _require("TELEGRAM_TOKEN")

REDIS_URL = _resolve_redis_url(_require("REDIS_URL"))
REDIS_NAMESPACE = os.getenv("REDIS_NAMESPACE", "marksman:")

# Telegram echoes this value in X-Telegram-Bot-Api-Secret-Token when set via setWebhook
WEBHOOK_SECRET_TOKEN: Optional[str] = os.getenv("WEBHOOK_SECRET_TOKEN") or None

WARN_BAN_THRESHOLD = _int_env("WARN_BAN_THRESHOLD", 3)
if WARN_BAN_THRESHOLD < 1:
    raise RuntimeError("WARN_BAN_THRESHOLD must be at least 1")

REQUEST_TIMEOUT_SECONDS = _int_env("REQUEST_TIMEOUT_SECONDS", 30)

FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
FLASK_PORT = _int_env("PORT", 8080)
