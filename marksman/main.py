# Copyright (c) 2025 sprouee
import asyncio
import sys
import threading

from telegram import Bot
from telegram.error import TelegramError

from marksman.logging_config import log
from marksman.moderation.client import TelegramModerationClient
from marksman.moderation.controller import ModerationController
from marksman.moderation.errors import StorageError
from marksman.moderation.storage import RedisWarningStore
from marksman.web.server import create_app


def _start_event_loop() -> asyncio.AbstractEventLoop:
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, name="moderation-loop", daemon=True)
    thread.start()
    return loop


def main() -> int:
    try:
        from marksman import config
    except RuntimeError as exc:
        log.error(f"Failed to load config: {exc}")
        return 1

    loop = _start_event_loop()

    bot = Bot(config.TELEGRAM_TOKEN)
    try:
        asyncio.run_coroutine_threadsafe(bot.initialize(), loop).result()
    except TelegramError as exc:
        log.error(f"Failed to create bot: {exc}")
        return 1
    log.info(f"Authorized on account {bot.username}")

    store = RedisWarningStore.from_url(config.REDIS_URL, namespace=config.REDIS_NAMESPACE)
    try:
        asyncio.run_coroutine_threadsafe(store.ping(), loop).result()
    except StorageError as exc:
        log.error(f"Failed to connect to Redis: {exc}")
        return 1
    log.info("Connected to Redis successfully")

    controller = ModerationController(
        TelegramModerationClient(bot),
        store,
        ban_threshold=config.WARN_BAN_THRESHOLD,
    )
    flask_app = create_app(
        controller,
        bot,
        loop,
        store,
        secret_token=config.WEBHOOK_SECRET_TOKEN,
        request_timeout=config.REQUEST_TIMEOUT_SECONDS,
    )

    log.info(f"Starting webhook server on {config.FLASK_HOST}:{config.FLASK_PORT}")
    try:
        flask_app.run(host=config.FLASK_HOST, port=config.FLASK_PORT, threaded=True)
    finally:
        asyncio.run_coroutine_threadsafe(bot.shutdown(), loop).result()
        loop.call_soon_threadsafe(loop.stop)
    return 0


if __name__ == "__main__":
    sys.exit(main())
