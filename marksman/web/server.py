# Copyright (c) 2025 sprouee
import asyncio
import concurrent.futures
import secrets
from typing import Any, Coroutine, Optional

import telegram
from flask import Flask, abort, jsonify, request

from marksman.logging_config import log
from marksman.moderation.client import update_from_telegram
from marksman.moderation.controller import ModerationController
from marksman.moderation.errors import StorageError
from marksman.moderation.storage import WarningStore

SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def create_app(
    controller: ModerationController,
    bot: Optional[telegram.Bot],
    loop: asyncio.AbstractEventLoop,
    store: WarningStore,
    secret_token: Optional[str] = None,
    request_timeout: float = 30,
) -> Flask:
    """Build the webhook app.

    Requests are served on Flask threads; the moderation coroutines run on
    `loop`, which must be running in another thread.
    """
    flask_app = Flask(__name__)

    def run_on_loop(coro: Coroutine[Any, Any, Any]) -> Any:
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        try:
            return future.result(timeout=request_timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise

    @flask_app.route("/", methods=["GET"])
    def home():
        return "Marksman is running"

    @flask_app.route("/", methods=["POST"])
    def webhook():
        if secret_token:
            provided = request.headers.get(SECRET_TOKEN_HEADER, "")
            if not secrets.compare_digest(provided, secret_token):
                log.warning("Received update with invalid secret token")
                abort(403)

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            log.error("Error decoding update: body is not a JSON object")
            return "Bad Request", 400

        try:
            tg_update = telegram.Update.de_json(payload, bot)
        except (KeyError, TypeError, ValueError) as exc:
            log.error(f"Error decoding update: {exc}")
            return "Bad Request", 400
        if tg_update is None:
            return "Bad Request", 400

        update = update_from_telegram(tg_update)
        try:
            run_on_loop(controller.handle_update(update))
        except Exception as exc:
            log.error(f"Error handling update {update.update_id}: {exc}", exc_info=True)
            return "Internal Server Error", 500

        return "", 200

    @flask_app.route("/healthz", methods=["GET"])
    def healthz():
        try:
            run_on_loop(store.ping())
        except (StorageError, concurrent.futures.TimeoutError) as exc:
            log.warning(f"Health check failed: {exc}")
            return jsonify({"status": "unavailable", "error": str(exc)}), 503
        return jsonify({"status": "ok"})

    return flask_app
