# Copyright (c) 2025 sprowii
import logging
import os

from dotenv import find_dotenv, load_dotenv

# every module imports this one first, so .env must be applied before any os.getenv
load_dotenv(find_dotenv(usecwd=True))


def configure_logging() -> logging.Logger:
    logging.basicConfig(
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
    return logging.getLogger("marksman")


log = configure_logging()
