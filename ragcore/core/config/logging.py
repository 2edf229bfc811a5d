"""
Central logging configuration for the whole project.
Call  init_logging()  *once* early in startup (before anything logs).
"""

import logging
import os
import sys

from contextlib import contextmanager
from contextvars import ContextVar
from loguru import logger
from ragcore.core.config.settings import settings
from ragcore.core.project_path import DATA_VOLUME


# --------------------------------------------------------------------------- #
# Context variables that callers may fill in per pipeline call
# --------------------------------------------------------------------------- #
tenant_id_ctx: ContextVar[str] = ContextVar("tenant_id", default="-")
document_id_ctx: ContextVar[str] = ContextVar("document_id", default="-")


@contextmanager
def log_context(tenant_id: str, document_id: str = "-"):
    tenant_token = tenant_id_ctx.set(tenant_id)
    document_token = document_id_ctx.set(document_id)
    try:
        yield
    finally:
        document_id_ctx.reset(document_token)
        tenant_id_ctx.reset(tenant_token)


# --------------------------------------------------------------------------- #
# Helper – forward stdlib logging records to Loguru
# --------------------------------------------------------------------------- #
class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.bind(
            tenant_id=tenant_id_ctx.get(), document_id=document_id_ctx.get()
        ).opt(
            depth=6, exception=record.exc_info  # keep caller info accurate
        ).log(level, record.getMessage())


def _patch_stdlib(level: str) -> None:
    logging.root.setLevel(level)
    logging.root.handlers[:] = [_InterceptHandler()]  # replace all handlers
    for noise in (
        "asyncio",
        "httpx",
        "httpcore",
        "urllib3",
        "chromadb",
        "sentence_transformers",
    ):
        logging.getLogger(noise).setLevel(logging.WARNING)


# --------------------------------------------------------------------------- #
# Main entry point
# --------------------------------------------------------------------------- #
def init_logging() -> None:
    # ----------- Sinks ------------------------------------------------------ #
    LOG_DIR = str(DATA_VOLUME / settings.LOG_DIR)
    os.makedirs(LOG_DIR, exist_ok=True)

    JSON_FORMAT = (
        '{{"timestamp":"{time:YYYY-MM-DD HH:mm:ss.SSS}",'
        '"level":"{level}",'
        '"message":{message!r},'
        '"file":"{file.name}","line":{line},"function":"{function}",'
        '"tenant_id":"{extra[tenant_id]}",'
        '"document_id":"{extra[document_id]}"}}'
    )

    logger.remove()  # drop default stderr sink

    # Human-friendly console
    logger.add(
        sys.stdout,
        level=settings.LOG_LEVEL,
        colorize=True,
        format=(
            "<green>{time:HH:mm:ss.SSS}</green> "
            "<level>{level: <8}</level> "
            "[<cyan>{extra[tenant_id]}</cyan>] "
            "<magenta>{extra[document_id]}</magenta> "
            "<blue>{name}</blue> | "
            "<level>{message}</level>"
        ),
        enqueue=False,
    )

    logger.add(
        f"{LOG_DIR}/error.log",
        level="ERROR",
        rotation="5 MB",
        retention="14 days",
        compression="zip",
        format=JSON_FORMAT,
        enqueue=False,
    )

    logger.add(
        f"{LOG_DIR}/app.log",
        level="DEBUG",
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        format=JSON_FORMAT,
        enqueue=False,
    )

    # Default values so “{extra[…]}” never fails
    logger.configure(
        extra={
            "tenant_id": "-",
            "document_id": "-",
        }
    )

    # Feed stdlib logging into Loguru
    _patch_stdlib(settings.LOG_LEVEL)

    # Fine-tune noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.WARNING if settings.DEBUG is False else logging.DEBUG
    )

    logger.info("Loguru logging configured")
