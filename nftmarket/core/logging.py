import logging.config
import uuid
from contextlib import AbstractContextManager
from typing import Any

import structlog

from nftmarket.core.config import settings

Logger = structlog.stdlib.BoundLogger

# Third-party loggers held above the root level
QUIET_LOGGERS: dict[str, str] = {
    "aiohttp.access": "WARNING",
    "asyncio": "WARNING",
}


def pre_chain() -> list[Any]:
    """Processors shared by structlog loggers and foreign stdlib records."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.is_production:
        processors.append(structlog.processors.format_exc_info)
    return processors


def renderer() -> Any:
    """JSON lines in production, coloured console output elsewhere."""
    if settings.is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def _dict_config(level: str) -> dict[str, Any]:
    loggers: dict[str, Any] = {
        "": {"handlers": ["console"], "level": level, "propagate": False},
    }
    for name, quiet_level in QUIET_LOGGERS.items():
        loggers[name] = {
            "handlers": ["console"],
            "level": quiet_level,
            "propagate": False,
        }

    return {
        "version": 1,
        "disable_existing_loggers": True,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer(),
                ],
                "foreign_pre_chain": pre_chain(),
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "structured",
            },
        },
        "loggers": loggers,
    }


def configure(level: str | None = None) -> None:
    """
    Route structlog and stdlib logging through one formatter.

    Safe to call more than once; structlog itself is only configured on
    the first call.
    """
    logging.config.dictConfig(_dict_config(level or settings.LOG_LEVEL))

    structlog.configure_once(
        processors=pre_chain()
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def generate_tx_id() -> str:
    return str(uuid.uuid4())


def bind_transaction(
    tx_id: str, kind: str, sender: str
) -> AbstractContextManager[None]:
    """Tag every log line emitted while a transaction executes."""
    return structlog.contextvars.bound_contextvars(
        tx_id=tx_id, tx_kind=kind, sender=sender
    )
