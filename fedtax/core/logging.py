"""Structured logging for the estimator.

Every event carries the request ID and the tax year being calculated when
they are known, so one estimate can be followed from the HTTP request down
to the engine's ``return_calculated`` event.
"""

import logging
import sys
from contextvars import ContextVar
from decimal import Decimal
from enum import Enum
from typing import Any

import orjson
import structlog
from structlog.types import Processor

from fedtax.core.config import settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
tax_year_ctx: ContextVar[int | None] = ContextVar("tax_year", default=None)


def _add_context_vars(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Attach request ID and tax year to the event when set."""
    if request_id := request_id_ctx.get():
        event_dict["request_id"] = request_id
    if tax_year := tax_year_ctx.get():
        event_dict["tax_year"] = tax_year
    return event_dict


def _json_default(obj: Any) -> Any:
    # Money stays a string so cents are never lost to float.
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)


def _orjson_serializer(obj: Any, **kwargs: Any) -> str:
    return orjson.dumps(obj, default=_json_default).decode("utf-8")


def _wants_json() -> bool:
    """JSON unless running in development without an explicit format."""
    log_format = settings.log_format.lower() if settings.log_format else None
    if log_format is not None:
        return log_format == "json"
    return settings.environment != "development"


def configure_logging() -> None:
    """Configure structlog: JSON lines in deployed environments, console locally."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_context_vars,
    ]

    if _wants_json():
        processors += [
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(serializer=_orjson_serializer),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if settings.debug else logging.INFO,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
