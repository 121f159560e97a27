"""structlog setup and request-scoped log context."""

import logging
import sys
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

# Third-party loggers pinned to a fixed level regardless of debug mode.
LIBRARY_LEVELS = {
    "sqlalchemy.engine": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "temporalio": logging.INFO,
}


def _processors(debug: bool) -> list[structlog.typing.Processor]:
    renderer: structlog.typing.Processor = (
        structlog.dev.ConsoleRenderer(colors=True)
        if debug
        else structlog.processors.JSONRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def setup_logging(debug: bool = False) -> None:
    """Configure structlog on top of stdlib logging.

    Debug mode renders coloured console lines; otherwise one JSON object per
    line goes to stdout.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )
    structlog.configure(
        processors=_processors(debug),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    for name, level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None) -> None:
    """Attach the correlation id to every log line of the current request."""
    if request_id:
        bind_contextvars(request_id=request_id)


def bind_actor_context(actor_id: UUID, tenant_id: UUID) -> None:
    """Attach actor and tenant ids. Role names stay out of the log stream."""
    bind_contextvars(actor_id=str(actor_id), tenant_id=str(tenant_id))


def clear_request_context() -> None:
    clear_contextvars()
