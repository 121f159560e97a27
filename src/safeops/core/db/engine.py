"""Async engine singleton for asyncpg."""

import ssl
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from src.safeops.core.config import get_settings

# libpq sslmode -> (check_hostname, verify_mode); "disable" means no TLS.
SSL_MODES: dict[str, tuple[bool, ssl.VerifyMode]] = {
    "prefer": (False, ssl.CERT_NONE),
    "require": (False, ssl.CERT_NONE),
    "verify-ca": (False, ssl.CERT_REQUIRED),
    "verify-full": (True, ssl.CERT_REQUIRED),
}

_engine: AsyncEngine | None = None


def ssl_context_for(mode: str) -> ssl.SSLContext | None:
    if mode == "disable":
        return None
    try:
        check_hostname, verify_mode = SSL_MODES[mode]
    except KeyError:
        raise ValueError(f"Unknown database_ssl_mode: {mode}") from None
    context = ssl.create_default_context()
    context.check_hostname = check_hostname
    context.verify_mode = verify_mode
    return context


def get_engine() -> AsyncEngine:
    """Engine shared by every request session and the audit writer."""
    global _engine
    if _engine is None:
        settings = get_settings()
        context = ssl_context_for(settings.database_ssl_mode)
        _engine = create_async_engine(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
            connect_args={"ssl": context} if context else {},
        )
    return _engine


async def dispose_engine() -> None:
    global _engine
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
