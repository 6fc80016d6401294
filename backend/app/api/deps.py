"""Shared API dependencies — single import point for all routers.

Re-exports the database session and gateway dependencies so that router
modules can import everything they need from one place::

    from app.api.deps import get_db, require_admin
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import Request

from app.auth.dependencies import get_current_admin, get_token_verifier, require_admin
from app.database import get_db
from app.errors import OperationTimeoutError

T = TypeVar("T")


def get_read_timeout(request: Request) -> float:
    """Seconds a public read may take before it is cancelled."""
    return request.app.state.settings.request_timeout_seconds


async def bounded(awaitable: Awaitable[T], timeout: float) -> T:
    """Await ``awaitable``, cancelling it and raising OperationTimeoutError after ``timeout`` seconds."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        raise OperationTimeoutError() from None


__all__ = [
    "bounded",
    "get_current_admin",
    "get_db",
    "get_read_timeout",
    "get_token_verifier",
    "require_admin",
]
