"""
Database utilities for bounding storage calls and surfacing their failures
"""
import asyncio
import functools
import logging
from typing import Callable, Any, TypeVar, cast, Awaitable

from sqlalchemy.exc import SQLAlchemyError

from .errors import AppError, InternalError

logger = logging.getLogger(__name__)

# Define a type variable for the return type of the decorated function
T = TypeVar('T')

DEFAULT_DB_TIMEOUT = 10.0

# Primary keys are 32-bit INTEGER columns
MAX_ROW_ID = 2**31 - 1


def row_id_in_range(row_id: int) -> bool:
    """Ids outside the column range cannot match a row; drivers reject them outright."""
    return 1 <= row_id <= MAX_ROW_ID


async def run_with_timeout(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """
    Await a storage call, turning timeouts and driver errors into InternalError.

    Domain errors (AppError) pass through untouched. Nothing is retried.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"Storage operation '{operation}' timed out after {timeout:.1f}s")
        raise InternalError("Storage operation timed out") from e
    except AppError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Storage operation '{operation}' failed: {str(e)}")
        raise InternalError() from e


def with_db_timeout(
    timeout: float = DEFAULT_DB_TIMEOUT
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator that bounds a database operation by a timeout.

    Args:
        timeout: Seconds to wait before giving up on the operation

    Returns:
        Decorated function raising InternalError on timeout or driver error
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await run_with_timeout(func(*args, **kwargs), timeout, func.__name__)

        return cast(Callable[..., Awaitable[T]], wrapper)

    return decorator
