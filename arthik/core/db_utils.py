"""
Database utilities for connection management and error handling
"""
import asyncio
import functools
import logging
from typing import Callable, Any, Optional, TypeVar, cast, Awaitable

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Errors worth another attempt: the connection dropped or the pooler refused us
RETRYABLE_ERRORS = (OperationalError, InterfaceError, ConnectionError)


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, RETRYABLE_ERRORS)


def _find_session(args: tuple, kwargs: dict) -> Optional[AsyncSession]:
    for value in list(args) + list(kwargs.values()):
        if isinstance(value, AsyncSession):
            return value
    return None


def with_db_retry(
    max_retries: int = 3,
    retry_delay: float = 0.5
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator that retries read-only database operations on connection errors.

    Only use it on functions that do not write: the session passed to the
    wrapped function is rolled back before each new attempt.

    Args:
        max_retries: Maximum number of retries before giving up
        retry_delay: Base delay between retries in seconds, doubled each time
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not _is_retryable(e) or attempt >= max_retries:
                        if attempt:
                            logger.error(f"Database operation {func.__name__} failed after {attempt} retries: {e}")
                        raise

                    attempt += 1
                    delay = retry_delay * (2 ** (attempt - 1))  # Exponential backoff
                    logger.warning(
                        f"Database connection error in {func.__name__}: {e}. "
                        f"Retrying in {delay:.2f}s... (Attempt {attempt}/{max_retries})"
                    )
                    session = _find_session(args, kwargs)
                    if session is not None:
                        await session.rollback()
                    await asyncio.sleep(delay)

        return cast(Callable[..., Awaitable[T]], wrapper)

    return decorator
