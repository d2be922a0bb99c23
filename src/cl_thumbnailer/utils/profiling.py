"""Timing helpers for the transform and capture algorithms."""

import inspect
import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar, cast

from loguru import logger

P = ParamSpec("P")
R = TypeVar("R")


def _log_elapsed(name: str, start_time: float) -> None:
    elapsed_time = time.perf_counter() - start_time
    logger.debug(f"[PROFILE] {name} took {elapsed_time:.3f}s")


def timed(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to log the wall-clock time of a sync or async function.

    Usage:
        @timed
        def render(source, geometry, fmt):
            ...
    """
    name = func.__qualname__

    if inspect.iscoroutinefunction(func):
        async_func = cast(Callable[P, Awaitable[object]], func)

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> object:
            start_time = time.perf_counter()
            try:
                return await async_func(*args, **kwargs)
            finally:
                _log_elapsed(name, start_time)

        return cast(Callable[P, R], async_wrapper)

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            _log_elapsed(name, start_time)

    return wrapper
