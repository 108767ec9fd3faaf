import inspect
import os
import time
from functools import wraps

from loguru import logger
from rich.logging import RichHandler

from sync_rules.utils.rich_console import get_console

LOG_LEVEL_ENV = "SYNC_RULES_LOG_LEVEL"
VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def configure_logging(verbose: bool = False) -> str:
    """
    Route loguru output through a Rich handler on the shared console.

    The level comes from --verbose first, then SYNC_RULES_LOG_LEVEL, then INFO.

    Returns:
        str: The level that was applied
    """
    if verbose:
        level = "DEBUG"
    else:
        level = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
        if level not in VALID_LEVELS:
            get_console().print(f"Invalid log level: {level}. Using INFO.", style="bold yellow")
            level = "INFO"

    logger.remove()
    handler = RichHandler(console=get_console(), rich_tracebacks=True, show_path=False, markup=False)
    logger.add(handler, level=level, format="{message}")
    return level


def timeit(func):  # pragma: no cover
    """
    Decorator that logs the execution time of the decorated function.
    Coroutine functions are timed across the await.
    """
    if inspect.iscoroutinefunction(func):

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start = time.perf_counter()
            result = await func(*args, **kwargs)
            elapsed = time.perf_counter() - start
            logger.debug(f"{func.__qualname__} executed in {elapsed:.6f}s")
            return result

        return async_wrapper

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start
        logger.debug(f"{func.__qualname__} executed in {elapsed:.6f}s")
        return result

    return wrapper
