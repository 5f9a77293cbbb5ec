"""
Base service class for NFT Viewer services.

This module provides a base class for the resolution services, with common
functionality for fallback handling, bounded concurrency, and timing logs.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

from nft_viewer.utils.errors import NFTViewerError

T = TypeVar('T')


class BaseService:
    """
    Base service class with common functionality.

    This class provides:
    - Fallback values for advisory reads
    - Bounded concurrency
    - Timing logs
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the base service.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def execute_with_fallback(
        self,
        coro: Awaitable[T],
        fallback_value: T,
        error_message: str = "Operation failed"
    ) -> T:
        """
        Await a coroutine, substituting a fallback value on failure.

        Args:
            coro: The coroutine to await
            fallback_value: Value returned if the coroutine fails
            error_message: Prefix for the warning logged on failure

        Returns:
            The coroutine's result, or the fallback value
        """
        try:
            return await coro
        except NFTViewerError as e:
            self.logger.warning(f"{error_message}: {e.message}")
            return fallback_value
        except Exception as e:
            self.logger.warning(f"{error_message}: {str(e)}", exc_info=True)
            return fallback_value

    async def gather_with_concurrency(
        self,
        concurrency_limit: int,
        items: Iterable[Any],
        func: Callable[[Any], Awaitable[T]]
    ) -> List[T]:
        """
        Apply ``func`` to each item using a fixed pool of workers.

        Items are pulled lazily, so at most ``concurrency_limit`` coroutines
        exist at any time regardless of how many items there are.

        Args:
            concurrency_limit: Number of workers
            items: Items to process, consumed in order
            func: Coroutine function applied to each item

        Returns:
            Results in the same order as ``items``

        Raises:
            Exception: The first exception raised by ``func``; remaining
                workers are cancelled
        """
        source = enumerate(items)
        results: Dict[int, T] = {}

        async def _worker() -> None:
            for index, item in source:
                results[index] = await func(item)

        workers = [asyncio.ensure_future(_worker()) for _ in range(concurrency_limit)]
        try:
            await asyncio.gather(*workers)
        except BaseException:
            for worker in workers:
                worker.cancel()
            raise
        return [results[index] for index in range(len(results))]

    def log_timing(self, operation_name: str) -> "TimingContextManager":
        """
        Create a context manager to log timing information.

        Args:
            operation_name: Name of the operation

        Returns:
            Timing context manager
        """
        return TimingContextManager(operation_name, self.logger)


class TimingContextManager:
    """Context manager to log timing information."""

    def __init__(self, operation_name: str, logger: logging.Logger):
        self.operation_name = operation_name
        self.logger = logger
        self.start_time = 0.0

    async def __aenter__(self) -> "TimingContextManager":
        self.start_time = time.monotonic()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed = time.monotonic() - self.start_time
        if exc_val is not None:
            self.logger.error(
                f"{self.operation_name} failed after {elapsed:.2f}s: {str(exc_val)}"
            )
        else:
            self.logger.info(f"{self.operation_name} completed in {elapsed:.2f}s")
