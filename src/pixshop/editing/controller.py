"""
Single-flight controller for asynchronous edit operations.

Admits one operation at a time, tracks the loading message and the last
error, and discards results that resolve after the session they were
started for has ended.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from ..errors import OperationInProgressError
from ..logging import operation_logger

T = TypeVar("T")


class OperationStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    ERROR = "error"


class OperationController:
    """Runs edit operations under a single in-flight guard.

    State machine::

        IDLE --run--> PENDING --success--> IDLE
        IDLE --run--> PENDING --failure--> ERROR --retry/dismiss--> IDLE

    Every run captures the session token. ``invalidate`` bumps the token, so
    a run that resolves afterwards neither applies its result nor records
    its failure.
    """

    def __init__(self):
        self.status = OperationStatus.IDLE
        self.error: str | None = None
        self.loading_message: str | None = None
        self._token = 0
        self._retry: Callable[[], Awaitable] | None = None

    @property
    def token(self) -> int:
        return self._token

    @property
    def is_busy(self) -> bool:
        return self.status is OperationStatus.PENDING

    def is_current(self, token: int) -> bool:
        return token == self._token

    def invalidate(self) -> None:
        """End the current session; in-flight results become stale."""
        self._token += 1
        self._retry = None
        self._settle(OperationStatus.IDLE)

    def ensure_idle(self) -> None:
        """Raise if an operation is in flight."""
        if self.is_busy:
            raise OperationInProgressError("Another edit is already in progress")

    def set_loading_message(self, message: str) -> None:
        self.loading_message = message

    def _settle(self, status: OperationStatus, error: str | None = None) -> None:
        self.status = status
        self.error = error
        self.loading_message = None

    async def run(
        self,
        name: str,
        work: Callable[[], Awaitable[T]],
        *,
        on_success: Callable[[T], None] | None = None,
        loading_message: str = "",
        failure_prefix: str = "",
    ) -> T | None:
        """
        Run one operation under the guard.

        Args:
            name: Operation name used in logs
            work: Zero-argument coroutine factory performing the model call(s)
            on_success: Applies the result to session state (e.g. history push)
            loading_message: Message shown while pending
            failure_prefix: Prepended to the error message on failure

        Returns:
            The result of ``work``, or None if it failed or went stale

        Raises:
            OperationInProgressError: If another operation is pending
        """
        self.ensure_idle()
        token = self._token
        log = operation_logger(name, token)

        self.status = OperationStatus.PENDING
        self.error = None
        self.loading_message = loading_message
        self._retry = None
        log.debug("Operation started")

        try:
            result = await work()
            if not self.is_current(token):
                log.info("Discarding result of operation from a closed session")
                return None
            if on_success is not None:
                on_success(result)
        except asyncio.CancelledError:
            if self.is_current(token):
                self._settle(OperationStatus.IDLE)
            raise
        except Exception as e:
            if not self.is_current(token):
                log.info("Discarding failure of operation from a closed session: {}", e)
                return None
            message = f"{failure_prefix} {e}".strip() if failure_prefix else str(e)
            log.warning("Operation failed: {}", message)
            self._settle(OperationStatus.ERROR, message)
            self._retry = lambda: self.run(
                name,
                work,
                on_success=on_success,
                loading_message=loading_message,
                failure_prefix=failure_prefix,
            )
            return None

        log.debug("Operation finished")
        self._settle(OperationStatus.IDLE)
        return result

    async def retry(self):
        """Re-run the last failed operation."""
        if self.status is not OperationStatus.ERROR or self._retry is None:
            return None
        retry, self._retry = self._retry, None
        return await retry()

    def dismiss(self) -> None:
        """Clear the error and return to idle."""
        if self.status is OperationStatus.ERROR:
            self._settle(OperationStatus.IDLE)
            self._retry = None
