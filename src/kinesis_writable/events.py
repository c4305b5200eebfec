"""
Asynchronous error notification channel.

Flush cycles started by the idle timer have no waiting producer, so their
terminal failures are published here instead of being raised. Multiple
subscribers can react (alerting, stopping the producer, logging).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from loguru import logger


@dataclass(frozen=True)
class ErrorEvent:
    """Immutable failure notification.

    Attributes:
        stream_name: Kinesis stream the writable targets
        error: The terminal error (usually RetriesExhausted)
        pending: Records still queued when the failure was published
        trigger: What started the failed cycle (e.g. "idle")
    """

    stream_name: str
    error: BaseException
    pending: int
    trigger: str = "idle"

    @property
    def failed_count(self) -> int | None:
        """Records left unacknowledged by the cycle, when the error reports it."""
        return getattr(self.error, "failed_count", None)


class ErrorSubscriber(Protocol):
    """Async callable accepting ErrorEvent."""

    async def __call__(self, event: ErrorEvent) -> None: ...


class ErrorBus:
    """In-process pub/sub for writable failures.

    One subscriber's failure does not affect others. With no subscribers,
    events are logged at ERROR level so failures are never silent.

    Example:
        bus = ErrorBus()

        async def on_error(event: ErrorEvent):
            await alert(f"{event.failed_count} records stuck on {event.stream_name}")

        bus.subscribe(on_error)
    """

    def __init__(self) -> None:
        self._subs: list[ErrorSubscriber] = []

    def subscribe(self, callback: ErrorSubscriber) -> None:
        if callback not in self._subs:
            self._subs.append(callback)
            logger.debug(f"Error subscriber added (total: {len(self._subs)})")

    def unsubscribe(self, callback: ErrorSubscriber) -> None:
        """Remove a subscriber. No-op if callback not found."""
        try:
            self._subs.remove(callback)
            logger.debug(f"Error subscriber removed (total: {len(self._subs)})")
        except ValueError:
            pass

    async def publish(self, event: ErrorEvent) -> None:
        """Deliver to all subscribers in registration order."""
        if not self._subs:
            logger.error(
                f"Unhandled Kinesis writable error on {event.stream_name} "
                f"({event.trigger} flush, {event.pending} pending): {event.error}"
            )
            return

        # Iterate over copy to allow unsubscribe during iteration
        for callback in list(self._subs):
            try:
                await callback(event)
            except Exception as exc:
                logger.warning(f"Error subscriber failed (ignored): {type(exc).__name__}: {exc}")

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)

