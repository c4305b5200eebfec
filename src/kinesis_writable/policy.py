"""
Retry policy and per-cycle retry controller.

A flush cycle moves Attempting -> Done when every record is acknowledged,
Attempting -> Backoff -> Attempting while failed records remain and budget
is left, and Attempting -> Failed (RetriesExhausted) otherwise.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence

from loguru import logger

from .errors import PartialFailure, RetriesExhausted, TransportError
from .queue import RecordQueue
from .submitter import BatchSubmitter
from .transform import RecordTransformer
from .types import DiagnosticLogger

Sleep = Callable[[float], Awaitable[Any]]


def fib(n: int) -> int:
    """n-th Fibonacci number with fib(1) == fib(2) == 1."""
    if n < 1:
        raise ValueError("n must be >= 1")
    a, b = 1, 1
    for _ in range(n - 1):
        a, b = b, a + b
    return a


@dataclass(frozen=True)
class RetryPolicy:
    """Fibonacci-scaled backoff: 1, 1, 2, 3, 5, 8, ... x base_delay_ms."""

    max_retries: int = 3
    base_delay_ms: float = 100

    def next_backoff_ms(self, attempt: int) -> float:
        return fib(attempt) * self.base_delay_ms

    def schedule_ms(self) -> list[float]:
        return [self.next_backoff_ms(i) for i in range(1, self.max_retries + 1)]


@dataclass
class RetryState:
    """Scoped to one flush cycle; discarded when the cycle ends."""

    attempts_made: int = 0
    max_attempts: int = 0
    next_delay_ms: float = 0.0

    @property
    def exhausted(self) -> bool:
        return self.attempts_made >= self.max_attempts


class RetryController:
    """Drives one flush cycle over a drained snapshot.

    Failed records are returned to the queue before any backoff, so at every
    await point the queue owns everything not yet acknowledged. Each retry
    re-drains exactly the requeued head of the queue; records appended in
    the meantime wait for a later cycle.
    """

    def __init__(
        self,
        queue: RecordQueue,
        transformer: RecordTransformer,
        submitter: BatchSubmitter,
        policy: RetryPolicy,
        *,
        sleep: Sleep = asyncio.sleep,
        log: Optional[DiagnosticLogger] = None,
    ):
        self._queue = queue
        self._transformer = transformer
        self._submitter = submitter
        self._policy = policy
        self._sleep = sleep
        self._log = log or logger

    async def run(self, records: Sequence[Any]) -> int:
        """Deliver ``records``; returns how many were written.

        Raises:
            RetriesExhausted: records still failing after max_retries extra attempts
        """
        state = RetryState(max_attempts=self._policy.max_retries)
        pending = list(records)
        written = 0

        while True:
            try:
                written += await self._attempt(pending)
                return written
            except (TransportError, PartialFailure) as e:
                failed = e.records if isinstance(e, PartialFailure) else pending
                self._queue.requeue_subset(failed)
                if state.exhausted:
                    raise RetriesExhausted(len(failed)) from e

                state.attempts_made += 1
                state.next_delay_ms = self._policy.next_backoff_ms(state.attempts_made)
                written += len(pending) - len(failed)
                self._log.debug(
                    f"Retrying {len(failed)} records in {state.next_delay_ms:g}ms "
                    f"(attempt {state.attempts_made}/{state.max_attempts})"
                )
                await self._sleep(state.next_delay_ms / 1000.0)
                pending = self._queue.drain_all(limit=len(failed))
            except asyncio.CancelledError:
                # Cancelled mid-attempt: nothing in this batch was acknowledged
                self._queue.requeue_subset(pending)
                raise

    async def _attempt(self, records: list[Any]) -> int:
        self._log.debug(f"Writing {len(records)} records to Kinesis")
        items = self._transformer.transform_many(records)

        try:
            outcome = await self._submitter.submit(items)
        except TransportError as e:
            self._log.warning(f"Failed writing {len(records)} records to Kinesis: {e}")
            raise

        self._log.info(f"Wrote {len(records) - outcome.failed_count} records to Kinesis")
        if outcome.all_succeeded:
            return len(records)

        self._log.warning(f"Failed writing {outcome.failed_count} records to Kinesis")
        failed = []
        for index in outcome.failed_indexes():
            self._log.warning(
                f"Failed record with message: {outcome.statuses[index].error_message}"
            )
            failed.append(records[index])

        raise PartialFailure(len(failed), len(records), failed)
