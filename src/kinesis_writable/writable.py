"""
KinesisWritable: the producer-facing stream adapter.

Records are buffered, flushed to PutRecords when the queue reaches the
high-water mark (or after an idle timeout), and only the records Kinesis
rejects are retried, with Fibonacci backoff.

Usage:
    client = boto3.client("kinesis", region_name="us-east-1")
    async with KinesisWritable(client, "events", WritableConfig(high_water_mark=100)) as w:
        for event in events:
            await w.write(event)
    # remaining records flushed on exit
"""

from __future__ import annotations

import asyncio
from typing import Any, Generic, Mapping, Optional, TypeVar, Union

from loguru import logger

from .config import WritableConfig, WritableSettings
from .errors import ConfigurationError, RetriesExhausted
from .events import ErrorBus, ErrorEvent, ErrorSubscriber
from .metrics import FLUSH_CYCLES_TOTAL, QUEUE_DEPTH
from .policy import RetryController, RetryPolicy, Sleep
from .queue import RecordQueue
from .scheduler import FlushScheduler
from .submitter import BatchSubmitter
from .transform import RecordTransformer
from .types import Codec, DiagnosticLogger, PartitionKeyFn, PutRecordsClient

T = TypeVar("T")


class KinesisWritable(Generic[T]):
    """Flushable stream writing records to a Kinesis stream.

    Exactly one flush cycle (including its retries) runs at a time, guarded
    by an asyncio.Lock. Appends never wait for that lock: a write arriving
    during a cycle only extends the queue, and if it reaches the threshold it
    waits its turn for the next cycle.

    Cancelling a write or flush while PutRecords is in flight returns the
    batch to the queue. A codec error is not retried: it propagates to the
    caller (or the error channel) and the whole drained batch is dropped,
    including records that would have serialized.

    Args:
        client: Object exposing ``put_records(Records=..., StreamName=...)``
        stream_name: Kinesis stream name
        config: WritableConfig or a mapping of its options
        partition_key: Strategy mapping a record to its partition key
        codec: Record serializer returning bytes (JSON by default)
        logger: Diagnostic sink (default: loguru bound to the stream name)
        error_bus: Channel for failures with no waiting caller
        sleep: Backoff sleep, injectable for tests
    """

    def __init__(
        self,
        client: PutRecordsClient,
        stream_name: str,
        config: Union[WritableConfig, Mapping[str, Any], None] = None,
        *,
        partition_key: Optional[PartitionKeyFn] = None,
        codec: Optional[Codec] = None,
        logger: Optional[DiagnosticLogger] = None,
        error_bus: Optional[ErrorBus] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if client is None:
            raise ConfigurationError("client is required")
        if not stream_name:
            raise ConfigurationError("stream_name is required")
        if config is None:
            config = WritableConfig()
        elif not isinstance(config, WritableConfig):
            config = WritableConfig(**dict(config))

        self._config = config
        self._stream_name = stream_name
        self._log = logger or _default_logger(stream_name)
        self._errors = error_bus or ErrorBus()

        self._queue: RecordQueue[T] = RecordQueue()
        self._transformer = RecordTransformer(codec, partition_key)
        self._submitter = BatchSubmitter(client, stream_name, config.max_batch_size)
        self._retry = RetryController(
            self._queue,
            self._transformer,
            self._submitter,
            RetryPolicy(config.max_retries, config.base_retry_delay_ms),
            sleep=sleep,
            log=self._log,
        )
        self._scheduler = FlushScheduler(
            config.high_water_mark, config.flush_idle_timeout, self._idle_flush
        )

        self._cycle_lock = asyncio.Lock()
        self._closed = False

    @classmethod
    def from_settings(
        cls, client: PutRecordsClient, settings: WritableSettings, **kwargs: Any
    ) -> "KinesisWritable[T]":
        if not settings.stream_name:
            raise ConfigurationError("stream_name is required")
        return cls(client, settings.stream_name, settings.to_config(), **kwargs)

    # --------------- context management

    async def __aenter__(self) -> "KinesisWritable[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.end()

    # --------------- properties

    @property
    def stream_name(self) -> str:
        return self._stream_name

    @property
    def config(self) -> WritableConfig:
        return self._config

    @property
    def pending(self) -> int:
        """Records queued and not yet acknowledged."""
        return len(self._queue)

    @property
    def flushing(self) -> bool:
        return self._cycle_lock.locked()

    @property
    def closed(self) -> bool:
        return self._closed

    def pending_records(self) -> list[T]:
        return self._queue.snapshot()

    def on_error(self, callback: ErrorSubscriber) -> None:
        """Subscribe to failures of flush cycles no caller is waiting on."""
        self._errors.subscribe(callback)

    # --------------- producer API

    async def write(self, record: T) -> None:
        """Queue a record.

        Returns once the record is accepted locally. When it fills the queue
        to the high-water mark, returns only after that flush cycle ends.

        Raises:
            RetriesExhausted: the flush cycle this write triggered failed
            RuntimeError: the writable was ended
        """
        if self._closed:
            raise RuntimeError(f"write after end on {self._stream_name}")

        self._log.debug("Adding to Kinesis queue")
        size = self._queue.append(record)
        QUEUE_DEPTH.labels(stream=self._stream_name).set(size)

        if self._scheduler.threshold_reached(size):
            await self._flush_cycle()
            return

        self._scheduler.rearm()

    async def flush(self) -> int:
        """Flush every queued record, one batch per cycle; returns records written.

        No-op on an empty queue. Stops at the first cycle ending in
        RetriesExhausted, leaving its records queued.
        """
        written = 0
        while self._queue:
            written += await self._flush_cycle()
        return written

    async def end(self) -> int:
        """Flush everything and refuse further writes. Safe to call again after a failure."""
        self._closed = True
        self._scheduler.cancel()
        try:
            return await self.flush()
        finally:
            await self._scheduler.aclose()

    # --------------- internals

    async def _flush_cycle(self) -> int:
        async with self._cycle_lock:
            self._scheduler.cancel()
            records = self._queue.drain_all(limit=self._config.max_batch_size)
            if not records:
                return 0

            try:
                written = await self._retry.run(records)
            except RetriesExhausted as e:
                FLUSH_CYCLES_TOTAL.labels(stream=self._stream_name, outcome="failed").inc()
                self._log.warning(f"{e}; {len(self._queue)} records remain queued")
                raise
            finally:
                QUEUE_DEPTH.labels(stream=self._stream_name).set(len(self._queue))

            FLUSH_CYCLES_TOTAL.labels(stream=self._stream_name, outcome="done").inc()
            return written

    async def _idle_flush(self) -> None:
        if not self._queue:
            return
        try:
            await self._flush_cycle()
        except Exception as e:
            await self._errors.publish(ErrorEvent(self._stream_name, e, len(self._queue)))


def _default_logger(stream_name: str) -> DiagnosticLogger:
    return logger.bind(stream=stream_name)
