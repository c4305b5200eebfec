"""Kinesis writable stream

Batching PutRecords adapter with:
- RecordQueue (ordered, atomic drain, head requeue)
- FlushScheduler (high-water mark + idle timeout)
- BatchSubmitter (sync boto3 or async clients)
- RetryPolicy / RetryController (Fibonacci backoff, failed-subset retry)
- ErrorBus for failures with no waiting caller
- Prometheus metrics
- Environment-based settings
"""

from .config import MAX_BATCH_SIZE, WritableConfig, WritableSettings, get_settings
from .errors import (
    ConfigurationError,
    KinesisWritableError,
    PartialFailure,
    RetriesExhausted,
    TransportError,
)
from .events import ErrorBus, ErrorEvent
from .partition import field_partition_key, random_partition_key
from .policy import RetryController, RetryPolicy, RetryState, fib
from .queue import RecordQueue
from .scheduler import FlushScheduler
from .stream import pipe
from .submitter import BatchSubmitter
from .transform import RecordTransformer, json_codec
from .types import BatchItem, Flushable, ItemStatus, PutRecordsClient, SubmissionOutcome
from .writable import KinesisWritable

__version__ = "1.0.0"
__all__ = [
    # types
    "BatchItem",
    "ItemStatus",
    "SubmissionOutcome",
    "PutRecordsClient",
    "Flushable",
    # errors
    "KinesisWritableError",
    "ConfigurationError",
    "TransportError",
    "PartialFailure",
    "RetriesExhausted",
    # config
    "MAX_BATCH_SIZE",
    "WritableConfig",
    "WritableSettings",
    "get_settings",
    # components
    "random_partition_key",
    "field_partition_key",
    "json_codec",
    "RecordTransformer",
    "RecordQueue",
    "BatchSubmitter",
    "fib",
    "RetryPolicy",
    "RetryState",
    "RetryController",
    "FlushScheduler",
    "ErrorBus",
    "ErrorEvent",
    # runtime
    "KinesisWritable",
    "pipe",
]
