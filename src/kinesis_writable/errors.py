"""
Custom exceptions for the Kinesis writable stream.

Transport and partial failures are recovered by the retry controller;
only RetriesExhausted reaches producers.
"""

from typing import Any, Sequence


class KinesisWritableError(Exception):
    """Base error for the Kinesis writable stream."""

    pass


class ConfigurationError(KinesisWritableError, ValueError):
    """Invalid construction arguments; the writable is never created."""

    pass


class TransportError(KinesisWritableError):
    """The PutRecords call itself could not complete (network, auth, throttling)."""

    pass


class PartialFailure(KinesisWritableError):
    """PutRecords completed but reported some records as failed."""

    def __init__(self, failed_count: int, total: int, records: Sequence[Any] = ()):
        super().__init__(f"{failed_count} of {total} records failed")
        self.failed_count = failed_count
        self.total = total
        # The failed records themselves, in submission order
        self.records = list(records)


class RetriesExhausted(KinesisWritableError):
    """Failed records persisted after the retry budget was spent."""

    def __init__(self, failed_count: int):
        super().__init__(f"Failed to write {failed_count} records")
        self.failed_count = failed_count


def map_client_error(e: Exception) -> TransportError:
    if isinstance(e, TransportError):
        return e
    return TransportError(f"{type(e).__name__}: {e}")
