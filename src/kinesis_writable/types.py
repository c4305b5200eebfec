from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Mapping, Protocol, Sequence, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class BatchItem:
    """One wire-level PutRecords entry, derived 1:1 from a queued record."""

    payload: bytes
    partition_key: str

    def to_wire(self) -> dict[str, Any]:
        return {"Data": self.payload, "PartitionKey": self.partition_key}


@dataclass(frozen=True)
class ItemStatus:
    succeeded: bool
    error_code: str | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class SubmissionOutcome:
    """Per-record result of one PutRecords call, index-aligned with the request."""

    failed_count: int
    statuses: tuple[ItemStatus, ...]

    @classmethod
    def from_response(cls, response: Mapping[str, Any], expected: int) -> "SubmissionOutcome":
        """Parse a PutRecords response.

        An entry carrying ``ErrorCode`` is a failed record. A response whose
        ``Records`` length does not match the request is rejected, since
        index correlation would be meaningless.
        """
        entries = response.get("Records") or []
        if len(entries) != expected:
            raise ValueError(
                f"PutRecords returned {len(entries)} results for {expected} records"
            )
        statuses = tuple(
            ItemStatus(
                succeeded=not entry.get("ErrorCode"),
                error_code=entry.get("ErrorCode"),
                error_message=entry.get("ErrorMessage"),
            )
            for entry in entries
        )
        failed = sum(1 for s in statuses if not s.succeeded)
        return cls(failed_count=failed, statuses=statuses)

    def failed_indexes(self) -> list[int]:
        return [i for i, s in enumerate(self.statuses) if not s.succeeded]

    @property
    def all_succeeded(self) -> bool:
        return self.failed_count == 0


class PutRecordsClient(Protocol):
    """Anything exposing the boto3 ``put_records`` signature, sync or async."""

    def put_records(
        self, *, Records: Sequence[Mapping[str, Any]], StreamName: str
    ) -> Union[Mapping[str, Any], Awaitable[Mapping[str, Any]]]: ...


class PartitionKeyFn(Protocol):
    def __call__(self, record: Any) -> str: ...


class Codec(Protocol):
    def __call__(self, record: Any) -> bytes: ...


class Flushable(Protocol[T]):
    """Capability consumed by a generic flushable stream framework."""

    async def write(self, record: T) -> None: ...

    async def flush(self) -> None: ...


class DiagnosticLogger(Protocol):
    """Minimal logger surface; loguru, stdlib and structlog loggers all fit."""

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...
