from __future__ import annotations

import asyncio
import inspect
from time import perf_counter
from typing import Any, Mapping, Sequence

from loguru import logger

from .config import MAX_BATCH_SIZE
from .errors import map_client_error
from .metrics import PUT_RECORDS_LATENCY_MS, RECORDS_TOTAL
from .types import BatchItem, PutRecordsClient, SubmissionOutcome


class BatchSubmitter:
    """Sends one snapshot of BatchItems through ``put_records``.

    Sync clients (boto3) run in a worker thread so the event loop keeps
    accepting writes; async clients are awaited directly. Any exception
    raised by the client, or an unreadable response, becomes a
    TransportError: no per-record status exists in that case.
    """

    def __init__(
        self,
        client: PutRecordsClient,
        stream_name: str,
        max_batch_size: int = MAX_BATCH_SIZE,
    ):
        self._client = client
        self._stream_name = stream_name
        self._max_batch_size = max_batch_size

    @property
    def stream_name(self) -> str:
        return self._stream_name

    async def submit(self, items: Sequence[BatchItem]) -> SubmissionOutcome:
        if len(items) > self._max_batch_size:
            raise ValueError(
                f"Batch of {len(items)} exceeds max_batch_size={self._max_batch_size}"
            )

        request = {
            "Records": [item.to_wire() for item in items],
            "StreamName": self._stream_name,
        }

        t0 = perf_counter()
        try:
            response = await self._call(request)
            outcome = SubmissionOutcome.from_response(response, expected=len(items))
        except Exception as e:
            RECORDS_TOTAL.labels(stream=self._stream_name, outcome="transport_error").inc(
                len(items)
            )
            logger.debug(f"PutRecords to {self._stream_name} failed: {type(e).__name__}: {e}")
            raise map_client_error(e) from e
        finally:
            PUT_RECORDS_LATENCY_MS.labels(stream=self._stream_name).observe(
                (perf_counter() - t0) * 1000.0
            )

        RECORDS_TOTAL.labels(stream=self._stream_name, outcome="success").inc(
            len(items) - outcome.failed_count
        )
        if outcome.failed_count:
            RECORDS_TOTAL.labels(stream=self._stream_name, outcome="failure").inc(
                outcome.failed_count
            )
        return outcome

    async def _call(self, request: dict[str, Any]) -> Mapping[str, Any]:
        put_records = self._client.put_records
        if inspect.iscoroutinefunction(put_records):
            return await put_records(**request)
        result = await asyncio.to_thread(put_records, **request)
        # e.g. mocks or partials wrapping a coroutine function
        if inspect.isawaitable(result):
            result = await result
        return result
