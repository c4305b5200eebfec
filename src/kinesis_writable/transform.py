from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from .partition import random_partition_key
from .types import BatchItem, Codec, PartitionKeyFn


def json_codec(record: Any) -> bytes:
    """Default codec: JSON, with pydantic models dumped through their own serializer."""
    if isinstance(record, BaseModel):
        return record.model_dump_json().encode("utf-8")
    return json.dumps(record, default=str).encode("utf-8")


class RecordTransformer:
    """Maps queued records to PutRecords entries. Pure; the record is never mutated."""

    def __init__(
        self,
        codec: Optional[Codec] = None,
        partition_key: Optional[PartitionKeyFn] = None,
    ):
        self._codec = codec or json_codec
        self._partition_key = partition_key or random_partition_key

    def transform(self, record: Any) -> BatchItem:
        return BatchItem(payload=self._codec(record), partition_key=self._partition_key(record))

    def transform_many(self, records: Iterable[Any]) -> list[BatchItem]:
        return [self.transform(r) for r in records]
