"""
Partition key strategies.

Key distribution drives shard balance downstream. The default spreads
records randomly; callers needing deterministic sharding supply their own
strategy (or use field_partition_key).
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from typing import Any

from .types import PartitionKeyFn


def random_partition_key(record: Any = None) -> str:
    """Pseudo-random integer in [0, 1000), zero-padded to 4 characters."""
    return f"{random.randrange(1000):04d}"


def field_partition_key(field: str, fallback: PartitionKeyFn = random_partition_key) -> PartitionKeyFn:
    """Build a strategy keyed on a record field (mapping key or attribute).

    Records lacking the field, or holding None there, go through ``fallback``.
    """

    def _key(record: Any) -> str:
        if isinstance(record, Mapping):
            value = record.get(field)
        else:
            value = getattr(record, field, None)
        if value is None:
            return fallback(record)
        return str(value)

    return _key
