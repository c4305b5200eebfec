from __future__ import annotations

from typing import AsyncIterable, Iterable, TypeVar, Union

from loguru import logger

from .types import Flushable

T = TypeVar("T")


async def pipe(source: Union[Iterable[T], AsyncIterable[T]], sink: Flushable[T]) -> int:
    """Feed every record from ``source`` into ``sink``, then end (or flush) it.

    Returns the number of records written to the sink.
    """
    count = 0
    if hasattr(source, "__aiter__"):
        async for record in source:  # type: ignore[union-attr]
            await sink.write(record)
            count += 1
    else:
        for record in source:  # type: ignore[union-attr]
            await sink.write(record)
            count += 1

    end = getattr(sink, "end", None)
    if end is not None:
        await end()
    else:
        await sink.flush()
    logger.debug(f"Piped {count} records")
    return count
