from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Iterator, Optional, TextIO

import typer
from loguru import logger

from .config import WritableConfig, get_settings
from .errors import KinesisWritableError
from .partition import field_partition_key
from .policy import RetryPolicy
from .stream import pipe
from .writable import KinesisWritable

app = typer.Typer(help="Batching Kinesis PutRecords writer")

# ---------------------------
# Common options
# ---------------------------


def stream_opt() -> Optional[str]:
    return typer.Option(
        None, "--stream", envvar="KINESIS_WRITABLE_STREAM_NAME", help="Kinesis stream name"
    )


def region_opt() -> Optional[str]:
    return typer.Option(None, "--region", envvar="KINESIS_WRITABLE_REGION", help="AWS region")


def iter_ndjson(fh: TextIO) -> Iterator[object]:
    """Yield one decoded JSON value per non-blank line."""
    for lineno, line in enumerate(fh, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            yield json.loads(line)
        except json.JSONDecodeError as e:
            raise typer.BadParameter(f"line {lineno}: {e}") from e


def make_kinesis_client(region: Optional[str]):
    import boto3

    return boto3.client("kinesis", region_name=region)


# ---------------------------
# Commands
# ---------------------------


@app.command("put")
def put(
    source: Optional[Path] = typer.Argument(None, help="NDJSON file (default: stdin)"),
    stream: Optional[str] = stream_opt(),
    region: Optional[str] = region_opt(),
    high_water_mark: Optional[int] = typer.Option(None, "--high-water-mark"),
    max_retries: Optional[int] = typer.Option(None, "--max-retries"),
    retry_delay_ms: Optional[float] = typer.Option(None, "--retry-delay-ms"),
    idle_timeout_ms: Optional[float] = typer.Option(None, "--idle-timeout-ms"),
    partition_field: Optional[str] = typer.Option(
        None, "--partition-field", help="Record field used as the partition key"
    ),
):
    """Write NDJSON records to a Kinesis stream in batches."""
    settings = get_settings()
    stream_name = stream or settings.stream_name
    if not stream_name:
        raise typer.BadParameter("--stream (or KINESIS_WRITABLE_STREAM_NAME) is required")

    base = settings.to_config()
    overrides = {
        "high_water_mark": high_water_mark,
        "max_retries": max_retries,
        "base_retry_delay_ms": retry_delay_ms,
        "flush_idle_timeout_ms": idle_timeout_ms,
    }
    config = WritableConfig(
        **{**base.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
    )

    client = make_kinesis_client(region or settings.region)
    writable: KinesisWritable[object] = KinesisWritable(
        client,
        stream_name,
        config,
        partition_key=field_partition_key(partition_field) if partition_field else None,
    )

    async def _run() -> int:
        if source is None:
            return await pipe(iter_ndjson(sys.stdin), writable)
        with source.open("r", encoding="utf-8") as fh:
            return await pipe(iter_ndjson(fh), writable)

    try:
        count = asyncio.run(_run())
    except KinesisWritableError as e:
        logger.error(f"Write to {stream_name} failed: {e}")
        raise typer.Exit(code=1)

    logger.success(f"Wrote {count} records to {stream_name}")
    typer.echo(json.dumps({"stream": stream_name, "records": count}))


@app.command("backoff")
def backoff(
    max_retries: int = typer.Option(3, "--max-retries"),
    retry_delay_ms: float = typer.Option(100, "--retry-delay-ms"),
):
    """Print the retry delay schedule (ms) for the given settings."""
    policy = RetryPolicy(max_retries=max_retries, base_delay_ms=retry_delay_ms)
    typer.echo(json.dumps({"delays_ms": policy.schedule_ms()}))


if __name__ == "__main__":
    app()
