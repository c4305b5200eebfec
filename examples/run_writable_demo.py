"""
Demo script for KinesisWritable.

Uses an in-memory client that rejects ~20% of records per call, showing
threshold flushes, failed-subset retries and the idle-timeout flush.
"""

import asyncio
import random
from loguru import logger

from kinesis_writable import ErrorEvent, KinesisWritable, WritableConfig


class FlakyKinesis:
    """Async stand-in for a Kinesis client with per-record throttling."""

    def __init__(self, failure_rate: float = 0.2):
        self.failure_rate = failure_rate
        self.delivered = 0

    async def put_records(self, *, Records, StreamName):
        await asyncio.sleep(0.01)  # simulate network latency
        results = []
        for _ in Records:
            if random.random() < self.failure_rate:
                results.append(
                    {
                        "ErrorCode": "ProvisionedThroughputExceededException",
                        "ErrorMessage": "Rate exceeded for shard shardId-000000000000",
                    }
                )
            else:
                self.delivered += 1
                results.append({"SequenceNumber": "0", "ShardId": "shardId-000000000000"})
        failed = sum(1 for r in results if "ErrorCode" in r)
        return {"FailedRecordCount": failed, "Records": results}


async def on_error(event: ErrorEvent):
    logger.error(f"⚠️  {event.failed_count} records stuck on {event.stream_name}")


async def main():
    client = FlakyKinesis()
    config = WritableConfig(
        high_water_mark=50, max_retries=5, base_retry_delay_ms=20, flush_idle_timeout_ms=200
    )

    async with KinesisWritable(client, "demo-stream", config) as writable:
        writable.on_error(on_error)
        logger.info("🚀 Writing 1,000 records")
        for i in range(1_000):
            await writable.write({"seq": i, "user": f"user-{i % 7}"})

        # A partial batch below the high-water mark goes out on the idle timer
        for i in range(10):
            await writable.write({"seq": 1_000 + i, "user": "late"})
        await asyncio.sleep(0.5)
        logger.info(f"Queue after idle flush: {writable.pending} pending")

    logger.info(f"✅ Delivered {client.delivered} records")


if __name__ == "__main__":
    asyncio.run(main())
