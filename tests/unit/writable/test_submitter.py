"""
Unit tests for BatchSubmitter.
"""

import pytest

from kinesis_writable import BatchItem, BatchSubmitter, SubmissionOutcome, TransportError

from fakes import AsyncFakeKinesis, FakeKinesis, fail_at


def items(n):
    return [BatchItem(payload=str(i).encode(), partition_key=f"{i:04d}") for i in range(n)]


@pytest.mark.asyncio
async def test_submit_builds_wire_request(kinesis, stream_name):
    sub = BatchSubmitter(kinesis, stream_name)
    outcome = await sub.submit(items(3))

    assert outcome.all_succeeded
    assert len(outcome.statuses) == 3
    (call,) = kinesis.calls
    assert call["StreamName"] == stream_name
    assert call["Records"][1] == {"Data": b"1", "PartitionKey": "0001"}


@pytest.mark.asyncio
async def test_submit_reports_failed_indexes(stream_name):
    client = AsyncFakeKinesis(fail_at(0, 2))
    outcome = await BatchSubmitter(client, stream_name).submit(items(4))

    assert outcome.failed_count == 2
    assert outcome.failed_indexes() == [0, 2]
    assert outcome.statuses[0].error_code == "ProvisionedThroughputExceededException"
    assert outcome.statuses[1].succeeded


@pytest.mark.asyncio
async def test_client_exception_becomes_transport_error(stream_name):
    client = FakeKinesis(ConnectionError("connection reset"))
    with pytest.raises(TransportError) as exc_info:
        await BatchSubmitter(client, stream_name).submit(items(2))
    assert isinstance(exc_info.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_mismatched_response_is_transport_error(stream_name):
    client = FakeKinesis({"FailedRecordCount": 0, "Records": [{}]})
    with pytest.raises(TransportError):
        await BatchSubmitter(client, stream_name).submit(items(2))


@pytest.mark.asyncio
async def test_oversized_batch_rejected(kinesis, stream_name):
    sub = BatchSubmitter(kinesis, stream_name, max_batch_size=2)
    with pytest.raises(ValueError):
        await sub.submit(items(3))
    assert kinesis.calls == []


def test_outcome_from_response_counts_error_codes():
    outcome = SubmissionOutcome.from_response(
        {"FailedRecordCount": 1, "Records": [{}, {"ErrorCode": "X", "ErrorMessage": "boom"}]},
        expected=2,
    )
    assert outcome.failed_count == 1
    assert outcome.statuses[1].error_message == "boom"
