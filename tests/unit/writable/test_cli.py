"""
Unit tests for the kinesis-writable CLI.
"""

import json

from typer.testing import CliRunner

from kinesis_writable import cli

from fakes import FakeKinesis, fail_all

runner = CliRunner()


def test_backoff_schedule():
    result = runner.invoke(cli.app, ["backoff", "--max-retries", "5", "--retry-delay-ms", "100"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"delays_ms": [100, 100, 200, 300, 500]}


def test_put_from_file(tmp_path, monkeypatch):
    client = FakeKinesis()
    monkeypatch.setattr(cli, "make_kinesis_client", lambda region: client)

    src = tmp_path / "events.ndjson"
    src.write_text('{"user": "a", "n": 1}\n\n{"user": "b", "n": 2}\n{"user": "a", "n": 3}\n')

    result = runner.invoke(
        cli.app,
        ["put", str(src), "--stream", "clicks", "--high-water-mark", "2", "--partition-field", "user"],
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout.strip().splitlines()[-1]) == {"stream": "clicks", "records": 3}
    assert [len(c["Records"]) for c in client.calls] == [2, 1]
    assert [r["PartitionKey"] for c in client.calls for r in c["Records"]] == ["a", "b", "a"]


def test_put_from_stdin_uses_env_stream(monkeypatch):
    client = FakeKinesis()
    monkeypatch.setattr(cli, "make_kinesis_client", lambda region: client)
    monkeypatch.setenv("KINESIS_WRITABLE_STREAM_NAME", "from-env")

    result = runner.invoke(cli.app, ["put"], input='{"a": 1}\n')

    assert result.exit_code == 0, result.output
    assert client.calls[0]["StreamName"] == "from-env"


def test_put_requires_stream():
    result = runner.invoke(cli.app, ["put"], input='{"a": 1}\n')
    assert result.exit_code != 0


def test_put_exits_nonzero_when_retries_exhausted(tmp_path, monkeypatch):
    client = FakeKinesis(fail_all)
    monkeypatch.setattr(cli, "make_kinesis_client", lambda region: client)
    src = tmp_path / "events.ndjson"
    src.write_text('{"n": 1}\n')

    result = runner.invoke(
        cli.app, ["put", str(src), "--stream", "s", "--max-retries", "0"]
    )

    assert result.exit_code == 1
