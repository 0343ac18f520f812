import asyncio
import json
import logging
import sys

from dnsFlail.logging_config import (
    JSONLFormatter,
    get_logger,
    get_worker_id,
    reset_worker_id,
    set_worker_id,
    setup_logging,
)


def _record(msg="example.com: timed out", level=logging.ERROR, **extra):
    record = logging.LogRecord("dnsflail.generator", level, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_jsonl_formatter_emits_single_json_line():
    line = JSONLFormatter(component="generator").format(
        _record(qname="example.com", outcome="failure", unrelated="dropped")
    )

    assert "\n" not in line
    data = json.loads(line)
    assert data["level"] == "ERROR"
    assert data["component"] == "generator"
    assert data["message"] == "example.com: timed out"
    assert data["qname"] == "example.com"
    assert data["outcome"] == "failure"
    assert "unrelated" not in data
    assert data["timestamp"].endswith("Z")


def test_jsonl_formatter_includes_exception():
    try:
        raise ConnectionRefusedError("refused")
    except ConnectionRefusedError:
        record = _record()
        record.exc_info = sys.exc_info()

    data = json.loads(JSONLFormatter().format(record))
    assert data["exception"]["type"] == "ConnectionRefusedError"
    assert data["exception"]["message"] == "refused"


def test_worker_id_is_scoped_to_task():
    async def worker(index):
        token = set_worker_id(f"worker-{index}")
        try:
            await asyncio.sleep(0)
            return json.loads(JSONLFormatter().format(_record()))["worker_id"]
        finally:
            reset_worker_id(token)

    async def scenario():
        return await asyncio.gather(worker(0), worker(1))

    assert asyncio.run(scenario()) == ["worker-0", "worker-1"]
    assert get_worker_id() == ""


def test_setup_logging_writes_jsonl_file(tmp_path):
    log_file = tmp_path / "logs" / "flail.jsonl"
    logger = setup_logging("test", log_file=str(log_file), enable_console=False)

    logger.info("requests: 10/9/1 (total/successes/failures)", extra={"requests": 10})
    for handler in logger.handlers:
        handler.flush()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    data = json.loads(lines[-1])
    assert data["message"] == "requests: 10/9/1 (total/successes/failures)"
    assert data["requests"] == 10
    assert logger.propagate is False
    setup_logging("test", log_file="", enable_console=False)


def test_get_logger_reuses_configured_logger():
    first = get_logger("generator")
    assert get_logger("generator") is first
    assert first.name == "dnsflail.generator"


def test_unwritable_log_file_falls_back_to_console(tmp_path, capsys):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")

    logger = setup_logging("test", log_file=str(blocker / "flail.jsonl"), enable_console=False)

    assert logger.handlers == []
    assert "Failed to set up file logging" in capsys.readouterr().err
