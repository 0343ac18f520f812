import logging
import os
from typing import Iterator, List

# Keep test runs from writing logs/dnsflail.jsonl into the working tree.
os.environ.setdefault("DNSFLAIL_LOG_FILE", "")

import dns.exception
import pytest

from dnsFlail.generator.models import ResolvedServer


class ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self, level: int) -> List[str]:
        return [r.getMessage() for r in self.records if r.levelno == level]

    def summaries(self) -> List[str]:
        return [m for m in self.messages(logging.INFO) if m.startswith("requests: ")]


class FailingTransport:
    def __init__(self) -> None:
        self.calls = 0

    async def send(self, query, address, port, timeout):
        self.calls += 1
        raise dns.exception.Timeout(timeout=timeout)


class SucceedingTransport:
    def __init__(self) -> None:
        self.queries = []

    async def send(self, query, address, port, timeout):
        self.queries.append((query, address, port, timeout))
        return None


@pytest.fixture
def generator_logs() -> Iterator[ListHandler]:
    logger = logging.getLogger("dnsflail.generator")
    handler = ListHandler()
    logger.addHandler(handler)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)


@pytest.fixture
def failing_transport() -> FailingTransport:
    return FailingTransport()


@pytest.fixture
def succeeding_transport() -> SucceedingTransport:
    return SucceedingTransport()


@pytest.fixture
def server() -> ResolvedServer:
    return ResolvedServer(address="127.0.0.1", port=5353, host="localhost")


@pytest.fixture
def names_file(tmp_path):
    path = tmp_path / "names.txt"
    path.write_text("example.com\n\n  test.org  \n   \n", encoding="utf-8")
    return path
