# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Pytest configuration file

# Standard library imports
import asyncio
import logging

from typing import Any, Callable, List, Mapping, Optional

# Third-party imports
import pytest

# Local/package imports
from surfer_syslog.config import FrontendConfig
from surfer_syslog.models import LogEntry
from surfer_syslog.protocol.handler import QueueHandler
from surfer_syslog.protocol.listener import RawMessageSource
from surfer_syslog.sink import EntrySink


# Define test categories
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark a test as an integration test"
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration after each test."""
    yield
    # Reset root logger after each test
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)  # Default level


class MemorySink(EntrySink):
    """Sink keeping written entries in a list."""

    def __init__(self, error: Optional[Exception] = None):
        super().__init__()
        self.entries: List[LogEntry] = []
        self.error = error
        self.acquired = 0
        self.released = 0

    def acquire(self) -> None:
        self.acquired += 1

    def release(self) -> None:
        self.released += 1

    def write(self, entry: LogEntry) -> None:
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        self.entries.append(entry)


class FakeSource(RawMessageSource):
    """Message source driven directly by the test."""

    def __init__(
        self,
        listen_error: Optional[Exception] = None,
        kill_error: Optional[Exception] = None,
    ):
        self.handler: Optional[QueueHandler] = None
        self.listen_error = listen_error
        self.kill_error = kill_error
        self.listening = False
        self.booted = False
        self.killed = False

    def set_handler(self, handler: QueueHandler) -> None:
        self.handler = handler

    def listen(self) -> None:
        if self.listen_error is not None:
            raise self.listen_error
        self.listening = True

    async def boot(self) -> None:
        self.booted = True

    async def kill(self) -> None:
        self.killed = True
        if self.kill_error is not None:
            raise self.kill_error

    def publish(self, parts: Mapping[str, Any]) -> bool:
        assert self.handler is not None
        return self.handler.handle(parts)


async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll until predicate() is true or fail after timeout seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.01)


@pytest.fixture
def memory_sink():
    return MemorySink()


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture
def frontend_config():
    return FrontendConfig(transport="udp", host="127.0.0.1", port=0, queue_size=4)


@pytest.fixture
def wait_until():
    return wait_for
