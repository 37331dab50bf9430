# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Tests for the engine running several frontends

# Standard library imports
import asyncio

from unittest.mock import AsyncMock, MagicMock

# Third-party imports
import pytest

# Local/package imports
from surfer_syslog.engine import Engine
from surfer_syslog.errors import (
    AlreadyClosedError,
    ConfigError,
    ShutdownError,
    UnsupportedSchemeError,
)
from surfer_syslog.frontend import FrontendState


def mock_frontend(start_error=None, close_error=None):
    frontend = MagicMock()
    frontend.start = AsyncMock(side_effect=start_error)
    frontend.close = AsyncMock(side_effect=close_error)
    return frontend


class TestEngine:
    """Tests for the Engine class."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_start_close(self, memory_sink):
        engine = await Engine.create(
            ["syslog+udp://127.0.0.1:0", "syslog+tcp://127.0.0.1:0"], sink=memory_sink
        )
        assert len(engine.frontends) == 2
        assert all(f.state is FrontendState.BOUND for f in engine.frontends)

        await engine.start()
        assert all(f.state is FrontendState.RUNNING for f in engine.frontends)
        assert memory_sink.acquired == 1

        await engine.close()
        assert all(f.state is FrontendState.CLOSED for f in engine.frontends)
        assert memory_sink.released == 1
        assert not memory_sink.is_open

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_create_closes_built_frontends_on_error(self, mocker, memory_sink):
        first = mock_frontend()
        mocker.patch(
            "surfer_syslog.engine.new_frontend",
            side_effect=[first, ConfigError("bad url")],
        )

        with pytest.raises(ConfigError):
            await Engine.create(["syslog+udp://:1", "syslog+udp://"], sink=memory_sink)
        first.close.assert_awaited_once()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_with_unsupported_scheme(self, memory_sink):
        with pytest.raises(UnsupportedSchemeError):
            await Engine.create(
                ["syslog+udp://127.0.0.1:0", "api+http://:8181/api/"], sink=memory_sink
            )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_start_failure_closes_engine(self, memory_sink):
        first = mock_frontend()
        second = mock_frontend(start_error=OSError("boom"))
        engine = Engine([first, second], memory_sink)

        with pytest.raises(OSError):
            await engine.start()

        first.close.assert_awaited_once()
        second.close.assert_awaited_once()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_close_reports_first_shutdown_error(self, memory_sink):
        error = ShutdownError("listener stuck")
        frontends = [
            mock_frontend(close_error=error),
            mock_frontend(close_error=AlreadyClosedError("closed")),
            mock_frontend(),
        ]
        engine = Engine(frontends, memory_sink)

        with pytest.raises(ShutdownError) as exc_info:
            await engine.close()

        assert exc_info.value is error
        for frontend in frontends:
            frontend.close.assert_awaited_once()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stop_releases_wait(self, memory_sink):
        engine = Engine([], memory_sink)
        waiter = asyncio.create_task(engine.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        engine.stop()
        await asyncio.wait_for(waiter, timeout=1)

