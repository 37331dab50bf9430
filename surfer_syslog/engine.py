# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Engine running a set of frontends that share one entry sink

# Standard library imports
import asyncio
import logging

from typing import Iterable, List, Optional, Union
from urllib.parse import SplitResult

# Local/package imports
from surfer_syslog.errors import AlreadyClosedError, ShutdownError
from surfer_syslog.frontend import LogFrontend, new_frontend
from surfer_syslog.sink import DiagnosticLogSink, EntrySink


class Engine:
    """
    Lifecycle manager for the configured frontends.

    Use ``await Engine.create(urls)`` to build it: every frontend binds its
    listener while the engine is created.
    """

    def __init__(self, frontends: List[LogFrontend], sink: EntrySink):
        self.logger = logging.getLogger("surfer_syslog.engine")
        self.frontends = frontends
        self.sink = sink
        self._stopped = asyncio.Event()

    @classmethod
    async def create(
        cls,
        frontend_urls: Iterable[Union[str, SplitResult]],
        sink: Optional[EntrySink] = None,
    ) -> "Engine":
        """
        Build a frontend for every URL.

        If one frontend cannot be built, the ones already bound are closed
        before the error is re-raised.

        Raises:
            ConfigError: If a URL is invalid
            BindError: If a listener cannot acquire its address
        """
        sink = sink or DiagnosticLogSink()
        frontends: List[LogFrontend] = []
        try:
            for url in frontend_urls:
                frontends.append(new_frontend(url, sink=sink))
        except Exception:
            for frontend in frontends:
                await frontend.close()
            raise
        return cls(frontends, sink)

    async def start(self) -> None:
        """
        Start every frontend, closing the started ones if one fails.
        """
        for frontend in self.frontends:
            try:
                await frontend.start()
            except Exception:
                self.logger.error("Failed to start frontend, shutting down engine")
                await self.close()
                raise
        self.logger.info(f"Engine started with {len(self.frontends)} frontend(s)")

    def stop(self) -> None:
        """Release callers blocked in wait()."""
        self._stopped.set()

    async def wait(self) -> None:
        """Block until stop() is called."""
        await self._stopped.wait()

    async def close(self) -> None:
        """
        Close every frontend.

        Raises:
            ShutdownError: The first listener release failure, after all
                frontends have been closed
        """
        first_error: Optional[ShutdownError] = None
        for frontend in self.frontends:
            try:
                await frontend.close()
            except AlreadyClosedError:
                continue
            except ShutdownError as exc:
                self.logger.error(f"Failed to close frontend: {exc}")
                first_error = first_error or exc
        self.stop()
        if first_error is not None:
            raise first_error

