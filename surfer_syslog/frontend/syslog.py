# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Syslog frontend: listener, ingestion queue and worker
#
# The listener publishes raw field maps into a bounded queue; a single worker
# task drains it, builds LogEntry objects and writes them to the sink.
# close() performs a rendezvous with the worker: it puts an acknowledgement
# future into a one-slot stop queue and waits until the worker resolves it.

# Standard library imports
import asyncio
import logging
import os

from typing import Any, Callable, Mapping, Optional

# Local/package imports
from surfer_syslog.config import FrontendConfig
from surfer_syslog.entry_builder import EntryBuilder
from surfer_syslog.errors import (
    AlreadyClosedError,
    AlreadyStartedError,
    FrontendStateError,
    SerializationError,
    ShutdownError,
)
from surfer_syslog.frontend.base import FrontendState, LogFrontend
from surfer_syslog.protocol.handler import QueueHandler
from surfer_syslog.protocol.listener import RawMessageSource, SyslogListener
from surfer_syslog.sink import DiagnosticLogSink, EntrySink
from surfer_syslog.telemetry import get_tracer

FatalHandler = Callable[[BaseException], None]


def abort_process(exc: BaseException) -> None:
    """
    Terminate the process after an internal invariant violation.
    """
    logging.getLogger("surfer_syslog.frontend.syslog").critical(
        f"Unrecoverable error in syslog worker: {exc}", exc_info=exc
    )
    logging.shutdown()
    os.abort()


class SyslogFrontend(LogFrontend):
    """
    Frontend receiving syslog over TCP or UDP.

    The listener address is bound by the constructor; ``start()`` boots the
    listener and the worker, ``close()`` stops them again.
    """

    def __init__(
        self,
        config: FrontendConfig,
        sink: Optional[EntrySink] = None,
        source: Optional[RawMessageSource] = None,
        on_fatal: Optional[FatalHandler] = None,
    ):
        """
        Initialize the frontend and bind its listener.

        Args:
            config: Frontend configuration
            sink: Destination of built entries (default: DiagnosticLogSink)
            source: Raw message source (default: SyslogListener for config)
            on_fatal: Called with a SerializationError raised by the sink

        Raises:
            BindError: If the listener cannot acquire its address
        """
        self.logger = logging.getLogger("surfer_syslog.frontend.syslog")
        self.state = FrontendState.CREATED
        self.config = config
        self.sink = sink or DiagnosticLogSink()
        self.on_fatal = on_fatal or abort_process
        self.builder = EntryBuilder(config.format)

        self.logs_queue: "asyncio.Queue[Mapping[str, Any]]" = asyncio.Queue(
            maxsize=config.queue_size
        )
        self.stop_queue: "asyncio.Queue[asyncio.Future]" = asyncio.Queue(maxsize=1)
        self.handler = QueueHandler(self.logs_queue)
        self.worker: Optional[asyncio.Task] = None

        self.source = source or SyslogListener(
            transport=config.transport,
            host=config.host,
            port=config.port,
            syslog_format=config.format,
            timeout=config.timeout,
        )
        self.source.set_handler(self.handler)
        self.source.listen()
        self.state = FrontendState.BOUND
        self.logger.debug(
            f"Syslog frontend bound to {config.transport}://{config.address}",
            extra={"frontend": config.address},
        )

    async def start(self) -> None:
        """
        Boot the listener and launch the worker.

        Raises:
            AlreadyStartedError: If the frontend is already running
            AlreadyClosedError: If the frontend has been closed
        """
        if self.state == FrontendState.RUNNING:
            raise AlreadyStartedError("Syslog frontend already started")
        if self.state in (FrontendState.CLOSING, FrontendState.CLOSED):
            raise AlreadyClosedError("Syslog frontend is closed")
        if self.state != FrontendState.BOUND:
            raise FrontendStateError(f"Cannot start frontend in state {self.state.value}")

        await self.source.boot()
        self.sink.open()
        self.worker = asyncio.create_task(self._run())
        self.state = FrontendState.RUNNING
        self.logger.info(
            f"Syslog frontend started on {self.config.transport}://{self.config.address}",
            extra={"frontend": self.config.address},
        )

    async def close(self) -> None:
        """
        Stop the worker, then the listener.

        Returns only once the worker has acknowledged the stop request and
        exited. Messages still queued are discarded.

        Raises:
            AlreadyClosedError: If close() was already called
            ShutdownError: If the listener fails to release its resources
        """
        if self.state in (FrontendState.CLOSING, FrontendState.CLOSED):
            raise AlreadyClosedError("Syslog frontend already closed")

        was_running = self.state == FrontendState.RUNNING
        self.state = FrontendState.CLOSING
        self.logger.info(
            f"Stopping syslog frontend on {self.config.transport}://{self.config.address}",
            extra={"frontend": self.config.address},
        )
        try:
            if was_running:
                await self._stop_worker()
        finally:
            # The listener is released even if the handshake is cancelled
            try:
                await self.source.kill()
            except OSError as exc:
                raise ShutdownError(f"Failed to stop syslog listener: {exc}") from exc
            finally:
                if was_running:
                    self.sink.close()
                self.state = FrontendState.CLOSED

    async def _stop_worker(self) -> None:
        worker = self.worker
        if worker is None:
            return
        ack = asyncio.get_running_loop().create_future()
        try:
            await self.stop_queue.put(ack)
            await asyncio.wait({ack, worker}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            ack.cancel()
            worker.cancel()
            self.worker = None
            raise
        if not ack.done():
            ack.cancel()
            self.logger.error(
                "Syslog worker exited without acknowledging stop",
                extra={"frontend": self.config.address},
            )
        await asyncio.gather(worker, return_exceptions=True)
        self.worker = None

    async def _run(self) -> None:
        stop_waiter = asyncio.ensure_future(self.stop_queue.get())
        parts_waiter: Optional[asyncio.Future] = None
        try:
            while True:
                parts_waiter = asyncio.ensure_future(self.logs_queue.get())
                await asyncio.wait(
                    {parts_waiter, stop_waiter}, return_when=asyncio.FIRST_COMPLETED
                )
                if stop_waiter.done():
                    ack = stop_waiter.result()
                    if not ack.done():
                        ack.set_result(None)
                    return
                self.process(parts_waiter.result())
        finally:
            stop_waiter.cancel()
            if parts_waiter is not None:
                parts_waiter.cancel()

    def process(self, parts: Mapping[str, Any]) -> None:
        """
        Build an entry from one raw field map and write it to the sink.

        A SerializationError is passed to the fatal handler; any other error is
        logged and the message is skipped.
        """
        tracer = get_tracer()
        with tracer.start_as_current_span(
            "surfer.syslog.entry",
            attributes={"syslog.format": self.config.format.value},
        ):
            try:
                entry = self.builder.build(parts)
                self.sink.write(entry)
            except SerializationError as exc:
                self.on_fatal(exc)
            except Exception:
                self.logger.exception(
                    "Failed to process syslog message",
                    extra={"frontend": self.config.address},
                )
