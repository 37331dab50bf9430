# -*- coding: utf-8 -*-
# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# TCP Protocol implementation for the syslog listener with RFC 6587 framing
# Standard library imports
import asyncio
import logging

from typing import Any, Dict, MutableSet, Optional

# Local/package imports
from surfer_syslog.protocol.decoder import SyslogDecoder
from surfer_syslog.protocol.framing import (
    DEFAULT_MAX_MSG_LENGTH,
    FramingError,
    FramingHelper,
)
from surfer_syslog.protocol.handler import QueueHandler
from surfer_syslog.protocol.processing import SyslogMessageProcessingMixin


class SyslogTCPProtocol(SyslogMessageProcessingMixin, asyncio.BufferedProtocol):
    """
    TCP Protocol implementation for handling syslog messages.

    One instance serves one connection. When ``idle_timeout`` is positive the
    connection is closed after that many seconds without data.
    """

    def __init__(
        self,
        decoder: SyslogDecoder,
        handler: QueueHandler,
        idle_timeout: float = 0.0,
        max_message_length: int = DEFAULT_MAX_MSG_LENGTH,
        connections: Optional[MutableSet["SyslogTCPProtocol"]] = None,
    ):
        self.logger = logging.getLogger("surfer_syslog.protocol.tcp")
        self.transport: Optional[asyncio.BaseTransport] = None
        self.peername: Optional[Any] = None
        self.decoder = decoder
        self.handler = handler
        self.idle_timeout = idle_timeout
        self.connections = connections
        self.framing = FramingHelper(
            max_msg_length=max_message_length, logger=self.logger
        )
        self.max_buffer_size = 65536
        self._read_buffer: Optional[bytearray] = None
        self._idle_handle: Optional[asyncio.TimerHandle] = None

    def get_peer_info(self) -> Dict[str, Any]:
        if self.peername:
            return {"host": self.peername[0], "port": self.peername[1]}
        return {"host": "unknown", "port": "unknown"}

    def span_attributes(self, msg: bytes) -> Dict[str, Any]:
        peer_info = self.get_peer_info()
        return {
            "net.transport": "ip_tcp",
            "net.peer.ip": str(peer_info["host"]),
            "net.peer.port": str(peer_info["port"]),
            "message.length": len(msg),
        }

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """
        Called when a connection is made. Registers the connection and arms the idle timer.
        """
        self.transport = transport
        self.peername = transport.get_extra_info("peername")
        if self.connections is not None:
            self.connections.add(self)
        peer_info = self.get_peer_info()
        self.logger.info(
            "TCP connection established",
            extra={
                "net.transport": "ip_tcp",
                "net.peer.ip": peer_info["host"],
                "net.peer.port": peer_info["port"],
            },
        )
        self._reset_idle_timer()

    def get_buffer(self, sizehint: int) -> bytearray:
        """
        Get a buffer for received data.

        Called by asyncio when some data is received.
        """
        buffer_size = self.max_buffer_size
        if sizehint > 0:
            buffer_size = min(sizehint, buffer_size)
        self._read_buffer = bytearray(buffer_size)
        return self._read_buffer

    def buffer_updated(self, nbytes: int) -> None:
        """
        Process the received data from buffer.

        Called by asyncio when the buffer is updated with nbytes.
        """
        if not nbytes:
            return
        if self._read_buffer is None:
            self.logger.error("Buffer updated called but no buffer exists")
            return

        self._reset_idle_timer()
        peer_info = self.get_peer_info()
        self.logger.debug(
            "Received data", extra={"peer": peer_info, "bytes_received": nbytes}
        )
        self.framing.add_data(self._read_buffer[:nbytes])
        try:
            messages = self.framing.extract_messages()
        except FramingError as exc:
            self.logger.error(
                f"Invalid framing from {peer_info}: {exc}", extra={"peer": peer_info}
            )
            if self.transport:
                self.transport.close()
            return

        self.process_syslog_messages(
            messages=messages,
            span_name="syslog.tcp.message",
            span_attributes_func=self.span_attributes,
            peer_info=peer_info,
        )

    def eof_received(self) -> bool:
        """
        Process any remaining data on EOF.
        """
        peer_info = self.get_peer_info()
        self.logger.debug("EOF received", extra={"peer": peer_info})
        try:
            messages = self.framing.extract_messages()
        except FramingError as exc:
            self.logger.error(
                f"Invalid framing from {peer_info}: {exc}", extra={"peer": peer_info}
            )
            messages = []

        remainder = self.framing.flush()
        if remainder:
            self.logger.warning(
                f"Final incomplete message in buffer at EOF from {peer_info}",
                extra={"peer": peer_info},
            )
            messages.append(remainder)

        self.process_syslog_messages(
            messages=messages,
            span_name="syslog.tcp.message",
            span_attributes_func=self.span_attributes,
            peer_info=peer_info,
        )
        return False  # Don't keep the transport open

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """
        Handle connection lost event.
        """
        peer_info = self.get_peer_info()
        if exc is not None:
            self.logger.error(
                f"Connection lost with error from {peer_info}: {exc}",
                extra={"peer": peer_info},
            )
        else:
            self.logger.info(
                f"Connection closed from {peer_info}", extra={"peer": peer_info}
            )

        self._cancel_idle_timer()
        self._read_buffer = None
        if self.connections is not None:
            self.connections.discard(self)

    def _reset_idle_timer(self) -> None:
        if self.idle_timeout <= 0:
            return
        self._cancel_idle_timer()
        loop = asyncio.get_running_loop()
        self._idle_handle = loop.call_later(self.idle_timeout, self._on_idle_timeout)

    def _cancel_idle_timer(self) -> None:
        if self._idle_handle is not None:
            self._idle_handle.cancel()
            self._idle_handle = None

    def _on_idle_timeout(self) -> None:
        self._idle_handle = None
        peer_info = self.get_peer_info()
        self.logger.info(
            f"Closing idle TCP connection from {peer_info}",
            extra={"peer": peer_info, "idle_timeout": self.idle_timeout},
        )
        if self.transport:
            self.transport.close()
