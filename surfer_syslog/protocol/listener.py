# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Listener lifecycle for the syslog raw message source
#
# The socket is bound synchronously by listen(), so bind failures surface while
# the frontend is being constructed. boot() attaches the asyncio protocol to the
# bound socket and kill() tears everything down again.

# Standard library imports
import asyncio
import logging
import socket

from abc import ABC, abstractmethod
from typing import Optional, Set, Tuple

# Local/package imports
from surfer_syslog.errors import BindError
from surfer_syslog.models import SyslogFormat
from surfer_syslog.protocol.decoder import DecoderFactory
from surfer_syslog.protocol.handler import QueueHandler
from surfer_syslog.protocol.tcp import SyslogTCPProtocol
from surfer_syslog.protocol.udp import SyslogUDPProtocol


class RawMessageSource(ABC):
    """
    Producer of raw syslog field maps for a frontend.

    The frontend calls ``set_handler`` and ``listen`` while it is constructed,
    ``boot`` from ``start()`` and ``kill`` from ``close()``.
    """

    @abstractmethod
    def set_handler(self, handler: QueueHandler) -> None:
        """Set the handler receiving decoded field maps."""

    @abstractmethod
    def listen(self) -> None:
        """
        Acquire the listening address.

        Raises:
            BindError: If the address cannot be acquired.
        """

    @abstractmethod
    async def boot(self) -> None:
        """Start accepting messages."""

    @abstractmethod
    async def kill(self) -> None:
        """
        Stop accepting messages and release the address.

        Raises:
            OSError: If resources cannot be released.
        """


class SyslogListener(RawMessageSource):
    """
    AsyncIO TCP or UDP syslog listener.
    """

    def __init__(
        self,
        transport: str,
        host: str,
        port: int,
        syslog_format: SyslogFormat = SyslogFormat.RFC3164,
        timeout: float = 0.0,
    ):
        """
        Initialize the listener.

        Args:
            transport: "tcp" or "udp"
            host: The host address to bind to, "" for every interface
            port: The port to listen on, 0 for any free port
            syslog_format: Header format used to decode messages
            timeout: TCP idle timeout in seconds, 0 disables it
        """
        self.logger = logging.getLogger("surfer_syslog.protocol.listener")
        self.transport = transport.lower()
        if self.transport not in ("tcp", "udp"):
            raise ValueError(f"Invalid transport specified: {transport}")
        self.host = host
        self.port = port
        self.syslog_format = syslog_format
        self.timeout = timeout
        self.handler: Optional[QueueHandler] = None
        self.sock: Optional[socket.socket] = None
        self.tcp_server: Optional[asyncio.AbstractServer] = None
        self.udp_transport: Optional[asyncio.DatagramTransport] = None
        self.connections: Set[SyslogTCPProtocol] = set()

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port), or the requested one before listen()."""
        if self.sock is not None:
            sockname = self.sock.getsockname()
            return sockname[0], sockname[1]
        return self.host, self.port

    def set_handler(self, handler: QueueHandler) -> None:
        self.handler = handler

    def listen(self) -> None:
        socktype = socket.SOCK_STREAM if self.transport == "tcp" else socket.SOCK_DGRAM
        try:
            family, _, proto, _, sockaddr = socket.getaddrinfo(
                self.host or None,
                self.port,
                type=socktype,
                flags=socket.AI_PASSIVE,
            )[0]
            sock = socket.socket(family, socktype, proto)
        except OSError as e:
            raise BindError((self.host, self.port), e) from e

        try:
            if self.transport == "tcp":
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(sockaddr)
            sock.setblocking(False)
        except OSError as e:
            sock.close()
            raise BindError((self.host, self.port), e) from e

        self.sock = sock
        host, port = self.address
        self.logger.debug(
            f"Bound {self.transport.upper()} socket on {host}:{port}",
            extra={"net.transport": f"ip_{self.transport}"},
        )

    async def boot(self) -> None:
        """
        Attach the syslog protocol to the bound socket.

        Raises:
            RuntimeError: If listen() has not been called or no handler is set
        """
        if self.sock is None:
            raise RuntimeError("Listener is not bound")
        if self.handler is None:
            raise RuntimeError("Listener has no handler")

        loop = asyncio.get_running_loop()
        decoder = DecoderFactory.create_decoder(self.syslog_format)
        handler = self.handler
        host, port = self.address

        if self.transport == "udp":
            self.udp_transport, _ = await loop.create_datagram_endpoint(
                lambda: SyslogUDPProtocol(decoder=decoder, handler=handler),
                sock=self.sock,
            )
            self.logger.info(f"UDP server listening on {host}:{port}")
        else:

            def protocol_factory() -> SyslogTCPProtocol:
                return SyslogTCPProtocol(
                    decoder=decoder,
                    handler=handler,
                    idle_timeout=self.timeout,
                    connections=self.connections,
                )

            self.tcp_server = await loop.create_server(protocol_factory, sock=self.sock)
            self.logger.info(
                f"TCP server listening on {host}:{port} with idle timeout: {self.timeout}s"
            )

    async def kill(self) -> None:
        """
        Stop the listener.
        """
        self.logger.info("Stopping syslog listener")

        if self.udp_transport is not None:
            self.logger.debug("Closing UDP transport")
            self.udp_transport.close()
            self.udp_transport = None
            # The transport owns the socket now
            self.sock = None

        if self.tcp_server is not None:
            self.logger.debug("Closing TCP server")
            self.tcp_server.close()
            for connection in list(self.connections):
                if connection.transport is not None:
                    connection.transport.close()
            await self.tcp_server.wait_closed()
            self.tcp_server = None
            self.sock = None

        if self.sock is not None:
            self.logger.debug("Closing unused socket")
            self.sock.close()
            self.sock = None
