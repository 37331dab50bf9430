# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# UDP Protocol implementation for the syslog listener


# Standard library imports
import asyncio
import logging

from typing import Any, Optional, Tuple

# Local/package imports
from surfer_syslog.protocol.decoder import SyslogDecoder
from surfer_syslog.protocol.handler import QueueHandler
from surfer_syslog.protocol.processing import SyslogMessageProcessingMixin


class SyslogUDPProtocol(SyslogMessageProcessingMixin, asyncio.DatagramProtocol):
    """
    UDP Protocol implementation for handling syslog messages.

    Each datagram carries exactly one syslog message.
    """

    def __init__(
        self,
        decoder: SyslogDecoder,
        handler: QueueHandler,
        buffer_size: int = 65536,  # 64KB default buffer size
    ):
        """
        Initialize the UDP protocol.

        Args:
            decoder: Header decoder producing raw field maps
            handler: Handler publishing field maps into the ingestion queue
            buffer_size: Size of the UDP receive buffer
        """
        self.logger = logging.getLogger("surfer_syslog.protocol.udp")
        self.transport: Optional[asyncio.BaseTransport] = None
        self.decoder = decoder
        self.handler = handler
        self.buffer_size = buffer_size

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """
        Called when the endpoint is ready to receive datagrams.

        Args:
            transport: The transport for the endpoint
        """
        self.transport = transport
        socket_info = transport.get_extra_info("socket")
        if not socket_info:
            self.logger.info("UDP server started", extra={"net.transport": "ip_udp"})
            return

        try:
            socket_info.setsockopt(
                socket_info.SOL_SOCKET, socket_info.SO_RCVBUF, self.buffer_size
            )
        except (OSError, AttributeError) as e:
            self.logger.warning(
                "Failed to set UDP receive buffer size",
                extra={"error": str(e), "requested_size": self.buffer_size},
            )

        # Handle both IPv4 (host, port) and IPv6 (host, port, flowinfo, scopeid)
        sockname = socket_info.getsockname()
        host, port = sockname[0], sockname[1]
        self.logger.info(
            f"UDP server started on {host}:{port}",
            extra={
                "net.transport": "ip_udp",
                "net.host.ip": host,
                "net.host.port": port,
            },
        )

    def datagram_received(self, data: bytes, addr: Tuple[Any, ...]) -> None:
        """
        Called when a UDP datagram is received.

        Args:
            data: The datagram data
            addr: The address of the sender
        """
        host, port = addr[0], addr[1]
        self.logger.debug("Received UDP datagram", extra={"host": host, "port": port})

        def span_attributes(msg: bytes) -> dict:
            return {
                "net.transport": "ip_udp",
                "net.peer.ip": host,
                "net.peer.port": port,
                "message.length": len(msg),
            }

        self.process_syslog_messages(
            messages=[data],
            span_name="syslog.udp.message",
            span_attributes_func=span_attributes,
            peer_info={"host": host, "port": port},
        )

    def error_received(self, exc: Exception) -> None:
        """
        Called when a previous send or receive operation raises an OSError.

        Args:
            exc: The exception that was raised
        """
        self.logger.error(f"Error in UDP server: {exc}", extra={"error": exc})

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """
        Called when the endpoint is closed.

        Args:
            exc: The exception that caused the close, or None
        """
        if exc:
            self.logger.warning(
                f"UDP server connection closed with error: {exc}",
                extra={"net.transport": "ip_udp", "error": exc},
            )
        else:
            self.logger.debug(
                "UDP server connection closed",
                extra={"net.transport": "ip_udp"},
            )
