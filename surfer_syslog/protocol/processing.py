# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Mixin for shared syslog message processing logic
#
# This mixin provides a reusable method for decoding framed syslog messages,
# tracing them, and handing the resulting field maps to the ingestion handler,
# for use by protocol handler classes.

# Standard library imports
import logging

from typing import Any, Callable, Dict, Iterable

# Local/package imports
from surfer_syslog.errors import DecodeError
from surfer_syslog.protocol.decoder import SyslogDecoder
from surfer_syslog.protocol.handler import QueueHandler
from surfer_syslog.telemetry import get_tracer


class SyslogMessageProcessingMixin:
    """
    Mixin class providing shared logic for processing syslog messages.

    Classes using it must set ``logger``, ``decoder`` and ``handler``.
    """

    logger: logging.Logger
    decoder: SyslogDecoder
    handler: QueueHandler

    def process_syslog_messages(
        self,
        messages: Iterable[bytes],
        span_name: str,
        span_attributes_func: Callable[[bytes], Dict[str, Any]],
        peer_info: Dict[str, Any],
    ) -> int:
        """
        Decode each message and publish it to the handler.

        Messages that fail to decode are logged and dropped.

        Args:
            messages: Raw syslog message bytes.
            span_name: Name for the tracing span.
            span_attributes_func: Function producing span attributes for a message.
            peer_info: Information about the message sender (host/port).

        Returns:
            The number of messages handed to the handler.
        """
        tracer = get_tracer()
        published = 0
        for msg in messages:
            if not msg:
                continue
            with tracer.start_as_current_span(
                span_name, attributes=span_attributes_func(msg)
            ) as span:
                try:
                    parts = self.decoder.decode(msg)
                except DecodeError as exc:
                    span.set_attribute("syslog.decode_error", str(exc))
                    self.logger.warning(
                        "Failed to parse syslog message",
                        extra={"peer": peer_info, "error": str(exc)},
                    )
                    self.logger.debug(
                        "Raw syslog message",
                        extra={
                            "peer": peer_info,
                            "log_msg": msg.decode("utf-8", errors="replace"),
                        },
                    )
                    continue

                self.logger.debug(
                    "Syslog message received",
                    extra={"peer": peer_info, "event_type": type(self.decoder).__name__},
                )
                if self.handler.handle(parts, peer_info):
                    published += 1
        return published
