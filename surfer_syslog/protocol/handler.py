# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Handler passing decoded field maps from the listener into the ingestion queue
#
# The ingestion queue is the backpressure boundary between the listener and
# the frontend worker. Protocol callbacks cannot block, so when the queue is
# full the handler drops the message and logs a warning. The frontend does
# not control this policy; a different listener may apply its own.

# Standard library imports
import asyncio
import logging

from typing import Any, Dict, Mapping, Optional


class QueueHandler:
    """
    Publish raw field maps into a bounded asyncio queue.

    Attributes:
        queue (asyncio.Queue): The ingestion queue shared with the worker.
        dropped (int): Number of messages dropped because the queue was full.
    """

    def __init__(self, queue: "asyncio.Queue[Mapping[str, Any]]"):
        self.logger = logging.getLogger("surfer_syslog.protocol.handler")
        self.queue = queue
        self.dropped = 0

    def handle(
        self, parts: Mapping[str, Any], peer_info: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Enqueue one field map without waiting.

        Args:
            parts: The decoded field map
            peer_info: Information about the sender, for logging

        Returns:
            True if the map was queued, False if it was dropped.
        """
        try:
            self.queue.put_nowait(parts)
        except asyncio.QueueFull:
            self.dropped += 1
            self.logger.warning(
                "Ingestion queue full, dropping syslog message",
                extra={
                    "peer": peer_info or {},
                    "queue_size": self.queue.maxsize,
                    "dropped": self.dropped,
                },
            )
            return False
        return True
