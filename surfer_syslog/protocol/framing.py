# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Framing helper for syslog messages received over stream transports

# Standard library imports
import logging
import re

from typing import List, Optional

# Constants
DEFAULT_END_OF_MSG_MARKER = b"\n"
DEFAULT_MAX_MSG_LENGTH = 64 * 1024  # 64 KiB
MAX_OCTET_COUNT = 1024 * 1024  # 1 MiB


class FramingError(Exception):
    """Exception raised when an octet-counted frame is invalid."""


class FramingHelper:
    """
    Split a syslog byte stream into messages (RFC 6587).

    Every frame is inspected on its own: a frame starting with a non-zero digit
    followed by a space is octet-counted (``"<len> <msg>"``), anything else is
    terminated by the end-of-message marker. Delimited frames longer than
    ``max_msg_length`` are truncated.
    """

    def __init__(
        self,
        end_of_msg_marker: bytes = DEFAULT_END_OF_MSG_MARKER,
        max_msg_length: int = DEFAULT_MAX_MSG_LENGTH,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the framing helper.

        Args:
            end_of_msg_marker: The marker indicating end of message for delimited frames
            max_msg_length: Maximum message length for delimited frames
            logger: Logger instance
        """
        self.end_of_msg_marker = end_of_msg_marker
        self.max_msg_length = max_msg_length
        self.logger = logger or logging.getLogger(__name__)
        self._buffer = bytearray()

        # Pattern matches: [1-9] followed by 0-6 digits, followed by a space
        self._octet_count_pattern = re.compile(b"^([1-9][0-9]{0,6}) ")

    def add_data(self, data: bytes) -> None:
        """
        Add data to the buffer.

        Args:
            data: The data to add to the buffer
        """
        self._buffer.extend(data)

    def extract_messages(self) -> List[bytes]:
        """
        Extract every complete message from the buffer.

        Returns:
            A list of complete messages, in arrival order

        Raises:
            FramingError: If an octet count exceeds the allowed maximum
        """
        messages = []
        while self._buffer:
            if self._starts_with_digit():
                message = self._extract_octet_counted()
            else:
                message = self._extract_delimited()
            if message is None:
                break
            messages.append(message)
        return messages

    def flush(self) -> Optional[bytes]:
        """
        Return and clear whatever incomplete data is left in the buffer.
        """
        if not self._buffer:
            return None
        remainder = bytes(self._buffer)
        self._buffer.clear()
        return remainder

    def _starts_with_digit(self) -> bool:
        return 49 <= self._buffer[0] <= 57  # ASCII 1-9

    def _extract_octet_counted(self) -> Optional[bytes]:
        match = self._octet_count_pattern.match(self._buffer)
        if not match:
            # Digits without a space yet; a long digit run is a delimited frame
            if len(self._buffer) > 8 or self.end_of_msg_marker in self._buffer[:8]:
                return self._extract_delimited()
            return None

        octet_count = int(match.group(1))
        if octet_count > MAX_OCTET_COUNT:
            self._buffer.clear()
            raise FramingError(f"Invalid octet count: {octet_count}")

        header_length = match.end()
        total_length = header_length + octet_count
        if len(self._buffer) < total_length:
            self.logger.debug(
                f"Partial message: have {len(self._buffer)} bytes, need {total_length} bytes"
            )
            return None

        message = bytes(self._buffer[header_length:total_length])
        del self._buffer[:total_length]
        return message

    def _extract_delimited(self) -> Optional[bytes]:
        marker_len = len(self.end_of_msg_marker)
        marker_pos = self._buffer.find(
            self.end_of_msg_marker, 0, self.max_msg_length + marker_len
        )
        if marker_pos == -1:
            if len(self._buffer) < self.max_msg_length + marker_len:
                return None
            message = bytes(self._buffer[: self.max_msg_length])
            del self._buffer[: self.max_msg_length]
            self.logger.warning(
                f"Message truncated at max length ({self.max_msg_length} bytes)"
            )
            return message

        message = bytes(self._buffer[:marker_pos])
        del self._buffer[: marker_pos + marker_len]
        return message

    @property
    def buffer_size(self) -> int:
        """Get the current size of the buffer."""
        return len(self._buffer)
