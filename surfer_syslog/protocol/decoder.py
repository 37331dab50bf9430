# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Syslog header decoders producing raw field maps
#
# Each decoder turns one framed syslog message into a dict whose keys depend on
# the header format:
#   - RFC3164: priority, facility, severity, timestamp, hostname, tag, content
#   - RFC5424: priority, facility, severity, version, timestamp, hostname,
#              app_name, proc_id, msg_id, structured_data, message
# RFC5424 nil values ("-") are left out of the map.

# Standard library imports
import re

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Pattern, Tuple

# Local/package imports
from surfer_syslog.errors import DecodeError
from surfer_syslog.models import SyslogFormat

NILVALUE = "-"

_PRI_PATTERN: Pattern[str] = re.compile(r"^<(?P<pri>\d{1,3})>")

_RFC3164_HEADER: Pattern[str] = re.compile(
    r"(?P<timestamp>[A-Z][a-z]{2} [ \d]\d \d{2}:\d{2}:\d{2})\s+"
    r"(?P<hostname>\S+)\s?"
    r"(?P<rest>.*)$",
    re.DOTALL,
)
_RFC3164_TAG: Pattern[str] = re.compile(
    r"^(?P<tag>[^:\[\s]{1,48})(?:\[(?P<pid>[^\]]*)\])?:\s?(?P<content>.*)$",
    re.DOTALL,
)

_RFC5424_HEADER: Pattern[str] = re.compile(
    r"(?P<version>[1-9]\d{0,2}) "
    r"(?P<timestamp>\S+) "
    r"(?P<hostname>\S{1,255}) "
    r"(?P<app_name>\S{1,48}) "
    r"(?P<proc_id>\S{1,128}) "
    r"(?P<msg_id>\S{1,32}) "
    r"(?P<rest>.*)$",
    re.DOTALL,
)
_RFC5424_FRACTION: Pattern[str] = re.compile(r"\.(\d+)")


def _parse_priority(message: str) -> Tuple[Dict[str, Any], str]:
    match = _PRI_PATTERN.match(message)
    if not match:
        raise DecodeError("Missing or invalid PRI part")
    priority = int(match.group("pri"))
    if priority > 191:
        raise DecodeError(f"Priority out of range: {priority}")
    parts = {
        "priority": priority,
        "facility": priority >> 3,
        "severity": priority & 0x07,
    }
    return parts, message[match.end() :]


class SyslogDecoder(ABC):
    """Decode a single syslog message into a raw field map."""

    syslog_format: SyslogFormat

    def decode(self, raw_message: bytes) -> Dict[str, Any]:
        """
        Decode a framed message.

        Raises:
            DecodeError: If the header does not match the decoder's format.
        """
        message = raw_message.decode("utf-8", errors="replace")
        message = message.rstrip("\r\n\x00")
        if message.startswith("\ufeff"):
            message = message[1:]
        return self.decode_text(message)

    @abstractmethod
    def decode_text(self, message: str) -> Dict[str, Any]:
        """Decode an already-decoded text message."""


class RFC3164Decoder(SyslogDecoder):
    """
    Decoder for BSD syslog messages.

    The header timestamp has no year or zone; the current year and the local
    timezone are assumed.
    """

    syslog_format = SyslogFormat.RFC3164

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now().astimezone())

    def decode_text(self, message: str) -> Dict[str, Any]:
        parts, rest = _parse_priority(message)
        match = _RFC3164_HEADER.match(rest)
        if not match:
            raise DecodeError("Invalid RFC3164 header")

        parts["timestamp"] = self._parse_timestamp(match.group("timestamp"))
        parts["hostname"] = match.group("hostname")

        body = match.group("rest")
        tag_match = _RFC3164_TAG.match(body)
        if tag_match:
            parts["tag"] = tag_match.group("tag")
            parts["content"] = tag_match.group("content")
        else:
            parts["tag"] = ""
            parts["content"] = body
        return parts

    def _parse_timestamp(self, value: str) -> datetime:
        now = self.clock()
        try:
            parsed = datetime.strptime(f"{now.year} {value}", "%Y %b %d %H:%M:%S")
        except ValueError as e:
            raise DecodeError(f"Invalid RFC3164 timestamp: {value}") from e
        return parsed.replace(tzinfo=now.tzinfo)


class RFC5424Decoder(SyslogDecoder):
    """Decoder for IETF syslog messages."""

    syslog_format = SyslogFormat.RFC5424

    def decode_text(self, message: str) -> Dict[str, Any]:
        parts, rest = _parse_priority(message)
        match = _RFC5424_HEADER.match(rest)
        if not match:
            raise DecodeError("Invalid RFC5424 header")

        parts["version"] = int(match.group("version"))
        timestamp = match.group("timestamp")
        if timestamp != NILVALUE:
            parts["timestamp"] = self.parse_timestamp(timestamp)
        for key in ("hostname", "app_name", "proc_id", "msg_id"):
            value = match.group(key)
            if value != NILVALUE:
                parts[key] = value

        structured_data, body = self.split_structured_data(match.group("rest"))
        if structured_data != NILVALUE:
            parts["structured_data"] = structured_data
        if body.startswith("\ufeff"):
            body = body[1:]
        parts["message"] = body
        return parts

    @staticmethod
    def parse_timestamp(value: str) -> datetime:
        """Parse an RFC3339 timestamp, keeping at most microsecond precision."""
        text = value.upper()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # fromisoformat accepts at most six fractional digits before 3.11
        text = _RFC5424_FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise DecodeError(f"Invalid RFC5424 timestamp: {value}") from e
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def split_structured_data(rest: str) -> Tuple[str, str]:
        """
        Split the STRUCTURED-DATA part from the message body.

        Raises:
            DecodeError: If an SD-ELEMENT is not terminated.
        """
        if rest.startswith(NILVALUE):
            return NILVALUE, rest[2:] if rest.startswith("- ") else rest[1:]
        if not rest.startswith("["):
            raise DecodeError("Invalid RFC5424 structured data")

        position = 0
        in_quotes = False
        escaped = False
        while position < len(rest):
            char = rest[position]
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_quotes = not in_quotes
            elif char == "]" and not in_quotes:
                # Consecutive SD-ELEMENTs continue the structured data
                if position + 1 < len(rest) and rest[position + 1] == "[":
                    position += 1
                    continue
                sd = rest[: position + 1]
                body = rest[position + 1 :]
                return sd, body[1:] if body.startswith(" ") else body
            position += 1
        raise DecodeError("Unterminated RFC5424 structured data")


class DecoderFactory:
    """
    Factory for the header decoder matching a frontend's syslog format.
    """

    decoders = {
        SyslogFormat.RFC3164: RFC3164Decoder,
        SyslogFormat.RFC5424: RFC5424Decoder,
    }

    @classmethod
    def create_decoder(cls, syslog_format: SyslogFormat) -> SyslogDecoder:
        """
        Create a decoder for the given format.

        Raises:
            ValueError: If the format has no decoder.
        """
        try:
            return cls.decoders[syslog_format]()
        except KeyError:
            raise ValueError(f"Unsupported syslog format: {syslog_format}")
