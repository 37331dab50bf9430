# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Format-aware conversion of raw syslog field maps into LogEntry objects

# Standard library imports
import logging

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional

# Local/package imports
from surfer_syslog.content import map_values, parse_content
from surfer_syslog.errors import NoDataError
from surfer_syslog.models import LogEntry, LogMessage, SyslogFormat

RawParts = Mapping[str, Any]


class ExtractedFields(NamedTuple):
    hostname: str
    application: str
    message: str


def _string_field(parts: RawParts, key: str) -> str:
    value = parts.get(key)
    return value if isinstance(value, str) else ""


def extract_rfc3164(parts: RawParts) -> ExtractedFields:
    """Read hostname, tag and content from an RFC3164 field map."""
    return ExtractedFields(
        hostname=_string_field(parts, "hostname"),
        application=_string_field(parts, "tag"),
        message=_string_field(parts, "content"),
    )


def extract_rfc5424(parts: RawParts) -> ExtractedFields:
    """Read hostname, app_name and message from an RFC5424 field map."""
    return ExtractedFields(
        hostname=_string_field(parts, "hostname"),
        application=_string_field(parts, "app_name"),
        message=_string_field(parts, "message"),
    )


FIELD_EXTRACTORS: Dict[SyslogFormat, Callable[[RawParts], ExtractedFields]] = {
    SyslogFormat.RFC3164: extract_rfc3164,
    SyslogFormat.RFC5424: extract_rfc5424,
}


class EntryBuilder:
    """
    Build LogEntry objects from raw field maps of one syslog format.

    The extraction function is chosen once, when the builder is created.
    """

    def __init__(
        self,
        syslog_format: SyslogFormat,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the builder.

        Args:
            syslog_format: The header format the raw maps were decoded from
            clock: Source of the ingestion time used when a map has no timestamp
        """
        self.logger = logging.getLogger("surfer_syslog.entry_builder")
        self.syslog_format = syslog_format
        self.extract = FIELD_EXTRACTORS[syslog_format]
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def build(self, parts: RawParts) -> LogEntry:
        """
        Convert a raw field map into a LogEntry.

        Missing or non-string fields are left empty. When the message body holds
        key-value pairs they are mapped into ``msg_content``; otherwise the
        payload stays empty.
        """
        timestamp = parts.get("timestamp")
        if not isinstance(timestamp, datetime):
            timestamp = self.clock()

        fields = self.extract(parts)
        msg_content = LogMessage()
        if fields.message:
            try:
                msg_content = map_values(parse_content(fields.message), timestamp)
            except NoDataError:
                self.logger.debug(
                    "No key-value content in message",
                    extra={"hostname": fields.hostname, "application": fields.application},
                )

        return LogEntry(
            timestamp=timestamp,
            hostname=fields.hostname,
            application=fields.application,
            message=fields.message,
            msg_content=msg_content,
        )
