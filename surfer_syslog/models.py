# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Structured log entry models produced by the ingestion frontend

# Standard library imports
import json

from datetime import datetime, timezone
from enum import Enum

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Local/package imports
from surfer_syslog.errors import SerializationError

NANOSECONDS_PER_SECOND = 1_000_000_000
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SyslogFormat(Enum):
    """
    Syslog header format variants understood by the frontend.

    Values:
        RFC3164: BSD syslog (``<PRI>Mmm dd hh:mm:ss host tag: content``).
        RFC5424: IETF syslog (``<PRI>1 TIMESTAMP HOST APP PROCID MSGID SD MSG``).
    """

    RFC3164 = "RFC3164"
    RFC5424 = "RFC5424"

    @classmethod
    def parse(cls, value: str) -> "SyslogFormat":
        """Look up a format by name, ignoring case."""
        try:
            return cls(value.strip().upper())
        except ValueError:
            valid = [member.value for member in cls]
            raise ValueError(
                f"Invalid syslog format: {value}. Must be one of {valid}"
            ) from None


def as_aware(value: datetime) -> datetime:
    """Interpret a naive datetime as local time."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


def epoch_nanoseconds(value: datetime) -> int:
    """Nanoseconds since the Unix epoch, exact to the microsecond."""
    delta = as_aware(value) - _EPOCH
    seconds = delta.days * 86400 + delta.seconds
    return seconds * NANOSECONDS_PER_SECOND + delta.microseconds * 1000


def epoch_seconds(nanoseconds: int) -> int:
    """Whole seconds of a nanosecond epoch value, truncated toward zero."""
    seconds = abs(nanoseconds) // NANOSECONDS_PER_SECOND
    return seconds if nanoseconds >= 0 else -seconds


class LogMessage(BaseModel):
    """
    Secondary payload extracted from the key-value pairs of a message body.

    Attributes:
        event_id (int): Entry timestamp in epoch nanoseconds.
        src_ip (str): Value of the ``SrcIP`` key.
        ip_location (str): Location marker for the source address.
        mac (str): Value of the ``MAC`` key.
        url (str): Value of the ``URL`` key.
        time (int): Entry timestamp in epoch seconds.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    event_id: int = Field(default=0, alias="eventid")
    src_ip: str = Field(default="", alias="ipaddr")
    ip_location: str = Field(default="", alias="iplocation")
    mac: str = Field(default="", alias="macaddr")
    url: str = ""
    time: int = 0


class LogEntry(BaseModel):
    """
    A single syslog message converted into a structured entry.

    Attributes:
        timestamp (datetime): Time reported by the sender, or ingestion time.
        hostname (str): Reporting host.
        application (str): RFC3164 tag or RFC5424 app-name.
        message (str): Free-text message body.
        msg_content (LogMessage): Payload extracted from the body.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    hostname: str = ""
    application: str = ""
    message: str = ""
    msg_content: LogMessage = Field(default_factory=LogMessage)

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        """Attach the local timezone to naive timestamps."""
        return as_aware(v)

    def to_json(self) -> str:
        """
        Encode the entry for the diagnostic sink.

        Empty fields are omitted, except ``msg_content`` which is always present.

        Raises:
            SerializationError: If the entry cannot be encoded.
        """
        try:
            data = self.model_dump(
                mode="json",
                by_alias=True,
                exclude_defaults=True,
                exclude={"msg_content"},
            )
            data["msg_content"] = self.msg_content.model_dump(
                mode="json", by_alias=True, exclude_defaults=True
            )
            return json.dumps(data)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Cannot be parsed to json: {exc}") from exc
