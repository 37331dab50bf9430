# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Key-value extraction from free-text syslog message bodies

# Standard library imports
from datetime import datetime
from typing import Any, Dict, Mapping

# Local/package imports
from surfer_syslog.errors import NoDataError
from surfer_syslog.models import LogMessage, epoch_nanoseconds, epoch_seconds

PAIR_SEPARATOR = ","
KEY_VALUE_SEPARATOR = ": "
REJECTED_KEY_FRAGMENT = "error"

# Location tag attached to every extracted payload
IP_LOCATION_MARKER = "PAQUES"


def _strip_leading_space(value: str) -> str:
    return value[1:] if value.startswith(" ") else value


def parse_content(content: str) -> Dict[str, str]:
    """
    Split a message body into key-value pairs.

    The body is split on commas; each segment must contain exactly one ``": "``
    separator to count as a pair. Keys containing ``error`` are dropped. A single
    leading space is trimmed from keys and values, and later duplicates win.

    Args:
        content: The free-text message body.

    Returns:
        A dict of the surviving pairs.

    Raises:
        NoDataError: If no pair survives.
    """
    data: Dict[str, str] = {}
    for segment in content.split(PAIR_SEPARATOR):
        pair = segment.split(KEY_VALUE_SEPARATOR)
        if len(pair) != 2:
            continue
        key, value = pair
        if REJECTED_KEY_FRAGMENT in key:
            continue
        data[_strip_leading_space(key)] = _strip_leading_space(value)

    if not data:
        raise NoDataError("no data")
    return data


def _string_value(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def map_values(data: Mapping[str, Any], timestamp: datetime) -> LogMessage:
    """
    Project extracted pairs onto a LogMessage.

    Event id and time always come from ``timestamp``; only ``SrcIP``, ``MAC``
    and ``URL`` are read from ``data``, and only when they are strings.
    """
    event_id = epoch_nanoseconds(timestamp)
    return LogMessage(
        event_id=event_id,
        time=epoch_seconds(event_id),
        ip_location=IP_LOCATION_MARKER,
        src_ip=_string_value(data, "SrcIP"),
        mac=_string_value(data, "MAC"),
        url=_string_value(data, "URL"),
    )
