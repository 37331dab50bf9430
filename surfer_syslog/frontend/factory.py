# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Frontend factory dispatching on the frontend URL scheme

# Standard library imports
from typing import Optional, Union
from urllib.parse import SplitResult, urlsplit

# Local/package imports
from surfer_syslog.config import SYSLOG_SCHEMES, FrontendConfig
from surfer_syslog.errors import UnsupportedSchemeError
from surfer_syslog.frontend.base import LogFrontend
from surfer_syslog.frontend.syslog import SyslogFrontend
from surfer_syslog.protocol.listener import RawMessageSource
from surfer_syslog.sink import EntrySink


def new_frontend(
    url: Union[str, SplitResult],
    sink: Optional[EntrySink] = None,
    source: Optional[RawMessageSource] = None,
) -> LogFrontend:
    """
    Create the frontend described by a URL.

    Args:
        url: Frontend URL, e.g. ``syslog+udp://:5141?format=RFC5424``
        sink: Destination of built entries
        source: Raw message source replacing the default listener

    Returns:
        A bound, not yet started frontend

    Raises:
        UnsupportedSchemeError: If no frontend handles the URL scheme
        ConfigError: If the URL or its options are invalid
        BindError: If the listener cannot acquire its address
    """
    parsed = urlsplit(url) if isinstance(url, str) else url
    scheme = parsed.scheme.lower()
    if scheme in SYSLOG_SCHEMES:
        config = FrontendConfig.from_url(parsed)
        return SyslogFrontend(config, sink=sink, source=source)
    raise UnsupportedSchemeError(parsed.scheme)
