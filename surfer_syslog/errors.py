# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Exception hierarchy for the syslog ingestion frontend
#
# Configuration and resource-acquisition errors abort frontend construction,
# NoDataError is local to a single message, SerializationError is fatal, and
# ShutdownError is the only error that surfaces from close().

# Standard library imports
from typing import Optional, Tuple


class SurferError(Exception):
    """Base class for all errors raised by surfer_syslog."""


class ConfigError(SurferError, ValueError):
    """Invalid frontend URL, missing host, or invalid option value."""


class UnsupportedSchemeError(ConfigError):
    """The frontend URL scheme has no frontend implementation."""

    def __init__(self, scheme: str):
        super().__init__(f"Invalid frontend {scheme}")
        self.scheme = scheme


class BindError(SurferError, OSError):
    """
    The listener could not acquire the requested address.

    Attributes:
        address (tuple): The (host, port) the listener tried to bind.
    """

    def __init__(self, address: Tuple[str, int], reason: Optional[BaseException] = None):
        host, port = address
        message = f"Unable to bind {host}:{port}"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.address = address


class DecodeError(SurferError, ValueError):
    """A raw syslog frame could not be decoded into a field map."""


class NoDataError(SurferError):
    """A message body yielded no key-value pairs."""


class SerializationError(SurferError):
    """A log entry could not be encoded for the diagnostic sink."""


class ShutdownError(SurferError):
    """The listener failed to release its resources during close()."""


class FrontendStateError(SurferError, RuntimeError):
    """A lifecycle method was called in a state that does not allow it."""


class AlreadyStartedError(FrontendStateError):
    """start() was called on a frontend that is already running."""


class AlreadyClosedError(FrontendStateError):
    """The frontend is closing or has been closed."""
