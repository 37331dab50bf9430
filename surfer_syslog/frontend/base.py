# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Abstract base class for log frontends

# Standard library imports
from abc import ABC, abstractmethod
from enum import Enum


class FrontendState(Enum):
    """
    Lifecycle states of a frontend.

    Values:
        CREATED: Configuration read, listener not yet bound.
        BOUND: Listener holds its address, nothing is running.
        RUNNING: Listener accepts messages and the worker consumes them.
        CLOSING: Shutdown handshake in progress.
        CLOSED: Worker exited and listener released.
    """

    CREATED = "created"
    BOUND = "bound"
    RUNNING = "running"
    CLOSING = "closing"
    CLOSED = "closed"


class LogFrontend(ABC):
    """
    A component that terminates an external protocol and produces log entries.
    """

    @abstractmethod
    async def start(self) -> None:
        """Start accepting and processing messages."""

    @abstractmethod
    async def close(self) -> None:
        """Stop processing and release every resource."""
