# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
"""
Output sinks for structured log entries.
"""
# Standard library imports
import logging
import logging.handlers
import os

from abc import ABC, abstractmethod
from typing import Optional

# Local/package imports
from surfer_syslog.models import LogEntry

DEFAULT_DIAGNOSTIC_LOG = "/tmp/log/surfer.log"
DEFAULT_MAX_BYTES = 500 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 3


class EntrySink(ABC):
    """
    Destination for LogEntry objects produced by a frontend.

    Frontends call ``open()`` when they start and ``close()`` when they shut
    down, so a sink may be shared and must count its users.
    """

    def __init__(self) -> None:
        self._users = 0

    @property
    def is_open(self) -> bool:
        return self._users > 0

    def open(self) -> None:
        if self._users == 0:
            self.acquire()
        self._users += 1

    def close(self) -> None:
        if self._users == 0:
            return
        self._users -= 1
        if self._users == 0:
            self.release()

    def acquire(self) -> None:
        """Acquire the underlying resource. Called by the first open()."""

    def release(self) -> None:
        """Release the underlying resource. Called by the last close()."""

    @abstractmethod
    def write(self, entry: LogEntry) -> None:
        """
        Emit one entry.

        Raises:
            SerializationError: If the entry cannot be encoded.
        """


class DiagnosticLogSink(EntrySink):
    """
    Sink writing one JSON line per entry to a size-rotated log file.

    Lines go through the ``surfer_syslog.diagnostic`` logger. With a filename the
    logger gets its own RotatingFileHandler and stops propagating; without one
    the lines reach whatever handlers the root logger has.
    """

    logger_name = "surfer_syslog.diagnostic"

    def __init__(
        self,
        filename: Optional[str] = DEFAULT_DIAGNOSTIC_LOG,
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
    ):
        super().__init__()
        self.filename = filename
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.logger = logging.getLogger(self.logger_name)
        self.handler: Optional[logging.Handler] = None
        self._saved_level = logging.NOTSET
        self._saved_propagate = True

    def acquire(self) -> None:
        if not self.filename:
            return
        directory = os.path.dirname(self.filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            self.filename,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(message)s", datefmt="%Y/%m/%d %H:%M:%S")
        )
        self._saved_level = self.logger.level
        self._saved_propagate = self.logger.propagate
        self.logger.addHandler(handler)
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False
        self.handler = handler

    def release(self) -> None:
        if self.handler is None:
            return
        self.logger.removeHandler(self.handler)
        self.handler.close()
        self.handler = None
        self.logger.setLevel(self._saved_level)
        self.logger.propagate = self._saved_propagate

    def write(self, entry: LogEntry) -> None:
        self.logger.info(entry.to_json())
