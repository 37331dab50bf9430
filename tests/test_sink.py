# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Tests for the entry sinks

# Standard library imports
import json
import logging

from datetime import datetime, timezone

# Third-party imports
import pytest

# Local/package imports
from surfer_syslog.models import LogEntry
from surfer_syslog.sink import DiagnosticLogSink

TIMESTAMP = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestEntrySinkReferenceCounting:
    """Tests for the shared open/close bookkeeping."""

    @pytest.mark.unit
    def test_first_open_acquires_last_close_releases(self, memory_sink):
        memory_sink.open()
        memory_sink.open()
        assert memory_sink.acquired == 1
        assert memory_sink.is_open

        memory_sink.close()
        assert memory_sink.released == 0
        assert memory_sink.is_open

        memory_sink.close()
        assert memory_sink.released == 1
        assert not memory_sink.is_open

    @pytest.mark.unit
    def test_close_without_open_is_ignored(self, memory_sink):
        memory_sink.close()
        assert memory_sink.released == 0
        assert not memory_sink.is_open


class TestDiagnosticLogSink:
    """Tests for the rotating JSON entry log."""

    @pytest.mark.unit
    def test_writes_json_lines(self, tmp_path):
        path = tmp_path / "logs" / "surfer.log"
        sink = DiagnosticLogSink(filename=str(path))
        sink.open()
        try:
            sink.write(LogEntry(timestamp=TIMESTAMP, hostname="host1"))
            sink.write(LogEntry(timestamp=TIMESTAMP, hostname="host2"))
        finally:
            sink.close()

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        payload = json.loads(lines[0].split(" ", 2)[2])
        assert payload["hostname"] == "host1"
        assert payload["msg_content"] == {}

    @pytest.mark.unit
    def test_release_restores_propagation(self, tmp_path):
        sink = DiagnosticLogSink(filename=str(tmp_path / "surfer.log"))
        logger = logging.getLogger(DiagnosticLogSink.logger_name)

        sink.open()
        assert logger.propagate is False
        assert sink.handler in logger.handlers

        handler = sink.handler
        sink.close()
        assert logger.propagate is True
        assert handler not in logger.handlers
        assert sink.handler is None

    @pytest.mark.unit
    def test_release_restores_logger_level(self, tmp_path):
        logger = logging.getLogger(DiagnosticLogSink.logger_name)
        logger.setLevel(logging.WARNING)
        try:
            sink = DiagnosticLogSink(filename=str(tmp_path / "surfer.log"))
            sink.open()
            assert logger.level == logging.INFO

            sink.close()
            assert logger.level == logging.WARNING
        finally:
            logger.setLevel(logging.NOTSET)

    @pytest.mark.unit
    def test_rotation_settings_are_applied(self, tmp_path):
        sink = DiagnosticLogSink(
            filename=str(tmp_path / "surfer.log"), max_bytes=1024, backup_count=2
        )
        sink.open()
        try:
            assert sink.handler.maxBytes == 1024
            assert sink.handler.backupCount == 2
        finally:
            sink.close()

    @pytest.mark.unit
    def test_rotates_when_file_is_full(self, tmp_path):
        path = tmp_path / "surfer.log"
        sink = DiagnosticLogSink(filename=str(path), max_bytes=200, backup_count=1)
        sink.open()
        try:
            for index in range(10):
                sink.write(LogEntry(timestamp=TIMESTAMP, message=f"message {index}"))
        finally:
            sink.close()

        assert (tmp_path / "surfer.log.1").exists()
        assert not (tmp_path / "surfer.log.2").exists()

    @pytest.mark.unit
    def test_without_filename_uses_logging_handlers(self, caplog):
        caplog.set_level(logging.INFO, logger=DiagnosticLogSink.logger_name)
        sink = DiagnosticLogSink(filename=None)
        sink.open()
        try:
            sink.write(LogEntry(timestamp=TIMESTAMP, hostname="host1"))
        finally:
            sink.close()

        assert sink.handler is None
        assert '"hostname": "host1"' in caplog.text
