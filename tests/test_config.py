# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Tests for the configuration module

# Standard library imports
import logging

# Third-party imports
import pytest
import yaml

from pydantic import ValidationError

# Local/package imports
from surfer_syslog.config import (
    DEFAULT_FRONTENDS,
    Config,
    FrontendConfig,
    LoggerConfig,
    SafeExtraFormatter,
    configure_logging,
    load_config,
    parse_duration,
)
from surfer_syslog.errors import ConfigError
from surfer_syslog.models import SyslogFormat


class TestParseDuration:
    """Tests for duration strings."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("0", 0.0),
            ("30", 30.0),
            ("1.5", 1.5),
            ("1.5s", 1.5),
            ("500ms", 0.5),
            ("2h", 7200.0),
            ("1m30s", 90.0),
            ("250us", 0.00025),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["", "5x", "-1s", "s", "1m 30s", "soon"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestFrontendConfig:
    """Tests for frontend URL parsing."""

    @pytest.mark.unit
    def test_defaults_from_url(self):
        config = FrontendConfig.from_url("syslog+udp://:5141")
        assert config.transport == "udp"
        assert config.host == ""
        assert config.port == 5141
        assert config.format is SyslogFormat.RFC3164
        assert config.queue_size == 512
        assert config.timeout == 0.0
        assert config.address == ":5141"

    @pytest.mark.unit
    def test_options_from_url(self):
        config = FrontendConfig.from_url(
            "syslog+tcp://127.0.0.1:5514?format=rfc5424&queueSize=64&timeout=1m30s"
        )
        assert config.transport == "tcp"
        assert config.host == "127.0.0.1"
        assert config.port == 5514
        assert config.format is SyslogFormat.RFC5424
        assert config.queue_size == 64
        assert config.timeout == 90.0

    @pytest.mark.unit
    def test_scheme_is_case_insensitive(self):
        config = FrontendConfig.from_url("SYSLOG+TCP://localhost:1514")
        assert config.transport == "tcp"
        assert config.host == "localhost"

    @pytest.mark.unit
    def test_ipv6_host(self):
        config = FrontendConfig.from_url("syslog+udp://[::1]:5141")
        assert config.host == "::1"

    @pytest.mark.unit
    def test_unknown_options_are_ignored(self):
        config = FrontendConfig.from_url("syslog+udp://:5141?colour=blue")
        assert config.queue_size == 512

    @pytest.mark.unit
    def test_last_option_value_wins(self):
        config = FrontendConfig.from_url("syslog+udp://:5141?queueSize=8&queueSize=16")
        assert config.queue_size == 16

    @pytest.mark.unit
    def test_plain_seconds_timeout(self):
        config = FrontendConfig.from_url("syslog+tcp://:5514?timeout=30")
        assert config.timeout == 30.0

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "url",
        [
            "syslog+udp://",
            "syslog+udp:///path",
            "syslog+udp://host",
            "syslog+udp://host:99999",
            "syslog+udp://host:port",
            "syslog+udp://:5141?format=RFC6587",
            "syslog+udp://:5141?queueSize=0",
            "syslog+udp://:5141?queueSize=many",
            "syslog+tcp://:5514?timeout=soon",
            "http://:5141",
        ],
    )
    def test_invalid_urls(self, url):
        with pytest.raises(ConfigError):
            FrontendConfig.from_url(url)

    @pytest.mark.unit
    def test_invalid_transport(self):
        with pytest.raises(ValidationError):
            FrontendConfig(transport="sctp", port=1)

    @pytest.mark.unit
    def test_config_is_frozen(self):
        config = FrontendConfig(transport="udp", port=1)
        with pytest.raises(ValidationError):
            config.port = 2


class TestConfig:
    """Tests for the service configuration."""

    @pytest.mark.unit
    def test_config_defaults(self):
        config = Config()
        assert config.frontends == DEFAULT_FRONTENDS
        assert config.frontends == ["syslog+udp://:5141", "syslog+tcp://:5514"]
        assert config.diagnostic_log.filename == "/tmp/log/surfer.log"
        assert config.diagnostic_log.max_bytes == 500 * 1024 * 1024
        assert config.diagnostic_log.backup_count == 3
        assert config.tracing_exporter == "none"
        assert config.log_level == "INFO"
        assert config.loggers == []

    @pytest.mark.unit
    def test_logger_config(self):
        """Test logger configuration."""
        logger_config = LoggerConfig(name="test.logger", level="DEBUG")
        assert logger_config.name == "test.logger"
        assert logger_config.level == "DEBUG"
        assert logger_config.propagate is True

    @pytest.mark.unit
    def test_log_level_is_normalized(self):
        assert Config(log_level="debug").log_level == "DEBUG"

    @pytest.mark.unit
    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Config(log_level="LOUD")

    @pytest.mark.unit
    def test_invalid_tracing_exporter(self):
        with pytest.raises(ValidationError):
            Config(tracing_exporter="jaeger")

    @pytest.mark.unit
    def test_empty_frontends(self):
        with pytest.raises(ValidationError):
            Config(frontends=[])


class TestLoadConfig:
    """Tests for loading YAML configuration files."""

    @pytest.mark.unit
    def test_load_config_from_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.safe_dump(
                {
                    "frontends": ["syslog+tcp://127.0.0.1:1514?format=RFC5424"],
                    "log_level": "DEBUG",
                    "diagnostic_log": {"filename": str(tmp_path / "entries.log")},
                    "loggers": [{"name": "surfer_syslog.protocol", "level": "WARNING"}],
                }
            )
        )

        config = load_config(config_file)
        assert config.frontends == ["syslog+tcp://127.0.0.1:1514?format=RFC5424"]
        assert config.log_level == "DEBUG"
        assert config.diagnostic_log.filename == str(tmp_path / "entries.log")
        assert config.loggers[0].name == "surfer_syslog.protocol"

    @pytest.mark.unit
    def test_load_empty_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        assert load_config(config_file) == Config()

    @pytest.mark.unit
    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    @pytest.mark.unit
    def test_load_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("frontends: [unclosed")
        with pytest.raises(yaml.YAMLError):
            load_config(config_file)

    @pytest.mark.unit
    def test_search_paths_fall_back_to_defaults(self, tmp_path, monkeypatch, mocker):
        monkeypatch.chdir(tmp_path)
        mocker.patch("pathlib.Path.exists", return_value=False)
        assert load_config() == Config()

    @pytest.mark.unit
    def test_search_paths_find_cwd_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.yml").write_text("log_level: ERROR\n")
        assert load_config().log_level == "ERROR"


class TestConfigureLogging:
    """Tests for logging setup from configuration."""

    @pytest.mark.unit
    def test_configure_logging(self):
        config = Config(
            log_level="DEBUG",
            loggers=[
                LoggerConfig(name="surfer_syslog.test", level="ERROR", propagate=False)
            ],
        )
        configure_logging(config)

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        safe_handlers = [
            handler
            for handler in root_logger.handlers
            if isinstance(handler.formatter, SafeExtraFormatter)
        ]
        assert len(safe_handlers) == 1

        logger = logging.getLogger("surfer_syslog.test")
        assert logger.level == logging.ERROR
        assert logger.propagate is False

    @pytest.mark.unit
    def test_safe_extra_formatter_fills_missing_fields(self):
        formatter = SafeExtraFormatter("%(frontend)s|%(peer)s|%(message)s")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
        assert formatter.format(record) == "||hello"

        record.frontend = ":5141"
        assert formatter.format(record) == ":5141||hello"
