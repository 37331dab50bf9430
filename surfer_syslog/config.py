# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Configuration module for loading and parsing configuration files and frontend URLs

# Standard library imports
import logging
import re

from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import SplitResult, parse_qs, urlsplit

# Third-party imports
import yaml

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    ValidationError,
    field_validator,
)

# Local/package imports
from surfer_syslog.errors import ConfigError
from surfer_syslog.models import SyslogFormat
from surfer_syslog.sink import (
    DEFAULT_BACKUP_COUNT,
    DEFAULT_DIAGNOSTIC_LOG,
    DEFAULT_MAX_BYTES,
)

SYSLOG_SCHEMES = {"syslog+tcp": "tcp", "syslog+udp": "udp"}
DEFAULT_FRONTENDS = ["syslog+udp://:5141", "syslog+tcp://:5514"]
DEFAULT_QUEUE_SIZE = 512

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_PLAIN_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_duration(value: str) -> float:
    """
    Parse a duration string into seconds.

    Accepts a plain number of seconds (``"30"``, ``"1.5"``) or a sequence of
    number+unit parts (``"500ms"``, ``"1m30s"``, ``"2h"``).

    Raises:
        ValueError: If the string is not a valid, non-negative duration.
    """
    text = value.strip()
    if _PLAIN_NUMBER.fullmatch(text):
        return float(text)

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position == 0:
        raise ValueError(f"Invalid duration: {value!r}")
    return total


class FrontendConfig(BaseModel):
    """
    Settings of a single syslog frontend, fixed at construction.

    Attributes:
        transport (str): "tcp" or "udp".
        host (str): Address to bind; "" binds every interface.
        port (int): Port to bind; 0 picks a free port.
        format (SyslogFormat): Header format of incoming messages.
        queue_size (int): Capacity of the ingestion queue.
        timeout (float): TCP idle timeout in seconds, 0 disables it.
    """

    model_config = ConfigDict(frozen=True)

    transport: str
    host: str = ""
    port: int = Field(ge=0, le=65535)
    format: SyslogFormat = SyslogFormat.RFC3164
    queue_size: PositiveInt = DEFAULT_QUEUE_SIZE
    timeout: float = Field(default=0.0, ge=0)

    @field_validator("transport")
    @classmethod
    def validate_transport(cls, v: str) -> str:
        """Validate that the transport is TCP or UDP."""
        valid_transports = ["tcp", "udp"]
        v = v.lower()
        if v not in valid_transports:
            raise ValueError(
                f"Invalid transport: {v}. Must be one of {valid_transports}"
            )
        return v

    @field_validator("format", mode="before")
    @classmethod
    def validate_format(cls, v: Union[str, SyslogFormat]) -> SyslogFormat:
        """Accept format names in any case."""
        if isinstance(v, SyslogFormat):
            return v
        return SyslogFormat.parse(str(v))

    @field_validator("timeout", mode="before")
    @classmethod
    def validate_timeout(cls, v: Union[str, float, int]) -> float:
        """Accept duration strings as well as numbers of seconds."""
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_url(cls, url: Union[str, SplitResult]) -> "FrontendConfig":
        """
        Build a frontend configuration from a ``syslog+tcp``/``syslog+udp`` URL.

        Recognized query options are ``format``, ``queueSize`` and ``timeout``;
        any other option is ignored.

        Raises:
            ConfigError: If the URL has no host part, no valid port, or an
                invalid option value.
        """
        parsed = urlsplit(url) if isinstance(url, str) else url
        scheme = parsed.scheme.lower()
        if scheme not in SYSLOG_SCHEMES:
            raise ConfigError(f"Invalid syslog frontend scheme '{parsed.scheme}'")
        if not parsed.netloc:
            raise ConfigError(f"Empty host in frontend URL '{parsed.geturl()}'")

        try:
            port = parsed.port
        except ValueError as e:
            raise ConfigError(f"Invalid port in frontend URL '{parsed.geturl()}': {e}")
        if port is None:
            raise ConfigError(f"Missing port in frontend URL '{parsed.geturl()}'")

        options = {}
        query = parse_qs(parsed.query, keep_blank_values=True)
        for option, field_name in (
            ("format", "format"),
            ("queueSize", "queue_size"),
            ("timeout", "timeout"),
        ):
            if option in query:
                options[field_name] = query[option][-1]

        try:
            return cls(
                transport=SYSLOG_SCHEMES[scheme],
                host=parsed.hostname or "",
                port=port,
                **options,
            )
        except ValidationError as e:
            raise ConfigError(
                f"Invalid frontend URL '{parsed.geturl()}': {e}"
            ) from e


class LoggerConfig(BaseModel):
    """
    Configuration for individual loggers.

    Attributes:
        name (str): Logger name.
        level (str): Logging level (default: "INFO").
        propagate (bool): Whether to propagate logs to parent (default: True).
    """

    name: str
    level: str = "INFO"
    propagate: bool = True


class DiagnosticLogConfig(BaseModel):
    """
    Configuration of the rotating file receiving one JSON line per entry.

    Attributes:
        filename (str, optional): Log file path; None sends lines to the
            regular logging handlers instead.
        max_bytes (int): Size at which the file is rotated.
        backup_count (int): Number of rotated files kept.
    """

    filename: Optional[str] = DEFAULT_DIAGNOSTIC_LOG
    max_bytes: PositiveInt = DEFAULT_MAX_BYTES
    backup_count: int = Field(default=DEFAULT_BACKUP_COUNT, ge=0)


class Config(BaseModel):
    """
    Main configuration class for the surfer syslog ingestion service.

    This class defines the frontends to run, logging, the diagnostic entry
    log, and tracing output.
    """

    # Frontend URLs, e.g. "syslog+udp://:5141?format=RFC5424&queueSize=1024"
    frontends: List[str] = Field(default_factory=lambda: list(DEFAULT_FRONTENDS))

    # Diagnostic entry log
    diagnostic_log: DiagnosticLogConfig = Field(default_factory=DiagnosticLogConfig)

    # Tracing configuration
    tracing_exporter: str = "none"  # "none" or "console"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    loggers: List[LoggerConfig] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is a valid Python logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @field_validator("tracing_exporter")
    @classmethod
    def validate_tracing_exporter(cls, v: str) -> str:
        """Validate that the tracing exporter is known."""
        valid_exporters = ["none", "console"]
        v = v.lower()
        if v not in valid_exporters:
            raise ValueError(
                f"Invalid tracing exporter: {v}. Must be one of {valid_exporters}"
            )
        return v

    @field_validator("frontends")
    @classmethod
    def validate_frontends(cls, v: List[str]) -> List[str]:
        """Validate that at least one frontend URL is configured."""
        if not v:
            raise ValueError("At least one frontend URL must be configured")
        return v


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. If None, will look for config.yaml
                   in the current directory and default directories.

    Returns:
        A Config object containing the loaded configuration.

    Raises:
        FileNotFoundError: If the configuration file cannot be found.
        yaml.YAMLError: If the configuration file contains invalid YAML.
    """
    search_paths = [
        Path.cwd() / "config.yaml",
        Path.cwd() / "config.yml",
        Path("/etc/surfer-syslog/config.yaml"),
        Path("/etc/surfer-syslog/config.yml"),
    ]

    if config_path:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
    else:
        for path in search_paths:
            if path.exists():
                config_file = path
                break
        else:
            logging.warning("No configuration file found, using default configuration")
            return Config()

    with open(config_file, "r") as f:
        try:
            config_data = yaml.safe_load(f) or {}
            return Config(**config_data)
        except yaml.YAMLError as e:
            logging.error("Error parsing configuration file", extra={"error": e})
            raise
        except Exception as e:
            logging.error("Error loading configuration", extra={"error": e})
            raise


class SafeExtraFormatter(logging.Formatter):
    """
    Custom formatter that substitutes missing extra fields with a blank string.
    """

    extra_fields = ("frontend", "peer")

    def format(self, record: logging.LogRecord) -> str:
        for name in self.extra_fields:
            if not hasattr(record, name):
                setattr(record, name, "")
        return super().format(record)


def configure_logging(config: "Config") -> None:
    """
    Configure logging based on the provided configuration.

    Args:
        config: The loaded configuration object.
    """
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    level = getattr(logging, config.log_level, logging.INFO)
    formatter = SafeExtraFormatter(config.log_format, datefmt=config.log_date_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logging.root.setLevel(level)
    logging.root.addHandler(console_handler)

    for logger_config in config.loggers:
        logger = logging.getLogger(logger_config.name)
        logger.setLevel(getattr(logging, logger_config.level, logging.INFO))
        logger.propagate = logger_config.propagate
