# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Main entry point for the syslog ingestion service

# Standard library imports
import argparse
import asyncio
import logging
import signal
import sys

from typing import List, Optional

# Local/package imports
from surfer_syslog.config import Config, configure_logging, load_config
from surfer_syslog.engine import Engine
from surfer_syslog.sink import DiagnosticLogSink
from surfer_syslog.telemetry import configure_tracing


def setup_logging(log_level: str = "INFO", config: Optional[Config] = None) -> None:
    """
    Configure logging with appropriate formatters and handlers.

    Args:
        log_level: The logging level to set (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        config: Optional configuration object to use for logging setup
    """
    if config:
        configure_logging(config)
        return

    level = getattr(logging, log_level.upper(), logging.INFO)
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Span export is chatty at DEBUG
    logging.getLogger("opentelemetry").setLevel(logging.WARNING)


def run_engine(config: Config) -> None:
    """
    Run the configured frontends until interrupted.

    Args:
        config: The service configuration
    """
    logger = logging.getLogger("surfer_syslog.main")

    try:
        configure_tracing(config.tracing_exporter)
        sink = DiagnosticLogSink(
            filename=config.diagnostic_log.filename,
            max_bytes=config.diagnostic_log.max_bytes,
            backup_count=config.diagnostic_log.backup_count,
        )

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            engine = loop.run_until_complete(Engine.create(config.frontends, sink))
        except Exception:
            loop.close()
            asyncio.set_event_loop(None)
            raise

        try:
            loop.add_signal_handler(signal.SIGTERM, engine.stop)
        except NotImplementedError:
            # Not available on Windows event loops
            pass

        try:
            loop.run_until_complete(engine.start())
            loop.run_until_complete(engine.wait())
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt, shutting down...")
        finally:
            loop.run_until_complete(engine.close())
            loop.close()
            asyncio.set_event_loop(None)

    except Exception as e:
        logger.exception(f"Failed to run engine: {e}")
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the syslog ingestion service.
    Parses command-line arguments, sets up logging, and starts the frontends.
    """
    parser = argparse.ArgumentParser(description="Surfer syslog ingestion service")
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--frontend",
        dest="frontends",
        action="append",
        metavar="URL",
        help="Frontend URL, e.g. syslog+udp://:5141?format=RFC5424 (repeatable, overrides config file)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (overrides config file)",
    )
    parser.add_argument(
        "--diagnostic-log",
        type=str,
        help="Path of the rotating JSON entry log (overrides config file)",
    )

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config if args.config else None)

        if args.frontends:
            config.frontends = args.frontends
        if args.log_level:
            config.log_level = args.log_level
        if args.diagnostic_log:
            config.diagnostic_log.filename = args.diagnostic_log

        setup_logging(config=config)
        logger = logging.getLogger("surfer_syslog.main")

        if args.config:
            logger.info(f"Loaded configuration from {args.config}")
        else:
            logger.info("Using default or automatically detected configuration")

        logger.info(f"Starting surfer syslog frontends: {', '.join(config.frontends)}")
        run_engine(config)
    except KeyboardInterrupt:
        logger = logging.getLogger("surfer_syslog.main")
        logger.info("Shutdown requested by user")
    except Exception as e:
        if not logging.root.handlers:
            setup_logging("ERROR")
        logger = logging.getLogger("surfer_syslog.main")
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
