# -*- coding: utf-8 -*-
# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# OpenTelemetry setup for surfer syslog ingestion
#
# Spans are recorded through the global tracer provider. Until
# configure_tracing() installs an SDK provider the API's no-op provider is
# used, so library users and tests pay nothing for tracing.

# Third-party imports
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Tracer

SERVICE_NAME = "surfer-syslog"


def configure_tracing(exporter: str = "none") -> None:
    """
    Install the tracer provider for the process.

    Args:
        exporter: "console" exports spans to stdout; "none" keeps the no-op provider.
    """
    if exporter == "none":
        return
    resource = Resource.create({"service.name": SERVICE_NAME})
    tracer_provider = TracerProvider(resource=resource)
    # For demo/dev: export to console. Replace with OTLPSpanExporter for production.
    tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(tracer_provider)


def get_tracer() -> Tracer:
    return trace.get_tracer(SERVICE_NAME)
