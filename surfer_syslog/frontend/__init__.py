# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Log frontends and the factory creating them from URLs

# Local/package imports
from surfer_syslog.frontend.base import FrontendState, LogFrontend
from surfer_syslog.frontend.factory import new_frontend
from surfer_syslog.frontend.syslog import SyslogFrontend

__all__ = ["FrontendState", "LogFrontend", "SyslogFrontend", "new_frontend"]
