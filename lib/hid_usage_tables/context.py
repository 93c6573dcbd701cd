## Copyright (C) 2024  HID Usage Tables Contributors
##
## This program is free software; you can redistribute it and/or modify
## it under the terms of the GNU General Public License as published by
## the Free Software Foundation; either version 2 of the License, or
## (at your option) any later version.
##
## This program is distributed in the hope that it will be useful,
## but WITHOUT ANY WARRANTY; without even the implied warranty of
## MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
## GNU General Public License for more details.
##
## You should have received a copy of the GNU General Public License along
## with this program; if not, write to the Free Software Foundation, Inc.,
## 51 Franklin Street, Fifth Floor, Boston, MA 02110-1301 USA.

from __future__ import annotations

import logging

from typing import Optional

from . import diagnostics
from .cancellation import NEVER
from .cancellation import CancellationToken
from .configuration import GeneratorOptions
from .diagnostics import Diagnostic
from .diagnostics import DiagnosticReporter
from .output import MemorySink
from .output import OutputSink

logger = logging.getLogger(__name__)


class GeneratorContext:
    """Everything a generator run talks to: options, output, diagnostics and cancellation."""

    def __init__(
        self,
        options: GeneratorOptions,
        sink: Optional[OutputSink] = None,
        reporter: Optional[DiagnosticReporter] = None,
        cancellation: Optional[CancellationToken] = None,
    ):
        self.options = options
        self.sink = sink if sink is not None else MemorySink()
        self.reporter = reporter if reporter is not None else DiagnosticReporter()
        self.cancellation = cancellation if cancellation is not None else NEVER
        self._cancel_reported = False

    def report(self, descriptor: Diagnostic, *args):
        return self.reporter.report(descriptor, *args)

    def add_source(self, name: str, text: str):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("adding source %s (%d characters)", name, len(text))
        self.sink.add_source(name, text)

    def check_cancelled(self) -> bool:
        """True once cancellation was requested; the first positive check reports it."""
        if not self.cancellation.cancelled:
            return False
        if not self._cancel_reported:
            self._cancel_reported = True
            self.report(diagnostics.CANCELLED)
        return True
