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
"""Severity-tagged notices reported by the generator.

Acquisition problems never escape the pipeline as exceptions; they are
reported here and the run continues with a degraded (empty) table.
"""

from __future__ import annotations

import dataclasses
import logging

from enum import IntEnum
from typing import List

logger = logging.getLogger(__name__)


class Severity(IntEnum):
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


@dataclasses.dataclass(frozen=True)
class Diagnostic:
    id: str
    title: str
    message_format: str
    severity: Severity

    def format(self, *args) -> str:
        return self.message_format.format(*args)


CACHE_FOLDER_CREATION_FAILED = Diagnostic(
    "HUT0001",
    "Cache folder creation failed",
    "Could not create the cache folder '{0}': {1}",
    Severity.WARNING,
)
CACHING_DISABLED = Diagnostic(
    "HUT0002",
    "Caching disabled",
    "Caching is disabled, the usage tables will be loaded from the specification source",
    Severity.WARNING,
)
DOCUMENT_NOT_FOUND = Diagnostic(
    "HUT0003",
    "Specification document not found",
    "Could not load the specification document '{0}': {1}",
    Severity.ERROR,
)
ATTACHMENT_NOT_FOUND = Diagnostic(
    "HUT0004",
    "JSON attachment not found",
    "Could not find the JSON attachment in '{0}'",
    Severity.ERROR,
)
ATTACHMENT_EXTRACTION_FAILED = Diagnostic(
    "HUT0005",
    "JSON attachment extraction failed",
    "Could not extract the JSON attachment from '{0}': {1}",
    Severity.ERROR,
)
DESERIALIZATION_FAILED = Diagnostic(
    "HUT0006",
    "JSON deserialization failed",
    "Could not deserialize the usage tables from '{0}': {1}",
    Severity.ERROR,
)
CANCELLED = Diagnostic(
    "HUT0007",
    "Generation cancelled",
    "Generation of the usage pages was cancelled",
    Severity.WARNING,
)
COMPLETED = Diagnostic(
    "HUT0008",
    "Generation completed",
    "Generated {1} usages in {2} usage pages from HID Usage Tables v{0} in {3:.3f}s",
    Severity.INFO,
)


@dataclasses.dataclass(frozen=True)
class ReportedDiagnostic:
    descriptor: Diagnostic
    message: str
    args: tuple

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def severity(self) -> Severity:
        return self.descriptor.severity


class DiagnosticReporter:
    """Collects reported diagnostics and forwards them to the log."""

    def __init__(self):
        self.reported: List[ReportedDiagnostic] = []

    def report(self, descriptor: Diagnostic, *args) -> ReportedDiagnostic:
        entry = ReportedDiagnostic(descriptor, descriptor.format(*args), args)
        self.reported.append(entry)
        logger.log(descriptor.severity, "%s: %s", descriptor.id, entry.message)
        return entry

    def __contains__(self, descriptor: Diagnostic) -> bool:
        return any(entry.descriptor == descriptor for entry in self.reported)

    def __len__(self):
        return len(self.reported)

    def __iter__(self):
        return iter(self.reported)

    def of(self, descriptor: Diagnostic) -> List[ReportedDiagnostic]:
        return [entry for entry in self.reported if entry.descriptor == descriptor]
