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
"""The generator run: resolve options, load the tables, render the sources."""

from __future__ import annotations

import dataclasses
import logging
import time

from enum import Enum

from . import diagnostics
from . import loader
from . import resolver
from .codegen import UsageCodeGenerator
from .context import GeneratorContext
from .loader import CacheTier
from .tables import UsageTables

logger = logging.getLogger(__name__)


class State(Enum):
    IDLE = "idle"
    RESOLVING_OPTIONS = "resolving options"
    SELECTING_CACHE_TIER = "selecting cache tier"
    READING_CACHE = "reading cache"
    FETCHING_ORIGIN = "fetching origin"
    PARSING = "parsing"
    GENERATING = "generating"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclasses.dataclass(frozen=True)
class GenerationResult:
    state: State
    tables: UsageTables = UsageTables.EMPTY
    usages: int = 0
    pages: int = 0
    elapsed: float = 0.0

    @property
    def degraded(self) -> bool:
        return self.tables is UsageTables.EMPTY

    @property
    def completed(self) -> bool:
        return self.state is State.COMPLETED


class UsagePageGenerator:
    """Runs the whole pipeline once against a :class:`GeneratorContext`.

    Never raises for acquisition problems: those are reported as diagnostics
    and leave the tables empty, so the run still generates (an empty registry).
    """

    def __init__(self):
        self.state = State.IDLE
        self.history = [State.IDLE]

    def _enter(self, state: State):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _cancelled(self, started: float, tables=UsageTables.EMPTY) -> GenerationResult:
        self._enter(State.CANCELLED)
        return GenerationResult(State.CANCELLED, tables, elapsed=time.perf_counter() - started)

    def _load(self, context: GeneratorContext, locations, tier: CacheTier) -> UsageTables:
        self._enter(State.FETCHING_ORIGIN if tier is CacheTier.ORIGIN else State.READING_CACHE)
        return loader.load(context, locations, tier)

    def execute(self, context: GeneratorContext) -> GenerationResult:
        started = time.perf_counter()

        self._enter(State.RESOLVING_OPTIONS)
        cache_folder = resolver.resolve_cache_folder(context.options, context.reporter)
        if context.check_cancelled():
            return self._cancelled(started)
        locations = resolver.resolve_locations(context.options, cache_folder, context.reporter)

        self._enter(State.SELECTING_CACHE_TIER)
        tier = loader.select_tier(locations)
        tables = self._load(context, locations, tier)
        if context.check_cancelled():
            return self._cancelled(started)
        if tables is UsageTables.EMPTY and tier is not CacheTier.ORIGIN:
            # a failed cache tier escalates once to the original source
            tables = self._load(context, locations, CacheTier.ORIGIN)
            if context.check_cancelled():
                return self._cancelled(started)

        self._enter(State.PARSING)
        if tables is UsageTables.EMPTY:
            logger.warning("no usage tables available, generating an empty registry")

        self._enter(State.GENERATING)
        generator = UsageCodeGenerator(context, tables)
        if not generator.generate():
            return self._cancelled(started, tables)

        elapsed = time.perf_counter() - started
        self._enter(State.COMPLETED)
        context.report(diagnostics.COMPLETED, tables.version, generator.usages, len(tables), elapsed)
        return GenerationResult(State.COMPLETED, tables, generator.usages, len(tables), elapsed)


def generate(context: GeneratorContext) -> GenerationResult:
    return UsagePageGenerator().execute(context)
