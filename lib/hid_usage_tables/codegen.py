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
"""Render usage tables as Python modules.

For every usage page three kinds of artifact are produced:

* ``usages/<page>.py``: an ``IntEnum`` of the full 32-bit usage ids,
* ``pages/<page>.py``: a :class:`hid_usages.base.UsagePage` subclass mapping
  page-local ids to usages,

plus a single ``usage_page.py`` holding the registry of all pages.

Output depends only on the tables and the options, so identical inputs give
identical sources.
"""

from __future__ import annotations

import json
import logging

from datetime import timezone
from typing import Iterable
from typing import List

from . import NAME
from . import __version__
from .context import GeneratorContext
from .tables import UsageKind
from .tables import UsagePage
from .tables import UsageTables

logger = logging.getLogger(__name__)

REGISTRY_SOURCE = "usage_page.py"
RUNTIME_MODULE = "hid_usages.base"


def enumeration_source(page: UsagePage) -> str:
    return f"usages/{page.module_name}.py"


def lookup_source(page: UsagePage) -> str:
    return f"pages/{page.module_name}.py"


def quote(text: str) -> str:
    """A double quoted Python string literal for ``text``."""
    return json.dumps(text, ensure_ascii=False)


def _comment(text: str) -> str:
    return " ".join(text.split())


def _docstring(text: str) -> str:
    return '"""' + _comment(text).replace("\\", "\\\\").replace('"', '\\"') + '"""'


def render_kinds(kinds: Iterable[UsageKind]) -> str:
    rendered = " | ".join(f"UsageTypes.{kind.name}" for kind in kinds)
    return rendered or "UsageTypes.NONE"


def render_timestamp(tables: UsageTables) -> str:
    if tables.last_generated is None:
        return "unknown"
    return tables.last_generated.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%SZ")


class UsageCodeGenerator:
    """Turns one :class:`UsageTables` into the generated sources."""

    def __init__(self, context: GeneratorContext, tables: UsageTables):
        self.context = context
        self.tables = tables
        self.root_namespace = context.options.root_namespace
        self.max_generated = context.options.max_generated
        self.usages = 0
        self.header = self.render_header()

    def render_header(self) -> str:
        return "\n".join(
            [
                f"# Generated by {NAME} {__version__}, do not edit.",
                "#",
                f"# Specification revision: {self.tables.version}; generated at {render_timestamp(self.tables)}.",
                "",
            ]
        )

    def generate(self) -> bool:
        """Add every source to the context's sink; False when cancelled midway."""
        for page in self.tables.usage_pages:
            if self.context.check_cancelled():
                return False
            self.context.add_source(enumeration_source(page), self.render_enumeration(page))

        registry = self.render_registry()
        if registry is None:
            return False
        self.context.add_source(REGISTRY_SOURCE, registry)

        for page in self.tables.usage_pages:
            if self.context.check_cancelled():
                return False
            self.context.add_source(lookup_source(page), self.render_lookup(page))
        return True

    def render_enumeration(self, page: UsagePage) -> str:
        lines = [
            self.header,
            "from enum import IntEnum",
            "",
            "",
            f"class {page.safe_name}Page(IntEnum):",
            f"    {_docstring(f'{page.name} Usage Page.')}",
        ]
        members: List[List[str]] = []
        names = {usage.safe_name for usage in page.usage_ids}

        for usage in page.usage_ids:
            members.append(
                [
                    f"    #: {_comment(usage.name)} Usage.",
                    f"    {usage.safe_name} = 0x{usage.full_id(page):08x}",
                ]
            )
            self.usages += 1

        generator = page.usage_id_generator
        if generator is not None and self.max_generated > 0:
            members.append(
                [f"    # Range: 0x{generator.start_usage_id:04x} -> 0x{generator.end_usage_id:04x}"]
            )
            for usage_id in generator.materialized(self.max_generated):
                index = usage_id - generator.start_usage_id
                member = generator.safe_name_for(index)
                if member in names:
                    member = f"{member}_0x{usage_id:04X}"
                names.add(member)
                members.append(
                    [
                        f"    #: {_comment(generator.name_for(index))} Usage.",
                        f"    {member} = 0x{(page.id << 16) | usage_id:08x}",
                    ]
                )
                self.usages += 1

        for member in members:
            lines.append("")
            lines.extend(member)
        lines.append("")
        return "\n".join(lines)

    def render_registry(self):
        """The registry source, or None when cancelled."""
        pages = self.tables.usage_pages
        lines = [self.header, f"from {RUNTIME_MODULE} import UsagePageRegistry", ""]
        for page in pages:
            if self.context.check_cancelled():
                return None
            lines.append(
                f"from {self.root_namespace}.pages.{page.module_name} import {page.safe_name}UsagePage"
            )
        lines.extend(
            [
                "",
                "",
                "class UsagePages(UsagePageRegistry):",
                '    """All usage pages, by usage page id."""',
                "",
                "    def __init__(self):",
            ]
        )
        if pages:
            entries = [f"                0x{page.id:04x}: {page.safe_name}UsagePage()" for page in pages]
            lines.append("        super().__init__(")
            lines.append("            {")
            lines.append(",\n".join(entries))
            lines.append("            }")
            lines.append("        )")
        else:
            lines.append("        super().__init__({})")

        for page in pages:
            if self.context.check_cancelled():
                return None
            lines.extend(
                [
                    "",
                    "    @property",
                    f"    def {page.safe_name}(self) -> {page.safe_name}UsagePage:",
                    f"        {_docstring(f'{page.name} Usage Page.')}",
                    f"        return self[0x{page.id:04x}]",
                ]
            )
        lines.append("")
        return "\n".join(lines)

    def render_lookup(self, page: UsagePage) -> str:
        lines = [
            self.header,
            f"from {RUNTIME_MODULE} import Usage",
            f"from {RUNTIME_MODULE} import UsagePage",
            f"from {RUNTIME_MODULE} import UsageTypes",
            "",
            "",
            f"class {page.safe_name}UsagePage(UsagePage):",
            f"    {_docstring(f'{page.name} Usage Page.')}",
            "",
        ]

        entries = [
            f"        0x{usage.id:04x}: ({quote(usage.name)}, {render_kinds(usage.kinds)})," for usage in page.usage_ids
        ]
        fallback = []
        generator = page.usage_id_generator
        if generator is not None and self.max_generated > 0:
            kinds = render_kinds(generator.kinds)
            materialized = generator.materialized(self.max_generated)
            for usage_id in materialized:
                name = generator.name_for(usage_id - generator.start_usage_id)
                entries.append(f"        0x{usage_id:04x}: ({quote(name)}, {kinds}),")

            if materialized.stop <= generator.end_usage_id:
                prefix = generator.name_prefix.replace("{", "{{").replace("}", "}}")
                fallback = [
                    f"        if 0x{materialized.stop:04x} <= usage_id <= 0x{generator.end_usage_id:04x}:",
                    f"            n = usage_id - 0x{generator.start_usage_id:04x}",
                    f"            return Usage(self, usage_id, f{quote(prefix + ' {n}')}, {kinds})",
                ]

        if entries:
            lines.append("    _USAGES = {")
            lines.extend(entries)
            lines.append("    }")
        else:
            lines.append("    _USAGES = {}")

        lines.extend(
            [
                "",
                "    def __init__(self):",
                f"        super().__init__(0x{page.id:04x}, {quote(page.name)})",
                "",
                "    def create_usage(self, usage_id: int) -> Usage:",
                "        entry = self._USAGES.get(usage_id)",
                "        if entry is not None:",
                "            return Usage(self, usage_id, *entry)",
            ]
        )
        lines.extend(fallback)
        lines.append("        return super().create_usage(usage_id)")
        lines.append("")
        return "\n".join(lines)
