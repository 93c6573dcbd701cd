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
"""Runtime classes behind the generated usage pages.

Generated page classes subclass :class:`UsagePage` and return :class:`Usage`
values tagged with :class:`UsageTypes`; the generated registry subclasses
:class:`UsagePageRegistry`.
"""

from __future__ import annotations

import enum

from collections import abc
from types import MappingProxyType
from typing import Iterator
from typing import Mapping

MAX_USAGE_ID = 0xFFFF


class UsageTypes(enum.IntFlag):
    NONE = 0
    # controls
    LINEAR_CONTROL = LC = 1 << 0
    ON_OFF_CONTROL = OOC = 1 << 1
    MOMENTARY_CONTROL = MC = 1 << 2
    ONE_SHOT_CONTROL = OSC = 1 << 3
    RE_TRIGGER_CONTROL = RTC = 1 << 4
    # data
    SELECTOR = SEL = 1 << 5
    STATIC_VALUE = SV = 1 << 6
    STATIC_FLAG = SF = 1 << 7
    DYNAMIC_FLAG = DF = 1 << 8
    DYNAMIC_VALUE = DV = 1 << 9
    # collection
    NAMED_ARRAY = NARY = 1 << 10
    COLLECTION_APPLICATION = CA = 1 << 11
    COLLECTION_LOGICAL = CL = 1 << 12
    COLLECTION_PHYSICAL = CP = 1 << 13
    USAGE_SWITCH = US = 1 << 14
    USAGE_MODIFIER = UM = 1 << 15
    # buffered bytes
    BUFFERED_BYTES = BB = 1 << 16


class Usage:
    """A usage of a usage page, e.g. the X axis of the Generic Desktop page."""

    __slots__ = ("page", "id", "name", "types")

    def __init__(self, page: UsagePage, usage_id: int, name: str, types: UsageTypes = UsageTypes.NONE):
        self.page = page
        self.id = usage_id
        self.name = name
        self.types = UsageTypes(types)

    @property
    def full_id(self) -> int:
        return (self.page.id << 16) | self.id

    def __eq__(self, other):
        if not isinstance(other, Usage):
            return NotImplemented
        return (self.full_id, self.name, self.types) == (other.full_id, other.name, other.types)

    def __hash__(self):
        return hash((self.full_id, self.name))

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"Usage(0x{self.full_id:08x}, {self.name!r}, {self.types!r})"


class UsagePage:
    """A usage page; subclasses map page-local usage ids to :class:`Usage` values."""

    def __init__(self, page_id: int, name: str):
        self.id = page_id
        self.name = name

    def unknown_name(self, usage_id: int) -> str:
        return f"Unknown Usage 0x{usage_id:04X}"

    def create_usage(self, usage_id: int) -> Usage:
        return Usage(self, usage_id, self.unknown_name(usage_id), UsageTypes.NONE)

    def get_usage(self, usage_id: int) -> Usage:
        if not 0 <= usage_id <= MAX_USAGE_ID:
            raise KeyError(f"Usage id 0x{usage_id:x} out of range in {self.name}")
        return self.create_usage(usage_id)

    __getitem__ = get_usage

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"{type(self).__name__}(0x{self.id:04x}, {self.name!r})"


class UsagePageRegistry(abc.Mapping):
    """Read-only mapping of usage page ids to usage pages."""

    def __init__(self, pages: Mapping[int, UsagePage]):
        self._pages = MappingProxyType(dict(pages))

    def __getitem__(self, page_id: int) -> UsagePage:
        return self._pages[page_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._pages)

    def __len__(self):
        return len(self._pages)

    def get_usage(self, full_id: int) -> Usage:
        """Look up a usage by its 32-bit id, page id in the high 16 bits."""
        page = self._pages.get(full_id >> 16)
        if page is None:
            raise KeyError(f"Usage page not found for usage 0x{full_id:08x}")
        return page.get_usage(full_id & MAX_USAGE_ID)
