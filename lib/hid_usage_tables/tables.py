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
"""In-memory model of the HID Usage Tables and its JSON decoding.

The JSON attachment of the specification looks like::

    {
      "UsageTableVersion": 1,
      "UsageTableRevision": 5,
      "LastGenerated": "2024-01-01T00:00:00Z",
      "UsagePages": [
        {
          "Kind": "Defined",
          "Id": 1,
          "Name": "Generic Desktop",
          "UsageIds": [{"Id": 1, "Name": "Pointer", "Kinds": ["CP"]}],
          "UsageIdGenerator": null
        }
      ]
    }

Property names are matched case-insensitively.
"""

from __future__ import annotations

import dataclasses
import json
import keyword
import re

from datetime import datetime
from datetime import timezone
from enum import Enum
from typing import Any
from typing import Callable
from typing import ClassVar
from typing import Iterable
from typing import Optional
from typing import Tuple

from .exceptions import DeserializationError

MAX_ID = 0xFFFF

_WORD = re.compile(r"[0-9A-Za-z]+")
_SNAKE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


class UsageKind(Enum):
    # controls
    LINEAR_CONTROL = "LC"
    ON_OFF_CONTROL = "OOC"
    MOMENTARY_CONTROL = "MC"
    ONE_SHOT_CONTROL = "OSC"
    RE_TRIGGER_CONTROL = "RTC"
    # data
    SELECTOR = "Sel"
    STATIC_VALUE = "SV"
    STATIC_FLAG = "SF"
    DYNAMIC_FLAG = "DF"
    DYNAMIC_VALUE = "DV"
    # collection
    NAMED_ARRAY = "NAry"
    COLLECTION_APPLICATION = "CA"
    COLLECTION_LOGICAL = "CL"
    COLLECTION_PHYSICAL = "CP"
    USAGE_SWITCH = "US"
    USAGE_MODIFIER = "UM"
    # buffered bytes
    BUFFERED_BYTES = "BufferedBytes"

    @classmethod
    def parse(cls, value: str) -> UsageKind:
        if isinstance(value, str):
            text = value.strip().lower()
            for kind in cls:
                if kind.value.lower() == text or kind.name.lower() == text:
                    return kind
        raise ValueError(f"Unknown usage kind {value!r}")


def safe_name(name: str) -> str:
    """Turn a human name into a PascalCase Python identifier.

    >>> safe_name("Generic Desktop")
    'GenericDesktop'
    >>> safe_name("3D Game Controller")
    '_3DGameController'
    """
    result = "".join(word[0].upper() + word[1:] for word in _WORD.findall(name or ""))
    if not result:
        return "Unnamed"
    if result[0].isdigit():
        result = "_" + result
    if keyword.iskeyword(result):
        result += "_"
    return result


def snake_case(name: str) -> str:
    """Module name for a safe name, e.g. ``GenericDesktop`` -> ``generic_desktop``."""
    result = _SNAKE_BOUNDARY.sub("_", name).lower()
    if not result or not result.isidentifier():
        result = "_" + result
    if keyword.iskeyword(result):
        result += "_"
    return result


def _fields(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise TypeError(f"{what} should be an object, not {type(value).__name__}")
    return {str(key).lower(): item for key, item in value.items()}


def _int(value: Any, what: str, maximum: int = MAX_ID) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} should be an integer, not {value!r}")
    if not 0 <= value <= maximum:
        raise ValueError(f"{what} 0x{value:x} is out of range")
    return value


def _str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{what} should be a string, not {value!r}")
    return value


def _kinds(values: Optional[Iterable[str]]) -> Tuple[UsageKind, ...]:
    kinds = []
    for value in values or ():
        kind = UsageKind.parse(value)
        if kind not in kinds:
            kinds.append(kind)
    return tuple(kinds)


def _timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    text = _str(value, "LastGenerated").strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(_LONG_FRACTION.sub(r"\1", text))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclasses.dataclass(frozen=True)
class UsageId:
    id: int
    name: str
    safe_name: str
    kinds: Tuple[UsageKind, ...] = ()

    def full_id(self, page: UsagePage) -> int:
        return (page.id << 16) | self.id

    @classmethod
    def from_dict(cls, value: Any) -> UsageId:
        fields = _fields(value, "UsageId")
        name = _str(fields.get("name"), "UsageId name")
        return cls(
            id=_int(fields.get("id"), f"UsageId '{name}'"),
            name=name,
            safe_name=fields.get("safename") or safe_name(name),
            kinds=_kinds(fields.get("kinds")),
        )


@dataclasses.dataclass(frozen=True)
class UsageIdGenerator:
    """A contiguous block of usage ids named by a prefix and a zero-based index."""

    start_usage_id: int
    end_usage_id: int
    name_prefix: str
    safe_name_prefix: str
    kinds: Tuple[UsageKind, ...] = ()

    def __post_init__(self):
        if self.start_usage_id > self.end_usage_id:
            raise ValueError(
                f"Generator '{self.name_prefix}' starts at 0x{self.start_usage_id:04x} "
                f"after its end 0x{self.end_usage_id:04x}"
            )

    def __len__(self):
        return self.end_usage_id - self.start_usage_id + 1

    def name_for(self, index: int) -> str:
        return f"{self.name_prefix} {index}"

    def safe_name_for(self, index: int) -> str:
        return f"{self.safe_name_prefix}{index}"

    def materialized(self, cap: int) -> range:
        """The usage ids emitted individually when at most ``cap`` entries are generated."""
        if cap <= 0:
            return range(self.start_usage_id, self.start_usage_id)
        return range(self.start_usage_id, min(self.start_usage_id + cap - 1, self.end_usage_id) + 1)

    @classmethod
    def from_dict(cls, value: Any) -> UsageIdGenerator:
        fields = _fields(value, "UsageIdGenerator")
        prefix = _str(fields.get("nameprefix"), "UsageIdGenerator name prefix")
        return cls(
            start_usage_id=_int(fields.get("startusageid"), f"Generator '{prefix}' start"),
            end_usage_id=_int(fields.get("endusageid"), f"Generator '{prefix}' end"),
            name_prefix=prefix,
            safe_name_prefix=fields.get("safenameprefix") or safe_name(prefix),
            kinds=_kinds(fields.get("kinds")),
        )


@dataclasses.dataclass(frozen=True)
class UsagePage:
    id: int
    name: str
    safe_name: str
    usage_ids: Tuple[UsageId, ...] = ()
    usage_id_generator: Optional[UsageIdGenerator] = None
    kind: Optional[str] = None

    @property
    def module_name(self) -> str:
        return snake_case(self.safe_name)

    @classmethod
    def from_dict(cls, value: Any) -> UsagePage:
        fields = _fields(value, "UsagePage")
        name = _str(fields.get("name"), "UsagePage name")
        generator = fields.get("usageidgenerator")
        return cls(
            id=_int(fields.get("id"), f"UsagePage '{name}'"),
            name=name,
            safe_name=fields.get("safename") or safe_name(name),
            usage_ids=_unique_names(UsageId.from_dict(usage) for usage in fields.get("usageids") or ()),
            usage_id_generator=UsageIdGenerator.from_dict(generator) if generator is not None else None,
            kind=fields.get("kind"),
        )


def _unique_names(entries: Iterable, key: Callable[[str], str] = str) -> tuple:
    """Disambiguate entries whose ``key(safe_name)`` collide by appending their id to the safe name."""
    seen = set()
    result = []
    for entry in entries:
        if key(entry.safe_name) in seen:
            entry = dataclasses.replace(entry, safe_name=f"{entry.safe_name}_0x{entry.id:04X}")
        seen.add(key(entry.safe_name))
        result.append(entry)
    return tuple(result)


@dataclasses.dataclass(frozen=True)
class UsageTables:
    version: str = ""
    last_generated: Optional[datetime] = None
    usage_pages: Tuple[UsagePage, ...] = ()

    # "no data available"; compare with ``is``, a parsed table with no pages is not EMPTY
    EMPTY: ClassVar[UsageTables]

    def __len__(self):
        return len(self.usage_pages)

    def validate(self):
        page_ids = set()
        for page in self.usage_pages:
            if page.id in page_ids:
                raise ValueError(f"Duplicated usage page 0x{page.id:04x}")
            page_ids.add(page.id)
            usage_ids = set()
            for usage in page.usage_ids:
                if usage.id in usage_ids:
                    raise ValueError(f"Duplicated usage 0x{usage.id:04x} in usage page '{page.name}'")
                usage_ids.add(usage.id)
        return self

    @classmethod
    def from_dict(cls, value: Any) -> UsageTables:
        fields = _fields(value, "UsageTables")
        version = fields.get("version")
        if version is None:
            parts = [
                fields.get(key)
                for key in ("usagetableversion", "usagetablerevision", "usagetablesubrevisioninternal")
                if fields.get(key) is not None
            ]
            version = ".".join(str(part) for part in parts)
        return cls(
            version=str(version),
            last_generated=_timestamp(fields.get("lastgenerated")),
            usage_pages=_unique_names(
                (UsagePage.from_dict(page) for page in fields.get("usagepages") or ()), key=snake_case
            ),
        ).validate()


UsageTables.EMPTY = UsageTables()


def parse_tables(data: bytes) -> UsageTables:
    """Decode the JSON attachment into :class:`UsageTables`.

    Raises :class:`DeserializationError` on malformed data, including a
    ``null`` document.
    """
    try:
        document = json.loads(data)
    except ValueError as e:
        raise DeserializationError(f"Invalid JSON: {e}") from e
    if document is None:
        raise DeserializationError("The deserialization of JSON returned null.")
    try:
        return UsageTables.from_dict(document)
    except (KeyError, TypeError, ValueError) as e:
        raise DeserializationError(str(e)) from e
