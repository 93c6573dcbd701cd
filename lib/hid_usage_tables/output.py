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
"""Destinations for generated source text."""

from __future__ import annotations

import logging

from pathlib import Path
from typing import Dict
from typing import Protocol

logger = logging.getLogger(__name__)


class OutputSink(Protocol):
    def add_source(self, name: str, text: str) -> None:
        ...


class MemorySink:
    """Keeps generated sources in insertion order, keyed by name."""

    def __init__(self):
        self.sources: Dict[str, str] = {}

    def add_source(self, name: str, text: str) -> None:
        if name in self.sources:
            raise ValueError(f"Source '{name}' was already added")
        self.sources[name] = text

    def __getitem__(self, name: str) -> str:
        return self.sources[name]

    def __contains__(self, name: str) -> bool:
        return name in self.sources

    def __len__(self):
        return len(self.sources)


class DirectorySink:
    """Writes generated sources below a directory, making every folder a package."""

    def __init__(self, root):
        self.root = Path(root)

    def add_source(self, name: str, text: str) -> None:
        path = self.root / name
        folder = self.root
        self._ensure_package(folder)
        for part in Path(name).parent.parts:
            folder = folder / part
            self._ensure_package(folder)
        path.write_text(text, encoding="utf-8")
        if logger.isEnabledFor(logging.INFO):
            logger.info("wrote %s", path)

    @staticmethod
    def _ensure_package(folder: Path):
        folder.mkdir(parents=True, exist_ok=True)
        init = folder / "__init__.py"
        if not init.exists():
            init.write_text("", encoding="utf-8")
