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
"""Turn the generator options into absolute locations for the source and the caches."""

from __future__ import annotations

import dataclasses
import logging
import os.path as _path

from pathlib import Path
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import unquote
from urllib.parse import urlparse

from . import diagnostics
from .configuration import GeneratorOptions
from .diagnostics import DiagnosticReporter

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class CacheLocations:
    specification: str
    attachment: str
    cache_folder: Optional[Path] = None
    cached_document: Optional[Path] = None
    cached_attachment: Optional[Path] = None
    force: bool = False

    @property
    def caching(self) -> bool:
        return self.cached_attachment is not None


def normalize_location(location: str, project_dir: str) -> str:
    """Return ``location`` as a URL, turning plain paths into absolute ``file`` URLs."""
    if not location:
        return ""
    try:
        scheme = urlparse(location).scheme
    except ValueError as e:
        # left as is, fetching it fails later on
        logger.warning("malformed specification location %r: %s", location, e)
        return location
    if len(scheme) > 1:  # a single letter is a Windows drive
        return location
    path = Path(location).expanduser()
    if not path.is_absolute():
        path = Path(project_dir) / path
    return Path(_path.abspath(path)).as_uri()


def location_path(location: str) -> Path:
    """The local file path of a ``file`` URL."""
    parsed = urlparse(location)
    path = unquote(parsed.path)
    if parsed.netloc and parsed.netloc != "localhost":
        path = f"//{parsed.netloc}{path}"
    return Path(path)


def document_name(location: str) -> str:
    try:
        path = urlparse(location).path
    except ValueError:
        return ""
    return PurePosixPath(unquote(path)).name


def resolve_cache_folder(options: GeneratorOptions, reporter: DiagnosticReporter) -> Optional[Path]:
    """Find the absolute cache folder, creating it if needed.

    Returns ``None`` when caching is not possible.
    """
    if not options.cache_folder:
        return None
    folder = Path(options.cache_folder).expanduser()
    if not folder.is_absolute():
        if not options.project_dir or not _path.isabs(options.project_dir):
            return None
        folder = Path(options.project_dir) / folder
    folder = Path(_path.abspath(folder))

    if not folder.is_dir():
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            reporter.report(diagnostics.CACHE_FOLDER_CREATION_FAILED, folder, e)
            return None
    return folder


def resolve_locations(
    options: GeneratorOptions, cache_folder: Optional[Path], reporter: DiagnosticReporter
) -> CacheLocations:
    specification = normalize_location(options.specification, options.project_dir)
    attachment = options.attachment
    force = options.force

    cached_document = cached_attachment = None
    if cache_folder is not None and attachment and specification:
        name = document_name(specification)
        if name:
            cached_attachment = cache_folder / attachment
            cached_document = cache_folder / name

    if cached_attachment is None:
        # without caches the only place to get the tables from is the source
        cache_folder = None
        cached_document = None
        force = True
        reporter.report(diagnostics.CACHING_DISABLED)

    locations = CacheLocations(
        specification=specification,
        attachment=attachment,
        cache_folder=cache_folder,
        cached_document=cached_document,
        cached_attachment=cached_attachment,
        force=force,
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("resolved %s", locations)
    return locations
