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
"""Choose where the usage tables come from and load them.

Three tiers are consulted, in order: the cached JSON attachment, the cached
specification document, and the specification at its original location.
Every failure is reported as a diagnostic and yields ``UsageTables.EMPTY``.
"""

from __future__ import annotations

import logging

from enum import Enum
from pathlib import Path
from typing import Optional

import requests

from . import diagnostics
from . import pdf
from .context import GeneratorContext
from .exceptions import AttachmentNotFoundError
from .exceptions import UnsupportedSchemeError
from .resolver import CacheLocations
from .tables import UsageTables
from .tables import parse_tables

logger = logging.getLogger(__name__)


class CacheTier(Enum):
    ATTACHMENT_CACHE = "attachment cache"
    DOCUMENT_CACHE = "document cache"
    ORIGIN = "origin"


def select_tier(locations: CacheLocations) -> CacheTier:
    if not locations.force:
        if locations.cached_attachment is not None and locations.cached_attachment.is_file():
            return CacheTier.ATTACHMENT_CACHE
        if locations.cached_document is not None and locations.cached_document.is_file():
            return CacheTier.DOCUMENT_CACHE
    return CacheTier.ORIGIN


def _write_cache(path: Path, data: bytes):
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        logger.warning("failed to write cache %s: %s", path, e)
    else:
        if logger.isEnabledFor(logging.INFO):
            logger.info("cached %d bytes to %s", len(data), path)


def parse(context: GeneratorContext, data: bytes, source) -> UsageTables:
    try:
        tables = parse_tables(data)
    except Exception as e:
        context.report(diagnostics.DESERIALIZATION_FAILED, source, e)
        return UsageTables.EMPTY
    if logger.isEnabledFor(logging.INFO):
        logger.info("loaded usage tables v%s (%d pages) from %s", tables.version, len(tables), source)
    return tables


def load_from_attachment(context: GeneratorContext, path: Path) -> UsageTables:
    """Parse a cached JSON attachment."""
    try:
        data = path.read_bytes()
    except OSError as e:
        context.report(diagnostics.DESERIALIZATION_FAILED, path, e)
        return UsageTables.EMPTY
    return parse(context, data, path)


def load_from_document(
    context: GeneratorContext,
    location: str,
    attachment: str,
    document_cache: Optional[Path] = None,
    attachment_cache: Optional[Path] = None,
) -> UsageTables:
    """Fetch a specification document, extract its attachment and parse it.

    The raw document is written to ``document_cache`` and the extracted
    attachment to ``attachment_cache`` when those are given.
    """
    try:
        document = pdf.fetch_document(location, context.options.timeout)
    except (requests.RequestException, OSError, UnsupportedSchemeError, ValueError) as e:
        context.report(diagnostics.DOCUMENT_NOT_FOUND, location, e)
        return UsageTables.EMPTY

    try:
        if context.check_cancelled():
            return UsageTables.EMPTY

        if document_cache is not None:
            _write_cache(document_cache, document)

        stream = pdf.find_attachment(document, attachment)
        if context.check_cancelled():
            return UsageTables.EMPTY

        data = pdf.decode_attachment(stream)
        if attachment_cache is not None:
            _write_cache(attachment_cache, data)
        if context.check_cancelled():
            return UsageTables.EMPTY
    except AttachmentNotFoundError as e:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s: %s", location, e.reason)
        context.report(diagnostics.ATTACHMENT_NOT_FOUND, location)
        return UsageTables.EMPTY
    except Exception as e:
        context.report(diagnostics.ATTACHMENT_EXTRACTION_FAILED, location, e)
        return UsageTables.EMPTY

    return parse(context, data, f"{location}#{attachment}")


def load(context: GeneratorContext, locations: CacheLocations, tier: CacheTier) -> UsageTables:
    """Load the tables from one tier; no fallback to other tiers."""
    if logger.isEnabledFor(logging.INFO):
        logger.info("loading usage tables from %s", tier.value)
    if tier is CacheTier.ATTACHMENT_CACHE:
        return load_from_attachment(context, locations.cached_attachment)
    if tier is CacheTier.DOCUMENT_CACHE:
        return load_from_document(
            context,
            locations.cached_document.as_uri(),
            locations.attachment,
            attachment_cache=locations.cached_attachment,
        )
    return load_from_document(
        context,
        locations.specification,
        locations.attachment,
        document_cache=locations.cached_document,
        attachment_cache=locations.cached_attachment,
    )
