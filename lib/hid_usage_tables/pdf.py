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
"""Fetch the specification document and pull its embedded JSON attachment.

Embedded files live in the document catalog's name tree::

    /Root -> /Names -> /EmbeddedFiles -> /Names [name filespec name filespec ...]

where each file specification names the file (``/F``, ``/UF``) and points at
the embedded stream through its ``/EF`` dictionary, under the same keys.
"""

from __future__ import annotations

import dataclasses
import io
import logging

from typing import Iterator
from typing import List
from typing import Optional
from urllib.parse import urlparse

import requests

from pypdf import PdfReader
from pypdf.generic import ArrayObject
from pypdf.generic import DictionaryObject
from pypdf.generic import IndirectObject
from pypdf.generic import StreamObject

from .exceptions import AttachmentNotFoundError
from .exceptions import UnsupportedSchemeError
from .resolver import location_path

logger = logging.getLogger(__name__)

_MAX_NAME_TREE_DEPTH = 32


def fetch_document(location: str, timeout: float = 60.0) -> bytes:
    """Read the raw document from a web or file URL."""
    scheme = urlparse(location).scheme.lower()
    if scheme.startswith("http"):
        if logger.isEnabledFor(logging.INFO):
            logger.info("downloading %s", location)
        response = requests.get(location, timeout=timeout)
        response.raise_for_status()
        return response.content
    if scheme == "file":
        return location_path(location).read_bytes()
    raise UnsupportedSchemeError(scheme, location)


@dataclasses.dataclass(frozen=True)
class AttachmentCandidate:
    key: str
    file_name: str
    file_spec: DictionaryObject


def _resolve(candidate):
    if isinstance(candidate, IndirectObject):
        return candidate.get_object()
    return candidate


def _dictionary(parent, key: str) -> Optional[DictionaryObject]:
    if not isinstance(parent, DictionaryObject):
        return None
    value = _resolve(parent.get(key))
    return value if isinstance(value, DictionaryObject) else None


def _text(value) -> Optional[str]:
    if isinstance(value, str):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return None


def _file_specs(node: DictionaryObject, depth: int = 0) -> Iterator[DictionaryObject]:
    if depth > _MAX_NAME_TREE_DEPTH:
        return
    names = _resolve(node.get("/Names"))
    if isinstance(names, ArrayObject):
        for entry in names:
            entry = _resolve(entry)
            if isinstance(entry, DictionaryObject):
                yield entry
    kids = _resolve(node.get("/Kids"))
    if isinstance(kids, ArrayObject):
        for kid in kids:
            kid = _resolve(kid)
            if isinstance(kid, DictionaryObject):
                yield from _file_specs(kid, depth + 1)


def attachment_candidates(reader: PdfReader) -> List[AttachmentCandidate]:
    """All named embedded files of the document, in name tree order."""
    catalog = _resolve(reader.trailer.get("/Root"))
    embedded_files = _dictionary(_dictionary(catalog, "/Names"), "/EmbeddedFiles")
    if embedded_files is None:
        return []

    candidates = []
    for file_spec in _file_specs(embedded_files):
        files = _dictionary(file_spec, "/EF")
        if files is None:
            continue
        for key in files.keys():
            file_name = _text(_resolve(file_spec.get(key)))
            if file_name and file_name.strip():
                candidates.append(AttachmentCandidate(str(key), file_name, file_spec))
    return candidates


def select_candidate(candidates: List[AttachmentCandidate], name: str) -> Optional[AttachmentCandidate]:
    """The first candidate named ``name`` (case-insensitive), else the first candidate."""
    wanted = (name or "").casefold()
    ranked = sorted(candidates, key=lambda candidate: 0 if candidate.file_name.casefold() == wanted else 1)
    return ranked[0] if ranked else None


def find_attachment(data: bytes, name: str) -> StreamObject:
    return locate_attachment(PdfReader(io.BytesIO(data)), name)


def locate_attachment(reader: PdfReader, name: str) -> StreamObject:
    """Locate the embedded stream of the attachment called ``name``.

    Falls back to the first embedded file when none has that name. Raises
    :class:`AttachmentNotFoundError` when the document embeds no usable file.
    """
    candidate = select_candidate(attachment_candidates(reader), name)
    if candidate is None:
        raise AttachmentNotFoundError(f"No embedded file named '{name}'")
    if candidate.file_name.casefold() != (name or "").casefold():
        logger.warning("no embedded file named '%s', using '%s'", name, candidate.file_name)

    stream = _resolve(_dictionary(candidate.file_spec, "/EF").get(candidate.key))
    if not isinstance(stream, StreamObject):
        raise AttachmentNotFoundError(f"Embedded file '{candidate.file_name}' is not a stream")
    return stream


def decode_attachment(stream: StreamObject) -> bytes:
    return stream.get_data()
