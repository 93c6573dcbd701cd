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
"""Generator options, read from the build properties.

Options arrive as a flat key/value mapping, either handed over by the build
or loaded from a YAML file. Keys are matched case-insensitively and may carry
a ``build_property.`` prefix. Malformed values fall back to their defaults.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import os.path as _path

from typing import Any
from typing import Mapping
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_ROOT_NAMESPACE = "hid_usages.generated"
DEFAULT_MAX_GENERATED = 16
DEFAULT_TIMEOUT = 60.0
_MAX_GENERATED_LIMIT = 0xFFFF

_KEY_PREFIX = "build_property."
KEY_ROOT_NAMESPACE = "RootNamespace"
KEY_SPECIFICATION = "HIDUsageTablesPDF"
KEY_ATTACHMENT = "HIDUsageTablesJSON"
KEY_CACHE_FOLDER = "HIDUsageTablesCacheFolder"
KEY_PROJECT_DIR = "ProjectDir"
KEY_FORCE = "GenerateUsagesFromSource"
KEY_MAX_GENERATED = "HIDUsagePagesMaxGenerated"
KEY_TIMEOUT = "HIDUsageTablesTimeout"


@dataclasses.dataclass(frozen=True)
class GeneratorOptions:
    root_namespace: str = DEFAULT_ROOT_NAMESPACE
    specification: str = ""
    attachment: str = ""
    cache_folder: str = ""
    project_dir: str = ""
    force: bool = False
    max_generated: int = DEFAULT_MAX_GENERATED
    timeout: float = DEFAULT_TIMEOUT


def normalize(values: Mapping[str, Any]) -> dict:
    normalized = {}
    for key, value in values.items():
        key = str(key).lower()
        if key.startswith(_KEY_PREFIX):
            key = key[len(_KEY_PREFIX) :]
        normalized[key] = value
    return normalized


def _get_str(values: dict, key: str) -> Optional[str]:
    value = values.get(key.lower())
    if value is None:
        return None
    value = str(value).strip()
    return value if value else None


def _get_bool(values: dict, key: str, default: bool) -> bool:
    value = values.get(key.lower())
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    if value is not None:
        logger.warning("ignoring invalid boolean %r for %s", value, key)
    return default


def _get_int(values: dict, key: str, default: int, maximum: int) -> int:
    value = values.get(key.lower())
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(str(value).strip(), 10)
    except ValueError:
        logger.warning("ignoring invalid number %r for %s", value, key)
        return default
    if not 0 <= number <= maximum:
        logger.warning("ignoring out of range number %r for %s", value, key)
        return default
    return number


def _get_float(values: dict, key: str, default: float) -> float:
    value = values.get(key.lower())
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("ignoring invalid number %r for %s", value, key)
        return default
    return number if number > 0 else default


def _is_package_name(name: str) -> bool:
    return all(part.isidentifier() for part in name.split("."))


def from_mapping(values: Mapping[str, Any]) -> GeneratorOptions:
    values = normalize(values or {})

    root_namespace = _get_str(values, KEY_ROOT_NAMESPACE) or DEFAULT_ROOT_NAMESPACE
    if not _is_package_name(root_namespace):
        logger.warning("ignoring invalid root namespace %r", root_namespace)
        root_namespace = DEFAULT_ROOT_NAMESPACE

    attachment = _get_str(values, KEY_ATTACHMENT) or ""
    if attachment and (_path.isabs(attachment) or "://" in attachment):
        # the attachment name is looked up inside the document and cached under the cache folder
        logger.warning("ignoring absolute attachment name %r", attachment)
        attachment = ""

    project_dir = _get_str(values, KEY_PROJECT_DIR)
    if not project_dir or not _path.isabs(project_dir):
        project_dir = os.getcwd()

    return GeneratorOptions(
        root_namespace=root_namespace,
        specification=_get_str(values, KEY_SPECIFICATION) or "",
        attachment=attachment,
        cache_folder=_get_str(values, KEY_CACHE_FOLDER) or "",
        project_dir=project_dir,
        force=_get_bool(values, KEY_FORCE, False),
        max_generated=_get_int(values, KEY_MAX_GENERATED, DEFAULT_MAX_GENERATED, _MAX_GENERATED_LIMIT),
        timeout=_get_float(values, KEY_TIMEOUT, DEFAULT_TIMEOUT),
    )


def load(file_path) -> dict:
    """Read the raw option mapping from a YAML file, or an empty mapping on failure."""
    loaded = {}
    if _path.isfile(file_path):
        try:
            with open(file_path) as config_file:
                loaded = yaml.safe_load(config_file)
        except Exception as e:
            logger.error("failed to load from %s: %s", file_path, e)
            loaded = {}
    else:
        logger.warning("configuration file %s not found", file_path)
    if not isinstance(loaded, dict):
        if loaded is not None:
            logger.error("ignoring %s, expected a mapping but found %s", file_path, type(loaded).__name__)
        loaded = {}
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("load => %s", loaded)
    return loaded
