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
"""Generate Python usage declarations from the HID Usage Tables specification.

The specification PDF published by the USB-IF carries a JSON attachment
describing every usage page and usage id. This package fetches the PDF (or a
cached copy of it or of the attachment), extracts and parses the attachment,
and renders one enumeration and one lookup class per usage page, plus a
registry of all pages.
"""

import pkgutil

NAME = "hid-usage-tables"

try:
    __version__ = pkgutil.get_data("hid_usage_tables", "version").strip().decode()
except Exception:
    __version__ = "unknown"
