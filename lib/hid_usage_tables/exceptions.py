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
"""Exceptions raised while acquiring and decoding the usage tables."""


class UsageTablesError(Exception):
    """Base exception for all failures of the usage tables pipeline."""

    def __init__(self, reason: str, location=None):
        super().__init__(reason)
        self.reason = reason
        self.location = location


class UnsupportedSchemeError(UsageTablesError):
    """Raised when the specification location is neither a web nor a file URL."""

    def __init__(self, scheme: str, location=None):
        super().__init__(f"The specification location has an unsupported scheme '{scheme}'", location)
        self.scheme = scheme


class AttachmentNotFoundError(UsageTablesError):
    """Raised when the document does not embed a usable attachment."""

    pass


class DeserializationError(UsageTablesError):
    """Raised when the attachment data cannot be turned into usage tables."""

    pass
