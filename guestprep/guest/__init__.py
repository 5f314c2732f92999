# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/guest/__init__.py
"""Guest image access: capability interface and the libguestfs backend."""

from .base import LINUX, UNKNOWN, WINDOWS, Guest, Removal, normalize_family
from .guestfs_guest import GuestFSGuest

__all__ = ["Guest", "GuestFSGuest", "Removal", "normalize_family", "LINUX", "WINDOWS", "UNKNOWN"]
