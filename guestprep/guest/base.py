# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/guest/base.py
"""
Guest capability interface.

Operations and the execution engine only ever talk to a guest image through
this surface. The libguestfs-backed implementation lives in guestfs_guest.py;
tests use an in-memory fake.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import List

LINUX = "linux"
WINDOWS = "windows"
UNKNOWN = "unknown"

_KNOWN_FAMILIES = (LINUX, WINDOWS)


def normalize_family(raw: str) -> str:
    """Map whatever inspection reported onto linux/windows/unknown."""
    fam = (raw or "").strip().lower()
    return fam if fam in _KNOWN_FAMILIES else UNKNOWN


class Removal(str, Enum):
    REMOVED = "removed"
    ABSENT = "absent"
    NOT_A_FILE = "not-a-file"
    DRY_RUN = "dry-run"

    @property
    def changed(self) -> bool:
        """True when the path was removed, or would have been in dry-run."""
        return self in (Removal.REMOVED, Removal.DRY_RUN)


class Guest(ABC):
    @abstractmethod
    def list_roots(self) -> List[str]:
        """Root device of every OS found by inspection (may be empty)."""

    @abstractmethod
    def list_devices(self) -> List[str]:
        """Raw block devices of the image, e.g. /dev/sda."""

    @abstractmethod
    def inspect_os_family(self, root: str) -> str:
        """linux, windows or unknown."""

    @abstractmethod
    def inspect_distro(self, root: str) -> str:
        """Distribution short name ("fedora", "debian", ...) or ""."""

    @abstractmethod
    def mount_root(self, root: str) -> None:
        ...

    @abstractmethod
    def umount_all(self) -> None:
        ...

    @abstractmethod
    def glob_expand(self, pattern: str) -> List[str]:
        """Sorted matches for pattern; empty list when nothing matches."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    def is_file(self, path: str) -> bool:
        ...

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        ...

    @abstractmethod
    def remove(self, path: str) -> Removal:
        """
        Remove a single non-directory. Returns ABSENT when the path is already
        gone and NOT_A_FILE when it is a directory; raises only on real I/O
        failures.
        """

    @abstractmethod
    def remove_recursive(self, path: str) -> Removal:
        """Remove path and everything below it; ABSENT when already gone."""

    @abstractmethod
    def filesize(self, path: str) -> int:
        ...

    @abstractmethod
    def truncate(self, path: str) -> Removal:
        """Truncate a regular file to zero length; ABSENT when missing."""

    @abstractmethod
    def is_lvm_pv(self, device: str) -> bool:
        ...

    @abstractmethod
    def change_pv_uuid(self, device: str) -> None:
        ...

    def close(self) -> None:
        return None
