# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/package_manager_cache.py
from __future__ import annotations

from typing import Optional

from ...guest.base import LINUX, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects
from .base import delete_globs, globs_as_text, sorted_globs

GLOBS = sorted_globs([
    "/var/cache/apt/archives/*.deb",
    "/var/cache/dnf/*",
    "/var/cache/yum/*",
    "/var/cache/zypp/*",
])


def package_manager_cache_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) != LINUX:
        return Outcome.SKIPPED
    delete_globs(guest, GLOBS, recursive=True)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="package-manager-cache",
        heading="Remove package manager cache",
        description="Remove downloaded packages and metadata caches:\n\n" + globs_as_text(GLOBS),
        perform_on_filesystems=package_manager_cache_perform,
    )
