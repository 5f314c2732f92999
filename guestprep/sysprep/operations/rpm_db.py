# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/rpm_db.py
from __future__ import annotations

from typing import Optional

from ...guest.base import LINUX, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects
from .base import delete_globs

RPM_DIR = "/var/lib/rpm"
GLOBS = ["/var/lib/rpm/__db.*"]


def rpm_db_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) != LINUX or not guest.is_dir(RPM_DIR):
        return Outcome.SKIPPED
    delete_globs(guest, GLOBS)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="rpm-db",
        heading="Remove host-specific RPM database files",
        description=(
            "Remove host-specific RPM database files and locks. RPM recreates "
            "these files automatically if needed."
        ),
        perform_on_filesystems=rpm_db_perform,
    )
