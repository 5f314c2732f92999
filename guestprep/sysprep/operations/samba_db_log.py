# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/samba_db_log.py
from __future__ import annotations

from typing import Optional

from ...guest.base import WINDOWS, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects
from .base import delete_globs, sorted_globs

# Files only: directories under these paths stay in place.
GLOBS = sorted_globs([
    "/var/log/samba/old/*",
    "/var/log/samba/*",
    "/var/lib/samba/*/*",
    "/var/lib/samba/*",
])


def samba_db_log_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) == WINDOWS:
        return Outcome.SKIPPED
    delete_globs(guest, GLOBS)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="samba-db-log",
        enabled_by_default=True,
        heading="Remove the database and log files of Samba",
        perform_on_filesystems=samba_db_log_perform,
    )
