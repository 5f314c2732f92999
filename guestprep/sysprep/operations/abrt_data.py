# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/abrt_data.py
from __future__ import annotations

from typing import Optional

from ...guest.base import WINDOWS, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects
from .base import delete_globs

GLOBS = ["/var/spool/abrt/*"]


def abrt_data_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) == WINDOWS:
        return Outcome.SKIPPED
    delete_globs(guest, GLOBS, recursive=True)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="abrt-data",
        enabled_by_default=True,
        heading="Remove the crash data generated by ABRT",
        description="Remove the automatically generated ABRT crash data in /var/spool/abrt/.",
        perform_on_filesystems=abrt_data_perform,
    )
