# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/mail_spool.py
from __future__ import annotations

from typing import Optional

from ...guest.base import WINDOWS, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects
from .base import delete_globs, sorted_globs

GLOBS = sorted_globs(["/var/spool/mail/*", "/var/mail/*"])


def mail_spool_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) == WINDOWS:
        return Outcome.SKIPPED
    delete_globs(guest, GLOBS, recursive=True)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="mail-spool",
        heading="Remove email from the local mail spool directory",
        perform_on_filesystems=mail_spool_perform,
    )
