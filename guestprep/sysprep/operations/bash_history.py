# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/bash_history.py
from __future__ import annotations

from typing import Optional

from ...guest.base import WINDOWS, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects
from .base import delete_globs, sorted_globs

GLOBS = sorted_globs(["/root/.bash_history", "/home/*/.bash_history"])


def bash_history_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) == WINDOWS:
        return Outcome.SKIPPED
    delete_globs(guest, GLOBS)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="bash-history",
        heading="Remove the bash history in the guest",
        description=(
            "Remove the bash history of user \"root\" and any other users who "
            "have a .bash_history file in their home directory."
        ),
        perform_on_filesystems=bash_history_perform,
    )
