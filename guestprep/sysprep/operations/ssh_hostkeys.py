# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/ssh_hostkeys.py
from __future__ import annotations

from typing import Optional

from ...guest.base import WINDOWS, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import REGENERATE_SSH_HOST_KEYS, SideEffects
from .base import delete_globs

GLOBS = ["/etc/ssh/*_host_*"]


def ssh_hostkeys_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) == WINDOWS:
        return Outcome.SKIPPED
    if delete_globs(guest, GLOBS):
        effects.record(REGENERATE_SSH_HOST_KEYS)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="ssh-hostkeys",
        heading="Remove the SSH host keys in the guest",
        description=(
            "The SSH host keys are regenerated (differently) next time the guest "
            "is booted. If, after cloning, the guest gets the same IP address, "
            "ssh will give you a stark warning about the host key changing."
        ),
        perform_on_filesystems=ssh_hostkeys_perform,
    )
