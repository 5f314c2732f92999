# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/udev_persistent_net.py
from __future__ import annotations

from typing import Optional

from ...guest.base import LINUX, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects
from .base import delete_globs

GLOBS = ["/etc/udev/rules.d/70-persistent-net.rules"]


def udev_persistent_net_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) != LINUX:
        return Outcome.SKIPPED
    delete_globs(guest, GLOBS)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="udev-persistent-net",
        heading="Remove udev persistent net rules",
        description=(
            "Remove udev persistent net rules which map the guest's existing MAC "
            "address to a fixed ethernet device (eg. eth0). A clone gets a new "
            "MAC address and would otherwise come up as eth1."
        ),
        perform_on_filesystems=udev_persistent_net_perform,
    )
