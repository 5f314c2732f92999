# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/dhcp_client_state.py
from __future__ import annotations

from typing import Optional

from ...guest.base import LINUX, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects
from .base import delete_globs, sorted_globs

GLOBS = sorted_globs([
    "/var/lib/dhclient/*",
    "/var/lib/dhcp/*",
    "/var/lib/NetworkManager/dhclient-*",
    "/var/lib/NetworkManager/internal-*",
])


def dhcp_client_state_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) != LINUX:
        return Outcome.SKIPPED
    delete_globs(guest, GLOBS, recursive=True)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="dhcp-client-state",
        heading="Remove DHCP client leases",
        perform_on_filesystems=dhcp_client_state_perform,
    )
