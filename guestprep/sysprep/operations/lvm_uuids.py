# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/lvm_uuids.py
from __future__ import annotations

from typing import Optional

from ...guest.base import Guest
from ..operation import OperationDescriptor, Outcome


def lvm_uuids_perform(guest: Guest, device: str) -> Optional[Outcome]:
    if not guest.is_lvm_pv(device):
        return Outcome.SKIPPED
    guest.change_pv_uuid(device)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="lvm-uuids",
        heading="Change LVM2 PV UUIDs",
        description=(
            "On Linux guests that have LVM2 physical volumes, give every PV a "
            "new random UUID so clones can be attached to the same host as the "
            "original without the PVs clashing."
        ),
        perform_on_devices=lvm_uuids_perform,
    )
