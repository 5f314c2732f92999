# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/machine_id.py
from __future__ import annotations

from typing import Optional

from ...guest.base import WINDOWS, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import REGENERATE_MACHINE_ID, SideEffects

ETC_MACHINE_ID = "/etc/machine-id"
DBUS_MACHINE_ID = "/var/lib/dbus/machine-id"


def machine_id_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) == WINDOWS:
        return Outcome.SKIPPED

    changed = guest.remove(DBUS_MACHINE_ID).changed
    # systemd wants the file to exist but be empty; it fills it on first boot.
    if guest.is_file(ETC_MACHINE_ID) and guest.filesize(ETC_MACHINE_ID) > 0:
        changed = guest.truncate(ETC_MACHINE_ID).changed or changed

    if changed:
        effects.record(REGENERATE_MACHINE_ID)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="machine-id",
        heading="Remove the local machine ID",
        description=(
            "The machine ID is usually generated randomly when the system is "
            "installed. Truncate /etc/machine-id and remove the D-Bus copy so "
            "that each clone gets its own."
        ),
        perform_on_filesystems=machine_id_perform,
    )
