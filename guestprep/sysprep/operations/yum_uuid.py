# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/yum_uuid.py
from __future__ import annotations

from typing import Optional

from ...guest.base import LINUX, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects

UUID_PATH = "/var/lib/yum/uuid"

YUM_DISTROS = frozenset({
    "almalinux",
    "centos",
    "fedora",
    "oraclelinux",
    "redhat-based",
    "rhel",
    "rocky",
    "scientificlinux",
})


def yum_uuid_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) != LINUX:
        return Outcome.SKIPPED
    if guest.inspect_distro(root) not in YUM_DISTROS or not guest.is_file(UUID_PATH):
        return Outcome.SKIPPED
    guest.remove(UUID_PATH)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="yum-uuid",
        heading="Remove the yum UUID",
        description=(
            "Yum creates a fresh UUID the next time it runs when it notices "
            "the original UUID has been erased."
        ),
        perform_on_filesystems=yum_uuid_perform,
    )
