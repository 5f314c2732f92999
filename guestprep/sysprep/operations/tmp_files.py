# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/tmp_files.py
from __future__ import annotations

from typing import Optional

from ...guest.base import WINDOWS, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects
from .base import delete_globs, sorted_globs

GLOBS = sorted_globs(["/tmp/*", "/var/tmp/*"])


def tmp_files_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) == WINDOWS:
        return Outcome.SKIPPED
    delete_globs(guest, GLOBS, recursive=True)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="tmp-files",
        enabled_by_default=False,
        heading="Remove temporary files",
        description=(
            "Remove everything under /tmp and /var/tmp. Off by default: some "
            "templates stage first-boot payloads there. Enable with --enable tmp-files."
        ),
        perform_on_filesystems=tmp_files_perform,
    )
