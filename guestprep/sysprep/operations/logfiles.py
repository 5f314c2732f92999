# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/logfiles.py
from __future__ import annotations

from typing import Optional

from ...guest.base import LINUX, Guest
from ..operation import OperationDescriptor, Outcome
from ..side_effects import SideEffects
from .base import delete_globs, globs_as_text, sorted_globs

GLOBS = sorted_globs([
    # log files
    "/var/log/*.log*",
    "/var/log/audit/*",
    "/var/log/btmp*",
    "/var/log/cron*",
    "/var/log/dmesg*",
    "/var/log/lastlog*",
    "/var/log/maillog*",
    "/var/log/mail/*",
    "/var/log/messages*",
    "/var/log/secure*",
    "/var/log/spooler*",
    "/var/log/tallylog*",
    "/var/log/wtmp*",
    # installer leftovers
    "/root/install.log",
    "/root/install.log.syslog",
    "/root/anaconda-ks.cfg",
])


def logfiles_perform(guest: Guest, root: str, effects: SideEffects) -> Optional[Outcome]:
    if guest.inspect_os_family(root) != LINUX:
        return Outcome.SKIPPED
    delete_globs(guest, GLOBS, recursive=True)
    return None


def op() -> OperationDescriptor:
    return OperationDescriptor(
        name="logfiles",
        enabled_by_default=True,
        heading="Remove many log files from the guest",
        description="Remove many log files.  On Linux the following files are removed:\n\n" + globs_as_text(GLOBS),
        perform_on_filesystems=logfiles_perform,
    )
