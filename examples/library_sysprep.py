#!/usr/bin/env python3
# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Example: sysprep a disk image using the guestprep library.

This example demonstrates:
- Building the operation registry with one extra, site-specific operation
- Selecting operations (defaults plus/minus a few)
- Running the plan against an image, dry-run first
- Reading outcomes and side effects from the run report

Usage:
    sudo python library_sysprep.py /var/lib/libvirt/images/template.qcow2
"""

import sys
from pathlib import Path

from guestprep import ExecutionEngine, GuestFSGuest, OperationDescriptor, Outcome, build_registry, select
from guestprep.core.logger import Log
from guestprep.guest.base import LINUX
from guestprep.sysprep.operations import ALL_OPERATIONS
from guestprep.sysprep.operations.base import delete_globs

logger = Log.setup(verbose=1)

CLOUD_INIT_GLOBS = ["/var/lib/cloud/instances/*", "/var/lib/cloud/instance"]


def cloud_init_state_perform(guest, root, effects):
    if guest.inspect_os_family(root) != LINUX:
        return Outcome.SKIPPED
    delete_globs(guest, CLOUD_INIT_GLOBS, recursive=True)
    return None


def cloud_init_state():
    return OperationDescriptor(
        name="cloud-init-state",
        heading="Remove cloud-init per-instance state",
        perform_on_filesystems=cloud_init_state_perform,
    )


def sysprep(image: Path, dry_run: bool) -> bool:
    registry = build_registry(ALL_OPERATIONS + [cloud_init_state])
    plan = select(registry, include=["tmp-files"], exclude=["lvm-uuids"])
    logger.info(f"Plan: {', '.join(plan.names)}")

    with GuestFSGuest.open(image, logger, dry_run=dry_run) as guest:
        report = ExecutionEngine(guest, plan, logger).run()

    for scope in report.roots:
        applied = [r.operation for r in scope.results if r.outcome is Outcome.APPLIED]
        logger.info(f"{scope.target} ({scope.family}): applied {len(applied)} operation(s)")
    for failure in report.failures:
        logger.error(f"✗ {failure}")
    if report.side_effects:
        logger.info(f"Follow-up on first boot: {', '.join(report.side_effects)}")
    return report.ok


def main():
    if len(sys.argv) != 2:
        print(__doc__)
        return 2
    image = Path(sys.argv[1])

    if not sysprep(image, dry_run=True):
        return 1
    answer = input("Apply for real? [y/N] ").strip().lower()
    if answer != "y":
        return 0
    return 0 if sysprep(image, dry_run=False) else 1


if __name__ == "__main__":
    sys.exit(main())
