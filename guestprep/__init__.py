# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/__init__.py
"""
guestprep - offline sysprep for virtual machine disk images

Removes logs, crash dumps, host keys, machine IDs and similar per-instance
state from a guest image so it can be cloned as a template.

Usage as a library:

    from guestprep import GuestFSGuest, ExecutionEngine, build_registry, select

    registry = build_registry()
    plan = select(registry, exclude=["ssh-hostkeys"])
    with GuestFSGuest.open(Path("fedora.qcow2"), logger) as guest:
        report = ExecutionEngine(guest, plan, logger).run()
"""

__version__ = "0.1.0"

from .guest import Guest, GuestFSGuest, Removal
from .sysprep import (
    ExecutionEngine,
    OperationDescriptor,
    OperationRegistry,
    Outcome,
    RunReport,
    SideEffects,
    build_registry,
    select,
)

__all__ = [
    "__version__",
    "ExecutionEngine",
    "Guest",
    "GuestFSGuest",
    "OperationDescriptor",
    "OperationRegistry",
    "Outcome",
    "Removal",
    "RunReport",
    "SideEffects",
    "build_registry",
    "select",
]
