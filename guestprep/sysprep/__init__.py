# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/__init__.py
"""Sysprep operation framework: descriptors, registry, selector, engine."""

from .engine import ExecutionEngine, OperationResult, RunReport, ScopeReport
from .operation import ExtraArg, Kind, OperationDescriptor, Outcome
from .registry import OperationRegistry, build_registry
from .selector import Plan, PlanEntry, select
from .side_effects import SideEffects

__all__ = [
    "ExecutionEngine",
    "ExtraArg",
    "Kind",
    "OperationDescriptor",
    "OperationRegistry",
    "OperationResult",
    "Outcome",
    "Plan",
    "PlanEntry",
    "RunReport",
    "ScopeReport",
    "SideEffects",
    "build_registry",
    "select",
]
