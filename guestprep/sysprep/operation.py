# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/sysprep/operation.py
"""
Operation descriptors.

A descriptor is the immutable metadata of one sysprep operation plus exactly
one way of running it: against a mounted root filesystem, or against a raw
block device.

Perform functions share one calling convention:

    perform_on_filesystems(guest, root, effects) -> Outcome | None
    perform_on_devices(guest, device) -> Outcome | None

Returning None means the operation did its work (Outcome.APPLIED). An
operation that decides it does not apply (wrong OS family, missing
precondition) returns Outcome.SKIPPED. Anything unexpected is raised and left
to the engine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from ..guest.base import Guest
    from .side_effects import SideEffects


class Outcome(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


class Kind(str, Enum):
    FILESYSTEMS = "filesystems"
    DEVICES = "devices"


FilesystemsPerform = Callable[["Guest", str, "SideEffects"], Optional[Outcome]]
DevicesPerform = Callable[["Guest", str], Optional[Outcome]]


@dataclass(frozen=True)
class ExtraArg:
    name: str
    description: str = ""
    default: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "default": self.default}


@dataclass(frozen=True)
class OperationDescriptor:
    name: str
    heading: str
    enabled_by_default: bool = True
    description: Optional[str] = None
    extra_args: Tuple[ExtraArg, ...] = field(default_factory=tuple)
    perform_on_filesystems: Optional[FilesystemsPerform] = field(default=None, compare=False, repr=False)
    perform_on_devices: Optional[DevicesPerform] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        # Accept any iterable for convenience; keep the stored value hashable.
        object.__setattr__(self, "extra_args", tuple(self.extra_args or ()))

    @property
    def capability_count(self) -> int:
        return int(self.perform_on_filesystems is not None) + int(self.perform_on_devices is not None)

    @property
    def kind(self) -> Optional[Kind]:
        if self.capability_count != 1:
            return None
        return Kind.FILESYSTEMS if self.perform_on_filesystems is not None else Kind.DEVICES

    def extra_arg(self, name: str) -> Optional[ExtraArg]:
        for a in self.extra_args:
            if a.name == name:
                return a
        return None

    def as_dict(self) -> Dict[str, Any]:
        kind = self.kind
        return {
            "name": self.name,
            "heading": self.heading,
            "description": self.description,
            "enabled_by_default": self.enabled_by_default,
            "kind": kind.value if kind else None,
            "extra_args": [a.as_dict() for a in self.extra_args],
        }
