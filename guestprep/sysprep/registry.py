# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/sysprep/registry.py
from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..core.exceptions import (
    ConfigurationError,
    DuplicateName,
    InvalidCapability,
    RegistryFrozen,
    UnknownOperation,
)
from .operation import OperationDescriptor

_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")

OperationConstructor = Callable[[], OperationDescriptor]


class OperationRegistry:
    """
    name -> OperationDescriptor table.

    Filled once by build_registry() and then frozen; nothing registers
    while a guest is being processed.
    """

    def __init__(self) -> None:
        self._ops: Dict[str, OperationDescriptor] = {}
        self._frozen = False

    def register(self, op: OperationDescriptor) -> None:
        if self._frozen:
            raise RegistryFrozen(f"cannot register {op.name!r}: registry is frozen", name=op.name)
        if not isinstance(op.name, str) or not _NAME_RE.match(op.name):
            raise ConfigurationError(f"invalid operation name {op.name!r} (lowercase letters, digits, '-')", name=op.name)
        if op.name in self._ops:
            raise DuplicateName(f"operation {op.name!r} registered twice", name=op.name)
        if op.capability_count != 1:
            raise InvalidCapability(
                f"operation {op.name!r} must define exactly one of perform_on_filesystems/perform_on_devices",
                name=op.name,
                capabilities=op.capability_count,
            )
        self._ops[op.name] = op

    def freeze(self) -> "OperationRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def list(self) -> List[OperationDescriptor]:
        return [self._ops[n] for n in sorted(self._ops)]

    def names(self) -> List[str]:
        return sorted(self._ops)

    def lookup(self, name: str) -> OperationDescriptor:
        try:
            return self._ops[name]
        except KeyError:
            raise UnknownOperation(f"unknown operation {name!r}", name=name, known=self.names()) from None

    def __contains__(self, name: object) -> bool:
        return name in self._ops

    def __len__(self) -> int:
        return len(self._ops)


def build_registry(constructors: Optional[Sequence[OperationConstructor]] = None) -> OperationRegistry:
    """
    Run every operation constructor once, in order, and return a fresh frozen
    registry. Any DuplicateName/InvalidCapability propagates: a broken
    operation table is a program defect and must stop the run before a guest
    image is opened.
    """
    if constructors is None:
        from .operations import ALL_OPERATIONS

        constructors = ALL_OPERATIONS

    reg = OperationRegistry()
    for ctor in constructors:
        reg.register(ctor())
    return reg.freeze()


def describe_operations(registry: OperationRegistry) -> List[Dict[str, Any]]:
    return [op.as_dict() for op in registry.list()]
