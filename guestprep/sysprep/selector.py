# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/sysprep/selector.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..core.exceptions import ConfigurationError, UnknownOperationArgument
from .operation import Kind, OperationDescriptor
from .registry import OperationRegistry


@dataclass(frozen=True)
class PlanEntry:
    op: OperationDescriptor
    options: Dict[str, Optional[str]] = field(default_factory=dict, compare=False)

    @property
    def name(self) -> str:
        return self.op.name


@dataclass(frozen=True)
class Plan:
    entries: Tuple[PlanEntry, ...]

    @property
    def names(self) -> List[str]:
        return [e.name for e in self.entries]

    def filesystem_entries(self) -> List[PlanEntry]:
        return [e for e in self.entries if e.op.kind is Kind.FILESYSTEMS]

    def device_entries(self) -> List[PlanEntry]:
        return [e for e in self.entries if e.op.kind is Kind.DEVICES]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)


def select(
    registry: OperationRegistry,
    include: Iterable[str] = (),
    exclude: Iterable[str] = (),
    operation_args: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Plan:
    """
    plan = (enabled-by-default ∪ include) \\ exclude, ordered by name.

    Every name mentioned in include/exclude must be registered; every
    operation argument must belong to a planned operation that declares it.
    """
    include_set = _names(include)
    exclude_set = _names(exclude)
    for name in sorted(include_set | exclude_set):
        registry.lookup(name)

    defaults = {op.name for op in registry.list() if op.enabled_by_default}
    wanted = (defaults | include_set) - exclude_set

    args = {str(k): dict(v or {}) for k, v in (operation_args or {}).items()}
    for op_name in sorted(args):
        op = registry.lookup(op_name)
        if op_name not in wanted:
            raise UnknownOperationArgument(
                f"arguments given for {op_name!r}, which is not selected to run",
                name=op_name,
            )
        for key in sorted(args[op_name]):
            if op.extra_arg(key) is None:
                raise UnknownOperationArgument(
                    f"operation {op_name!r} has no argument {key!r}",
                    name=op_name,
                    argument=key,
                    accepted=[a.name for a in op.extra_args],
                )

    entries = []
    for name in sorted(wanted):
        op = registry.lookup(name)
        options: Dict[str, Optional[str]] = {a.name: a.default for a in op.extra_args}
        options.update({k: (None if v is None else str(v)) for k, v in args.get(name, {}).items()})
        entries.append(PlanEntry(op=op, options=options))
    return Plan(entries=tuple(entries))


def _names(items: Iterable[str]) -> Set[str]:
    out: Set[str] = set()
    for item in items or ():
        out.update(parse_operation_list(item))
    return out


def parse_operation_list(value: str) -> List[str]:
    """'abrt-data, logfiles' -> ['abrt-data', 'logfiles']"""
    return [p.strip() for p in str(value or "").split(",") if p.strip()]


def parse_operation_arg(value: str) -> Tuple[str, str, str]:
    """'op:key=value' -> ('op', 'key', 'value')"""
    op, sep, rest = str(value).partition(":")
    key, eq, val = rest.partition("=")
    if not sep or not eq or not op.strip() or not key.strip():
        raise ConfigurationError(f"bad operation argument {value!r}, expected OP:KEY=VALUE", value=value)
    return op.strip(), key.strip(), val


def collect_operation_args(values: Iterable[str]) -> Dict[str, Dict[str, str]]:
    out: Dict[str, Dict[str, str]] = {}
    for v in values or ():
        op, key, val = parse_operation_arg(v)
        out.setdefault(op, {})[key] = val
    return out
