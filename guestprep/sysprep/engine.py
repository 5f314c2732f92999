# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/sysprep/engine.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..core.exceptions import OperationFailed, format_exception_for_cli
from ..core.logger import Log
from ..guest.base import Guest
from .operation import Outcome
from .selector import Plan, PlanEntry
from .side_effects import SideEffects

ROOT_SCOPE = "root"
DEVICE_SCOPE = "device"
# Listing roots/devices happens once per image, outside any root or device.
GUEST_SCOPE = "guest"


@dataclass
class OperationResult:
    operation: str
    outcome: Outcome
    reason: Optional[str] = None
    duration_s: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "outcome": self.outcome.value,
            "reason": self.reason,
            "duration_s": round(self.duration_s, 6),
        }


@dataclass
class ScopeReport:
    """Results for one root (or one raw device)."""
    scope: str
    target: str
    family: Optional[str] = None
    results: List[OperationResult] = field(default_factory=list)
    aborted_by: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.aborted_by is None

    def as_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "scope": self.scope,
            "target": self.target,
            "results": [r.as_dict() for r in self.results],
            "aborted_by": self.aborted_by,
        }
        if self.scope == ROOT_SCOPE:
            d["family"] = self.family
        return d


@dataclass
class RunReport:
    plan: List[str]
    roots: List[ScopeReport] = field(default_factory=list)
    devices: List[ScopeReport] = field(default_factory=list)
    failures: List[OperationFailed] = field(default_factory=list)
    side_effects: List[str] = field(default_factory=list)
    guest: ScopeReport = field(default_factory=lambda: ScopeReport(scope=GUEST_SCOPE, target="image"))

    @property
    def ok(self) -> bool:
        return not self.failures

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "plan": list(self.plan),
            "roots": [r.as_dict() for r in self.roots],
            "devices": [d.as_dict() for d in self.devices],
            "guest": self.guest.as_dict(),
            "failures": [f.to_dict(include_cause=True) for f in self.failures],
            "side_effects": list(self.side_effects),
        }


class _ScopeAborted(Exception):
    pass


class ExecutionEngine:
    """
    Apply a plan to one open guest.

    Roots are visited in sorted order; on each root the filesystem operations
    run one at a time in plan order. Device operations then run once per raw
    device, in the same order. An unexpected exception aborts the rest of the
    current root (or device) and is recorded; the next root/device still runs.
    If listing the roots or the devices fails, only that phase is skipped.
    """

    def __init__(
        self,
        guest: Guest,
        plan: Plan,
        logger: logging.Logger,
        *,
        side_effects: Optional[SideEffects] = None,
    ):
        self.guest = guest
        self.plan = plan
        self.logger = logger
        self.side_effects = side_effects if side_effects is not None else SideEffects()

    def run(self) -> RunReport:
        report = RunReport(plan=self.plan.names)

        fs_entries = self.plan.filesystem_entries()
        dev_entries = self.plan.device_entries()

        if fs_entries:
            roots = self._listing(report, "list_roots", self.guest.list_roots, "filesystem operations")
            if not roots and report.guest.aborted_by is None:
                Log.warn(self.logger, "No operating system found on the image; filesystem operations not run")
            for root in roots:
                report.roots.append(self._run_root(root, fs_entries, report))

        if dev_entries:
            for device in self._listing(report, "list_devices", self.guest.list_devices, "device operations"):
                report.devices.append(self._run_device(device, dev_entries, report))

        self.side_effects.complete()
        report.side_effects = sorted(self.side_effects.drain())
        return report

    # -----------------------
    # scopes
    # -----------------------

    def _run_root(self, root: str, entries: List[PlanEntry], report: RunReport) -> ScopeReport:
        scope = ScopeReport(scope=ROOT_SCOPE, target=root)
        log = Log.bind(self.logger, root=root)
        mounted = False
        try:
            scope.family = self._guarded(scope, report, log, "inspect", lambda: self.guest.inspect_os_family(root))
            Log.step(log, f"Root {root} ({scope.family})")

            self._guarded(scope, report, log, "mount", lambda: self.guest.mount_root(root))
            mounted = True

            for entry in entries:
                perform = entry.op.perform_on_filesystems
                assert perform is not None
                self._run_one(
                    scope,
                    report,
                    log,
                    entry,
                    lambda p=perform: p(self.guest, root, self.side_effects),
                )
        except _ScopeAborted:
            pass
        finally:
            if mounted:
                try:
                    self.guest.umount_all()
                except Exception as e:
                    Log.warn(log, f"umount_all failed: {e}")
        return scope

    def _run_device(self, device: str, entries: List[PlanEntry], report: RunReport) -> ScopeReport:
        scope = ScopeReport(scope=DEVICE_SCOPE, target=device)
        log = Log.bind(self.logger, device=device)
        Log.step(log, f"Device {device}")
        try:
            for entry in entries:
                perform = entry.op.perform_on_devices
                assert perform is not None
                self._run_one(scope, report, log, entry, lambda p=perform: p(self.guest, device))
        except _ScopeAborted:
            pass
        return scope

    # -----------------------
    # single call
    # -----------------------

    def _run_one(
        self,
        scope: ScopeReport,
        report: RunReport,
        log: Any,
        entry: PlanEntry,
        call: Callable[[], Optional[Outcome]],
    ) -> None:
        oplog = log.bind(op=entry.name)
        before = self.side_effects.tokens
        t0 = time.monotonic()
        try:
            out = call()
            outcome = Outcome.APPLIED if out is None else Outcome(out)
            if outcome is Outcome.FAILED:
                raise RuntimeError(f"{entry.name} reported failure")
        except Exception as e:
            self._record_failure(scope, report, oplog, entry.name, e, time.monotonic() - t0)
            raise _ScopeAborted() from e
        dt = time.monotonic() - t0

        reason = None
        if outcome is Outcome.SKIPPED:
            reason = f"not applicable to {scope.family}" if scope.scope == ROOT_SCOPE else "not applicable"
            Log.trace(oplog, "skipped %s", entry.name)
        else:
            added = sorted(self.side_effects.tokens - before)
            oplog.info(f"{entry.name}: {entry.op.heading}" + (f" (side effects: {', '.join(added)})" if added else ""))

        scope.results.append(OperationResult(entry.name, outcome, reason, dt))

    def _listing(self, report: RunReport, what: str, fn: Callable[[], List[str]], phase: str) -> List[str]:
        """
        A failed listing skips only its own phase; whatever already ran on the
        image stays in the report.
        """
        log = Log.bind(self.logger, scope=GUEST_SCOPE)
        try:
            return sorted(self._guarded(report.guest, report, log, what, fn, skipping=phase))
        except _ScopeAborted:
            return []

    def _guarded(
        self,
        scope: ScopeReport,
        report: RunReport,
        log: Any,
        what: str,
        fn: Callable[[], Any],
        *,
        skipping: Optional[str] = None,
    ) -> Any:
        t0 = time.monotonic()
        try:
            return fn()
        except Exception as e:
            self._record_failure(scope, report, log.bind(op=what), what, e, time.monotonic() - t0, skipping=skipping)
            raise _ScopeAborted() from e

    def _record_failure(
        self,
        scope: ScopeReport,
        report: RunReport,
        log: Any,
        name: str,
        exc: Exception,
        dt: float,
        *,
        skipping: Optional[str] = None,
    ) -> None:
        reason = format_exception_for_cli(exc, verbose=2)
        failure = OperationFailed(
            code=1,
            msg=f"{name} failed on {scope.scope} {scope.target}: {reason}",
            cause=exc,
            context={"operation": name, "scope": scope.scope, "target": scope.target},
        )
        report.failures.append(failure)
        scope.results.append(OperationResult(name, Outcome.FAILED, reason, dt))
        scope.aborted_by = name
        skipping = skipping or f"the rest of {scope.scope} {scope.target}"
        Log.fail(log, f"{name} failed, skipping {skipping}: {reason}")
        log.debug("traceback", exc_info=exc)
