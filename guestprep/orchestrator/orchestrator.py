# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/orchestrator/orchestrator.py
from __future__ import annotations

import argparse
import datetime as _dt
import logging
from pathlib import Path
from typing import Any, Callable, ContextManager, Dict, List, Optional

from ..core.exceptions import GuestError, GuestprepError
from ..core.logger import Log
from ..guest.base import Guest
from ..guest.guestfs_guest import GuestFSGuest
from ..sysprep.engine import ExecutionEngine, RunReport
from ..sysprep.registry import OperationRegistry, build_registry
from ..sysprep.report_writer import (
    build_report,
    print_operations,
    print_summary,
    report_path_for,
    write_report,
)
from ..sysprep.selector import Plan, collect_operation_args, select
from ..sysprep.side_effects import SideEffects

GuestOpener = Callable[..., ContextManager[Guest]]


class Orchestrator:
    """
    Top-level run: resolve the plan, then sysprep each image in turn.

    Everything that can be a configuration mistake (unknown operation names,
    bad operation arguments, a broken operation table) is resolved before the
    first image is opened.
    """

    def __init__(
        self,
        logger: logging.Logger,
        args: argparse.Namespace,
        *,
        registry: Optional[OperationRegistry] = None,
        opener: Optional[GuestOpener] = None,
    ):
        self.logger = logger
        self.args = args
        self.registry = registry
        self.opener: GuestOpener = opener or GuestFSGuest.open
        self.reports: List[Dict[str, Any]] = []

    def build_plan(self) -> Plan:
        if self.registry is None:
            self.registry = build_registry()
        plan = select(
            self.registry,
            include=getattr(self.args, "enable", None) or [],
            exclude=getattr(self.args, "disable", None) or [],
            operation_args=collect_operation_args(getattr(self.args, "operation_args", None) or []),
        )
        Log.trace(self.logger, "plan=%s", plan.names)
        return plan

    def run(self) -> int:
        plan = self.build_plan()
        assert self.registry is not None

        if getattr(self.args, "list_operations", False):
            print_operations(self.registry)
            return 0

        if not len(plan):
            Log.warn(self.logger, "No operations selected; nothing to do")
            return 0

        images = [Path(p).expanduser() for p in (getattr(self.args, "add", None) or [])]
        Log.banner(self.logger, f"sysprep: {len(plan)} operation(s), {len(images)} image(s)")
        self.logger.info(f"Operations: {', '.join(plan.names)}")

        rc = 0
        for idx, image in enumerate(images):
            if not self.process_image(image, plan, idx, len(images)):
                rc = 1
        return rc

    def process_image(self, image: Path, plan: Plan, index: int, total: int) -> bool:
        dry_run = bool(getattr(self.args, "dry_run", False))
        started = _dt.datetime.now().isoformat()
        log = Log.bind(self.logger, image=image.name)
        Log.step(log, f"Image {index + 1}/{total}: {image}" + (" (dry-run)" if dry_run else ""))

        run: Optional[RunReport] = None
        error: Optional[GuestprepError] = None
        try:
            with self.opener(image, self.logger, dry_run=dry_run, fmt=getattr(self.args, "format", None)) as guest:
                run = ExecutionEngine(guest, plan, log, side_effects=SideEffects()).run()
        except GuestError as e:
            # Raised while opening, or while closing after the run finished.
            error = e.with_context(image=str(image))
            Log.fail(log, f"Cannot process {image}: {e.user_message(include_cause=True)}")

        if run is None:
            report: Dict[str, Any] = {
                "tool": "guestprep",
                "image": str(image),
                "dry_run": dry_run,
                "ok": False,
                "error": error.to_dict(include_cause=True) if error is not None else None,
            }
            self._emit_report(report, index, total)
            return False

        print_summary(run, image=image)
        report = build_report(image, run, dry_run=dry_run, started=started, operations=self.registry)
        if error is not None:
            report["ok"] = False
            report["error"] = error.to_dict(include_cause=True)
        self._emit_report(report, index, total)
        self._log_outcome(log, run)
        return run.ok and error is None

    def _emit_report(self, report: Dict[str, Any], index: int, total: int) -> None:
        self.reports.append(report)
        base = getattr(self.args, "report", None)
        if not base:
            return
        path = write_report(report_path_for(Path(base), index, total), report)
        self.logger.info(f"Report written: {path}")

    @staticmethod
    def _log_outcome(log: Any, run: RunReport) -> None:
        if run.ok:
            Log.ok(log, "sysprep completed")
        else:
            Log.warn(log, f"sysprep completed with {len(run.failures)} failure(s)")
        for token in run.side_effects:
            log.info(f"Side effect: {token}")
