# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/sysprep/report_writer.py
"""
guestprep report writer: JSON file plus a rich console summary.
"""

from __future__ import annotations

import datetime as _dt
import os
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.table import Table

from .. import __version__
from ..core.exceptions import wrap_fatal
from ..core.utils import U
from .engine import RunReport
from .operation import Outcome
from .registry import OperationRegistry, describe_operations

_OUTCOME_STYLE = {
    Outcome.APPLIED: "green",
    Outcome.SKIPPED: "dim",
    Outcome.FAILED: "bold red",
}


def _json_safe(obj: Any) -> Any:
    """
    Convert common non-JSON-native objects into JSON-safe representations.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (_dt.datetime, _dt.date)):
        return obj.isoformat()
    if is_dataclass(obj) and not isinstance(obj, type):
        return _json_safe(asdict(obj))
    v = getattr(obj, "value", None)
    if v is not None and not isinstance(obj, (dict, list, tuple, set, frozenset)):
        return _json_safe(v)
    if isinstance(obj, dict):
        return {str(k): _json_safe(v2) for k, v2 in obj.items()}
    if isinstance(obj, (set, frozenset)):
        return sorted(_json_safe(x) for x in obj)
    if isinstance(obj, (list, tuple)):
        return [_json_safe(x) for x in obj]
    return str(obj)


def _atomic_write_text(path: Path, content: str, suffix: str = ".tmp.guestprep") -> None:
    """
    Write temp file in the same directory, fsync it, then os.replace over
    the target so readers never see a half-written report.
    """
    U.ensure_dir(path.parent)
    tmp = Path(str(path) + suffix)
    try:
        with open(tmp, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(str(tmp), str(path))
    finally:
        if tmp.exists():
            tmp.unlink()


def report_path_for(base: Path, index: int, total: int) -> Path:
    """
    One report per image. With several images, number them:
      report.json -> report_disk0.json, report_disk1.json, ...
    """
    if total <= 1:
        return base
    suffix = base.suffix or ".json"
    return base.parent / f"{base.stem}_disk{index}{suffix}"


def build_report(
    image: Path,
    run: RunReport,
    *,
    dry_run: bool,
    started: Optional[str] = None,
    operations: Optional[OperationRegistry] = None,
) -> Dict[str, Any]:
    report: Dict[str, Any] = {
        "tool": "guestprep",
        "version": __version__,
        "image": str(image),
        "dry_run": bool(dry_run),
        "timestamps": {"start": started, "end": _dt.datetime.now().isoformat()},
        **run.as_dict(),
    }
    if operations is not None:
        report["operations"] = list(describe_operations(operations))
    return report


def write_report(path: Path, report: Dict[str, Any]) -> Path:
    path = Path(path).expanduser()
    try:
        _atomic_write_text(path, U.json_dump(_json_safe(report)) + "\n")
    except OSError as e:
        raise wrap_fatal(f"Cannot write report {path}: {e}", e, path=str(path)) from e
    return path


# -----------------------
# console
# -----------------------

def print_summary(run: RunReport, *, image: Path, console: Optional[Console] = None) -> None:
    console = console or Console(stderr=True)

    table = Table(title=f"sysprep: {image.name}", show_lines=False)
    table.add_column("Target")
    table.add_column("Operation")
    table.add_column("Outcome")
    table.add_column("Detail", overflow="fold")

    guest_scope = [run.guest] if run.guest.results else []
    for scope in guest_scope + list(run.roots) + list(run.devices):
        label = f"{scope.target} ({scope.family})" if scope.family else scope.target
        for r in scope.results:
            style = _OUTCOME_STYLE.get(r.outcome, "")
            table.add_row(label, r.operation, f"[{style}]{r.outcome.value}[/]" if style else r.outcome.value, r.reason or "")
            label = ""
        if scope.aborted_by:
            table.add_row("", "", "[bold red]aborted[/]", f"remaining operations not run after {scope.aborted_by}")

    console.print(table)
    if run.side_effects:
        console.print("[bold]Recommended after sysprep:[/] " + ", ".join(run.side_effects))
    else:
        console.print("No side effects.")


def print_operations(registry: OperationRegistry, *, console: Optional[Console] = None) -> None:
    console = console or Console()
    table = Table(title="sysprep operations")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Default")
    table.add_column("Kind")
    table.add_column("Description", overflow="fold")
    for op in describe_operations(registry):
        table.add_row(op["name"], "*" if op["enabled_by_default"] else "", op["kind"] or "?", op["heading"])
    console.print(table)
