# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/cli/args/groups.py
from __future__ import annotations

import argparse

from .builder import AppendOverridingDefault


def _add_global_config_logging(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Global config/logging (two-phase parse relies on these)
    # ------------------------------------------------------------------
    from ... import __version__

    p.add_argument(
        "--config",
        action="append",
        default=[],
        help="YAML/JSON config file (repeatable; later overrides earlier).",
    )
    p.add_argument("--dump-config", action="store_true", help="Print merged normalized config and exit.")
    p.add_argument("--dump-args", action="store_true", help="Print final parsed args and exit.")
    p.add_argument("--version", action="version", version=__version__)
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity: -v, -vv, -vvv (trace)")
    p.add_argument("-q", "--quiet", action="count", default=0, help="Less output: -q warnings only, -qq errors only")
    p.add_argument("--log-file", dest="log_file", default=None, help="Write logs to file.")
    p.add_argument("--json-logs", dest="json_logs", action="store_true", help="Emit logs as NDJSON.")


def _add_input_images(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-a",
        "--add",
        dest="add",
        action=AppendOverridingDefault,
        default=[],
        metavar="IMAGE",
        help="Disk image to sysprep (repeatable; images are processed one after another).",
    )
    p.add_argument("--format", dest="format", default=None, help="Disk format of the images (default: autodetect).")


def _add_operation_selection(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Which operations run
    # ------------------------------------------------------------------
    p.add_argument(
        "--enable",
        dest="enable",
        action=AppendOverridingDefault,
        default=[],
        metavar="OPS",
        help="Run these operations in addition to the defaults (comma-separated, repeatable).",
    )
    p.add_argument(
        "--disable",
        dest="disable",
        action=AppendOverridingDefault,
        default=[],
        metavar="OPS",
        help="Do not run these operations (comma-separated, repeatable). Wins over --enable.",
    )
    p.add_argument(
        "--operation-arg",
        dest="operation_args",
        action=AppendOverridingDefault,
        default=[],
        metavar="OP:KEY=VALUE",
        help="Pass an argument to an operation (repeatable).",
    )
    p.add_argument("--list-operations", dest="list_operations", action="store_true", help="List operations and exit.")


def _add_run_behavior(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-n",
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Open images read-only; log what would be removed without changing anything.",
    )
    p.add_argument(
        "--report",
        dest="report",
        default=None,
        help="Write a JSON report here (numbered per image when several are given).",
    )
