# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/cli/args/validators.py
from __future__ import annotations

import argparse
import os
from typing import Any, Dict

from ...core.exceptions import ConfigurationError
from ...sysprep.selector import parse_operation_arg


def _validate_images(args: argparse.Namespace) -> None:
    if getattr(args, "list_operations", False):
        return
    images = list(getattr(args, "add", None) or [])
    if not images:
        raise SystemExit("at least one disk image is required (-a IMAGE or `add:` in config)")
    for img in images:
        if not os.path.exists(str(img)):
            raise SystemExit(f"disk image not found: {img}")


def _validate_operation_args(args: argparse.Namespace) -> None:
    # Syntax only; whether the operation/argument exists is decided by the selector.
    for v in getattr(args, "operation_args", None) or []:
        try:
            parse_operation_arg(v)
        except ConfigurationError as e:
            raise SystemExit(str(e))


def validate_args(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    _validate_images(args)
    _validate_operation_args(args)
