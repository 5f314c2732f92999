# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/config/config_loader.py
from __future__ import annotations

import argparse
import glob
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

import yaml

from ..core.exceptions import Fatal
from ..core.utils import U, deep_merge_dict


class Config:
    """
    YAML/JSON config files that act as argparse defaults.

    Keys are argparse dests (snake_case); dashes are accepted and normalized.
    Later files win over earlier ones; nested mappings are deep-merged.
    """

    @staticmethod
    def expand_configs(logger: logging.Logger, cfgs: Sequence[str]) -> List[Path]:
        out: List[Path] = []
        for raw in cfgs:
            pattern = str(Path(raw).expanduser())
            matches = sorted(glob.glob(pattern)) if any(ch in pattern for ch in "*?[") else [pattern]
            if not matches:
                U.die(logger, f"Config glob matched nothing: {raw}", 2)
            for m in matches:
                p = Path(m)
                if not p.is_file():
                    U.die(logger, f"Config file not found: {p}", 2)
                out.append(p.resolve())
        return out

    @staticmethod
    def load_one(logger: logging.Logger, path: Path) -> Dict[str, Any]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise Fatal(2, f"Cannot read config {path}: {e}", cause=e) from e

        try:
            if path.suffix.lower() == ".json":
                data = json.loads(text) if text.strip() else {}
            else:
                data = yaml.safe_load(text)
        except (yaml.YAMLError, ValueError) as e:
            logger.error(f"Invalid config {path}: {e}")
            raise Fatal(2, f"Invalid config {path}: {e}", cause=e) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            U.die(logger, f"Config {path} must be a mapping at top level, got {type(data).__name__}", 2)
        logger.debug(f"Loaded config {path} ({len(data)} keys)")
        return {Config._norm_key(k): v for k, v in data.items()}

    @staticmethod
    def load_many(logger: logging.Logger, paths: Sequence[Path]) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for p in paths:
            merged = deep_merge_dict(merged, Config.load_one(logger, p))
        return merged

    @staticmethod
    def apply_as_defaults(logger: logging.Logger, parser: argparse.ArgumentParser, conf: Dict[str, Any]) -> None:
        actions = {a.dest: a for a in parser._actions}  # noqa: SLF001 - argparse has no public accessor
        defaults: Dict[str, Any] = {}
        for k, v in conf.items():
            action = actions.get(k)
            if action is None:
                logger.warning(f"Ignoring unknown config key: {k}")
                continue
            # append-style flags take a list; allow a scalar in YAML.
            if isinstance(action, argparse._AppendAction) and not isinstance(v, list):  # noqa: SLF001
                v = [v]
            defaults[k] = v
        if defaults:
            parser.set_defaults(**defaults)

    @staticmethod
    def _norm_key(k: Any) -> str:
        return str(k).strip().replace("-", "_")
