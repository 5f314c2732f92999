# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/sysprep/operations/base.py
"""Shared pieces for glob-delete style operations."""
from __future__ import annotations

from typing import Iterable, List

from ...guest.base import Guest


def sorted_globs(globs: Iterable[str]) -> List[str]:
    return sorted(set(globs))


def delete_globs(guest: Guest, globs: Iterable[str], *, recursive: bool = False) -> List[str]:
    """
    Expand each glob and remove every match. A glob matching nothing, or a
    match that disappears before we get to it, is not an error.

    Returns the paths that were (or, in dry-run, would be) removed.
    """
    touched: List[str] = []
    for pattern in globs:
        for path in guest.glob_expand(pattern):
            res = guest.remove_recursive(path) if recursive else guest.remove(path)
            if res.changed:
                touched.append(path)
    return touched


def globs_as_text(globs: Iterable[str]) -> str:
    return "\n".join(" " + g for g in globs)
