# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/sysprep/side_effects.py
from __future__ import annotations

from typing import FrozenSet, Set

from ..core.exceptions import SideEffectsNotReady

# Tokens emitted by the built-in operations.
REGENERATE_SSH_HOST_KEYS = "regenerate-ssh-host-keys"
REGENERATE_MACHINE_ID = "regenerate-machine-id"


class SideEffects:
    """
    Post-processing reminders collected over one image run.

    A set: the same token recorded by several operations, or on several roots,
    is reported once. Created empty per image, completed by the engine, then
    drained by the reporter.
    """

    def __init__(self) -> None:
        self._tokens: Set[str] = set()
        self._complete = False

    def record(self, token: str) -> None:
        if self._complete:
            raise SideEffectsNotReady(code=1, msg=f"side effects already finalized, cannot record {token!r}")
        token = (token or "").strip()
        if not token:
            raise ValueError("side-effect token must be a non-empty string")
        self._tokens.add(token)

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    @property
    def tokens(self) -> FrozenSet[str]:
        return frozenset(self._tokens)

    @property
    def is_complete(self) -> bool:
        return self._complete

    def complete(self) -> None:
        self._complete = True

    def drain(self) -> FrozenSet[str]:
        if not self._complete:
            raise SideEffectsNotReady(code=1, msg="side effects drained before the run completed")
        return frozenset(self._tokens)
