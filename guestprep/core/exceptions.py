# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/core/exceptions.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


def _safe_int(x: Any, default: int = 1) -> int:
    try:
        return int(x)
    except Exception:
        return default


def _clamp_exit_code(code: int) -> int:
    # Exit codes are 0..255.
    if code < 0:
        return 1
    if code > 255:
        return 255
    return code


def _one_line(s: str, limit: int = 600) -> str:
    s = (s or "").strip().replace("\r", " ").replace("\n", " ")
    s = " ".join(s.split())
    return s if len(s) <= limit else (s[: limit - 3] + "...")


def _format_context_compact(ctx: Dict[str, Any]) -> str:
    return ", ".join(f"{k}={ctx.get(k)!r}" for k in sorted(ctx.keys()))


@dataclass(eq=False)
class GuestprepError(Exception):
    """
    Base project error with:
      - stable fields for reporting/JSON
      - readable __str__ (what users see)
      - safe code handling (never crashes on int())
    """
    code: int = 1
    msg: str = "error"
    cause: Optional[BaseException] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.code = _clamp_exit_code(_safe_int(self.code, default=1))
        self.msg = _one_line(self.msg) or self.__class__.__name__
        if self.context is None:
            self.context = {}
        super().__init__(self.msg)
        self.args = (self.msg,)

    def with_context(self, **ctx: Any) -> "GuestprepError":
        if self.context is None:
            self.context = {}
        self.context.update(ctx)
        return self

    def user_message(self, *, include_context: bool = False, include_cause: bool = False) -> str:
        """
        Human-friendly message for CLI output/logs.
        """
        parts = [self.msg or self.__class__.__name__]

        if include_context and self.context:
            parts.append(f"[{_one_line(_format_context_compact(self.context), limit=600)}]")

        if include_cause and self.cause is not None:
            parts.append(f"(cause: {type(self.cause).__name__}: {_one_line(str(self.cause))})")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.user_message(include_context=False, include_cause=False)

    def to_dict(self, *, include_cause: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "code": self.code,
            "message": self.msg,
            "context": dict(self.context or {}),
        }
        if include_cause and self.cause is not None:
            d["cause"] = {"type": type(self.cause).__name__, "message": _one_line(str(self.cause))}
        return d


class Fatal(GuestprepError):
    """
    User-facing fatal error (exit code should be honored by top-level main()).
    """
    pass


class ConfigurationError(Fatal):
    """
    Program configuration defect: bad operation table or bad selection.
    Raised before any guest image is opened; never retried.
    """

    def __init__(self, msg: str, **context: Any):
        super().__init__(code=2, msg=msg, context=context or None)


class DuplicateName(ConfigurationError):
    pass


class InvalidCapability(ConfigurationError):
    pass


class UnknownOperation(ConfigurationError):
    pass


class UnknownOperationArgument(ConfigurationError):
    pass


class RegistryFrozen(ConfigurationError):
    pass


class GuestError(GuestprepError):
    """
    libguestfs (or fake) call failed in a way the caller did not expect.
    """
    pass


class ExpectedAbsence(GuestprepError):
    """
    Target path does not exist. Strict guest primitives raise this; the
    tolerant ones turn it into Removal.ABSENT.
    """

    def __init__(self, path: str):
        super().__init__(code=1, msg=f"No such file or directory: {path}", context={"path": path})
        self.path = path


class OperationFailed(GuestprepError):
    """
    An operation raised something it did not handle. The engine records it
    and aborts the current root (or device) only.
    """
    pass


class SideEffectsNotReady(GuestprepError):
    pass


def wrap_fatal(msg: str, exc: Optional[BaseException] = None, code: int = 1, **context: Any) -> Fatal:
    return Fatal(code=code, msg=msg, cause=exc, context=context or None)


def wrap_guest(msg: str, exc: Optional[BaseException] = None, **context: Any) -> GuestError:
    return GuestError(code=1, msg=msg, cause=exc, context=context or None)


def format_exception_for_cli(e: BaseException, *, verbose: int = 0) -> str:
    """
    One-liner output for CLI.

    verbose=0: just message
    verbose=1: message + compact context (if any)
    verbose>=2: message + context + cause
    """
    if isinstance(e, GuestprepError):
        return e.user_message(
            include_context=(verbose >= 1),
            include_cause=(verbose >= 2),
        )

    if verbose >= 2:
        return f"{type(e).__name__}: {_one_line(str(e))}"
    return _one_line(str(e)) or type(e).__name__
