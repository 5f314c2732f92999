# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/core/__init__.py
from .exceptions import (
    ConfigurationError,
    DuplicateName,
    ExpectedAbsence,
    Fatal,
    GuestError,
    GuestprepError,
    InvalidCapability,
    OperationFailed,
    UnknownOperation,
    UnknownOperationArgument,
)
from .logger import Log

__all__ = [
    "ConfigurationError",
    "DuplicateName",
    "ExpectedAbsence",
    "Fatal",
    "GuestError",
    "GuestprepError",
    "InvalidCapability",
    "Log",
    "OperationFailed",
    "UnknownOperation",
    "UnknownOperationArgument",
]
