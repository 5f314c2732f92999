# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/orchestrator/__init__.py
from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]
