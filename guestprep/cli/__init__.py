# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/cli/__init__.py
