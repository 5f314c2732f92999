# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/cli/help_texts.py
from __future__ import annotations

# Pure help text used by the argparse epilog. Keep it copy/paste runnable.

YAML_EXAMPLE = r"""# guestprep configuration example (YAML)
#
# Run:
# sudo guestprep --config template.yaml
#
# Merge multiple configs (later overrides earlier):
# sudo guestprep --config base.yaml --config fedora.yaml -a other.qcow2
#
# Keys are the long option names with '-' replaced by '_'.
# CLI flags always win over config values. A list flag given on the command
# line (-a, --enable, --disable, --operation-arg) replaces the config list.

add:
  - /var/lib/libvirt/images/fedora-template.qcow2
enable:
  - tmp-files
disable:
  - ssh-hostkeys
dry_run: false
report: ./out/sysprep-report.json
log_file: ./out/guestprep.log
json_logs: false
"""

FEATURE_SUMMARY = r"""  - Operations are applied to every OS root found on the image, in name order.
  - A failing operation stops the remaining operations for that root only.
  - Side effects (e.g. regenerate-ssh-host-keys) are listed once at the end.
  - --dry-run opens the image read-only and only logs what would be removed.
  - --list-operations shows every operation; '*' marks the default set.
"""
