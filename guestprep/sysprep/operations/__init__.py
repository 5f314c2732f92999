# SPDX-License-Identifier: LGPL-3.0-or-later
# guestprep/sysprep/operations/__init__.py
"""
Built-in sysprep operations.

ALL_OPERATIONS is the one place an operation gets wired in: build_registry()
calls each constructor once, in this order.
"""

from . import (
    abrt_data,
    bash_history,
    dhcp_client_state,
    logfiles,
    lvm_uuids,
    machine_id,
    mail_spool,
    package_manager_cache,
    rpm_db,
    samba_db_log,
    ssh_hostkeys,
    tmp_files,
    udev_persistent_net,
    yum_uuid,
)

ALL_OPERATIONS = [
    abrt_data.op,
    bash_history.op,
    dhcp_client_state.op,
    logfiles.op,
    lvm_uuids.op,
    machine_id.op,
    mail_spool.op,
    package_manager_cache.op,
    rpm_db.op,
    samba_db_log.op,
    ssh_hostkeys.op,
    tmp_files.op,
    udev_persistent_net.op,
    yum_uuid.op,
]

__all__ = ["ALL_OPERATIONS"]
