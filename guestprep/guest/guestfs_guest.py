# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# guestprep/guest/guestfs_guest.py
from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

from ..core.exceptions import ExpectedAbsence, GuestError, wrap_guest
from ..core.logger import Log
from ..core.utils import U
from .base import Guest, Removal, normalize_family

try:
    import guestfs  # type: ignore
except ImportError:  # pragma: no cover
    guestfs = None  # type: ignore


_T = TypeVar("_T")


class GuestFSGuest(Guest):
    """
    Guest capability backed by a launched libguestfs handle.

    The handle is owned by open(): it is launched there and always unmounted
    and closed when the with-block exits, whatever happened inside it.
    In dry-run mode the drive is attached read-only and every mutating call
    only logs what it would have done.
    """

    def __init__(self, g: Any, logger: logging.Logger, *, dry_run: bool = False):
        self.g = g
        self.logger = logger
        self.dry_run = bool(dry_run)

    # -----------------------
    # lifecycle
    # -----------------------

    @classmethod
    @contextlib.contextmanager
    def open(
        cls,
        image: Path,
        logger: logging.Logger,
        *,
        dry_run: bool = False,
        fmt: Optional[str] = None,
    ) -> Iterator["GuestFSGuest"]:
        if guestfs is None:
            raise GuestError(
                code=1,
                msg="libguestfs Python bindings are not installed (python3-libguestfs)",
                context={"image": str(image)},
            )

        g = guestfs.GuestFS(python_return_dict=True)
        if logger.isEnabledFor(logging.DEBUG):
            try:
                g.set_trace(1)
            except Exception:
                pass

        opts: Dict[str, Any] = {"readonly": bool(dry_run)}
        if fmt:
            opts["format"] = fmt
        try:
            g.add_drive_opts(str(image), **opts)
            Log.step(logger, f"Launching appliance for {image}")
            g.launch()
        except RuntimeError as e:
            try:
                g.close()
            except Exception:
                pass
            raise wrap_guest(f"Cannot open disk image: {e}", e, image=str(image)) from e

        guest = cls(g, logger, dry_run=dry_run)
        try:
            yield guest
        finally:
            guest.close()

    def close(self) -> None:
        try:
            self.g.umount_all()
        except Exception:
            pass
        try:
            if hasattr(self.g, "shutdown"):
                self.g.shutdown()
        except Exception as e:
            self.logger.warning(f"Appliance shutdown reported an error: {e}")
        try:
            self.g.close()
        except Exception:
            pass

    def _call(self, what: str, fn: Callable[[], _T], **ctx: Any) -> _T:
        try:
            return fn()
        except RuntimeError as e:
            raise wrap_guest(f"{what} failed: {e}", e, **ctx) from e

    # -----------------------
    # inspection
    # -----------------------

    def list_roots(self) -> List[str]:
        roots = self._call("inspect_os", self.g.inspect_os) or []
        return sorted(U.to_text(r) for r in roots)

    def list_devices(self) -> List[str]:
        devs = self._call("list_devices", self.g.list_devices) or []
        return sorted(U.to_text(d) for d in devs)

    def inspect_os_family(self, root: str) -> str:
        return normalize_family(U.to_text(self._call("inspect_get_type", lambda: self.g.inspect_get_type(root), root=root)))

    def inspect_distro(self, root: str) -> str:
        distro = U.to_text(self._call("inspect_get_distro", lambda: self.g.inspect_get_distro(root), root=root))
        return "" if distro == "unknown" else distro

    # -----------------------
    # mounting
    # -----------------------

    def mount_root(self, root: str) -> None:
        mps = self._call("inspect_get_mountpoints", lambda: self.g.inspect_get_mountpoints(root), root=root) or {}
        if isinstance(mps, list):  # python_return_dict=False style
            mps = dict(mps)
        # Parents before children: "/" then "/boot" then "/boot/efi".
        for mp in sorted(mps, key=lambda m: (len(m), m)):
            dev = mps[mp]
            try:
                if self.dry_run:
                    self.g.mount_ro(dev, mp)
                else:
                    self.g.mount(dev, mp)
                Log.trace(self.logger, "mounted %s on %s", dev, mp)
            except RuntimeError as e:
                if mp == "/":
                    raise wrap_guest(f"Cannot mount root filesystem {dev}: {e}", e, root=root, device=dev) from e
                self.logger.warning(f"Skipping {mp} ({dev}): {e}")

    def umount_all(self) -> None:
        self._call("umount_all", self.g.umount_all)

    # -----------------------
    # files
    # -----------------------

    def glob_expand(self, pattern: str) -> List[str]:
        paths = self._call("glob_expand", lambda: self.g.glob_expand(pattern), pattern=pattern) or []
        return sorted(U.to_text(p) for p in paths)

    def exists(self, path: str) -> bool:
        # exists() follows symlinks; a dangling link still has to count.
        return bool(self._call("exists", lambda: self.g.exists(path), path=path)) or self._is_symlink(path)

    def _is_symlink(self, path: str) -> bool:
        return bool(self._call("is_symlink", lambda: self.g.is_symlink(path), path=path))

    def is_file(self, path: str) -> bool:
        return bool(self._call("is_file", lambda: self.g.is_file(path), path=path))

    def is_dir(self, path: str) -> bool:
        return bool(self._call("is_dir", lambda: self.g.is_dir(path), path=path))

    def _rm_strict(self, path: str) -> Removal:
        if not self.exists(path):
            raise ExpectedAbsence(path)
        if self.is_dir(path) and not self._is_symlink(path):
            return Removal.NOT_A_FILE
        if self.dry_run:
            self.logger.info(f"DRY-RUN: would remove {path}")
            return Removal.DRY_RUN
        self._call("rm", lambda: self.g.rm(path), path=path)
        return Removal.REMOVED

    def remove(self, path: str) -> Removal:
        try:
            return self._rm_strict(path)
        except ExpectedAbsence:
            return Removal.ABSENT

    def remove_recursive(self, path: str) -> Removal:
        if not self.exists(path):
            return Removal.ABSENT
        if self.dry_run:
            self.logger.info(f"DRY-RUN: would remove -r {path}")
            return Removal.DRY_RUN
        self._call("rm_rf", lambda: self.g.rm_rf(path), path=path)
        return Removal.REMOVED

    def filesize(self, path: str) -> int:
        return int(self._call("filesize", lambda: self.g.filesize(path), path=path))

    def truncate(self, path: str) -> Removal:
        if not self.is_file(path):
            return Removal.ABSENT
        if self.dry_run:
            self.logger.info(f"DRY-RUN: would truncate {path}")
            return Removal.DRY_RUN
        self._call("truncate", lambda: self.g.truncate(path), path=path)
        return Removal.REMOVED

    # -----------------------
    # devices
    # -----------------------

    def is_lvm_pv(self, device: str) -> bool:
        try:
            return U.to_text(self.g.vfs_type(device)) == "LVM2_member"
        except RuntimeError:
            # No recognisable signature on the device at all.
            return False

    def change_pv_uuid(self, device: str) -> None:
        if self.dry_run:
            self.logger.info(f"DRY-RUN: would change PV UUID of {device}")
            return
        self._call("pvchange_uuid", lambda: self.g.pvchange_uuid(device), device=device)
