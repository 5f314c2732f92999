# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import argparse
import contextlib
import json

import pytest

from fakes.fake_guest import FakeFS, FakeGuest
from guestprep.core.exceptions import UnknownOperation, wrap_guest
from guestprep.orchestrator.orchestrator import Orchestrator


def _args(**kw):
    base = dict(
        add=[],
        format=None,
        enable=[],
        disable=[],
        operation_args=[],
        list_operations=False,
        dry_run=False,
        report=None,
    )
    base.update(kw)
    return argparse.Namespace(**base)


class _Opener:
    """Stands in for GuestFSGuest.open: one FakeGuest per image path."""

    def __init__(self, guests, broken=()):
        self.guests = guests
        self.broken = set(broken)
        self.opened = []

    @contextlib.contextmanager
    def __call__(self, image, logger, *, dry_run=False, fmt=None):
        self.opened.append((image.name, dry_run, fmt))
        if image.name in self.broken:
            raise wrap_guest("Cannot open disk image", RuntimeError("launch failed"), image=str(image))
        guest = self.guests[image.name]
        try:
            yield guest
        finally:
            guest.close()


def _linux_guest():
    return FakeGuest({"/dev/sda1": FakeFS(files={"/var/log/messages": b"m", "/etc/ssh/ssh_host_rsa_key": b"k"})})


@pytest.mark.unit
def test_list_operations_opens_nothing(logger, capsys):
    opener = _Opener({})
    rc = Orchestrator(logger, _args(list_operations=True), opener=opener).run()

    assert rc == 0
    assert opener.opened == []
    assert "logfiles" in capsys.readouterr().out


@pytest.mark.unit
def test_unknown_operation_fails_before_open(logger, tmp_path):
    opener = _Opener({})
    with pytest.raises(UnknownOperation):
        Orchestrator(logger, _args(add=[str(tmp_path / "a.img")], enable=["nope"]), opener=opener).run()
    assert opener.opened == []


@pytest.mark.unit
def test_single_image_with_report(logger, tmp_path):
    guest = _linux_guest()
    opener = _Opener({"a.img": guest})
    report = tmp_path / "out" / "report.json"

    rc = Orchestrator(
        logger,
        _args(add=[str(tmp_path / "a.img")], report=str(report), format="raw"),
        opener=opener,
    ).run()

    assert rc == 0
    assert opener.opened == [("a.img", False, "raw")]
    assert guest.closed
    assert guest.roots["/dev/sda1"].files == {}
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["ok"] is True
    assert data["side_effects"] == ["regenerate-ssh-host-keys"]
    assert "logfiles" in data["plan"]


@pytest.mark.unit
def test_disable_and_dry_run(logger, tmp_path):
    guest = _linux_guest()
    guest.dry_run = True
    opener = _Opener({"a.img": guest})

    rc = Orchestrator(logger, _args(add=[str(tmp_path / "a.img")], disable=["logfiles"], dry_run=True), opener=opener).run()

    assert rc == 0
    assert opener.opened == [("a.img", True, None)]
    assert "/var/log/messages" in guest.roots["/dev/sda1"].files
    assert not [c for c in guest.calls if c == ("glob_expand", "/var/log/messages*")]


@pytest.mark.unit
def test_failures_set_exit_code_and_next_image_still_runs(logger, tmp_path):
    bad = _linux_guest()
    bad.fail[("remove", "/etc/ssh/ssh_host_rsa_key")] = RuntimeError("EIO")
    good = _linux_guest()
    opener = _Opener({"bad.img": bad, "good.img": good}, broken={"gone.img"})
    report = tmp_path / "r.json"

    orch = Orchestrator(
        logger,
        _args(add=[str(tmp_path / n) for n in ("bad.img", "gone.img", "good.img")], report=str(report)),
        opener=opener,
    )
    rc = orch.run()

    assert rc == 1
    assert [o[0] for o in opener.opened] == ["bad.img", "gone.img", "good.img"]
    assert good.roots["/dev/sda1"].files == {}
    assert [r["ok"] for r in orch.reports] == [False, False, True]
    assert (tmp_path / "r_disk0.json").exists()
    assert (tmp_path / "r_disk1.json").exists()
    assert (tmp_path / "r_disk2.json").exists()


@pytest.mark.unit
def test_device_listing_failure_keeps_work_already_done(logger, tmp_path):
    guest = _linux_guest()
    guest.fail[("list_devices", None)] = wrap_guest("list_devices failed", RuntimeError("appliance died"))
    opener = _Opener({"a.img": guest})
    report = tmp_path / "r.json"

    orch = Orchestrator(logger, _args(add=[str(tmp_path / "a.img")], report=str(report)), opener=opener)
    rc = orch.run()

    assert rc == 1
    assert guest.roots["/dev/sda1"].files == {}
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["ok"] is False
    assert data["side_effects"] == ["regenerate-ssh-host-keys"]
    assert [r["target"] for r in data["roots"]] == ["/dev/sda1"]
    assert data["failures"][0]["context"]["operation"] == "list_devices"


@pytest.mark.unit
def test_report_lists_registered_operations(logger, tmp_path):
    opener = _Opener({"a.img": _linux_guest()})
    orch = Orchestrator(logger, _args(add=[str(tmp_path / "a.img")]), opener=opener)

    orch.run()

    ops = {o["name"]: o for o in orch.reports[0]["operations"]}
    assert ops["tmp-files"]["enabled_by_default"] is False
    assert ops["lvm-uuids"]["kind"] == "devices"


@pytest.mark.unit
def test_open_failure_report_carries_image_context(logger, tmp_path):
    opener = _Opener({}, broken={"gone.img"})
    orch = Orchestrator(logger, _args(add=[str(tmp_path / "gone.img")]), opener=opener)

    assert orch.run() == 1

    err = orch.reports[0]["error"]
    assert err["type"] == "GuestError"
    assert err["context"]["image"] == str(tmp_path / "gone.img")
    assert err["cause"]["message"] == "launch failed"
