# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest

from fakes.fake_guest import FakeFS, FakeGuest
from guestprep.core.exceptions import OperationFailed, wrap_guest
from guestprep.sysprep.engine import ExecutionEngine
from guestprep.sysprep.operation import OperationDescriptor, Outcome
from guestprep.sysprep.registry import build_registry
from guestprep.sysprep.selector import select
from guestprep.sysprep.side_effects import SideEffects


def _plan(*ctors, include=()):
    return select(build_registry(list(ctors)), include=include)


def _recording(name, log, *, fail_on=None, token=None, result=None):
    def perform(guest, root, effects):
        log.append((name, root, guest.mounted))
        if fail_on is not None and root == fail_on:
            raise RuntimeError(f"{name} exploded")
        if token:
            effects.record(token)
        return result

    return lambda: OperationDescriptor(name=name, heading=name.upper(), perform_on_filesystems=perform)


@pytest.mark.unit
class TestRoots:

    def test_ops_run_in_name_order_per_sorted_root(self, logger):
        calls = []
        guest = FakeGuest({"/dev/sdb1": FakeFS(), "/dev/sda1": FakeFS()})
        plan = _plan(_recording("b", calls), _recording("a", calls))

        report = ExecutionEngine(guest, plan, logger).run()

        assert calls == [
            ("a", "/dev/sda1", "/dev/sda1"),
            ("b", "/dev/sda1", "/dev/sda1"),
            ("a", "/dev/sdb1", "/dev/sdb1"),
            ("b", "/dev/sdb1", "/dev/sdb1"),
        ]
        assert [r.target for r in report.roots] == ["/dev/sda1", "/dev/sdb1"]
        assert report.ok

    def test_failure_aborts_only_the_current_root(self, logger):
        calls = []
        guest = FakeGuest({"/dev/sda1": FakeFS(), "/dev/sdb1": FakeFS()})
        plan = _plan(_recording("a", calls, fail_on="/dev/sda1"), _recording("b", calls))

        report = ExecutionEngine(guest, plan, logger).run()

        assert calls == [("a", "/dev/sda1", "/dev/sda1"), ("a", "/dev/sdb1", "/dev/sdb1"), ("b", "/dev/sdb1", "/dev/sdb1")]
        assert not report.ok
        assert len(report.failures) == 1
        f = report.failures[0]
        assert isinstance(f, OperationFailed)
        assert f.context == {"operation": "a", "scope": "root", "target": "/dev/sda1"}
        assert isinstance(f.cause, RuntimeError)

        sda, sdb = report.roots
        assert sda.aborted_by == "a"
        assert [(r.operation, r.outcome) for r in sda.results] == [("a", Outcome.FAILED)]
        assert [(r.operation, r.outcome) for r in sdb.results] == [("a", Outcome.APPLIED), ("b", Outcome.APPLIED)]

    def test_umount_after_every_root_even_on_failure(self, logger):
        guest = FakeGuest({"/dev/sda1": FakeFS(), "/dev/sdb1": FakeFS()})
        plan = _plan(_recording("a", [], fail_on="/dev/sda1"))

        ExecutionEngine(guest, plan, logger).run()

        assert guest.umounts == 2
        assert guest.mounted is None

    def test_mount_failure_is_recorded_and_next_root_runs(self, logger):
        calls = []
        guest = FakeGuest({"/dev/sda1": FakeFS(), "/dev/sdb1": FakeFS()})
        guest.fail[("mount_root", "/dev/sda1")] = wrap_guest("cannot mount /", RuntimeError("bad superblock"))

        report = ExecutionEngine(guest, _plan(_recording("a", calls)), logger).run()

        assert calls == [("a", "/dev/sdb1", "/dev/sdb1")]
        assert report.roots[0].aborted_by == "mount"
        assert report.failures[0].context["operation"] == "mount"
        # never mounted, so nothing to unmount for sda1
        assert guest.umounts == 1

    def test_skipped_reason_names_family(self, logger):
        guest = FakeGuest({"/dev/sda1": FakeFS(family="windows")})
        plan = _plan(_recording("a", [], result=Outcome.SKIPPED))

        report = ExecutionEngine(guest, plan, logger).run()

        r = report.roots[0].results[0]
        assert r.outcome is Outcome.SKIPPED
        assert r.reason == "not applicable to windows"
        assert report.ok

    def test_returned_failed_outcome_counts_as_failure(self, logger):
        guest = FakeGuest({"/dev/sda1": FakeFS()})
        report = ExecutionEngine(guest, _plan(_recording("a", [], result=Outcome.FAILED)), logger).run()
        assert report.roots[0].aborted_by == "a"
        assert not report.ok

    def test_no_roots_is_not_an_error(self, logger):
        report = ExecutionEngine(FakeGuest(), _plan(_recording("a", [])), logger).run()
        assert report.roots == []
        assert report.ok


@pytest.mark.unit
class TestSideEffects:

    def test_tokens_merged_across_roots_and_ops(self, logger):
        guest = FakeGuest({"/dev/sda1": FakeFS(), "/dev/sdb1": FakeFS()})
        plan = _plan(_recording("a", [], token="t1"), _recording("b", [], token="t1"), _recording("c", [], token="t0"))
        fx = SideEffects()

        report = ExecutionEngine(guest, plan, logger, side_effects=fx).run()

        assert report.side_effects == ["t0", "t1"]
        assert fx.is_complete

    def test_tokens_from_a_failed_root_survive(self, logger):
        guest = FakeGuest({"/dev/sda1": FakeFS()})
        plan = _plan(_recording("a", [], token="early"), _recording("b", [], fail_on="/dev/sda1"))

        report = ExecutionEngine(guest, plan, logger).run()

        assert report.side_effects == ["early"]
        assert not report.ok


@pytest.mark.unit
class TestDevices:

    def _dev_op(self, calls, fail_on=None):
        def perform(guest, device):
            calls.append(device)
            if device == fail_on:
                raise RuntimeError("pvchange failed")
            return None

        return lambda: OperationDescriptor(name="dev", heading="D", perform_on_devices=perform)

    def test_device_ops_run_per_sorted_device_and_never_mount(self, logger):
        calls = []
        guest = FakeGuest(devices={"/dev/sdb": {}, "/dev/sda": {}})

        report = ExecutionEngine(guest, _plan(self._dev_op(calls)), logger).run()

        assert calls == ["/dev/sda", "/dev/sdb"]
        assert ("list_roots", None) not in guest.calls
        assert not [c for c in guest.calls if c[0] == "mount_root"]
        assert [d.target for d in report.devices] == ["/dev/sda", "/dev/sdb"]

    def test_device_failure_isolated(self, logger):
        calls = []
        guest = FakeGuest(devices={"/dev/sda": {}, "/dev/sdb": {}})

        report = ExecutionEngine(guest, _plan(self._dev_op(calls, fail_on="/dev/sda")), logger).run()

        assert calls == ["/dev/sda", "/dev/sdb"]
        assert report.devices[0].aborted_by == "dev"
        assert report.devices[1].ok
        assert report.failures[0].context["scope"] == "device"


@pytest.mark.unit
def test_run_is_deterministic(logger):
    def run_once():
        calls = []
        guest = FakeGuest({"/dev/sdc1": FakeFS(), "/dev/sda1": FakeFS(), "/dev/sdb1": FakeFS()})
        plan = _plan(_recording("z", calls), _recording("m", calls), _recording("a", calls))
        report = ExecutionEngine(guest, plan, logger).run()
        return calls, report.as_dict()

    first, second = run_once(), run_once()
    assert first[0] == second[0]
    strip = lambda d: [[(r["operation"], r["outcome"]) for r in s["results"]] for s in d["roots"]]
    assert strip(first[1]) == strip(second[1])


@pytest.mark.unit
def test_report_as_dict_shape(logger):
    guest = FakeGuest({"/dev/sda1": FakeFS()})
    d = ExecutionEngine(guest, _plan(_recording("a", [], fail_on="/dev/sda1")), logger).run().as_dict()

    assert d["ok"] is False
    assert d["plan"] == ["a"]
    assert d["roots"][0]["family"] == "linux"
    assert d["failures"][0]["type"] == "OperationFailed"
    assert d["failures"][0]["cause"]["type"] == "RuntimeError"


@pytest.mark.unit
class TestListingFailures:

    def test_device_listing_failure_keeps_root_results(self, logger):
        calls = []
        guest = FakeGuest({"/dev/sda1": FakeFS()}, devices={"/dev/sda": {}})
        guest.fail[("list_devices", None)] = wrap_guest("list_devices failed", RuntimeError("appliance died"))
        dev = lambda: OperationDescriptor(name="dev", heading="D", perform_on_devices=lambda g, d: calls.append(d))
        plan = _plan(_recording("a", calls, token="t1"), dev)

        report = ExecutionEngine(guest, plan, logger).run()

        assert calls == [("a", "/dev/sda1", "/dev/sda1")]
        assert [(r.operation, r.outcome) for r in report.roots[0].results] == [("a", Outcome.APPLIED)]
        assert report.devices == []
        assert report.side_effects == ["t1"]
        assert not report.ok
        assert report.failures[0].context == {"operation": "list_devices", "scope": "guest", "target": "image"}
        assert report.guest.aborted_by == "list_devices"

    def test_root_listing_failure_still_runs_devices(self, logger):
        calls = []
        guest = FakeGuest({"/dev/sda1": FakeFS()}, devices={"/dev/sda": {}})
        guest.fail[("list_roots", None)] = RuntimeError("inspection failed")
        dev = lambda: OperationDescriptor(name="dev", heading="D", perform_on_devices=lambda g, d: calls.append(d))
        plan = _plan(_recording("a", calls), dev)

        report = ExecutionEngine(guest, plan, logger).run()

        assert calls == ["/dev/sda"]
        assert report.roots == []
        assert [d.target for d in report.devices] == ["/dev/sda"]
        assert [f.context["operation"] for f in report.failures] == ["list_roots"]
        d = report.as_dict()
        assert d["guest"]["results"][0]["operation"] == "list_roots"
        assert d["guest"]["results"][0]["outcome"] == "failed"
