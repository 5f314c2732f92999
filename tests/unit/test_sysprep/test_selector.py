# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest

from guestprep.core.exceptions import ConfigurationError, UnknownOperation, UnknownOperationArgument
from guestprep.sysprep.operation import ExtraArg, OperationDescriptor
from guestprep.sysprep.registry import build_registry
from guestprep.sysprep.selector import (
    collect_operation_args,
    parse_operation_arg,
    parse_operation_list,
    select,
)


def _fs(guest, root, effects):
    return None


def _dev(guest, device):
    return None


@pytest.fixture
def registry():
    return build_registry([
        lambda: OperationDescriptor(name="a", heading="A", perform_on_filesystems=_fs),
        lambda: OperationDescriptor(name="b", heading="B", perform_on_filesystems=_fs),
        lambda: OperationDescriptor(name="c", heading="C", enabled_by_default=False, perform_on_filesystems=_fs),
        lambda: OperationDescriptor(
            name="d",
            heading="D",
            enabled_by_default=False,
            extra_args=[ExtraArg("mode", "how", default="fast")],
            perform_on_devices=_dev,
        ),
    ])


@pytest.mark.unit
class TestSelect:

    def test_defaults_only(self, registry):
        assert select(registry).names == ["a", "b"]

    def test_include_and_exclude(self, registry):
        assert select(registry, include=["c"], exclude=["b"]).names == ["a", "c"]

    def test_exclude_wins_over_include(self, registry):
        assert select(registry, include=["c"], exclude=["c"]).names == ["a", "b"]

    def test_comma_separated_lists(self, registry):
        assert select(registry, include=["c, d"], exclude=["a,b"]).names == ["c", "d"]

    def test_unknown_include(self, registry):
        with pytest.raises(UnknownOperation):
            select(registry, include=["nope"])

    def test_unknown_exclude(self, registry):
        with pytest.raises(UnknownOperation):
            select(registry, exclude=["nope"])

    def test_plan_is_sorted_and_split_by_kind(self, registry):
        plan = select(registry, include=["d"])
        assert plan.names == ["a", "b", "d"]
        assert [e.name for e in plan.filesystem_entries()] == ["a", "b"]
        assert [e.name for e in plan.device_entries()] == ["d"]

    def test_options_default_and_override(self, registry):
        plan = select(registry, include=["d"])
        assert plan.device_entries()[0].options == {"mode": "fast"}

        plan = select(registry, include=["d"], operation_args={"d": {"mode": "slow"}})
        assert plan.device_entries()[0].options == {"mode": "slow"}

    def test_argument_for_unselected_operation(self, registry):
        with pytest.raises(UnknownOperationArgument):
            select(registry, operation_args={"d": {"mode": "slow"}})

    def test_undeclared_argument(self, registry):
        with pytest.raises(UnknownOperationArgument) as ei:
            select(registry, include=["d"], operation_args={"d": {"speed": "1"}})
        assert ei.value.context["accepted"] == ["mode"]

    def test_argument_for_unknown_operation(self, registry):
        with pytest.raises(UnknownOperation):
            select(registry, operation_args={"zz": {"k": "v"}})


@pytest.mark.unit
class TestParsing:

    def test_parse_operation_list(self):
        assert parse_operation_list(" a, b ,,c ") == ["a", "b", "c"]
        assert parse_operation_list("") == []

    def test_parse_operation_arg(self):
        assert parse_operation_arg("d:mode=slow") == ("d", "mode", "slow")
        assert parse_operation_arg("d:mode=") == ("d", "mode", "")
        assert parse_operation_arg("d:k=a=b") == ("d", "k", "a=b")

    @pytest.mark.parametrize("bad", ["d", "d:mode", ":k=v", "d:=v"])
    def test_parse_operation_arg_rejects(self, bad):
        with pytest.raises(ConfigurationError):
            parse_operation_arg(bad)

    def test_collect_operation_args_last_wins(self):
        assert collect_operation_args(["d:mode=a", "d:mode=b", "e:x=1"]) == {"d": {"mode": "b"}, "e": {"x": "1"}}
