# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import argparse
import json

import pytest

from guestprep.config.config_loader import Config
from guestprep.core.exceptions import Fatal


@pytest.mark.unit
class TestLoad:

    def test_yaml_keys_normalized(self, logger, tmp_path):
        p = tmp_path / "a.yaml"
        p.write_text("dry-run: true\nenable: [tmp-files]\n", encoding="utf-8")
        assert Config.load_one(logger, p) == {"dry_run": True, "enable": ["tmp-files"]}

    def test_json(self, logger, tmp_path):
        p = tmp_path / "a.json"
        p.write_text(json.dumps({"report": "out.json"}), encoding="utf-8")
        assert Config.load_one(logger, p) == {"report": "out.json"}

    def test_empty_file(self, logger, tmp_path):
        p = tmp_path / "empty.yaml"
        p.write_text("", encoding="utf-8")
        assert Config.load_one(logger, p) == {}

    def test_non_mapping_rejected(self, logger, tmp_path):
        p = tmp_path / "list.yaml"
        p.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(Fatal) as ei:
            Config.load_one(logger, p)
        assert ei.value.code == 2

    def test_invalid_yaml(self, logger, tmp_path):
        p = tmp_path / "bad.yaml"
        p.write_text("a: [unclosed\n", encoding="utf-8")
        with pytest.raises(Fatal):
            Config.load_one(logger, p)

    def test_later_file_wins(self, logger, tmp_path):
        a = tmp_path / "10-base.yaml"
        b = tmp_path / "20-site.yaml"
        a.write_text("dry_run: false\nreport: a.json\n", encoding="utf-8")
        b.write_text("dry_run: true\n", encoding="utf-8")

        paths = Config.expand_configs(logger, [str(tmp_path / "*.yaml")])

        assert [p.name for p in paths] == ["10-base.yaml", "20-site.yaml"]
        assert Config.load_many(logger, paths) == {"dry_run": True, "report": "a.json"}

    def test_missing_config(self, logger, tmp_path):
        with pytest.raises(Fatal):
            Config.expand_configs(logger, [str(tmp_path / "nope.yaml")])
        with pytest.raises(Fatal):
            Config.expand_configs(logger, [str(tmp_path / "*.nothing")])


@pytest.mark.unit
def test_apply_as_defaults(logger, caplog):
    parser = argparse.ArgumentParser()
    parser.add_argument("--enable", action="append", default=[])
    parser.add_argument("--dry-run", dest="dry_run", action="store_true")

    Config.apply_as_defaults(logger, parser, {"enable": "tmp-files", "dry_run": True, "bogus": 1})

    args = parser.parse_args([])
    assert args.enable == ["tmp-files"]
    assert args.dry_run is True
    assert "Ignoring unknown config key: bogus" in caplog.text
