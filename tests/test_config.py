import json

import pytest

from davutil import config

CONFIG = {
    "default": {"dav_url": "https://dav.example.com/", "dav_user": "me"},
    "backup": {"inherits": "default", "dav_url": "https://backup.example.com/"},
    "offsite": {"inherits": "backup", "dav_pass": "secret"},
    "loop_a": {"inherits": "loop_b", "dav_url": "https://a.example.com/"},
    "loop_b": {"inherits": "loop_a", "dav_user": "b"},
}


class TestConfigSection:
    def test_plain(self):
        assert config.config_section(CONFIG, "default") == CONFIG["default"]

    def test_inherits(self):
        section = config.config_section(CONFIG, "backup")
        assert section["dav_url"] == "https://backup.example.com/"
        assert section["dav_user"] == "me"

    def test_inherits_recursive(self):
        section = config.config_section(CONFIG, "offsite")
        assert section["dav_url"] == "https://backup.example.com/"
        assert section["dav_user"] == "me"
        assert section["dav_pass"] == "secret"

    def test_inheritance_loop(self):
        section = config.config_section(CONFIG, "loop_a")
        assert section["dav_url"] == "https://a.example.com/"
        assert section["dav_user"] == "b"

    def test_missing(self):
        assert config.config_section(CONFIG, "nonexistent") == {}


class TestReadConfig:
    def test_json(self, tmp_path):
        fn = tmp_path / "davutil.json"
        fn.write_text(json.dumps(CONFIG))
        assert config.read_config(str(fn)) == CONFIG

    def test_yaml(self, tmp_path):
        pytest.importorskip("yaml")
        fn = tmp_path / "davutil.yaml"
        fn.write_text("---\ndefault:\n  dav_url: https://dav.example.com/\n")
        assert config.read_config(str(fn)) == {
            "default": {"dav_url": "https://dav.example.com/"}
        }

    def test_broken(self, tmp_path):
        pytest.importorskip("yaml")
        fn = tmp_path / "davutil.conf"
        fn.write_text("default: [unclosed\n")
        assert config.read_config(str(fn)) == {}

    def test_missing_file(self, tmp_path):
        assert config.read_config(str(tmp_path / "nope.json")) == {}

    def test_default_locations(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert config.config_locations()[0] == str(
            tmp_path / ".config" / "davutil" / "davutil.conf"
        )
        cfgdir = tmp_path / ".config" / "davutil"
        cfgdir.mkdir(parents=True)
        (cfgdir / "davutil.yaml").write_text(json.dumps({"default": {}}))
        assert config.read_config(None) == {"default": {}}
