"""Tests for configuration resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from scmt.config import load_config
from scmt.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("CONFIGDIR", "LOGFILE", "ENGINEER", "MESSAGE", "JSON", "LOGLEVEL", "LOGFORMAT", "CONFIG_FILE"):
        monkeypatch.delenv(f"SCMT_{key}", raising=False)


class TestDefaults:
    def test_defaults(self, tmp_path: Path) -> None:
        config = load_config(config_file=tmp_path / "absent.yaml")
        assert config.configdir == Path("/etc/scmt")
        assert config.datafile == Path("/etc/scmt/data.json")
        assert config.logfile == Path("/var/log/scmt.log")
        assert config.engineer
        assert config.message == ""
        assert config.output_json is False
        assert config.log.level == "info"
        assert config.log.format == "console"


class TestLayers:
    def test_file_overrides_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / ".scmt.yaml"
        config_file.write_text("configdir: /srv/scmt\njson: true\nloglevel: debug\n", encoding="utf-8")
        config = load_config(config_file=config_file)
        assert config.configdir == Path("/srv/scmt")
        assert config.output_json is True
        assert config.log.level == "debug"

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / ".scmt.yaml"
        config_file.write_text("engineer: file-user\n", encoding="utf-8")
        monkeypatch.setenv("SCMT_ENGINEER", "env-user")
        monkeypatch.setenv("SCMT_JSON", "yes")
        config = load_config(config_file=config_file)
        assert config.engineer == "env-user"
        assert config.output_json is True

    def test_overrides_win(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCMT_ENGINEER", "env-user")
        config = load_config(config_file=tmp_path / "absent.yaml", engineer="flag-user", message=None)
        assert config.engineer == "flag-user"
        assert config.message == ""

    def test_config_file_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("logfile: /tmp/custom.log\n", encoding="utf-8")
        monkeypatch.setenv("SCMT_CONFIG_FILE", str(config_file))
        assert load_config().logfile == Path("/tmp/custom.log")


class TestValidation:
    @pytest.mark.parametrize(("alias", "level"), [("verbose", "debug"), ("warn", "warning"), ("quiet", "error")])
    def test_log_level_aliases(self, tmp_path: Path, alias: str, level: str) -> None:
        assert load_config(config_file=tmp_path / "absent.yaml", loglevel=alias).log.level == level

    def test_invalid_log_level(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid log level"):
            load_config(config_file=tmp_path / "absent.yaml", loglevel="loud")

    def test_invalid_log_format(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid log format"):
            load_config(config_file=tmp_path / "absent.yaml", logformat="xml")

    def test_malformed_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / ".scmt.yaml"
        config_file.write_text("configdir: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(config_file=config_file)

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / ".scmt.yaml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_file=config_file)

    def test_unknown_override(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(config_file=tmp_path / "absent.yaml", colour="blue")
