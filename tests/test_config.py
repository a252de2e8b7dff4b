import pytest

from config import Config
from default import DEFAULT


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch):
    monkeypatch.delenv("CONFIG_ENV", raising=False)


def write_ini(directory, name, text):
    (directory / name).write_text(text, encoding="utf-8")


def test_repo_config_loads():
    config = Config()
    assert config.combination_limit == 15
    assert config.combination_separator == " + "
    assert config.unknown_label == "Unknown"
    assert config.rules_default_profile == "default"


def test_missing_file_uses_defaults(tmp_path, caplog):
    config = Config(config_dir=str(tmp_path))
    assert config.trades_directory == DEFAULT.trades_directory
    assert config.combination_limit == DEFAULT.combination_limit
    assert config.log_level == "WARNING"
    assert "not found in section" in caplog.text


def test_values_and_quoted_separator(tmp_path):
    write_ini(tmp_path, "config.ini", (
        "[general]\nlog_level = debug\n"
        "[analytics]\ncombination_limit = 5\ncombination_separator = \" & \"\nunknown_label = N/A\n"
    ))
    config = Config(config_dir=str(tmp_path))
    assert config.log_level == "DEBUG"
    assert config.combination_limit == 5
    assert config.combination_separator == " & "
    assert config.unknown_label == "N/A"


def test_invalid_int_falls_back(tmp_path):
    write_ini(tmp_path, "config.ini", "[analytics]\ncombination_limit = lots\n")
    assert Config(config_dir=str(tmp_path)).combination_limit == DEFAULT.combination_limit


def test_environment_overlay(tmp_path, monkeypatch):
    write_ini(tmp_path, "config.ini", "[analytics]\ncombination_limit = 5\nunknown_label = Unknown\n")
    write_ini(tmp_path, "config.prop.ini", "[analytics]\ncombination_limit = 3\n")
    monkeypatch.setenv("CONFIG_ENV", "prop")
    config = Config(config_dir=str(tmp_path))
    assert config.combination_limit == 3
    assert config.unknown_label == "Unknown"


def test_get_bool(tmp_path):
    write_ini(tmp_path, "config.ini", "[flags]\non = yes\noff = 0\nodd = maybe\n")
    config = Config(config_dir=str(tmp_path))
    assert config.get_bool("flags", "on") is True
    assert config.get_bool("flags", "off", default=True) is False
    assert config.get_bool("flags", "odd", default=True) is True
    assert config.get_bool("flags", "missing") is False


def test_merge_exports_flag(tmp_path):
    write_ini(tmp_path, "config.ini", "[general]\nmerge_exports = yes\n")
    assert Config(config_dir=str(tmp_path)).merge_exports is True
    assert Config().merge_exports is False
