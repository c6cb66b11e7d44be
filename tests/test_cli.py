"""
Tests for the nodeconf command line.
"""

import json
import pytest

from nodeconf import cli


@pytest.fixture(autouse=True)
def _quiet(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda settings: None)
    monkeypatch.delenv("NODECONF_INI_FILES", raising=False)


@pytest.fixture
def ini_file(tmp_path):
    path = tmp_path / "local.ini"
    path.write_text("[db]\nmax_size = 100\nname = widget\n", encoding="utf-8")
    return path


def test_get_value(ini_file, capsys):
    assert cli.main(["-c", str(ini_file), "get", "db", "max_size"]) == 0
    assert capsys.readouterr().out == "100\n"


def test_get_missing_value(ini_file):
    assert cli.main(["-c", str(ini_file), "get", "db", "missing"]) == 1


def test_get_section(ini_file, capsys):
    assert cli.main(["-c", str(ini_file), "get", "db"]) == 0
    assert capsys.readouterr().out == "max_size = 100\nname = widget\n"


def test_dump_json(ini_file, capsys):
    assert cli.main(["-c", str(ini_file), "dump", "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == {"db": {"max_size": "100", "name": "widget"}}


def test_dump_text(ini_file, capsys):
    assert cli.main(["-c", str(ini_file), "dump"]) == 0
    assert capsys.readouterr().out == "[db]\nmax_size = 100\nname = widget\n"


def test_set_writes_back(ini_file):
    assert cli.main(["-c", str(ini_file), "set", "db", "max_size", "200"]) == 0
    assert "max_size = 200" in ini_file.read_text(encoding="utf-8")


def test_set_no_persist(ini_file):
    assert cli.main(["-c", str(ini_file), "set", "db", "max_size", "200", "--no-persist"]) == 0
    assert "max_size = 100" in ini_file.read_text(encoding="utf-8")


def test_delete_missing_key(ini_file):
    assert cli.main(["-c", str(ini_file), "delete", "db", "missing"]) == 1


def test_missing_config_file(tmp_path):
    assert cli.main(["-c", str(tmp_path / "nope.ini"), "dump"]) == 1


def test_files_from_environment(ini_file, monkeypatch, capsys):
    monkeypatch.setenv("NODECONF_INI_FILES", str(ini_file))
    assert cli.main(["get", "db", "name"]) == 0
    assert capsys.readouterr().out == "widget\n"


def test_diff(ini_file, tmp_path, capsys):
    other = tmp_path / "other.ini"
    other.write_text("[db]\nmax_size = 100\nname = gadget\n", encoding="utf-8")
    assert cli.main(["-c", str(ini_file), "diff", str(other)]) == 1
    delta = json.loads(capsys.readouterr().out)
    assert delta["changed"] == {"db/name": {"before": "widget", "after": "gadget"}}
    assert delta["added"] == {} and delta["removed"] == {}
