"""Tests for the pacscan command line."""

import json
import logging

import pytest
from click.testing import CliRunner
from pacscan import MissingSourceFileError
from pacscan import __version__
from pacscan.logging_setup import JsonlHandler
from pacscan.main import cli


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep user and project settings files out of the tests."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return home, work


@pytest.fixture
def runner():
    return CliRunner()


def test_json_output(runner, fixtures_dir):
    result = runner.invoke(cli, [str(fixtures_dir / "flat"), "--json"])

    assert result.exit_code == 0, result.output
    packages = json.loads(result.output)
    assert [p["name"] for p in packages] == ["@baz/buzz", "@baz/fizz", "@fu/buzz", "@fu/fizz", "bar", "foo", "flat"]
    assert packages[-1]["directory"] == str(fixtures_dir / "flat")
    assert packages[1]["main"] is None


def test_async_matches_sync(runner, fixtures_dir):
    sync_result = runner.invoke(cli, [str(fixtures_dir / "nested"), "--json"])
    async_result = runner.invoke(cli, [str(fixtures_dir / "nested"), "--json", "--async"])

    assert async_result.exit_code == 0, async_result.output
    assert json.loads(async_result.output) == json.loads(sync_result.output)


def test_include_parents_flag(runner, fixtures_dir):
    path = fixtures_dir / "flat" / "node_modules" / "foo"

    without = json.loads(runner.invoke(cli, [str(path), "--json"]).output)
    with_parents = json.loads(runner.invoke(cli, [str(path), "--json", "--include-parents"]).output)

    assert [p["name"] for p in without] == ["foo"]
    assert len(with_parents) == 7


def test_table_output(runner, fixtures_dir):
    result = runner.invoke(cli, [str(fixtures_dir / "single")])

    assert result.exit_code == 0, result.output
    assert "Installed Packages" in result.output
    assert "Total: 1 packages" in result.output


def test_empty_directory(runner, fixtures_dir):
    result = runner.invoke(cli, [str(fixtures_dir / "unpackaged_single")])

    assert result.exit_code == 0
    assert "No packages found" in result.output


def test_defaults_to_current_directory(runner, fixtures_dir, monkeypatch):
    monkeypatch.chdir(fixtures_dir / "single")

    result = runner.invoke(cli, ["--json"])

    assert [p["name"] for p in json.loads(result.output)] == ["single"]


def test_missing_path_is_usage_error(runner, tmp_path):
    result = runner.invoke(cli, [str(tmp_path / "missing")])

    assert result.exit_code == 2


def test_scan_error_exits_with_status_1(runner, fixtures_dir, monkeypatch):
    def fail(self):
        raise MissingSourceFileError()

    monkeypatch.setattr("pacscan.main.Scanner.scan_sync", fail)

    result = runner.invoke(cli, [str(fixtures_dir / "single")])

    assert result.exit_code == 1
    assert "Could not resolve base directory as file was missing" in result.output


def test_project_settings_enable_parents(runner, fixtures_dir, isolated_settings):
    _, work = isolated_settings
    (work / ".pacscan").mkdir()
    (work / ".pacscan" / "settings.yaml").write_text("include_parents: true\n")

    path = fixtures_dir / "flat" / "node_modules" / "foo"
    with_settings = json.loads(runner.invoke(cli, [str(path), "--json"]).output)
    overridden = json.loads(runner.invoke(cli, [str(path), "--json", "--no-include-parents"]).output)

    assert len(with_settings) == 7
    assert [p["name"] for p in overridden] == ["foo"]


def test_invalid_settings(runner, fixtures_dir, isolated_settings):
    home, _ = isolated_settings
    (home / ".pacscan").mkdir()
    (home / ".pacscan" / "settings.yaml").write_text("include_parents: [1, 2]\n")

    result = runner.invoke(cli, [str(fixtures_dir / "single")])

    assert result.exit_code == 1
    assert "Invalid pacscan settings" in result.output


def test_excludes_setting_is_rejected(runner, fixtures_dir, isolated_settings):
    _, work = isolated_settings
    (work / ".pacscan").mkdir()
    (work / ".pacscan" / "settings.yaml").write_text("excludes: [harness]\n")

    result = runner.invoke(cli, [str(fixtures_dir / "single"), "--json"])

    assert result.exit_code == 1
    assert "Invalid pacscan settings" in result.output
    assert "excludes" in result.output


@pytest.mark.parametrize("flags", [[], ["--async"]])
def test_scan_starts_from_path_not_caller(runner, fixtures_dir, monkeypatch, flags):
    calls = []

    def record(options=None):
        calls.append(options)
        return []

    async def record_async(options=None):
        calls.append(options)
        return []

    monkeypatch.setattr("pacscan.execution.find_callers", record)
    monkeypatch.setattr("pacscan.execution.find_callers_async", record_async)

    result = runner.invoke(cli, [str(fixtures_dir / "single"), "--json", *flags])

    assert result.exit_code == 0, result.output
    assert [p["name"] for p in json.loads(result.output)] == ["single"]
    assert calls == []


def test_log_file(runner, fixtures_dir, tmp_path):
    log_file = tmp_path / "logs" / "pacscan.jsonl"
    root = logging.getLogger()
    level = root.level

    try:
        result = runner.invoke(cli, [str(fixtures_dir / "flat"), "--json", "--log-file", str(log_file)])
    finally:
        for handler in list(root.handlers):
            if isinstance(handler, JsonlHandler):
                root.removeHandler(handler)
        root.setLevel(level)

    assert result.exit_code == 0
    records = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert records
    assert all(record["logger"].startswith("pacscan") for record in records)


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
