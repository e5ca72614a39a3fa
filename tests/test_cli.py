"""Tests for the command-line interface."""

import json
import logging

import pytest
from click.testing import CliRunner

from clicktoplay.cli import cli
from clicktoplay.scenario import Scenario

URL = "http://mochi.test:8888/plugin_add_dynamically.html"
ORIGIN = "http://mochi.test:8888"


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("CLICKTOPLAY_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("CLICKTOPLAY_WAIT_TIMEOUT", "0.2")
    yield CliRunner()
    # setup_logging binds handlers to the runner's temporary stdout
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for log_filter in root.filters[:]:
        root.removeFilter(log_filter)


@pytest.fixture
def config_file(tmp_path):
    scenario_dir = tmp_path / "scenarios"
    path = tmp_path / "config.yaml"
    path.write_text(f"scenarios:\n  scenario_dirs:\n    - {scenario_dir}\n")

    blocked = Scenario(name="always_blocked", description="Expects activation that never comes")
    blocked.add_step("new_page", url=URL)
    blocked.add_step("add_object", origin=ORIGIN)
    blocked.add_step("expect_activated", index=0)
    blocked.save(scenario_dir / "always_blocked.yaml")
    return path


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_config_command(runner):
    result = runner.invoke(cli, ["config"])
    assert result.exit_code == 0, result.output
    assert "Current Configuration:" in result.output
    assert "click_to_play: True" in result.output


def test_scenario_list(runner, config_file):
    result = runner.invoke(cli, ["-c", str(config_file), "scenario", "list"])
    assert result.exit_code == 0, result.output
    assert "navigation_persistence" in result.output
    assert "always_blocked" in result.output


def test_scenario_show(runner):
    result = runner.invoke(cli, ["scenario", "show", "navigation_persistence"])
    assert result.exit_code == 0, result.output
    assert "Plugin should stay activated after hash change" in result.output


def test_run_builtin_scenario_with_report(runner, tmp_path):
    report = tmp_path / "report.json"
    result = runner.invoke(
        cli, ["scenario", "run", "navigation_persistence", "--report", str(report)]
    )

    assert result.exit_code == 0, result.output
    assert "Scenario navigation_persistence passed" in result.output
    assert json.loads(report.read_text())["status"] == "passed"


def test_run_failing_scenario(runner, config_file):
    result = runner.invoke(
        cli, ["-c", str(config_file), "scenario", "run", "always_blocked", "--timeout", "0.1"]
    )

    assert result.exit_code == 1
    assert "[failed] Object 0 should be activated" in result.output


def test_scenario_sets_its_own_click_to_play_flag(runner):
    result = runner.invoke(
        cli, ["scenario", "run", "navigation_persistence", "--no-click-to-play"]
    )
    # The scenario turns click-to-play back on as its first step
    assert result.exit_code == 0, result.output


def test_run_unknown_scenario(runner):
    result = runner.invoke(cli, ["scenario", "run", "does_not_exist"])
    assert result.exit_code == 1
    assert "not found" in result.output


@pytest.mark.parametrize("timeout", ["0", "-1"])
def test_run_rejects_non_positive_timeout(runner, timeout):
    result = runner.invoke(
        cli, ["scenario", "run", "navigation_persistence", "--timeout", timeout]
    )
    assert result.exit_code == 2
    assert "Invalid value for '--timeout'" in result.output
