"""Tests for the swap-kernel command line."""

import json
import logging
import sys
import types

import pytest
from click.testing import CliRunner

from swap_kernel.cli import load_locator, main
from swap_kernel.hook.simulated import SimulatedGame, SimulatedLocator
from swap_kernel.models.config import SwapperConfig


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "DSREquipmentSwap.json"
    path.write_text(json.dumps({
        "ProcessSearchTimeoutMs": 20,
        "ProcessSearchIntervalMs": 5,
        "LeftWeaponTriggers": [[1234, 1000, 1]],
        "RingTriggers": [[-1, 100, 2, True]],
    }), encoding="utf-8")
    return path


@pytest.fixture
def hook_module(monkeypatch):
    """An importable module exposing ProcessLocator factories."""
    module = types.ModuleType("fake_swap_hooks")
    module.missing_game = lambda config: SimulatedLocator(SimulatedGame(), fail_searches=1)
    module.simulated = lambda config: SimulatedLocator(SimulatedGame())
    monkeypatch.setitem(sys.modules, "fake_swap_hooks", module)
    return module


class TestCheckConfig:
    def test_lists_triggers(self, config_file):
        result = CliRunner().invoke(main, ["check-config", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "Left-Hand Weapon: 1 trigger(s)" in result.output
        assert "Ring: 1 trigger(s)" in result.output
        assert "Head Armor: 0 trigger(s)" in result.output
        assert "  LeftWeaponTriggers[0]: Weapon [SpEffect 1234 & ParamID 1000]" in result.output
        assert "  RingTriggers[0]: Ring [SpEffect -1 & ParamID 100] += 2 => 102 (permanent)" in result.output

    def test_invalid_config_exits_1(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"LeftSpEffectTriggers": []}), encoding="utf-8")

        result = CliRunner().invoke(main, ["check-config", "--config", str(path)])

        assert result.exit_code == 1

    def test_missing_config_exits_1(self, tmp_path):
        result = CliRunner().invoke(
            main, ["check-config", "--config", str(tmp_path / "nope.json")]
        )
        assert result.exit_code == 1


class TestRun:
    def test_requires_hook_or_simulate(self, config_file):
        result = CliRunner().invoke(main, ["run", "--config", str(config_file)])
        assert result.exit_code == 2
        assert "--hook" in result.output

    def test_hook_and_simulate_conflict(self, config_file, hook_module):
        result = CliRunner().invoke(main, [
            "run", "--config", str(config_file),
            "--hook", "fake_swap_hooks:simulated", "--simulate",
        ])
        assert result.exit_code == 2
        assert "not both" in result.output

    def test_process_not_found_exits_2(self, config_file, hook_module):
        result = CliRunner().invoke(main, [
            "run", "--config", str(config_file), "--hook", "fake_swap_hooks:missing_game",
        ])
        assert result.exit_code == 2


class TestLoadLocator:
    def test_builds_locator_from_factory(self, hook_module):
        locator = load_locator("fake_swap_hooks:simulated", SwapperConfig())
        assert isinstance(locator, SimulatedLocator)

    @pytest.mark.parametrize("target", [
        "fake_swap_hooks",
        "fake_swap_hooks:nothing_here",
        "no_such_module_anywhere:factory",
    ])
    def test_bad_targets_rejected(self, target, hook_module):
        import click

        with pytest.raises(click.BadParameter):
            load_locator(target, SwapperConfig())
