from __future__ import annotations

import json
from pathlib import Path

import pytest

from sigil.budget import CompilationBudget
from sigil.config import CompilerLimits, TargetLanguageConfig, apply_env_overrides, load_config
from sigil.diagnostics import Phase
from sigil.errors import ConfigError, ResourceLimitExceeded


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})
    assert config.root == tmp_path.resolve()
    assert config.registry is None
    assert config.target == TargetLanguageConfig()
    assert config.limits == CompilerLimits()


def test_toml_config(tmp_path: Path) -> None:
    (tmp_path / "sigil.toml").write_text(
        'registry = "schema/domain.json"\n\n'
        "[target]\n"
        'domain_module = "@shop/domain"\n'
        "header = false\n\n"
        "[limits]\n"
        "max_nesting_depth = 10\n",
        encoding="utf-8",
    )
    config = load_config(tmp_path, environ={})
    assert config.registry == (tmp_path / "schema" / "domain.json").resolve()
    assert config.target.domain_module == "@shop/domain"
    assert config.target.header is False
    assert config.limits.max_nesting_depth == 10
    assert config.limits.max_nodes == CompilerLimits().max_nodes


def test_json_rc_config(tmp_path: Path) -> None:
    (tmp_path / ".sigilrc").write_text(json.dumps({"limits": {"max_nodes": 99}}), encoding="utf-8")
    config = load_config(tmp_path, environ={})
    assert config.limits.max_nodes == 99


def test_environment_overrides_file(tmp_path: Path) -> None:
    (tmp_path / "sigil.toml").write_text("[limits]\nmax_nodes = 10\n", encoding="utf-8")
    config = load_config(tmp_path, environ={"SIGIL_MAX_NODES": "20", "SIGIL_TIME_BUDGET": "0.5"})
    assert config.limits.max_nodes == 20
    assert config.limits.time_budget_seconds == 0.5


def test_invalid_environment_value() -> None:
    with pytest.raises(ConfigError, match="SIGIL_MAX_NESTING_DEPTH"):
        apply_env_overrides(CompilerLimits(), {"SIGIL_MAX_NESTING_DEPTH": "deep"})


def test_explicit_config_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="does not exist"):
        load_config(tmp_path, tmp_path / "missing.toml", environ={})


def test_invalid_files(tmp_path: Path) -> None:
    (tmp_path / "sigil.toml").write_text("[limits\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path, environ={})

    rc = tmp_path / "custom.json"
    rc.write_text('{"limits": {"max_nodes": "many"}}', encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid \\[limits\\] value"):
        load_config(tmp_path, rc, environ={})


def test_unsupported_target_language() -> None:
    with pytest.raises(ConfigError, match="Unsupported target language 'rust'"):
        TargetLanguageConfig(language="rust")


class TestCompilationBudget:
    def test_depth(self) -> None:
        budget = CompilationBudget(CompilerLimits(max_nesting_depth=2))
        budget.enter(1, 1)
        budget.enter(1, 1)
        with pytest.raises(ResourceLimitExceeded) as exc_info:
            budget.enter(3, 7)
        assert exc_info.value.limit == "max_nesting_depth"
        assert (exc_info.value.location.line, exc_info.value.location.column) == (3, 7)

    def test_exit_restores_depth(self) -> None:
        budget = CompilationBudget(CompilerLimits(max_nesting_depth=1))
        for _ in range(5):
            budget.enter(1, 1)
            budget.exit()
        assert budget.depth == 0

    def test_node_count(self) -> None:
        budget = CompilationBudget(CompilerLimits(max_nodes=2))
        budget.count_node(1, 1)
        budget.count_node(1, 1)
        with pytest.raises(ResourceLimitExceeded, match="2 syntax nodes"):
            budget.count_node(1, 1)

    def test_time_budget_uses_injected_clock(self) -> None:
        now = [100.0]
        budget = CompilationBudget(CompilerLimits(time_budget_seconds=1.5), clock=lambda: now[0])
        budget.check_time()
        now[0] = 102.0
        with pytest.raises(ResourceLimitExceeded) as exc_info:
            budget.check_time(4, 2)
        assert exc_info.value.message == "Compilation exceeded its time budget of 1.5s"
        diagnostic = exc_info.value.to_diagnostic(Phase.TYPES)
        assert diagnostic.code == "SIGIL_RESOURCE_LIMIT"
        assert "time_budget_seconds" in diagnostic.hint
