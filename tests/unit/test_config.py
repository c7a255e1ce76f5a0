"""Unit tests for config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from foliodb.config import ConfigError, Environment, from_environ, load
from foliodb.constants import API_BASE_URL, DEFAULT_PROJECT_REF

YAML_CONFIG = """\
default_env: prod
environments:
  prod:
    project_ref: prodref
    access_token: ${FOLIO_TEST_TOKEN}
    delay_ms: 500
  dev:
    project_ref: devref
    api_base_url: http://localhost:54321/v1/projects/
    schema: scratch
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "foliodb.config.yml"
    path.write_text(YAML_CONFIG, encoding="utf-8")
    return path


def test_default_env_and_token_expansion(config_file: Path, monkeypatch) -> None:
    monkeypatch.setenv("FOLIO_TEST_TOKEN", "sbp_123")
    env = load(config_file)

    assert env.name == "prod"
    assert env.project_ref == "prodref"
    assert env.access_token == "sbp_123"
    assert env.delay_ms == 500
    assert env.schema == "domainfolio"
    assert env.query_url() == f"{API_BASE_URL}/prodref/database/query"


def test_named_env(config_file: Path) -> None:
    env = load(config_file, "dev")
    assert env.schema == "scratch"
    assert env.access_token is None
    assert env.query_url() == "http://localhost:54321/v1/projects/devref/database/query"


def test_default_file_picked_up_from_cwd(config_file: Path) -> None:
    # autouse fixture chdirs into tmp_path, where config_file lives
    assert load().project_ref == "prodref"


def test_unknown_env(config_file: Path) -> None:
    with pytest.raises(ConfigError, match="'stage' not found"):
        load(config_file, "stage")


def test_explicit_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load(tmp_path / "missing.yml")


def test_no_default_env(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yml"
    path.write_text("environments: {}\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="default_env"):
        load(path)


def test_toml_config(tmp_path: Path) -> None:
    path = tmp_path / "foliodb.toml"
    path.write_text(
        'default_env = "prod"\n\n[environments.prod]\nproject_ref = "tomlref"\n',
        encoding="utf-8",
    )
    assert load(path).project_ref == "tomlref"


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "bad.yml"
    path.write_text("environments: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Could not parse"):
        load(path)


def test_missing_project_ref() -> None:
    with pytest.raises(ConfigError, match="project_ref"):
        Environment("x", {})


def test_falls_back_to_environment_variables(monkeypatch) -> None:
    monkeypatch.setenv("SUPABASE_PROJECT_REF", "envref")
    monkeypatch.setenv("SUPABASE_ACCESS_TOKEN", "sbp_env")
    env = load()
    assert env.project_ref == "envref"
    assert env.access_token == "sbp_env"


def test_from_environ_defaults() -> None:
    env = from_environ(environ={})
    assert env.project_ref == DEFAULT_PROJECT_REF
    assert env.access_token is None


def test_numeric_strings_are_coerced() -> None:
    env = Environment("x", {"project_ref": "r", "delay_ms": "0", "timeout": "12.5"})
    assert env.delay_ms == 0
    assert env.timeout == 12.5


@pytest.mark.parametrize(
    "extra",
    [{"delay_ms": "fast"}, {"delay_ms": [200]}, {"timeout": "soon"}, {"delay_ms": -1}],
)
def test_bad_delay_or_timeout_is_config_error(extra) -> None:
    with pytest.raises(ConfigError):
        Environment("x", {"project_ref": "r", **extra})


def test_bad_delay_in_file_fails_before_anything_runs(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yml"
    path.write_text(
        "default_env: prod\nenvironments:\n  prod:\n    project_ref: r\n    delay_ms: slow\n",
        encoding="utf-8",
    )
    with pytest.raises(ConfigError, match="delay_ms"):
        load(path)
