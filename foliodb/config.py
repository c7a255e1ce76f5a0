from __future__ import annotations
import os
import pathlib
import typing as t
import yaml

try:
    import tomllib as _toml
except ModuleNotFoundError:
    import tomli as _toml

from foliodb.constants import (
    API_BASE_URL,
    DEFAULT_PROJECT_REF,
    DEFAULT_SCHEMA,
    DEFAULT_TIMEOUT,
    PROJECT_REF_ENV,
    ACCESS_TOKEN_ENV,
)

_DEFAULT_PATH = pathlib.Path("foliodb.config.yml")


class ConfigError(RuntimeError):
    """Raised for any user‑visible configuration problem."""


def _expand(raw: t.Any) -> str | None:
    """Allow `${ENV_VAR}` syntax for secrets."""
    if raw is None:
        return None
    raw = str(raw)
    if raw.startswith("${") and raw.endswith("}"):
        return os.getenv(raw[2:-1])
    return raw


class Environment:
    """
    A thin value‑object holding what is needed to reach one Supabase
    project.  Nothing here talks to the network.
    """

    def __init__(self, name: str, d: dict[str, t.Any]) -> None:
        self.name: str = name
        try:
            self.project_ref: str = str(d["project_ref"])
        except KeyError as exc:
            raise ConfigError(f"Environment {name!r} has no project_ref") from exc
        self.api_base_url: str = str(d.get("api_base_url", API_BASE_URL)).rstrip("/")
        self.access_token: str | None = _expand(d.get("access_token"))
        self.schema: str = d.get("schema", DEFAULT_SCHEMA)
        try:
            delay = d.get("delay_ms")
            self.delay_ms: int | None = None if delay is None else int(delay)
            self.timeout: float = float(d.get("timeout", DEFAULT_TIMEOUT))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Environment {name!r}: bad delay_ms / timeout ({exc})") from exc
        if self.delay_ms is not None and self.delay_ms < 0:
            raise ConfigError(f"Environment {name!r}: delay_ms must be >= 0")

    def query_url(self) -> str:
        """Return the Management API endpoint that runs SQL."""
        return f"{self.api_base_url}/{self.project_ref}/database/query"


def from_environ(name: str = "default", environ: t.Mapping[str, str] | None = None) -> Environment:
    """Build an :class:`Environment` from ``SUPABASE_*`` variables only."""
    environ = os.environ if environ is None else environ
    return Environment(
        name,
        {
            "project_ref": environ.get(PROJECT_REF_ENV, DEFAULT_PROJECT_REF),
            "access_token": environ.get(ACCESS_TOKEN_ENV),
        },
    )


def _read(cfg_file: pathlib.Path) -> dict[str, t.Any]:
    try:
        if cfg_file.suffix == ".toml":
            with cfg_file.open("rb") as fh:
                return _toml.load(fh)
        with cfg_file.open(encoding="utf-8") as fh:
            return yaml.safe_load(fh) or {}
    except (yaml.YAMLError, _toml.TOMLDecodeError) as exc:
        raise ConfigError(f"Could not parse {cfg_file}: {exc}") from exc


def load(path: pathlib.Path | str | None = None, env: str | None = None) -> Environment:
    """
    Parse *path* (or the default YAML) and return an :class:`Environment`.

    Without an explicit *path* and without ``foliodb.config.yml`` in the
    working directory, the environment comes from ``SUPABASE_*`` variables.
    """
    if path is None and not _DEFAULT_PATH.exists():
        return from_environ(env or "default")

    cfg_file = pathlib.Path(path) if path else _DEFAULT_PATH
    if not cfg_file.exists():
        raise ConfigError(f"Config file {cfg_file} not found.")

    raw = _read(cfg_file)

    env_name = env or raw.get("default_env")
    if not env_name:
        raise ConfigError("No environment specified and no default_env in config")

    try:
        return Environment(env_name, raw["environments"][env_name])
    except (KeyError, TypeError) as exc:
        raise ConfigError(f"Environment {env_name!r} not found in config") from exc
