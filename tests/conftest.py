from pathlib import Path

import pytest

from foliodb.driver import ExecResult

FUNCTION_SQL = """\
-- Domainfolio Schema

CREATE SCHEMA IF NOT EXISTS domainfolio;

-- ============================================
-- DOMAINS
-- ============================================
CREATE TABLE domainfolio.domains (
  id UUID PRIMARY KEY,
  name TEXT NOT NULL,
  expires_at TIMESTAMPTZ
);

CREATE OR REPLACE FUNCTION domainfolio.update_updated_at()
RETURNS TRIGGER
LANGUAGE plpgsql
AS $$
BEGIN
  -- keep updated_at fresh; never split here
  NEW.updated_at = NOW();

  RETURN NEW;
END;
$$;

INSERT INTO domainfolio.registrars (id, name) VALUES ('manual', 'Manual Entry');
"""


class ScriptedExecutor:
    """Records every statement; fails the 1-based calls listed in *fail_on*."""

    def __init__(self, fail_on=(), error="relation already exists"):
        self.fail_on = set(fail_on)
        self.error = error
        self.calls: list[str] = []

    def execute_one(self, sql: str) -> ExecResult:
        self.calls.append(sql)
        if len(self.calls) in self.fail_on:
            return ExecResult.fail(self.error)
        return ExecResult.ok([{"ok": len(self.calls)}])


@pytest.fixture
def executor():
    return ScriptedExecutor()


@pytest.fixture
def migration_file(tmp_path: Path) -> Path:
    path = tmp_path / "001_initial_schema.sql"
    path.write_text(FUNCTION_SQL, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep the developer's real token / config out of the tests."""
    monkeypatch.delenv("SUPABASE_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("SUPABASE_PROJECT_REF", raising=False)
    monkeypatch.chdir(tmp_path)
