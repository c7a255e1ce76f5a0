from __future__ import annotations
import pathlib
import time
import typing as t
from dataclasses import dataclass, field

import click

from foliodb.constants import DEFAULT_DELAY_MS
from foliodb.driver import ExecResult, SQLExecutor
from foliodb.migrations.reader import MigrationFile, read_migration
from foliodb.utils import describe, is_executable, truncate

_DETAIL_WIDTH = 150


@dataclass
class RunOptions:
    delay_ms: int = DEFAULT_DELAY_MS
    stop_on_error: bool = False
    silent: bool = False
    dry_run: bool = False


@dataclass
class ExecutionOutcome:
    index: int
    sql: str
    success: bool
    data: t.Any = None
    error: str | None = None


@dataclass
class MigrationResult:
    """
    Tally for one batch.  ``total`` is the input length, so
    ``successful + failed < total`` means the run was cut short.
    """

    total: int
    successful: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    outcomes: list[ExecutionOutcome] = field(default_factory=list)
    stopped: bool = False

    @property
    def processed(self) -> int:
        return self.successful + self.failed

    @property
    def ok(self) -> bool:
        return self.failed == 0


class MigrationRunner:
    """
    Pushes statements to a :class:`~foliodb.driver.SQLExecutor` strictly one
    after another, pausing ``delay_ms`` between calls.  Later statements may
    depend on objects created by earlier ones, so order is never changed.
    """

    def __init__(
        self,
        executor: SQLExecutor,
        options: RunOptions | None = None,
        *,
        sleep: t.Callable[[float], None] = time.sleep,
    ) -> None:
        self.executor = executor
        self.options = options or RunOptions()
        self._sleep = sleep

    def _say(self, message: str) -> None:
        if not self.options.silent:
            click.echo(message)

    def run(self, statements: t.Sequence[str]) -> MigrationResult:
        opts = self.options
        result = MigrationResult(total=len(statements))
        self._say(f"\nRunning migration with {len(statements)} statements...\n")

        if opts.dry_run:
            for i, stmt in enumerate(statements, 1):
                self._say(f"(DRY) [{i}/{len(statements)}]\n{stmt}\n")
            return result

        for i, raw in enumerate(statements, 1):
            stmt = raw.strip()
            if not is_executable(stmt):
                continue

            self._say(f"[{i}/{len(statements)}]")
            outcome = self._execute(i, stmt)
            result.outcomes.append(outcome)

            if outcome.success:
                result.successful += 1
            else:
                result.failed += 1
                result.errors.append(f"Statement {i}: {outcome.error}")
                if opts.stop_on_error:
                    click.echo("\nStopping due to error (stop_on_error=True)")
                    result.stopped = True
                    break

            if i < len(statements):
                self._sleep(opts.delay_ms / 1000)

        self._say(
            f"\n✅ Migration complete: {result.successful} successful, "
            f"{result.failed} failed\n"
        )
        return result

    def _execute(self, index: int, stmt: str) -> ExecutionOutcome:
        try:
            res = self.executor.execute_one(stmt)
        except Exception as exc:
            # any executor error counts against this statement only
            res = ExecResult.fail(str(exc) or exc.__class__.__name__)
        label = describe(stmt)
        if res.success:
            self._say(f"✓ {label}")
            return ExecutionOutcome(index, stmt, True, data=res.data)

        error = res.error or "unknown error"
        self._say(f"✗ {label}: {truncate(error, _DETAIL_WIDTH)}")
        return ExecutionOutcome(index, stmt, False, error=error)

    def run_file(self, path: pathlib.Path | str) -> MigrationResult:
        """Read, split and run one migration file."""
        return self.run_migration(read_migration(path))

    def run_migration(self, mf: MigrationFile) -> MigrationResult:
        """Split and run an already loaded migration file."""
        self._say(f"\nReading migration file: {mf.path}")
        self._say(f"File size: {mf.size_kb:.1f} KB")

        statements = mf.statements()
        self._say(f"Parsed {len(statements)} statements")
        return self.run(statements)
