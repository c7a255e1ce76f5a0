#!/usr/bin/env python3
"""
foliodb – run Domainfolio SQL migrations through the Supabase Management API.

• Single file:     foliodb migrate supabase/migrations/001_initial_schema.sql
• Whole directory: foliodb migrate supabase/migrations
• Inspect:         foliodb tables | columns <table> | count <table>

Connection settings come from `foliodb.config.yml` when present, otherwise
from SUPABASE_PROJECT_REF / SUPABASE_ACCESS_TOKEN (or the keychain entry
left behind by `supabase login`).
"""
from __future__ import annotations

import contextlib
import json
import pathlib
import sys

import click

from foliodb import __version__
from foliodb.config import ConfigError, Environment, load
from foliodb.constants import CLI_DELAY_MS
from foliodb.driver import connection
from foliodb.introspect import get_row_count, list_columns, list_tables
from foliodb.migrations.reader import MigrationFileError, discover, read_migration
from foliodb.migrations.runner import MigrationResult, MigrationRunner, RunOptions
from foliodb.utils import describe, statement_type, truncate

_SHOWN_ERRORS = 5
_ERROR_WIDTH = 100
_RULE = "=" * 40


def _fatal(exc: Exception) -> None:
    prefix = "Config error" if isinstance(exc, ConfigError) else "Fatal error"
    click.echo(f"{prefix}: {exc}", err=True)
    sys.exit(1)


def _first_set(*values):
    return next(v for v in values if v is not None)


def _load_env(ctx, _param, value) -> Environment:
    try:
        return load(ctx.obj["config_path"], value)
    except ConfigError as exc:
        _fatal(exc)


@click.group()
@click.option(
    "-c", "--config", "config_path", type=click.Path(), help="env config YAML/TOML"
)
@click.pass_context
def main(ctx, config_path):
    ctx.obj = {"config_path": pathlib.Path(config_path) if config_path else None}


@main.command()
def version():
    click.echo(__version__)


def _env_opt(fn):
    return click.option("-e", "--env", callback=_load_env, expose_value=True)(fn)


def _schema_opt(fn):
    return click.option("--schema", default=None, help="defaults to the env's schema")(fn)


def _print_summary(total: int, successful: int, failed: int, errors: list[str]) -> None:
    click.echo(_RULE)
    click.echo(f"  Total: {total}")
    click.echo(f"  Successful: {successful}")
    click.echo(f"  Failed: {failed}")
    click.echo(_RULE)

    if failed:
        click.echo("\nErrors:")
        for err in errors[:_SHOWN_ERRORS]:
            click.echo(f"  - {truncate(err, _ERROR_WIDTH)}")
        if len(errors) > _SHOWN_ERRORS:
            click.echo(f"  ... and {len(errors) - _SHOWN_ERRORS} more")


@main.command()
@_env_opt
@click.argument("path", type=click.Path(path_type=pathlib.Path))
@click.option("--delay-ms", type=click.IntRange(min=0), default=None,
              help=f"pause between statements (default {CLI_DELAY_MS})")
@click.option("--stop-on-error", is_flag=True)
@click.option("--silent", is_flag=True, help="only print the final tally")
@click.option("--dry-run", is_flag=True)
def migrate(env, path, delay_ms, stop_on_error, silent, dry_run):
    """Run one migration file, or every *.sql file of a directory in order."""
    options = RunOptions(
        delay_ms=_first_set(delay_ms, env.delay_ms, CLI_DELAY_MS),
        stop_on_error=stop_on_error,
        silent=silent,
        dry_run=dry_run,
    )

    click.echo(_RULE)
    click.echo("  Domainfolio Migration Runner")
    click.echo(_RULE + "\n")

    results: list[tuple[str, MigrationResult]] = []
    try:
        files = discover(path) if path.is_dir() else [read_migration(path)]
        # a dry run never talks to the API, so it needs no token
        conn = contextlib.nullcontext() if dry_run else connection(env)
        with conn as executor:
            runner = MigrationRunner(executor, options)
            for mf in files:
                result = runner.run_migration(mf)
                results.append((mf.path.name, result))
                if stop_on_error and not result.ok:
                    break
    except (ConfigError, MigrationFileError) as exc:
        _fatal(exc)

    errors: list[str] = []
    for name, result in results:
        errors.extend(f"{name}: {e}" if len(files) > 1 else e for e in result.errors)

    _print_summary(
        total=sum(r.total for _, r in results),
        successful=sum(r.successful for _, r in results),
        failed=sum(r.failed for _, r in results),
        errors=errors,
    )
    if errors:
        sys.exit(1)
    if dry_run:
        click.echo("\n-- DRY‑RUN complete (no changes executed)")
    else:
        click.echo("\n✅ Migration completed successfully!")


@main.command()
@click.argument("path", type=click.Path(path_type=pathlib.Path))
def parse(path):
    """Show how a migration file is split, without executing anything."""
    try:
        mf = read_migration(path)
    except MigrationFileError as exc:
        _fatal(exc)

    statements = mf.statements()
    for i, stmt in enumerate(statements, 1):
        click.echo(f"[{i:>3}] {statement_type(stmt):<8} {describe(stmt, 70)}")
    click.echo(f"\n{len(statements)} statements")


@main.command("exec")
@_env_opt
@click.argument("sql")
def exec_cmd(env, sql):
    """Run a single statement and print the JSON result."""
    try:
        with connection(env) as executor:
            res = executor.execute_one(sql)
    except ConfigError as exc:
        _fatal(exc)

    if not res.success:
        click.echo(f"✗ {res.error}", err=True)
        sys.exit(1)
    if isinstance(res.data, str):
        click.echo(res.data)
    else:
        click.echo(json.dumps(res.data, indent=2, default=str))


@main.command()
@_env_opt
@_schema_opt
def tables(env, schema):
    schema = schema or env.schema
    try:
        with connection(env) as executor:
            names = list_tables(executor, schema)
    except ConfigError as exc:
        _fatal(exc)
    for name in names:
        click.echo(f"{schema}.{name}")


@main.command()
@_env_opt
@_schema_opt
@click.argument("table")
def columns(env, schema, table):
    schema = schema or env.schema
    try:
        with connection(env) as executor:
            cols = list_columns(executor, table, schema)
    except ConfigError as exc:
        _fatal(exc)
    if not cols:
        click.echo(f"No columns found for {schema}.{table}", err=True)
        sys.exit(1)
    width = max(len(c["name"]) for c in cols)
    for col in cols:
        click.echo(f"{col['name']:<{width}}  {col['type']}")


@main.command()
@_env_opt
@_schema_opt
@click.argument("table")
def count(env, schema, table):
    schema = schema or env.schema
    try:
        with connection(env) as executor:
            rows = get_row_count(executor, table, schema)
    except ConfigError as exc:
        _fatal(exc)
    if rows < 0:
        click.echo(f"Could not count rows in {schema}.{table}", err=True)
        sys.exit(1)
    click.echo(str(rows))


if __name__ == "__main__":
    main()
