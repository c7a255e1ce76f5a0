from __future__ import annotations
import re
import pathlib
from foliodb.utils import split_sql

_MIGR_RE = re.compile(r"^(\d+)_(.+?)\.sql$", re.IGNORECASE)


class MigrationFileError(RuntimeError):
    """The migration path does not point to a readable SQL file."""


class MigrationFile:
    """Representation of one migration SQL file on disk."""

    def __init__(self, path: pathlib.Path) -> None:
        self.path: pathlib.Path = path
        if not path.is_file():
            raise MigrationFileError(f"File not found: {path}")
        try:
            self.sql: str = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise MigrationFileError(f"Could not read {path}: {exc}") from exc

        m = _MIGR_RE.match(path.name)
        self.version: str | None = m.group(1) if m else None
        self.description: str = m.group(2) if m else path.stem

    @property
    def size_kb(self) -> float:
        return len(self.sql) / 1024

    def statements(self) -> list[str]:
        return split_sql(self.sql)

    def ordering_key(self) -> tuple[int, int, str]:
        if self.version is None:
            return (1, 0, self.path.name)
        return (0, int(self.version), self.path.name)


def read_migration(path: pathlib.Path | str) -> MigrationFile:
    path = pathlib.Path(path)
    if not path.is_absolute():
        path = pathlib.Path.cwd() / path
    return MigrationFile(path)


def discover(migrations_dir: pathlib.Path) -> list[MigrationFile]:
    """
    Return **sorted** list of ``MigrationFile`` objects found in *migrations_dir*.

    Numbered files (``001_initial_schema.sql``) sort by their number, the
    rest by name after them.
    """
    if not migrations_dir.is_dir():
        raise MigrationFileError(f"Directory not found: {migrations_dir}")

    items = [
        MigrationFile(p)
        for p in migrations_dir.iterdir()
        if p.is_file() and p.suffix.lower() == ".sql"
    ]
    return sorted(items, key=lambda m: m.ordering_key())
