"""Apply `database/schema.sql` and `database/seed.sql` to the configured server."""
from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterator

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

# The target database comes from settings, not from the file.
_DB_DIRECTIVES = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")
# Quoted literals (with backslash escapes) or a bare statement separator.
_TOKENS = re.compile(r"'(?:\\.|[^'\\])*'|\"(?:\\.|[^\"\\])*\"|;")


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Yield statements split on ';' outside of quoted literals."""
    start = 0
    for m in _TOKENS.finditer(sql):
        if m.group() != ";":
            continue
        stmt = sql[start : m.start()].strip()
        start = m.end()
        if stmt:
            yield stmt

    tail = sql[start:].strip()
    if tail:
        yield tail


def _prepare(sql: str) -> str:
    return _LINE_COMMENT.sub("", _DB_DIRECTIVES.sub("", sql))


def _connection(db_config: dict, *, with_database: bool = True):
    return closing(DatabaseConnection(DBConfig.from_dict(db_config)).connect(with_database=with_database))


def ensure_database_exists(db_config: dict) -> None:
    name = DBConfig.from_dict(db_config).database
    with _connection(db_config, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()


def _run_file(db_config: dict, path: Path) -> int:
    statements = list(iter_sql_statements(_prepare(path.read_text(encoding="utf-8"))))
    with _connection(db_config) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    return len(statements)


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_file(db_config, Path(schema_path))
    logger.info("Applied %s (%d statements)", schema_path, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_file(db_config, Path(seed_path))
    logger.info("Applied %s (%d statements)", seed_path, count)


def list_tables(db_config: dict) -> list[str]:
    with _connection(db_config) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
