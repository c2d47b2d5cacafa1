from __future__ import annotations

import sqlite3
from pathlib import Path

MEMORY_DB = ":memory:"
MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def connect_db(db_path: Path | str) -> sqlite3.Connection:
    if str(db_path) != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(str(db_path))
    connection.row_factory = sqlite3.Row
    # Без этого ON DELETE CASCADE для order_items не срабатывает
    connection.execute("PRAGMA foreign_keys = ON")
    return connection


def applied_migrations(connection: sqlite3.Connection) -> set[str]:
    with connection:
        connection.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                filename TEXT PRIMARY KEY,
                applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
    return {row["filename"] for row in connection.execute("SELECT filename FROM schema_migrations")}


def pending_migrations(connection: sqlite3.Connection, migrations_dir: Path = MIGRATIONS_DIR) -> list[Path]:
    done = applied_migrations(connection)
    return [path for path in sorted(migrations_dir.glob("*.sql")) if path.name not in done]


def apply_migrations(connection: sqlite3.Connection, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    executed: list[str] = []
    for migration_file in pending_migrations(connection, migrations_dir):
        # executescript сам делает COMMIT перед запуском, отметку пишем отдельной транзакцией
        connection.executescript(migration_file.read_text(encoding="utf-8"))
        with connection:
            connection.execute(
                "INSERT INTO schema_migrations (filename) VALUES (?)",
                (migration_file.name,),
            )
        executed.append(migration_file.name)
    return executed
