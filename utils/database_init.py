import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

TABLE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9]{2,62}$")


class AsyncDatabaseInitializer:
    """
    Manage the async SQLite database backing the metadata tables.

    - The database file is located at: <db_dir>/app.db
    - The directory is created if missing. A RuntimeError is raised if the
      path points to a file or cannot be created.
    - Existing data is kept across restarts; tables are created on demand
      with `ensure_table()`.
    """

    def __init__(self, db_dir: Path | str) -> None:
        db_dir = Path(db_dir).expanduser()

        if db_dir.exists() and not db_dir.is_dir():
            raise RuntimeError(
                f"Database directory {db_dir} points to a file, not a directory."
            )

        try:
            db_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RuntimeError(
                f"Failed to create or access database directory at {db_dir}"
            ) from exc

        self.db_dir = db_dir
        self.db_path = self.db_dir / "app.db"

    @staticmethod
    async def ensure_table(conn: aiosqlite.Connection, table_name: str) -> None:
        """
        Create a key/value entity table if it does not exist yet.

        Rows are addressed by the composite (PartitionKey, RowKey) key and
        carry the image record columns.
        """
        if not TABLE_NAME_RE.match(table_name):
            raise ValueError(f"Invalid table name: {table_name!r}")

        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {table_name} (
                PartitionKey TEXT NOT NULL,
                RowKey TEXT NOT NULL,
                ImageUri TEXT NOT NULL,
                DetailedPrompt TEXT NOT NULL,
                OriginalPrompt TEXT NOT NULL,
                Timestamp INTEGER NOT NULL,
                PRIMARY KEY (PartitionKey, RowKey)
            )
            """
        )
        await conn.commit()

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Async context manager yielding an `aiosqlite.Connection`.
        """
        conn = await aiosqlite.connect(self.db_path)
        try:
            yield conn
        finally:
            await conn.close()
