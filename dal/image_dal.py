"""Async Data Access Layer for image metadata records.

Provides ImageDAL class with the upsert/get operations of a table-style
key/value store on top of `utils.database_init.AsyncDatabaseInitializer`.
"""

from __future__ import annotations

import time
from typing import Optional

from models.image_record import ImageRecord
from utils.database_init import AsyncDatabaseInitializer


class ImageDAL:
    """Data access layer for image records.

    Every record is one entity keyed by (id, id): there is a single logical
    collection, so the partition key and the row key are the same value.
    The table is created on demand before each operation.
    """

    _COLUMNS = (
        "PartitionKey",
        "RowKey",
        "ImageUri",
        "DetailedPrompt",
        "OriginalPrompt",
    )
    _COLUMN_LIST = ", ".join(_COLUMNS)

    def __init__(self, db_initializer: AsyncDatabaseInitializer, table_name: str = "images") -> None:
        self._db = db_initializer
        self.table_name = table_name

    async def upsert(self, record: ImageRecord) -> None:
        """Insert the record, replacing any entity already stored under its id."""
        entity = record.to_entity()

        async with self._db.connection() as conn:
            await self._db.ensure_table(conn, self.table_name)
            await conn.execute(
                f"INSERT OR REPLACE INTO {self.table_name} ({self._COLUMN_LIST}, Timestamp) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                tuple(entity[col] for col in self._COLUMNS) + (int(time.time()),),
            )
            await conn.commit()

    async def get(self, image_id: str) -> Optional[ImageRecord]:
        """Return the ImageRecord stored for `image_id`, or None if not found."""
        async with self._db.connection() as conn:
            await self._db.ensure_table(conn, self.table_name)
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM {self.table_name} "
                "WHERE PartitionKey = ? AND RowKey = ?",
                (image_id, image_id),
            )
            row = await cur.fetchone()
            return ImageRecord.from_entity(dict(zip(self._COLUMNS, row))) if row else None
