"""Unit tests for dal.image_dal.ImageDAL and the database initializer."""

import pytest

from dal.image_dal import ImageDAL
from models.image_record import ImageRecord
from utils.database_init import AsyncDatabaseInitializer


def make_record(image_id: str, prompt: str = "a cat") -> ImageRecord:
    return ImageRecord(
        id=image_id,
        image_uri=f"https://store.example.com/images/{image_id}.png",
        detailed_prompt=f"prefix {prompt}",
        original_prompt=prompt,
    )


class TestImageDAL:
    async def test_get_missing_returns_none(self, db_initializer):
        dal = ImageDAL(db_initializer)

        assert await dal.get("does-not-exist") is None

    async def test_upsert_then_get(self, db_initializer):
        dal = ImageDAL(db_initializer)
        record = make_record("id-1")

        await dal.upsert(record)

        assert await dal.get("id-1") == record

    async def test_upsert_overwrites(self, db_initializer):
        dal = ImageDAL(db_initializer)

        await dal.upsert(make_record("id-1", "first"))
        await dal.upsert(make_record("id-1", "second"))

        stored = await dal.get("id-1")
        assert stored.original_prompt == "second"

    async def test_rows_are_keyed_by_id_twice(self, db_initializer):
        dal = ImageDAL(db_initializer)
        await dal.upsert(make_record("id-1"))

        async with db_initializer.connection() as conn:
            cur = await conn.execute("SELECT PartitionKey, RowKey FROM images")
            rows = await cur.fetchall()

        assert rows == [("id-1", "id-1")]

    async def test_tables_are_independent(self, db_initializer):
        images = ImageDAL(db_initializer, table_name="images")
        archive = ImageDAL(db_initializer, table_name="archive")

        await images.upsert(make_record("id-1"))

        assert await archive.get("id-1") is None

    async def test_records_survive_new_initializer(self, test_config):
        await ImageDAL(AsyncDatabaseInitializer(test_config.database_dir)).upsert(make_record("id-1"))

        reopened = ImageDAL(AsyncDatabaseInitializer(test_config.database_dir))

        assert await reopened.get("id-1") == make_record("id-1")


class TestDatabaseInitializer:
    def test_creates_directory(self, temp_dir):
        initializer = AsyncDatabaseInitializer(temp_dir / "nested" / "db")

        assert initializer.db_dir.is_dir()
        assert initializer.db_path == temp_dir / "nested" / "db" / "app.db"

    def test_rejects_file_path(self, temp_dir):
        path = temp_dir / "not-a-dir"
        path.write_text("x")

        with pytest.raises(RuntimeError):
            AsyncDatabaseInitializer(path)

    async def test_ensure_table_rejects_unsafe_names(self, db_initializer):
        async with db_initializer.connection() as conn:
            with pytest.raises(ValueError):
                await db_initializer.ensure_table(conn, "images; DROP TABLE x")

    async def test_ensure_table_is_idempotent(self, db_initializer):
        async with db_initializer.connection() as conn:
            await db_initializer.ensure_table(conn, "images")
            await db_initializer.ensure_table(conn, "images")
            cur = await conn.execute(
                "SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name='images'"
            )
            (count,) = await cur.fetchone()

        assert count == 1
