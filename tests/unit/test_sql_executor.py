"""Tests for the SQL executor against an in-memory store."""

import asyncio
from unittest.mock import MagicMock

from sql_tools.sql_executor import SQLExecutor


async def test_select_returns_rows(executor):
    result = await executor.execute("SELECT id, name FROM customer ORDER BY id")

    assert result["success"]
    assert result["data"] == [
        {"id": 1, "name": "Alice Smith"},
        {"id": 2, "name": "Bob Jones"}
    ]
    assert result["query"] == "SELECT id, name FROM customer ORDER BY id"


async def test_empty_result(executor):
    result = await executor.execute("SELECT id FROM customer WHERE id = 999")
    assert result == {"success": True, "data": [], "query": "SELECT id FROM customer WHERE id = 999"}


async def test_large_integer_becomes_string(executor):
    result = await executor.execute("SELECT 9007199254740993 AS big, 42 AS small")

    assert result["success"]
    assert result["data"] == [{"big": "9007199254740993", "small": 42}]


async def test_colon_in_literal_is_not_a_bind_parameter(executor):
    result = await executor.execute("SELECT 'meet at :noon' AS note, '10:30' AS t")

    assert result["success"]
    assert result["data"] == [{"note": "meet at :noon", "t": "10:30"}]


async def test_backslash_colon_in_literal_is_kept(executor):
    result = await executor.execute("SELECT 'a\\:b' AS x, '\\:c' AS y")

    assert result["success"]
    assert result["data"] == [{"x": "a\\:b", "y": "\\:c"}]


async def test_missing_table_reports_store_message(executor):
    result = await executor.execute("SELECT * FROM missing_table")

    assert not result["success"]
    assert "no such table: missing_table" in result["error"]
    assert result["query"] == "SELECT * FROM missing_table"


async def test_validation_failure_never_touches_store():
    engine = MagicMock()
    executor = SQLExecutor(engine)

    result = await executor.execute("DELETE FROM customer")

    assert result == {
        "success": False,
        "error": "Only SELECT queries are allowed",
        "query": "DELETE FROM customer"
    }
    engine.connect.assert_not_called()


async def test_row_limit(engine):
    executor = SQLExecutor(engine, limit=1)
    result = await executor.execute("SELECT id FROM customer ORDER BY id")

    assert result["data"] == [{"id": 1}]


async def test_timeout(engine):
    executor = SQLExecutor(engine, timeout=0.05)

    async def slow_fetch(sql):
        await asyncio.sleep(1)
        return []

    executor._fetch = slow_fetch
    result = await executor.execute("SELECT 1")

    assert not result["success"]
    assert result["error"] == "Query timed out after 0.05 seconds"


async def test_read_does_not_modify_store(executor):
    before = await executor.execute("SELECT COUNT(*) AS n FROM customer")
    await executor.execute("SELECT * FROM customer")
    after = await executor.execute("SELECT COUNT(*) AS n FROM customer")

    assert before["data"] == after["data"] == [{"n": 2}]
