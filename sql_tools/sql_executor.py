import asyncio
from typing import Dict, Any, List, Optional
import structlog
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine

from agent.utils import make_json_serializable
from sql_tools.sql_validator import SQLValidator

logger = structlog.get_logger()


class QueryExecutionError(Exception):
    """Raised by callers that treat a failed SqlExecutionResult as fatal."""


class SQLExecutor:
    def __init__(
        self,
        engine: AsyncEngine,
        validator: Optional[SQLValidator] = None,
        timeout: int = 30,
        limit: int = 1000
    ):
        self.engine = engine
        self.validator = validator or SQLValidator()
        self.timeout = timeout
        self.limit = limit

    async def execute(self, sql: str) -> Dict[str, Any]:
        """
        Validate and run a read-only query.

        Never raises for validation or database failures; every outcome is a
        tagged result: {"success", "data" | "error", "query"}.
        """
        validation = self.validator.validate(sql)
        if not validation["is_valid"]:
            return {
                "success": False,
                "error": validation["error"],
                "query": sql
            }

        try:
            rows = await asyncio.wait_for(self._fetch(sql), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("Query timed out", timeout=self.timeout, sql_preview=sql[:100])
            return {
                "success": False,
                "error": f"Query timed out after {self.timeout} seconds",
                "query": sql
            }
        except Exception as e:
            error_message = self._error_message(e)
            logger.error("Error executing query", error=error_message, sql_preview=sql[:100])
            return {
                "success": False,
                "error": error_message,
                "query": sql
            }

        logger.info("Query executed", row_count=len(rows), sql_preview=sql[:100])
        return {
            "success": True,
            "data": rows,
            "query": sql
        }

    async def _fetch(self, sql: str) -> List[Dict[str, Any]]:
        # Raw driver SQL: no bind-parameter parsing, the text runs exactly as generated.
        # Connection is never committed, so the read runs inside a rolled-back transaction
        async with self.engine.connect() as conn:
            result = await conn.exec_driver_sql(sql)
            rows = result.mappings().fetchmany(self.limit)
        return [make_json_serializable(dict(row)) for row in rows]

    @staticmethod
    def _error_message(error: Exception) -> str:
        if isinstance(error, DBAPIError) and error.orig is not None:
            return str(error.orig)
        return str(error) or "Unknown error executing query"
