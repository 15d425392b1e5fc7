from .sql_validator import SQLValidator
from .sql_executor import SQLExecutor, QueryExecutionError

__all__ = [
    "SQLValidator",
    "SQLExecutor",
    "QueryExecutionError"
]
