import re
from typing import Dict, Any, Optional
import structlog

logger = structlog.get_logger()


class SQLValidator:
    # Substring match on purpose: a literal or alias mentioning one of these
    # words is rejected too.
    FORBIDDEN_KEYWORDS = [
        'insert', 'update', 'delete', 'drop', 'truncate', 'alter'
    ]

    CODE_FENCE_OPEN = re.compile(r'^\s*```[a-zA-Z]*[ \t]*\n?')
    CODE_FENCE_CLOSE = re.compile(r'\n?[ \t]*```\s*$')

    def validate(self, sql: Optional[str]) -> Dict[str, Any]:
        """
        Check that a generated query is safe to run against the store.

        Rules run in order and the first failure wins:
        empty query, non-SELECT statement, mutating keyword,
        multiple statements, unbalanced quotes.

        Returns:
            {"is_valid": bool, "error": Optional[str]}
        """
        if not sql or not sql.strip():
            return self._invalid("Query is empty")

        stripped = sql.strip()
        lowered = stripped.lower()

        if not lowered.startswith('select'):
            return self._invalid("Only SELECT queries are allowed")

        if any(keyword in lowered for keyword in self.FORBIDDEN_KEYWORDS):
            return self._invalid("Query contains disallowed keywords")

        if ';' in stripped[:-1]:
            return self._invalid("Multiple queries are not allowed")

        if stripped.count("'") % 2 != 0:
            return self._invalid("Unbalanced single quotes in query")

        if stripped.count('"') % 2 != 0:
            return self._invalid("Unbalanced double quotes in query")

        return {"is_valid": True, "error": None}

    def sanitize_sql(self, sql: Optional[str]) -> str:
        """Strip markdown code fences, surrounding whitespace and trailing semicolons."""
        if not sql:
            return ""
        sql = self.CODE_FENCE_OPEN.sub('', sql)
        sql = self.CODE_FENCE_CLOSE.sub('', sql)
        sql = re.sub(r'[;\s]+$', '', sql)
        return sql.strip()

    def _invalid(self, error: str) -> Dict[str, Any]:
        logger.warning("SQL validation failed", error=error)
        return {"is_valid": False, "error": error}
