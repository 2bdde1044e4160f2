"""Classification of SQL text into reads and writes.

Statements decide with it whether `execute` produces a result set and
reject `execute_query` / `execute_update` calls of the wrong kind.
"""

from typing import ClassVar

import sqlparse
import sqlparse.sql


class SQLAnalysisError(Exception):
    """SQL text could not be classified."""


class SQLWriteDetector:
    """Detect SQL that writes, including Snowflake-only statements.

    Anything that is not recognisably a read counts as a write.
    """

    WRITE_TYPES: ClassVar[frozenset[str]] = frozenset(
        {"INSERT", "UPDATE", "DELETE", "CREATE", "DROP", "ALTER", "TRUNCATE", "MERGE"}
    )

    # Used when sqlparse reports the statement type as UNKNOWN.
    WRITE_KEYWORDS: ClassVar[frozenset[str]] = WRITE_TYPES | {"COPY", "GRANT", "REVOKE", "PUT", "REMOVE"}
    READ_KEYWORDS: ClassVar[frozenset[str]] = frozenset({"SELECT", "WITH", "SHOW", "DESCRIBE", "DESC", "EXPLAIN", "LIST"})

    def is_write_sql(self, sql: str) -> bool:
        """True if any statement in `sql` writes.

        Raises
        ------
        SQLAnalysisError
            If `sql` is blank or cannot be parsed.
        """
        if not sql or not sql.strip():
            raise SQLAnalysisError("Empty SQL statement")

        try:
            statements = sqlparse.parse(sql)
        except Exception as e:
            raise SQLAnalysisError(f"SQL parsing error: {e!s}") from e

        if not statements:
            raise SQLAnalysisError("Failed to parse SQL")
        return any(self._is_write_statement(statement) for statement in statements)

    def _is_write_statement(self, statement: sqlparse.sql.Statement) -> bool:
        stmt_type = statement.get_type()
        if stmt_type == "SELECT":
            return False
        if stmt_type in self.WRITE_TYPES:
            return True

        first_token = statement.token_first(skip_cm=True)
        if first_token is None:
            return True
        keyword = first_token.value.upper()
        if keyword in self.WRITE_KEYWORDS:
            return True
        return keyword not in self.READ_KEYWORDS
