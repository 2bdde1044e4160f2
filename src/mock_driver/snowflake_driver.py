"""
Snowflake implementation of the driver interfaces.

This is the driver application code talks to in production, and the one the
mock engine substitutes in tests::

    driver_manager.register(SnowflakeDriver(settings.snowflake))
    with driver_manager.get_connection("snowflake://acme?warehouse=WH") as conn:
        ...
"""

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Self
from urllib.parse import parse_qsl, urlsplit

from snowflake.connector import (
    DictCursor,
    NotSupportedError,
    ProgrammingError,
    SnowflakeConnection,
)
from snowflake.connector.cursor import SnowflakeCursor

from .interfaces import (
    CallableStatement,
    Connection,
    Driver,
    PreparedStatement,
    ResultSet,
    Statement,
)
from .settings import SnowflakeSettings
from .sql_analyzer import SQLWriteDetector

logger = logging.getLogger(__name__)

URL_SCHEME = "snowflake"

# see: https://docs.snowflake.com/en/developer-guide/python-connector/python-connector-example#using-cursor-to-fetch-values
QUERY_TIMEOUT_ERRNO = 604

# URL query parameters passed through to the connector.
URL_PARAMETERS = frozenset({"warehouse", "role", "database", "schema", "user", "authenticator"})


class SnowflakeDriver(Driver):
    """Answer ``snowflake://<account>[?warehouse=..&role=..]`` URLs."""

    def __init__(self, settings: SnowflakeSettings | None = None) -> None:
        self.settings = settings

    def connect(
        self,
        url: str,
        properties: Mapping[str, str] | None = None,
    ) -> "SnowflakeConnectionAdapter | None":
        parsed = urlsplit(url)
        if parsed.scheme != URL_SCHEME:
            return None

        conn_params = self.connection_params(url, properties)
        logger.info(f"Connecting to Snowflake account {conn_params['account']}")
        return SnowflakeConnectionAdapter(
            SnowflakeConnection(
                connection_name=None,
                connections_file_path=None,
                **conn_params,
            )
        )

    def connection_params(
        self,
        url: str,
        properties: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Merge settings, URL and properties, later sources winning.

        Raises
        ------
        ValueError
            If no account is given by the URL or the settings.
        """
        conn_params: dict[str, Any] = {}
        if self.settings is not None:
            conn_params |= {
                "account": self.settings.account,
                "user": self.settings.user,
                "password": self.settings.password.get_secret_value(),
                "warehouse": self.settings.warehouse,
                "role": self.settings.role,
                "authenticator": self.settings.authenticator,
            }

        parsed = urlsplit(url)
        if parsed.hostname:
            conn_params["account"] = parsed.hostname
        conn_params |= {key: value for key, value in parse_qsl(parsed.query) if key in URL_PARAMETERS}
        conn_params |= dict(properties or {})

        if not conn_params.get("account"):
            raise ValueError(f"No Snowflake account in {url!r} or settings")
        return conn_params


class SnowflakeConnectionAdapter(Connection):
    def __init__(self, conn: SnowflakeConnection) -> None:
        self.raw = conn
        self._auto_commit = True

    def create_statement(self) -> "SnowflakeStatement":
        return SnowflakeStatement(self)

    def prepare_statement(self, sql: str) -> "SnowflakePreparedStatement":
        return SnowflakePreparedStatement(self, sql)

    def prepare_call(self, sql: str) -> CallableStatement:
        raise NotSupportedError(f"Stored procedure calls are not supported: {sql}")

    def commit(self) -> None:
        self.raw.commit()

    def rollback(self) -> None:
        self.raw.rollback()

    def set_auto_commit(self, auto_commit: bool) -> None:  # noqa: FBT001
        self.raw.autocommit(auto_commit)
        self._auto_commit = auto_commit

    def get_auto_commit(self) -> bool:
        return self._auto_commit

    def is_closed(self) -> bool:
        return self.raw.is_closed()

    def close(self) -> None:
        self.raw.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class SnowflakeStatement(Statement):
    def __init__(self, connection: SnowflakeConnectionAdapter) -> None:
        self._connection = connection
        self._cursor: SnowflakeCursor | None = None
        self._timeout_seconds: int | None = None
        self._result_set: SnowflakeResultSet | None = None
        self._update_count = -1
        self._detector = SQLWriteDetector()

    def _run(self, sql: str, params: list[object] | None = None) -> SnowflakeCursor:
        if self._cursor is None:
            self._cursor = self._connection.raw.cursor(DictCursor)
        self._result_set = None
        self._update_count = -1
        try:
            _ = self._cursor.execute(sql, params, timeout=self._timeout_seconds)
        except ProgrammingError as e:
            if e.errno == QUERY_TIMEOUT_ERRNO:
                logger.exception(f"Query execution timed out after {self._timeout_seconds} seconds")
                raise TimeoutError(f"Query execution timed out after {self._timeout_seconds} seconds") from e
            logger.exception("Query execution error")
            raise
        return self._cursor

    def _query(self, sql: str, params: list[object] | None = None) -> "SnowflakeResultSet":
        if self._detector.is_write_sql(sql):
            raise ProgrammingError("execute_query cannot run a statement that writes; use execute_update")
        self._result_set = SnowflakeResultSet(self, self._run(sql, params))
        return self._result_set

    def _update(self, sql: str, params: list[object] | None = None) -> int:
        if not self._detector.is_write_sql(sql):
            raise ProgrammingError("execute_update cannot run a query; use execute_query")
        cursor = self._run(sql, params)
        self._update_count = cursor.rowcount or 0
        return self._update_count

    def execute_query(self, sql: str) -> "SnowflakeResultSet":
        return self._query(sql)

    def execute_update(self, sql: str) -> int:
        return self._update(sql)

    def execute(self, sql: str) -> bool:
        if self._detector.is_write_sql(sql):
            _ = self.execute_update(sql)
            return False
        _ = self.execute_query(sql)
        return True

    def get_result_set(self) -> "SnowflakeResultSet | None":
        return self._result_set

    def get_update_count(self) -> int:
        return self._update_count

    def set_query_timeout(self, seconds: int) -> None:
        if seconds < 0:
            raise ValueError("Query timeout must not be negative")
        self._timeout_seconds = seconds or None

    def get_connection(self) -> SnowflakeConnectionAdapter:
        return self._connection

    def close(self) -> None:
        if self._cursor is not None:
            _ = self._cursor.close()
            self._cursor = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class SnowflakePreparedStatement(SnowflakeStatement, PreparedStatement):
    def __init__(self, connection: SnowflakeConnectionAdapter, sql: str) -> None:
        super().__init__(connection)
        self.sql = sql
        self._parameters: dict[int, object] = {}

    def set_object(self, index: int, value: object) -> None:
        if index < 1:
            raise ProgrammingError(f"Parameter index must start at 1, got {index}")
        self._parameters[index] = value

    def clear_parameters(self) -> None:
        self._parameters.clear()

    def _bound_parameters(self) -> list[object]:
        missing = [i for i in range(1, max(self._parameters, default=0) + 1) if i not in self._parameters]
        if missing:
            raise ProgrammingError(f"Parameters not set: {missing}")
        return [self._parameters[i] for i in sorted(self._parameters)]

    def execute_query(self, sql: str | None = None) -> "SnowflakeResultSet":
        return self._query(sql if sql is not None else self.sql, self._bound_parameters())

    def execute_update(self, sql: str | None = None) -> int:
        return self._update(sql if sql is not None else self.sql, self._bound_parameters())


class SnowflakeResultSet(ResultSet):
    """Stream the rows of a `DictCursor` one at a time."""

    def __init__(self, statement: SnowflakeStatement, cursor: SnowflakeCursor) -> None:
        self._statement = statement
        self._cursor = cursor
        self._row: dict[str, Any] | None = None
        self._row_number = 0
        self._was_null = False
        self._closed = False

    def next(self) -> bool:
        if self._closed:
            raise ProgrammingError("Result set is closed")
        row = self._cursor.fetchone()
        if row is None:
            self._row = None
            return False
        self._row = dict(row)
        self._row_number += 1
        return True

    def get_value(self, column: str) -> Any:
        if self._row is None:
            raise ProgrammingError("No current row; call next() first")
        # Snowflake reports unquoted identifiers in upper case.
        for key in (column, column.upper()):
            if key in self._row:
                value = self._row[key]
                self._was_null = value is None
                return value
        raise ProgrammingError(f"Unknown column: {column}")

    def get_object(self, column: str) -> object:
        return self.get_value(column)

    def get_string(self, column: str) -> str | None:
        value = self.get_value(column)
        return None if value is None else str(value)

    def get_int(self, column: str) -> int:
        value = self.get_value(column)
        return 0 if value is None else int(value)

    def get_float(self, column: str) -> float:
        value = self.get_value(column)
        return 0.0 if value is None else float(value)

    def get_boolean(self, column: str) -> bool:
        value = self.get_value(column)
        return False if value is None else bool(value)

    def was_null(self) -> bool:
        return self._was_null

    def get_row(self) -> int:
        return self._row_number if self._row is not None else 0

    def get_statement(self) -> SnowflakeStatement:
        return self._statement

    def close(self) -> None:
        self._closed = True
        self._row = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
