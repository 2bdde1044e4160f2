"""
Interfaces of the driver → connection → statement → result set call chain.

Application code is written against these abstract classes. In production a
real driver (see `snowflake_driver`) implements them; in tests the engine
vends stand-ins that subclass them, so `isinstance` checks in the code under
test keep working.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from types import TracebackType
from typing import Any, Self


class SqlInterface(ABC):
    """Marker base class. Only subclasses of it can be intercepted."""


class Closeable(SqlInterface):
    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def __enter__(self) -> Self: ...

    @abstractmethod
    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...


class Driver(SqlInterface):
    """Entry point registered with a `DriverRegistry`."""

    @abstractmethod
    def connect(
        self,
        url: str,
        properties: Mapping[str, str] | None = None,
    ) -> "Connection | None":
        """Open a connection, or return None if `url` belongs to another driver."""


class Connection(Closeable):
    @abstractmethod
    def create_statement(self) -> "Statement": ...

    @abstractmethod
    def prepare_statement(self, sql: str) -> "PreparedStatement": ...

    @abstractmethod
    def prepare_call(self, sql: str) -> "CallableStatement": ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...

    @abstractmethod
    def set_auto_commit(self, auto_commit: bool) -> None: ...  # noqa: FBT001

    @abstractmethod
    def get_auto_commit(self) -> bool: ...

    @abstractmethod
    def is_closed(self) -> bool: ...


class Statement(Closeable):
    @abstractmethod
    def execute_query(self, sql: str) -> "ResultSet":
        """Run a query and return its rows."""

    @abstractmethod
    def execute_update(self, sql: str) -> int:
        """Run a write statement and return the affected row count."""

    @abstractmethod
    def execute(self, sql: str) -> bool:
        """Run any statement. True when it produced a result set."""

    @abstractmethod
    def get_result_set(self) -> "ResultSet": ...

    @abstractmethod
    def get_update_count(self) -> int: ...

    @abstractmethod
    def set_query_timeout(self, seconds: int) -> None: ...

    @abstractmethod
    def get_connection(self) -> Connection: ...


class PreparedStatement(Statement):
    @abstractmethod
    def set_object(self, index: int, value: object) -> None:
        """Bind the 1-based parameter `index`."""

    @abstractmethod
    def clear_parameters(self) -> None: ...

    @abstractmethod
    def execute_query(self, sql: str | None = None) -> "ResultSet":
        """Run the prepared query. A non-None `sql` replaces the prepared text."""


class CallableStatement(PreparedStatement):
    @abstractmethod
    def register_out_parameter(self, index: int, sql_type: int) -> None: ...

    @abstractmethod
    def get_out_parameter(self, index: int) -> object: ...


class ResultSet(Closeable):
    """Forward-only cursor over the rows of one result."""

    @abstractmethod
    def next(self) -> bool:
        """Advance to the next row. False once the rows are exhausted."""

    @abstractmethod
    def get_value(self, column: str) -> Any: ...

    @abstractmethod
    def get_object(self, column: str) -> object: ...

    @abstractmethod
    def get_string(self, column: str) -> str | None: ...

    @abstractmethod
    def get_int(self, column: str) -> int: ...

    @abstractmethod
    def get_float(self, column: str) -> float: ...

    @abstractmethod
    def get_boolean(self, column: str) -> bool: ...

    @abstractmethod
    def was_null(self) -> bool:
        """True when the last value read was SQL NULL."""

    @abstractmethod
    def get_row(self) -> int:
        """1-based number of the current row, 0 before the first row."""

    @abstractmethod
    def get_statement(self) -> Statement: ...

    @abstractmethod
    def close(self) -> None:
        """Release the rows. Answered by the bound mock object like any other result set call."""


class Category(Enum):
    """The four roles of the call chain.

    Membership is structural: refinements such as `PreparedStatement`
    belong to the category of the interface they refine.
    """

    ENTRY = "entry"
    CONNECTION = "connection"
    STATEMENT = "statement"
    ROW_SOURCE = "row_source"

    @property
    def interface(self) -> type[SqlInterface]:
        return _CATEGORY_INTERFACES[self]

    @classmethod
    def of(cls, tp: Any) -> "Category | None":
        """Return the category `tp` belongs to, or None for any other shape.

        Examples
        --------
        >>> Category.of(PreparedStatement)
        <Category.STATEMENT: 'statement'>
        >>> Category.of(int) is None
        True
        """
        if not isinstance(tp, type):
            return None
        for category, interface in _CATEGORY_INTERFACES.items():
            if issubclass(tp, interface):
                return category
        return None


_CATEGORY_INTERFACES: dict[Category, type[SqlInterface]] = {
    Category.ENTRY: Driver,
    Category.CONNECTION: Connection,
    Category.STATEMENT: Statement,
    Category.ROW_SOURCE: ResultSet,
}
