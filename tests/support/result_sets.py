from typing import Any


class MockNameResultSet:
    """One row whose every column reads "mockName"."""

    def __init__(self) -> None:
        self._rows_left = 1

    def next(self) -> bool:
        if self._rows_left > 0:
            self._rows_left -= 1
            return True
        return False

    def get_value(self, column: str) -> Any:  # noqa: ARG002
        return "mockName"


class RowsResultSet:
    """Serve a fixed list of rows, tracking NULL reads like a real result set."""

    def __init__(self, rows: list[dict[str, Any]], label: str = "rows") -> None:
        self.rows = rows
        self.label = label
        self.requested_columns: list[str] = []
        self._index = -1
        self._was_null = False

    def __repr__(self) -> str:
        return f"RowsResultSet({self.label})"

    def next(self) -> bool:
        self._index += 1
        return self._index < len(self.rows)

    def get_value(self, column: str) -> Any:
        self.requested_columns.append(column)
        value = self.rows[self._index][column]
        self._was_null = value is None
        return value

    def get_string(self, column: str) -> str | None:
        value = self.get_value(column)
        return None if value is None else str(value)

    def get_int(self, column: str) -> int:
        value = self.get_value(column)
        return 0 if value is None else int(value)

    def was_null(self) -> bool:
        return self._was_null


class FailingResultSet:
    """A mock whose data call fails the way a broken fixture would."""

    def next(self) -> bool:
        raise LookupError("fixture has no rows")


class ClosingResultSet:
    """An empty result set that notices when the code under test releases it."""

    def __init__(self) -> None:
        self.closed = False

    def next(self) -> bool:
        return False

    def close(self) -> None:
        self.closed = True


class UntypedResultSet:
    """Parameters left unannotated register as Any and match no interface method."""

    def get_value(self, column):  # noqa: ANN001, ANN201
        return column
