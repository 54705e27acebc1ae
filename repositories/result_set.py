"""
repositories/result_set.py
--------------------------
A forward-only cursor over query rows with access by column name, so
extractors can read aliased join columns regardless of the driver.
"""

from typing import Any, Optional


class ResultSet:
    """
    Wraps a DB-API cursor that has just executed a query.

    Column names are matched case-insensitively: PostgreSQL folds unquoted
    aliases to lower case while SQLite keeps them as written.
    """

    def __init__(self, cursor):
        self._cursor = cursor
        self._columns = {
            column[0].upper(): index
            for index, column in enumerate(cursor.description or ())
        }
        self._row: Optional[tuple] = None

    def next(self) -> bool:
        """Advance to the next row. Returns False once the rows run out."""
        self._row = self._cursor.fetchone()
        return self._row is not None

    def get(self, column: str) -> Any:
        """Value of ``column`` in the current row (None for SQL NULL)."""
        if self._row is None:
            raise LookupError("ResultSet is not positioned on a row")
        try:
            index = self._columns[column.upper()]
        except KeyError:
            raise KeyError(f"Column {column!r} not in result set") from None
        return self._row[index]

    def is_null(self, column: str) -> bool:
        return self.get(column) is None
