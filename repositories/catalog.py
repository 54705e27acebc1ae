"""
repositories/catalog.py
-----------------------
Maps each CRUD operation of an entity type to the SQL template it runs.
"""

from enum import Enum
from typing import Callable, Mapping

from repositories.exceptions import UnsupportedOperation


class CrudOperation(str, Enum):
    """Logical operations a repository can dispatch."""

    FIND_BY_ID = "FIND_BY_ID"
    SAVE = "SAVE"
    UPDATE = "UPDATE"
    DELETE_ONE = "DELETE_ONE"
    DELETE_MANY = "DELETE_MANY"
    COUNT = "COUNT"

    def __str__(self) -> str:
        return self.value


# Named placeholder every DELETE_MANY template must contain.
IDS_PLACEHOLDER = ":ids"


class OperationCatalog:
    """
    SQL templates for one entity type.

    A statically declared override for an operation always wins; otherwise
    the fallback supplier passed to `resolve` is called. Fallbacks that have
    nothing to offer should raise `UnsupportedOperation` rather than return
    empty text.
    """

    def __init__(self, entity_type: type, overrides: Mapping[CrudOperation, str] | None = None):
        self.entity_type = entity_type
        self._overrides = dict(overrides or {})
        self._resolved: dict[CrudOperation, str] = {}

    def resolve(self, operation: CrudOperation, fallback: Callable[[], str]) -> str:
        """
        Return the template for ``operation``.

        Raises:
            UnsupportedOperation: If neither an override nor the fallback
                provides a template.
        """
        if operation in self._resolved:
            return self._resolved[operation]
        sql = self._overrides.get(operation)
        if sql is None:
            sql = fallback()
        if not sql or not sql.strip():
            raise UnsupportedOperation(self.entity_type, operation)
        self._check(operation, sql)
        self._resolved[operation] = sql
        return sql

    def _check(self, operation: CrudOperation, sql: str) -> None:
        if operation in (CrudOperation.FIND_BY_ID, CrudOperation.DELETE_ONE) and sql.count("?") != 1:
            raise ValueError(
                f"{self.entity_type.__name__} {operation} SQL must hold exactly one '?' parameter"
            )
        if operation is CrudOperation.DELETE_MANY and sql.count(IDS_PLACEHOLDER) != 1:
            raise ValueError(
                f"{self.entity_type.__name__} {operation} SQL must hold one '{IDS_PLACEHOLDER}' placeholder"
            )

