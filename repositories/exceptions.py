"""
repositories/exceptions.py
--------------------------
Errors raised by the repository layer. Driver errors are never swallowed:
they are wrapped in one of these and chained with ``raise ... from``.
"""

from typing import Any


class PersistenceError(Exception):
    """Base class for every repository error."""


class SaveFailure(PersistenceError):
    """The insert or the generated-key lookup failed for an entity."""

    def __init__(self, entity: Any, reason: str = "insert failed"):
        self.entity = entity
        super().__init__(f"Failed to save entity ({reason}): {entity}")


class MissingIdentity(PersistenceError):
    """An entity type has no usable primary-key field."""

    def __init__(self, entity_type: type, detail: str = "no identity field designated"):
        self.entity_type = entity_type
        super().__init__(f"{entity_type.__name__}: {detail}")


class UnsupportedOperation(PersistenceError):
    """No SQL template exists for an operation on an entity type."""

    def __init__(self, entity_type: type, operation: Any):
        self.entity_type = entity_type
        self.operation = operation
        super().__init__(
            f"Operation {operation} is not supported for {entity_type.__name__}"
        )


class StoreFailure(PersistenceError):
    """Any other failure reported by the database driver."""

    def __init__(self, operation: Any, detail: str = ""):
        self.operation = operation
        message = f"Store call failed during {operation}"
        super().__init__(f"{message}: {detail}" if detail else message)
