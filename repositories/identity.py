"""
repositories/identity.py
------------------------
Reads and writes the primary key of an entity without requiring the entity
to implement any particular interface.
"""

import dataclasses
from typing import Any, Callable, Generic, Optional, TypeVar

from repositories.exceptions import MissingIdentity

T = TypeVar("T")


class IdentityAccessor(Generic[T]):
    """
    A getter/setter pair for the single primary-key field of an entity type.

    Immutable entity types get a ``replacer`` instead of a setter: it returns
    a keyed copy and leaves the original untouched.

    An accessor built without a getter, or with neither setter nor replacer,
    represents a type with no designated key: `get`, `set` and `keyed` then
    raise `MissingIdentity`.
    """

    def __init__(
        self,
        entity_type: type,
        getter: Optional[Callable[[T], Optional[int]]] = None,
        setter: Optional[Callable[[T, int], None]] = None,
        replacer: Optional[Callable[[T, int], T]] = None,
    ):
        self.entity_type = entity_type
        self._getter = getter
        self._setter = setter
        self._replacer = replacer

    @classmethod
    def for_field(cls, entity_type: type, field_name: str = "id") -> "IdentityAccessor":
        """
        Accessor for a plain attribute. Frozen dataclasses are keyed by
        copy through `dataclasses.replace`.
        """
        def _get(entity: Any) -> Optional[int]:
            try:
                return getattr(entity, field_name)
            except AttributeError as e:
                raise MissingIdentity(entity_type, f"no attribute {field_name!r}") from e

        def _set(entity: Any, key: int) -> None:
            if not hasattr(entity, field_name):
                raise MissingIdentity(entity_type, f"no attribute {field_name!r}")
            setattr(entity, field_name, key)

        if dataclasses.is_dataclass(entity_type) and entity_type.__dataclass_params__.frozen:
            if field_name not in {f.name for f in dataclasses.fields(entity_type)}:
                return cls(entity_type, _get)

            def _replace(entity: Any, key: int) -> Any:
                return dataclasses.replace(entity, **{field_name: key})

            return cls(entity_type, _get, replacer=_replace)
        return cls(entity_type, _get, _set)

    @property
    def designated(self) -> bool:
        return self._getter is not None and (
            self._setter is not None or self._replacer is not None
        )

    def peek(self, entity: T) -> Optional[int]:
        """The entity's key, or None if it has not been saved."""
        if not self.designated:
            raise MissingIdentity(self.entity_type)
        return self._getter(entity)

    def get(self, entity: T) -> int:
        """
        Read the key of a saved entity.

        Raises:
            MissingIdentity: If no key field is designated or the key is unset.
        """
        key = self.peek(entity)
        if key is None:
            raise MissingIdentity(self.entity_type, f"entity has no key yet: {entity}")
        return key

    def set(self, entity: T, key: int) -> None:
        """
        Write the key in place.

        Raises:
            MissingIdentity: If no key field is designated.
            TypeError: If the entity type is immutable; use `keyed`.
        """
        if not self.designated:
            raise MissingIdentity(self.entity_type)
        if self._setter is None:
            raise TypeError(f"{self.entity_type.__name__} is immutable, its key is assigned by copy")
        self._setter(entity, key)

    def keyed(self, entity: T, key: int) -> T:
        """Return the entity carrying ``key``: the same object, or a copy if immutable."""
        if self._replacer is not None:
            return self._replacer(entity, key)
        self.set(entity, key)
        return entity
