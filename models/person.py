"""
models/person.py
----------------
Domain model for people, their addresses and their family links.
"""

import weakref
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from models.address import Address


@dataclass(eq=False)
class Person:
    """
    A person with optional addresses, a spouse reference and children.

    Attributes:
        first_name: Given name.
        last_name: Family name.
        dob: Date of birth, timezone-aware. None only when read from a row
            whose DOB is NULL.
        id: Database primary key (None for new records).
        salary: Exact decimal salary.
        email: Optional email address.
        home_address: Optional home address, saved along with the person.
        business_address: Optional business address, saved along with the person.
        spouse_id: Key of an already saved spouse, if any.
        children: Children owned by this person for persistence.

    Two people are equal when first name, last name and id match.
    """
    first_name: str
    last_name: str
    dob: Optional[datetime]
    id: Optional[int] = None
    salary: Decimal = field(default_factory=lambda: Decimal("0"))
    email: Optional[str] = None
    home_address: Optional[Address] = None
    business_address: Optional[Address] = None
    spouse_id: Optional[int] = None
    children: set["Person"] = field(default_factory=set, repr=False)
    _parent: Optional[weakref.ref] = field(default=None, init=False, repr=False)

    @property
    def parent(self) -> Optional["Person"]:
        """The parent this person was added to, if it is still alive."""
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, parent: Optional["Person"]) -> None:
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def parent_id(self) -> Optional[int]:
        """Key of the parent, or None if there is no saved parent."""
        parent = self.parent
        return parent.id if parent is not None else None

    def add_child(self, child: "Person") -> None:
        """Attach a child and point its parent back-reference here."""
        self.children.add(child)
        child.parent = self

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Person):
            return NotImplemented
        return (self.first_name, self.last_name, self.id) == (
            other.first_name, other.last_name, other.id,
        )

    def __hash__(self) -> int:
        return hash((self.first_name, self.last_name, self.id))

    def __str__(self) -> str:
        dob = self.dob.isoformat() if self.dob is not None else None
        return (
            f"Person(first_name={self.first_name!r}, last_name={self.last_name!r}, "
            f"dob={dob}, id={self.id})"
        )
