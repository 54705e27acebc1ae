"""
models/address.py
-----------------
Value object for postal addresses owned by a person.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Region(str, Enum):
    """Named geographic regions an address can belong to."""

    NORTH = "NORTH"
    SOUTH = "SOUTH"
    EAST = "EAST"
    WEST = "WEST"

    @classmethod
    def parse(cls, value: str) -> "Region":
        """Look up a region by name, ignoring case."""
        return cls[value.strip().upper()]


@dataclass(frozen=True)
class Address:
    """
    An immutable postal address.

    Attributes:
        street_address: First street line.
        address2: Optional second line (apartment, suite).
        city: City name.
        state: State or province code.
        postcode: Postal code.
        country: Country name.
        county: County name.
        region: Geographic region.
        id: Database primary key (None until saved). Saving returns a keyed
            copy; the key takes no part in equality or hashing.
    """
    street_address: str
    address2: Optional[str]
    city: str
    state: str
    postcode: str
    country: str
    county: str
    region: Region
    id: Optional[int] = field(default=None, compare=False)
