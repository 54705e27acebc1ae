"""
repositories/people_repo.py
---------------------------
Data access layer for people.

A person is saved together with its addresses and children, and found
again from a single join that returns one row per child.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Sequence

from models.address import Address, Region
from models.person import Person
from repositories.address_repo import AddressRepository
from repositories.catalog import CrudOperation
from repositories.crud_repo import CrudRepository
from repositories.identity import IdentityAccessor
from repositories.result_set import ResultSet
from utils.logger import get_logger

logger = get_logger(__name__)


SAVE_PERSON_SQL = """
    INSERT INTO PEOPLE
    (FIRST_NAME, LAST_NAME, DOB, SALARY, EMAIL, HOME_ADDRESS, BUSINESS_ADDRESS, SPOUSE, PARENT_ID)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
    RETURNING ID
"""

# One row per child; parent, spouse and address columns repeat on every row.
FIND_PERSON_BY_ID_SQL = """
    SELECT
    PARENT.ID AS PARENT_ID, PARENT.FIRST_NAME AS PARENT_FIRST_NAME, PARENT.LAST_NAME AS PARENT_LAST_NAME,
    PARENT.DOB AS PARENT_DOB, PARENT.SALARY AS PARENT_SALARY, PARENT.EMAIL AS PARENT_EMAIL,
    PARENT.SPOUSE AS SPOUSE,

    CHILD.ID AS CHILD_ID, CHILD.FIRST_NAME AS CHILD_FIRST_NAME, CHILD.LAST_NAME AS CHILD_LAST_NAME,
    CHILD.DOB AS CHILD_DOB, CHILD.SALARY AS CHILD_SALARY, CHILD.EMAIL AS CHILD_EMAIL,

    HOME.ID AS HOME_ID, HOME.STREET_ADDRESS AS HOME_STREET_ADDRESS, HOME.ADDRESS2 AS HOME_ADDRESS2,
    HOME.CITY AS HOME_CITY, HOME.STATE AS HOME_STATE, HOME.POSTCODE AS HOME_POSTCODE,
    HOME.COUNTY AS HOME_COUNTY, HOME.REGION AS HOME_REGION, HOME.COUNTRY AS HOME_COUNTRY,

    BUSINESS.ID AS BUSINESS_ID, BUSINESS.STREET_ADDRESS AS BUSINESS_STREET_ADDRESS,
    BUSINESS.ADDRESS2 AS BUSINESS_ADDRESS2, BUSINESS.CITY AS BUSINESS_CITY, BUSINESS.STATE AS BUSINESS_STATE,
    BUSINESS.POSTCODE AS BUSINESS_POSTCODE, BUSINESS.COUNTY AS BUSINESS_COUNTY,
    BUSINESS.REGION AS BUSINESS_REGION, BUSINESS.COUNTRY AS BUSINESS_COUNTRY

    FROM PEOPLE AS PARENT
    LEFT OUTER JOIN PEOPLE AS CHILD ON PARENT.ID = CHILD.PARENT_ID
    LEFT OUTER JOIN ADDRESSES AS HOME ON PARENT.HOME_ADDRESS = HOME.ID
    LEFT OUTER JOIN ADDRESSES AS BUSINESS ON PARENT.BUSINESS_ADDRESS = BUSINESS.ID
    WHERE PARENT.ID = ?
"""

# Email, addresses, spouse and parent are not updatable through this path.
UPDATE_PERSON_SQL = "UPDATE PEOPLE SET FIRST_NAME = ?, LAST_NAME = ?, DOB = ?, SALARY = ? WHERE ID = ?"

COUNT_PEOPLE_SQL = "SELECT COUNT(*) FROM PEOPLE"
DELETE_PERSON_SQL = "DELETE FROM PEOPLE WHERE ID = ?"
DELETE_PEOPLE_SQL = "DELETE FROM PEOPLE WHERE ID IN (:ids)"


class PeopleRepository(CrudRepository[Person]):
    """
    Repository for the PEOPLE table.

    Saving a person first saves its home and business addresses through
    an AddressRepository on the same connection, then the person row, then
    every child (recursively, through `save`). The spouse is stored by key
    only and is never saved from here. A person that already has a key is
    never inserted again; use `update` instead.
    """

    ENTITY_TYPE = Person
    IDENTITY = IdentityAccessor.for_field(Person)
    RESAVE_KEYED = False
    SQL = {
        CrudOperation.SAVE: SAVE_PERSON_SQL,
        CrudOperation.FIND_BY_ID: FIND_PERSON_BY_ID_SQL,
        CrudOperation.UPDATE: UPDATE_PERSON_SQL,
    }

    def __init__(self, connection, paramstyle: Optional[str] = None):
        super().__init__(connection, paramstyle)
        self.address_repo = AddressRepository(connection, self.paramstyle)

    # ── MAPPERS ───────────────────────────────────────────

    def map_for_save(self, entity: Person) -> Sequence[Any]:
        entity.home_address = self._save_address(entity.home_address)
        entity.business_address = self._save_address(entity.business_address)
        return (
            entity.first_name,
            entity.last_name,
            _dob_to_db(entity.dob),
            str(entity.salary),
            entity.email,
            entity.home_address.id if entity.home_address else None,
            entity.business_address.id if entity.business_address else None,
            entity.spouse_id,
            entity.parent_id,
        )

    def map_for_update(self, entity: Person) -> Sequence[Any]:
        return (
            entity.first_name,
            entity.last_name,
            _dob_to_db(entity.dob),
            str(entity.salary),
        )

    def post_save(self, entity: Person, key: int) -> None:
        try:
            for child in list(entity.children):
                self.save(child)
        finally:
            # Saved children hash differently now. Building from a set would
            # reuse the stale hashes, so iterate.
            entity.children = {child for child in entity.children}

    def _save_address(self, address: Optional[Address]) -> Optional[Address]:
        """Save an address and return its keyed copy."""
        if address is None:
            return None
        return self.address_repo.save(address)

    # ── EXTRACTION ────────────────────────────────────────

    def extract_entity(self, rs: ResultSet) -> Person:
        """
        Rebuild a person and its children from the find-by-id join.

        Addresses and spouse come from the first row only. Every row,
        including the first, may carry one child; rows whose CHILD_ID is
        NULL add nothing.
        """
        parent = _extract_person(rs, "PARENT_")
        parent.home_address = _extract_address(rs, "HOME_")
        parent.business_address = _extract_address(rs, "BUSINESS_")
        spouse_id = rs.get("SPOUSE")
        parent.spouse_id = spouse_id if spouse_id is not None and spouse_id > 0 else None

        while True:
            if not rs.is_null("CHILD_ID"):
                parent.add_child(_extract_person(rs, "CHILD_"))
            if not rs.next():
                break
        logger.debug(f"Found person #{parent.id} with {len(parent.children)} child(ren)")
        return parent

    # ── FALLBACK SQL ──────────────────────────────────────

    def get_count_sql(self) -> str:
        return COUNT_PEOPLE_SQL

    def get_delete_sql(self) -> str:
        return DELETE_PERSON_SQL

    def get_delete_in_sql(self) -> str:
        return DELETE_PEOPLE_SQL


# ── HELPERS ───────────────────────────────────────────────

def _extract_person(rs: ResultSet, prefix: str) -> Person:
    """Build a person from the columns carrying ``prefix``."""
    salary = rs.get(prefix + "SALARY")
    return Person(
        first_name=rs.get(prefix + "FIRST_NAME"),
        last_name=rs.get(prefix + "LAST_NAME"),
        dob=_dob_from_db(rs.get(prefix + "DOB")),
        id=rs.get(prefix + "ID"),
        salary=Decimal(str(salary)) if salary is not None else Decimal("0"),
        email=rs.get(prefix + "EMAIL"),
    )


def _extract_address(rs: ResultSet, prefix: str) -> Optional[Address]:
    """Build an address from ``prefix`` columns, or None if its ID is NULL."""
    address_id = rs.get(prefix + "ID")
    if address_id is None:
        return None
    return Address(
        id=address_id,
        street_address=rs.get(prefix + "STREET_ADDRESS"),
        address2=rs.get(prefix + "ADDRESS2"),
        city=rs.get(prefix + "CITY"),
        state=rs.get(prefix + "STATE"),
        postcode=rs.get(prefix + "POSTCODE"),
        country=rs.get(prefix + "COUNTRY"),
        county=rs.get(prefix + "COUNTY"),
        region=Region.parse(rs.get(prefix + "REGION")),
    )


def _dob_to_db(dob: Optional[datetime]) -> Optional[str]:
    """Store dates of birth as naive UTC timestamps."""
    if dob is None:
        return None
    return dob.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f")


def _dob_from_db(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.replace(tzinfo=timezone.utc)
