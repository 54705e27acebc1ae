"""
repositories/address_repo.py
----------------------------
Data access layer for addresses. Flat row mapping, no associations.
Only find-by-id and save are supported.
"""

from typing import Any, Sequence

from models.address import Address, Region
from repositories.catalog import CrudOperation
from repositories.crud_repo import CrudRepository
from repositories.identity import IdentityAccessor
from repositories.result_set import ResultSet


FIND_ADDRESS_BY_ID_SQL = """
    SELECT ID, STREET_ADDRESS, ADDRESS2, CITY, STATE, POSTCODE, COUNTY, REGION, COUNTRY
    FROM ADDRESSES
    WHERE ID = ?
"""

SAVE_ADDRESS_SQL = """
    INSERT INTO ADDRESSES (STREET_ADDRESS, ADDRESS2, CITY, STATE, POSTCODE, COUNTY, REGION, COUNTRY)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    RETURNING ID
"""


class AddressRepository(CrudRepository[Address]):
    """Repository for the ADDRESSES table."""

    ENTITY_TYPE = Address
    IDENTITY = IdentityAccessor.for_field(Address)
    SQL = {
        CrudOperation.FIND_BY_ID: FIND_ADDRESS_BY_ID_SQL,
        CrudOperation.SAVE: SAVE_ADDRESS_SQL,
    }

    def extract_entity(self, rs: ResultSet) -> Address:
        return Address(
            id=rs.get("ID"),
            street_address=rs.get("STREET_ADDRESS"),
            address2=rs.get("ADDRESS2"),
            city=rs.get("CITY"),
            state=rs.get("STATE"),
            postcode=rs.get("POSTCODE"),
            country=rs.get("COUNTRY"),
            county=rs.get("COUNTY"),
            region=Region.parse(rs.get("REGION")),
        )

    def map_for_save(self, entity: Address) -> Sequence[Any]:
        return (
            entity.street_address,
            entity.address2,
            entity.city,
            entity.state,
            entity.postcode,
            entity.county,
            entity.region.name,
            entity.country,
        )
