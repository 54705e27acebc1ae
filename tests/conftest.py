"""
Pytest configuration and shared fixtures.

Repository tests run against an in-memory SQLite database created with the
project schema. Nothing is committed; each test gets a fresh database.
"""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from db.init_db import create_tables
from models.address import Address, Region
from models.person import Person
from repositories.address_repo import AddressRepository
from repositories.people_repo import PeopleRepository

CENTRAL = timezone(timedelta(hours=-6))


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:")
    create_tables(conn, "sqlite")
    yield conn
    conn.close()


@pytest.fixture
def people_repo(connection) -> PeopleRepository:
    return PeopleRepository(connection)


@pytest.fixture
def address_repo(connection) -> AddressRepository:
    return AddressRepository(connection)


@pytest.fixture
def john() -> Person:
    return Person("John", "Smith", datetime(1980, 11, 15, tzinfo=CENTRAL))


@pytest.fixture
def address() -> Address:
    return Address(
        street_address="123 Birch Street",
        address2="Apt 1A",
        city="Leeds",
        state="WA",
        postcode="90210",
        country="United States",
        county="Fulton County",
        region=Region.WEST,
    )
