"""Tests for AddressRepository."""

import pytest

from models.address import Region
from repositories.exceptions import UnsupportedOperation


class TestAddressRepository:
    """Find and save are the only supported operations."""

    def test_save_and_find(self, address_repo, address) -> None:
        saved = address_repo.save(address)

        found = address_repo.find_by_id(saved.id)

        assert found == saved
        assert found.region is Region.WEST
        assert found.county == "Fulton County"

    def test_each_save_creates_a_new_row(self, address_repo, address) -> None:
        first_key = address_repo.save(address).id
        second_key = address_repo.save(address).id

        assert second_key != first_key

    def test_missing_address_returns_none(self, address_repo) -> None:
        assert address_repo.find_by_id(-1) is None

    @pytest.mark.parametrize("call", ["count", "update", "delete"])
    def test_unsupported_operations(self, address_repo, address, call) -> None:
        address_repo.save(address)

        with pytest.raises(UnsupportedOperation):
            if call == "count":
                address_repo.count()
            else:
                getattr(address_repo, call)(address)
