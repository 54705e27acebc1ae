"""Tests for PeopleRepository against an in-memory SQLite database."""

import sqlite3
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from models.person import Person
from repositories.exceptions import SaveFailure
from repositories.people_repo import PeopleRepository
from tests.fakes import FakeConnection, FakeCursor

CENTRAL = timezone(timedelta(hours=-6))


def _person(first_name: str, year: int = 2000) -> Person:
    return Person(first_name, "Smith", datetime(year, 11, 15, tzinfo=CENTRAL))


class TestSave:
    """Tests for save."""

    def test_save_assigns_key(self, people_repo, john) -> None:
        saved = people_repo.save(john)

        assert saved is john
        assert saved.id > 0

    def test_two_people_get_distinct_keys(self, people_repo) -> None:
        first = people_repo.save(_person("John", 1980))
        second = people_repo.save(_person("Bobby", 1980))

        assert first.id is not None and second.id is not None
        assert first.id != second.id

    def test_save_with_home_address(self, people_repo, john, address) -> None:
        john.home_address = address

        saved = people_repo.save(john)

        assert saved.home_address.id > 0

    def test_save_with_business_address(self, people_repo, john, address) -> None:
        john.business_address = address

        saved = people_repo.save(john)

        assert saved.business_address.id > 0

    def test_save_cascades_to_children(self, people_repo, john) -> None:
        for name in ("Johnny", "Bobby", "Tommy"):
            john.add_child(_person(name))

        saved = people_repo.save(john)

        assert len(saved.children) == 3
        assert all(child.id > 0 for child in saved.children)
        assert all(child.parent is saved for child in saved.children)

    def test_children_set_usable_after_save(self, people_repo, john) -> None:
        child = _person("Johnny")
        john.add_child(child)

        people_repo.save(john)

        assert child in john.children

    def test_children_findable_in_set_after_save(self, people_repo) -> None:
        pairs = []
        for index in range(25):
            parent = _person(f"Parent{index}", 1970)
            child = _person(f"Child{index}")
            parent.add_child(child)
            pairs.append((parent, child))

        for parent, _ in pairs:
            people_repo.save(parent)

        missing = [child.first_name for parent, child in pairs if child not in parent.children]
        assert missing == []

    def test_children_set_rehashed_when_a_child_save_fails(self) -> None:
        parent = _person("John", 1980)
        for name in ("Johnny", "Bobby"):
            parent.add_child(_person(name))
        connection = FakeConnection(
            FakeCursor(("ID",), [(1,)]),
            FakeCursor(("ID",), [(2,)]),
            FakeCursor(error=sqlite3.IntegrityError("boom")),
        )
        repo = PeopleRepository(connection, paramstyle="qmark")

        with pytest.raises(SaveFailure):
            repo.save(parent)

        saved = [child for child in parent.children if child.id is not None]
        assert len(saved) == 1
        assert saved[0] in parent.children

    def test_saving_a_keyed_person_again_is_refused(self, people_repo, john) -> None:
        people_repo.save(john)
        key = john.id

        with pytest.raises(SaveFailure, match="already has a key"):
            people_repo.save(john)

        assert john.id == key
        assert people_repo.count() == 1

    def test_child_shared_by_two_parents_is_inserted_once(self, people_repo) -> None:
        child = _person("Johnny")
        first, second = _person("John", 1980), _person("Jane", 1980)
        first.add_child(child)
        second.children.add(child)
        people_repo.save(first)

        with pytest.raises(SaveFailure, match="already has a key"):
            people_repo.save(second)

        assert people_repo.count() == 3

    def test_address_is_keyed_by_copy(self, people_repo, john, address) -> None:
        seen = {address}
        john.home_address = address

        people_repo.save(john)

        assert address.id is None
        assert address in seen
        assert john.home_address is not address
        assert john.home_address == address
        assert john.home_address.id > 0

    def test_save_cascades_to_grandchildren(self, people_repo, john) -> None:
        child = _person("Johnny")
        grandchild = _person("Jimmy", 2020)
        child.add_child(grandchild)
        john.add_child(child)

        people_repo.save(john)

        assert grandchild.id > 0
        found_child = people_repo.find_by_id(child.id)
        assert {c.first_name for c in found_child.children} == {"Jimmy"}

    def test_save_with_spouse_reference(self, people_repo, john) -> None:
        bobby = people_repo.save(_person("Bobby", 1980))
        john.spouse_id = bobby.id

        people_repo.save(john)
        found = people_repo.find_by_id(john.id)

        assert found.spouse_id == bobby.id

    def test_cyclic_graph_is_reported(self, people_repo, john) -> None:
        child = _person("Johnny")
        john.add_child(child)
        child.children.add(john)

        with pytest.raises(SaveFailure, match="cycle"):
            people_repo.save(john)


class TestFindById:
    """Tests for find_by_id."""

    def test_round_trip(self, people_repo, john) -> None:
        john.email = "john@example.com"
        john.salary = Decimal("52000.50")
        saved = people_repo.save(john)

        found = people_repo.find_by_id(saved.id)

        assert found == saved
        assert found.email == "john@example.com"
        assert found.salary == Decimal("52000.50")
        assert found.dob == john.dob
        assert found.dob.tzinfo == timezone.utc

    def test_round_trip_with_home_address(self, people_repo, john, address) -> None:
        john.home_address = address
        saved = people_repo.save(john)

        found = people_repo.find_by_id(saved.id)

        assert found.home_address.state == "WA"
        assert found.home_address.street_address == "123 Birch Street"
        assert found.business_address is None

    def test_round_trip_with_business_address(self, people_repo, john, address) -> None:
        john.business_address = address
        saved = people_repo.save(john)

        found = people_repo.find_by_id(saved.id)

        assert found.business_address.state == "WA"
        assert found.home_address is None

    def test_round_trip_with_children(self, people_repo, john) -> None:
        for name in ("Johnny", "Bobby", "Tommy"):
            john.add_child(_person(name))
        saved = people_repo.save(john)

        found = people_repo.find_by_id(saved.id)

        assert {c.first_name for c in found.children} == {"Johnny", "Bobby", "Tommy"}
        assert all(child.parent is found for child in found.children)

    def test_person_without_spouse_has_none(self, people_repo, john) -> None:
        saved = people_repo.save(john)

        assert people_repo.find_by_id(saved.id).spouse_id is None

    def test_missing_person_returns_none(self, people_repo) -> None:
        assert people_repo.find_by_id(-1) is None


class TestCount:
    """Tests for count."""

    def test_count_grows_with_saves(self, people_repo) -> None:
        start = people_repo.count()

        people_repo.save(_person("Test"))
        people_repo.save(_person("Test"))

        assert people_repo.count() == start + 2

    def test_empty_table_counts_zero(self, people_repo) -> None:
        assert people_repo.count() == 0


class TestDelete:
    """Tests for delete."""

    def test_delete_one(self, people_repo) -> None:
        saved = people_repo.save(_person("Test"))
        start = people_repo.count()

        people_repo.delete(saved)

        assert people_repo.count() == start - 1
        assert people_repo.find_by_id(saved.id) is None

    def test_delete_many(self, people_repo) -> None:
        first = people_repo.save(_person("Test"))
        second = people_repo.save(_person("Test"))
        third = people_repo.save(_person("Test"))
        start = people_repo.count()

        people_repo.delete(first, second, third)

        assert people_repo.count() == start - 3

    def test_delete_nothing_is_a_no_op(self, people_repo) -> None:
        people_repo.save(_person("Test"))

        people_repo.delete()

        assert people_repo.count() == 1

    def test_delete_does_not_cascade_to_children(self, people_repo, john) -> None:
        john.add_child(_person("Johnny"))
        people_repo.save(john)

        people_repo.delete(john)

        assert people_repo.count() == 1


class TestUpdate:
    """Tests for update."""

    def test_update_salary(self, people_repo, john) -> None:
        saved = people_repo.save(john)
        before = people_repo.find_by_id(saved.id)

        saved.salary = Decimal("73000.23")
        people_repo.update(saved)
        after = people_repo.find_by_id(saved.id)

        assert after.salary == Decimal("73000.23")
        assert after.salary != before.salary
        assert after.first_name == before.first_name
        assert after.last_name == before.last_name
        assert after.dob == before.dob

    def test_update_names(self, people_repo, john) -> None:
        saved = people_repo.save(john)

        saved.first_name = "Jonathan"
        people_repo.update(saved)

        assert people_repo.find_by_id(saved.id).first_name == "Jonathan"

    def test_update_ignores_email(self, people_repo, john) -> None:
        john.email = "john@example.com"
        saved = people_repo.save(john)

        saved.email = "other@example.com"
        people_repo.update(saved)

        assert people_repo.find_by_id(saved.id).email == "john@example.com"

    def test_update_of_deleted_row_is_silent(self, people_repo, john) -> None:
        saved = people_repo.save(john)
        people_repo.delete(saved)

        people_repo.update(saved)

        assert people_repo.find_by_id(saved.id) is None
