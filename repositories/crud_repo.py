"""
repositories/crud_repo.py
-------------------------
Generic CRUD engine shared by every repository.

A concrete repository declares its entity type, its identity accessor and
its SQL templates, and supplies the row mappers. The engine prepares and
runs the statements, reads generated keys and assigns them.

Transactions are not managed here: nothing is committed or rolled back.
The caller owns the connection and decides when to commit.
"""

from abc import ABC, abstractmethod
from contextlib import closing
from typing import Any, Generic, Iterable, Optional, Sequence, TypeVar

from db.connection import DB_ERRORS, paramstyle_of
from repositories.catalog import CrudOperation, IDS_PLACEHOLDER, OperationCatalog
from repositories.exceptions import (
    MissingIdentity,
    SaveFailure,
    StoreFailure,
    UnsupportedOperation,
)
from repositories.identity import IdentityAccessor
from repositories.result_set import ResultSet
from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Raised by extractors on malformed column values (unknown enum names,
# unparseable dates or decimals).
EXTRACTION_ERRORS: tuple[type[Exception], ...] = (LookupError, ValueError, TypeError, ArithmeticError)


def render_id_list(sql: str, keys: Iterable[Any]) -> str:
    """
    Substitute a comma-joined list of keys into the ``:ids`` placeholder.

    The result is executed as literal SQL, not bound as parameters, so the
    keys must come from entities this engine has saved. Replace this
    function with array binding on drivers that support it.
    """
    return sql.replace(IDS_PLACEHOLDER, ",".join(str(key) for key in keys))


class CrudRepository(ABC, Generic[T]):
    """
    Repository base class for one entity type.

    Subclasses set:
        ENTITY_TYPE: The persisted class.
        IDENTITY: IdentityAccessor for the primary key.
        SQL: Per-operation template overrides. Templates use ``?``
            placeholders; they are rewritten for the connection's driver.

    and may override the ``get_*_sql`` fallbacks instead of using ``SQL``.
    """

    ENTITY_TYPE: type = object
    IDENTITY: Optional[IdentityAccessor] = None
    SQL: dict[CrudOperation, str] = {}

    # Saving an entity that already has a key inserts a fresh row when True,
    # and raises SaveFailure when False.
    RESAVE_KEYED = True

    # Checked when the repository is built rather than at first use.
    REQUIRED_OPERATIONS = (CrudOperation.FIND_BY_ID, CrudOperation.SAVE)

    def __init__(self, connection, paramstyle: Optional[str] = None):
        """
        Args:
            connection: An open DB-API connection, shared with nested repositories.
            paramstyle: Driver paramstyle. Detected from the connection if omitted.

        Raises:
            MissingIdentity: If the entity type has no identity accessor.
            UnsupportedOperation: If a required template is missing.
        """
        if self.IDENTITY is None or not self.IDENTITY.designated:
            raise MissingIdentity(self.ENTITY_TYPE)
        self.connection = connection
        self.paramstyle = paramstyle or paramstyle_of(connection)
        self.identity: IdentityAccessor = self.IDENTITY
        self.catalog = OperationCatalog(self.ENTITY_TYPE, self.SQL)
        self._fallbacks = {
            CrudOperation.FIND_BY_ID: self.get_find_by_id_sql,
            CrudOperation.SAVE: self.get_save_sql,
            CrudOperation.UPDATE: self.get_update_sql,
            CrudOperation.DELETE_ONE: self.get_delete_sql,
            CrudOperation.DELETE_MANY: self.get_delete_in_sql,
            CrudOperation.COUNT: self.get_count_sql,
        }
        self._saving: set[int] = set()
        for operation in self.REQUIRED_OPERATIONS:
            self._sql(operation)

    # ── CREATE ────────────────────────────────────────────

    def save(self, entity: T) -> T:
        """
        Insert an entity, assign its generated key and run `post_save`.

        Returns:
            The entity carrying its key: the same object, or a keyed copy
            for immutable entity types.

        Raises:
            SaveFailure: If the insert or the key lookup fails, or if the
                entity is reached again while it is still being saved, or if
                it already has a key and RESAVE_KEYED is False.
        """
        sql = self._sql(CrudOperation.SAVE)
        marker = id(entity)
        if marker in self._saving:
            raise SaveFailure(entity, "entity is already being saved, the graph has a cycle")
        if not self.RESAVE_KEYED and self.identity.peek(entity) is not None:
            raise SaveFailure(entity, "entity already has a key")
        self._saving.add(marker)
        try:
            params = self.map_for_save(entity)
            try:
                with closing(self.connection.cursor()) as cur:
                    cur.execute(sql, params)
                    key = self._generated_key(cur)
                    logger.debug(f"Records affected: {cur.rowcount}")
            except DB_ERRORS as e:
                logger.error(f"Failed to save {self._name}: {e}")
                raise SaveFailure(entity, str(e)) from e
            if not key:
                logger.error(f"No generated key returned for {self._name}")
                raise SaveFailure(entity, "no generated key returned")

            entity = self.identity.keyed(entity, key)
            logger.info(f"Saved {self._name} #{key}")
            self.post_save(entity, key)
        finally:
            self._saving.discard(marker)
        return entity

    # ── READ ──────────────────────────────────────────────

    def find_by_id(self, key: int) -> Optional[T]:
        """
        Fetch one entity by primary key.

        Returns:
            The extracted entity, or None if no row matches.

        Raises:
            StoreFailure: If the query fails or a row cannot be read.
        """
        sql = self._sql(CrudOperation.FIND_BY_ID)
        try:
            with closing(self.connection.cursor()) as cur:
                cur.execute(sql, (key,))
                rs = ResultSet(cur)
                if not rs.next():
                    return None
                try:
                    return self.extract_entity(rs)
                except EXTRACTION_ERRORS as e:
                    logger.error(f"Unreadable {self._name} row for #{key}: {e!r}")
                    raise StoreFailure(CrudOperation.FIND_BY_ID, f"unreadable row: {e!r}") from e
        except DB_ERRORS as e:
            logger.error(f"Failed to find {self._name} #{key}: {e}")
            raise StoreFailure(CrudOperation.FIND_BY_ID, str(e)) from e

    def count(self) -> int:
        """Number of stored entities, or 0 if the query returns no row."""
        sql = self._sql(CrudOperation.COUNT)
        try:
            with closing(self.connection.cursor()) as cur:
                cur.execute(sql)
                row = cur.fetchone()
                return int(row[0]) if row else 0
        except DB_ERRORS as e:
            logger.error(f"Failed to count {self._name}: {e}")
            raise StoreFailure(CrudOperation.COUNT, str(e)) from e

    # ── UPDATE ────────────────────────────────────────────

    def update(self, entity: T) -> None:
        """
        Update an existing entity by key.

        A key that matches no row is not reported.
        """
        sql = self._sql(CrudOperation.UPDATE)
        params = list(self.map_for_update(entity))
        params.append(self.identity.get(entity))
        self._execute(CrudOperation.UPDATE, sql, params)

    # ── DELETE ────────────────────────────────────────────

    def delete(self, *entities: T) -> None:
        """
        Delete one entity by bound key, or several in one statement through
        the ``:ids`` list.
        """
        if not entities:
            return
        if len(entities) == 1:
            sql = self._sql(CrudOperation.DELETE_ONE)
            key = self.identity.get(entities[0])
            affected = self._execute(CrudOperation.DELETE_ONE, sql, (key,))
            logger.info(f"Deleted {self._name} #{key} ({affected} record(s))")
            return

        keys = [self.identity.get(entity) for entity in entities]
        sql = render_id_list(self._sql(CrudOperation.DELETE_MANY), keys)
        affected = self._execute(CrudOperation.DELETE_MANY, sql)
        logger.info(f"Deleted {affected} {self._name} record(s)")

    # ── HOOKS ─────────────────────────────────────────────

    @abstractmethod
    def extract_entity(self, rs: ResultSet) -> T:
        """Build an entity from a result set positioned on its first row."""

    @abstractmethod
    def map_for_save(self, entity: T) -> Sequence[Any]:
        """Parameters for the SAVE template, in placeholder order."""

    def map_for_update(self, entity: T) -> Sequence[Any]:
        """Parameters for the UPDATE template, without the trailing key."""
        raise UnsupportedOperation(self.ENTITY_TYPE, CrudOperation.UPDATE)

    def post_save(self, entity: T, key: int) -> None:
        """Called after an entity has been inserted and keyed."""

    def get_find_by_id_sql(self) -> str:
        """Must hold exactly one ``?`` bound to the key."""
        raise UnsupportedOperation(self.ENTITY_TYPE, CrudOperation.FIND_BY_ID)

    def get_save_sql(self) -> str:
        raise UnsupportedOperation(self.ENTITY_TYPE, CrudOperation.SAVE)

    def get_update_sql(self) -> str:
        raise UnsupportedOperation(self.ENTITY_TYPE, CrudOperation.UPDATE)

    def get_delete_sql(self) -> str:
        raise UnsupportedOperation(self.ENTITY_TYPE, CrudOperation.DELETE_ONE)

    def get_delete_in_sql(self) -> str:
        """Must hold the ``(:ids)`` placeholder, e.g. ``DELETE FROM T WHERE ID IN (:ids)``."""
        raise UnsupportedOperation(self.ENTITY_TYPE, CrudOperation.DELETE_MANY)

    def get_count_sql(self) -> str:
        raise UnsupportedOperation(self.ENTITY_TYPE, CrudOperation.COUNT)

    # ── HELPERS ───────────────────────────────────────────

    @property
    def _name(self) -> str:
        return self.ENTITY_TYPE.__name__

    def _sql(self, operation: CrudOperation) -> str:
        sql = self.catalog.resolve(operation, self._fallbacks[operation])
        if self.paramstyle in ("format", "pyformat"):
            return sql.replace("?", "%s")
        return sql

    def _execute(self, operation: CrudOperation, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Run a statement that returns no rows. Returns the affected row count."""
        try:
            with closing(self.connection.cursor()) as cur:
                if params is None:
                    cur.execute(sql)
                else:
                    cur.execute(sql, params)
                logger.debug(f"Records affected: {cur.rowcount}")
                return cur.rowcount
        except DB_ERRORS as e:
            logger.error(f"Failed to run {operation} for {self._name}: {e}")
            raise StoreFailure(operation, str(e)) from e

    @staticmethod
    def _generated_key(cur) -> Optional[int]:
        """Key from a ``RETURNING`` row, falling back to ``lastrowid``."""
        if cur.description:
            row = cur.fetchone()
            if row is not None:
                return row[0]
        return cur.lastrowid
