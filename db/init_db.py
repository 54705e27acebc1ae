"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from config import DB_BACKEND
from utils.logger import get_logger

logger = get_logger(__name__)

_POSTGRESQL_SCHEMA = """
-- Addresses: owned by exactly one person row, created fresh on every save
CREATE TABLE IF NOT EXISTS ADDRESSES (
    ID              BIGSERIAL PRIMARY KEY,
    STREET_ADDRESS  VARCHAR(255),
    ADDRESS2        VARCHAR(255),
    CITY            VARCHAR(100),
    STATE           VARCHAR(50),
    POSTCODE        VARCHAR(20),
    COUNTY          VARCHAR(100),
    REGION          VARCHAR(20),
    COUNTRY         VARCHAR(100)
);

-- People: SPOUSE is a plain reference, PARENT_ID links children to their parent
CREATE TABLE IF NOT EXISTS PEOPLE (
    ID                  BIGSERIAL PRIMARY KEY,
    FIRST_NAME          VARCHAR(255) NOT NULL,
    LAST_NAME           VARCHAR(255) NOT NULL,
    DOB                 TIMESTAMP,
    SALARY              NUMERIC(15,2) DEFAULT 0,
    EMAIL               VARCHAR(255),
    HOME_ADDRESS        BIGINT REFERENCES ADDRESSES(ID),
    BUSINESS_ADDRESS    BIGINT REFERENCES ADDRESSES(ID),
    SPOUSE              BIGINT,
    PARENT_ID           BIGINT REFERENCES PEOPLE(ID) ON DELETE SET NULL
);

CREATE INDEX IF NOT EXISTS IDX_PEOPLE_PARENT ON PEOPLE(PARENT_ID);
"""

_SQLITE_SCHEMA = """
CREATE TABLE IF NOT EXISTS ADDRESSES (
    ID              INTEGER PRIMARY KEY AUTOINCREMENT,
    STREET_ADDRESS  TEXT,
    ADDRESS2        TEXT,
    CITY            TEXT,
    STATE           TEXT,
    POSTCODE        TEXT,
    COUNTY          TEXT,
    REGION          TEXT,
    COUNTRY         TEXT
);

CREATE TABLE IF NOT EXISTS PEOPLE (
    ID                  INTEGER PRIMARY KEY AUTOINCREMENT,
    FIRST_NAME          TEXT NOT NULL,
    LAST_NAME           TEXT NOT NULL,
    DOB                 TEXT,
    SALARY              NUMERIC DEFAULT 0,
    EMAIL               TEXT,
    HOME_ADDRESS        INTEGER REFERENCES ADDRESSES(ID),
    BUSINESS_ADDRESS    INTEGER REFERENCES ADDRESSES(ID),
    SPOUSE              INTEGER,
    PARENT_ID           INTEGER REFERENCES PEOPLE(ID) ON DELETE SET NULL
);

CREATE INDEX IF NOT EXISTS IDX_PEOPLE_PARENT ON PEOPLE(PARENT_ID);
"""

SCHEMA_SQL: dict[str, str] = {
    "postgresql": _POSTGRESQL_SCHEMA,
    "sqlite": _SQLITE_SCHEMA,
}


def create_tables(conn, backend: str | None = None) -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).

    Args:
        conn: An open DB-API connection.
        backend: "postgresql" or "sqlite". Defaults to ``DB_BACKEND``.
    """
    backend = (backend or DB_BACKEND).lower()
    schema = SCHEMA_SQL[backend]
    try:
        if backend == "sqlite":
            conn.executescript(schema)
        else:
            with conn.cursor() as cur:
                cur.execute(schema)
        conn.commit()
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise


if __name__ == "__main__":
    from db.connection import open_connection, close_connection
    connection = open_connection()
    try:
        create_tables(connection)
    finally:
        close_connection(connection)
    print("Database schema created successfully.")
