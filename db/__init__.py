"""
db/ - Connections and Schema
============================
`connection` opens the single DB-API connection a repository works on and
names the driver errors the repositories wrap; `init_db` creates the
ADDRESSES and PEOPLE tables for PostgreSQL or SQLite.
"""
