"""PostgreSQL schema, engine and query helpers."""
