"""Repository for the key-value local storage table."""

import sqlite3


def get_item(conn: sqlite3.Connection, key: str) -> str | None:
    """Get a stored value, or None if the key is absent."""
    row = conn.execute(
        "SELECT value FROM local_storage WHERE key = ?", (key,)
    ).fetchone()
    if row is None:
        return None
    return row[0]


def set_item(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Store a value, overwriting any previous one."""
    conn.execute(
        "INSERT INTO local_storage (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
        (key, value),
    )
    conn.commit()
