"""SQLite-backed login records."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

from chatrelay.core.types import LoginRecord
from chatrelay.exceptions import LoginNotFound


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LoginStore:
    """Stores the last login per username with an expiry.

    A new login for a username replaces whatever was stored before.
    """

    def __init__(
        self,
        db_path: Path | str,
        *,
        ttl_days: int = 7,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ttl = timedelta(days=ttl_days)
        self._clock = clock
        self._init_db()

    def _conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS logins (
                    username TEXT PRIMARY KEY,
                    country TEXT NOT NULL DEFAULT '',
                    expires_at TIMESTAMP NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_logins_expires ON logins(expires_at)")
            conn.commit()

    def save(self, username: str, country: str | None = None) -> LoginRecord:
        """Upsert the login for *username*, expiring ``ttl_days`` from now."""
        record = LoginRecord(
            username=username,
            country=country or "",
            expires=self._clock() + self._ttl,
        )
        with self._conn() as conn:
            conn.execute(
                """INSERT INTO logins (username, country, expires_at) VALUES (?, ?, ?)
                   ON CONFLICT(username) DO UPDATE SET
                       country = excluded.country,
                       expires_at = excluded.expires_at""",
                (
                    record.username,
                    record.country,
                    record.expires.isoformat(timespec="microseconds"),
                ),
            )
            conn.commit()
        return record

    def get(self, username: str) -> LoginRecord:
        """Return the live record for *username*, or raise :class:`LoginNotFound`."""
        with self._conn() as conn:
            row = conn.execute(
                "SELECT username, country, expires_at FROM logins WHERE username = ?",
                (username,),
            ).fetchone()
        if row is None:
            raise LoginNotFound(username)
        expires = datetime.fromisoformat(row["expires_at"])
        if expires <= self._clock():
            raise LoginNotFound(username)
        return LoginRecord(username=row["username"], country=row["country"], expires=expires)

    def cleanup_expired(self) -> int:
        """Permanently delete expired records. Returns how many were removed."""
        with self._conn() as conn:
            cur = conn.execute(
                "DELETE FROM logins WHERE expires_at <= ?",
                (self._clock().isoformat(timespec="microseconds"),),
            )
            conn.commit()
            return cur.rowcount
