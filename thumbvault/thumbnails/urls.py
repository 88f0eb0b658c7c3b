"""SQLite association of subjects to their last known artifact URL.

This is the caller-side record used by the HTTP layer; the store, the
derivative engine and the renderer client never read or write it.
"""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel


class UrlKind(str, Enum):
    """Which artifact URL is recorded for a subject."""

    HEADSHOT = "headshot"
    THUMBNAIL = "thumbnail"


class ArtifactUrlEntry(BaseModel):
    """Recorded artifact URL for one subject."""

    subject_id: int
    kind: UrlKind
    url: str
    updated_at: datetime


class ArtifactUrlStore:
    """SQLite-backed subject -> artifact URL mapping."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._ensure_tables()

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _ensure_tables(self) -> None:
        """Create database tables if they don't exist."""
        with self._lock:
            self.conn.executescript("""
                CREATE TABLE IF NOT EXISTS artifact_urls (
                    subject_id INTEGER NOT NULL,
                    kind TEXT NOT NULL,
                    url TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL,
                    PRIMARY KEY (subject_id, kind)
                );
            """)
            self.conn.commit()

    def set(self, subject_id: int, url: str, kind: UrlKind = UrlKind.HEADSHOT) -> None:
        """Record (or replace) the URL for a subject."""
        with self._lock:
            self.conn.execute(
                """
                INSERT OR REPLACE INTO artifact_urls (subject_id, kind, url, updated_at)
                VALUES (?, ?, ?, ?)
                """,
                (subject_id, kind.value, url, datetime.now().isoformat()),
            )
            self.conn.commit()

    def get_entry(
        self, subject_id: int, kind: UrlKind = UrlKind.HEADSHOT
    ) -> ArtifactUrlEntry | None:
        with self._lock:
            row = self.conn.execute(
                "SELECT * FROM artifact_urls WHERE subject_id = ? AND kind = ?",
                (subject_id, kind.value),
            ).fetchone()

        if row is None:
            return None

        return ArtifactUrlEntry(
            subject_id=row["subject_id"],
            kind=UrlKind(row["kind"]),
            url=row["url"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def get(self, subject_id: int, kind: UrlKind = UrlKind.HEADSHOT) -> str | None:
        """Get the recorded URL, or None when missing or blank."""
        entry = self.get_entry(subject_id, kind)
        if entry is None or not entry.url.strip():
            return None
        return entry.url

    def get_many(
        self, subject_ids: list[int], kind: UrlKind = UrlKind.HEADSHOT
    ) -> dict[int, str]:
        """Get recorded URLs for several subjects; missing ones are omitted."""
        if not subject_ids:
            return {}
        placeholders = ",".join("?" for _ in subject_ids)
        with self._lock:
            rows = self.conn.execute(
                f"""
                SELECT subject_id, url FROM artifact_urls
                WHERE kind = ? AND subject_id IN ({placeholders})
                """,
                (kind.value, *subject_ids),
            ).fetchall()
        return {row["subject_id"]: row["url"] for row in rows if row["url"].strip()}

    def count(self, kind: UrlKind | None = None) -> int:
        """Count recorded URLs, optionally for one kind."""
        with self._lock:
            if kind:
                row = self.conn.execute(
                    "SELECT COUNT(*) as cnt FROM artifact_urls WHERE kind = ?",
                    (kind.value,),
                ).fetchone()
            else:
                row = self.conn.execute(
                    "SELECT COUNT(*) as cnt FROM artifact_urls"
                ).fetchone()
        return row["cnt"] if row else 0

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
