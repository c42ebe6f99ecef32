import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone

from texteditor.models import ShareRecord


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ShareRegistry(ABC):
    @abstractmethod
    def shares_for(self, file_type: str, file_id: str) -> list[ShareRecord]:
        """All shares of a file, regardless of recipient, in creation order."""


class ShareRepository(ShareRegistry):
    def __init__(self, db_path: str):
        self.db_path = db_path

    @contextmanager
    def _connect(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS shares (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    file_type TEXT NOT NULL,
                    file_id TEXT NOT NULL,
                    owner_user_id TEXT NOT NULL,
                    share_with TEXT,
                    token TEXT NOT NULL,
                    expiration TEXT,
                    created_at TEXT NOT NULL
                );
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_shares_item ON shares(file_type, file_id)"
            )

    def create_share(
        self,
        *,
        file_type: str,
        file_id: str,
        owner_user_id: str,
        token: str,
        share_with: str | None = None,
        expiration: datetime | None = None,
    ) -> ShareRecord:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO shares(file_type, file_id, owner_user_id, share_with, token, expiration, created_at)
                VALUES(?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    file_type,
                    file_id,
                    owner_user_id,
                    share_with,
                    token,
                    expiration.isoformat() if expiration else None,
                    utc_now_iso(),
                ),
            )
            row = conn.execute("SELECT * FROM shares WHERE id = ?", (cursor.lastrowid,)).fetchone()
        return self._to_record(row)

    def shares_for(self, file_type: str, file_id: str) -> list[ShareRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, file_type, file_id, owner_user_id, share_with, token, expiration
                FROM shares
                WHERE file_type = ? AND file_id = ?
                ORDER BY id ASC
                """,
                (file_type, file_id),
            ).fetchall()
        return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row: sqlite3.Row) -> ShareRecord:
        return ShareRecord.model_validate(
            {
                "id": row["id"],
                "file_type": row["file_type"],
                "file_id": row["file_id"],
                "owner_user_id": row["owner_user_id"],
                "share_with": row["share_with"],
                "token": row["token"],
                "expiration": row["expiration"],
            }
        )
