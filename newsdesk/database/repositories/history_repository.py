from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from newsdesk.database.connection import get_connection
from newsdesk.database.models import HistoryRecord
from newsdesk.history.exceptions import HistoryRecordNotFoundError


class HistoryRepository:
    """Database operations for the audio_jobs table."""

    def insert(
        self,
        *,
        user_id: str,
        file_name: str,
        job_type: str,
        result: dict[str, Any],
        mime_type: str | None = None,
    ) -> HistoryRecord:
        """Insert a completed job's result and return the stored row."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO audio_jobs
                        (user_id, file_name, mime_type, job_type, status, result)
                    VALUES (%s, %s, %s, %s, 'COMPLETED', %s)
                    RETURNING id, created_at
                    """,
                    (user_id, file_name, mime_type, job_type, Jsonb(result)),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT into audio_jobs returned no row")

        return HistoryRecord(
            id=str(row["id"]),
            user_id=user_id,
            file_name=file_name,
            job_type=job_type,
            result=result,
            mime_type=mime_type,
            created_at=row["created_at"],
        )

    def query_recent(self, user_id: str, limit: int) -> list[HistoryRecord]:
        """Return the user's most recent rows, newest first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, user_id, file_name, mime_type, job_type,
                           status, result, created_at
                    FROM audio_jobs
                    WHERE user_id = %s
                    ORDER BY created_at DESC
                    LIMIT %s
                    """,
                    (user_id, limit),
                )
                rows = cur.fetchall()

        return [
            HistoryRecord(
                id=str(row["id"]),
                user_id=str(row["user_id"]),
                file_name=row["file_name"],
                job_type=row["job_type"],
                result=row["result"] or {},
                mime_type=row["mime_type"],
                status=row["status"],
                created_at=row["created_at"],
            )
            for row in rows
        ]

    def delete_by_id(self, record_id: str) -> bool:
        """Delete a row. Returns False when no row matched."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM audio_jobs WHERE id = %s", (record_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted

    def update_result(self, record_id: str, result: dict[str, Any]) -> None:
        """Replace the stored result payload of one row.

        Raises:
            HistoryRecordNotFoundError: if no row with this id exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE audio_jobs SET result = %s WHERE id = %s",
                    (Jsonb(result), record_id),
                )
                if cur.rowcount == 0:
                    raise HistoryRecordNotFoundError(f"History record {record_id} not found")
            conn.commit()
