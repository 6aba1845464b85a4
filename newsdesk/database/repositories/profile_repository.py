from psycopg.rows import dict_row

from newsdesk.database.connection import get_connection
from newsdesk.database.models import ProfileRecord

GLOBAL_API_KEY_SETTING = "gemini_api_key"


class ProfileRepository:
    """Database operations for the profiles and app_settings tables."""

    def find_profile(self, user_id: str) -> ProfileRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, gemini_api_key, is_admin, is_active
                    FROM profiles
                    WHERE id = %s
                    """,
                    (user_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return ProfileRecord(
            id=str(row["id"]),
            is_admin=bool(row["is_admin"]),
            is_active=row["is_active"] is not False,
            gemini_api_key=row["gemini_api_key"],
        )

    def get_global_api_key(self) -> str | None:
        """Return the organisation-wide API key, if one is configured."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT value FROM app_settings WHERE id = %s",
                    (GLOBAL_API_KEY_SETTING,),
                )
                row = cur.fetchone()

        if row is None or not row[0]:
            return None
        return str(row[0])
