from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class HistoryRecord:
    """Represents a row from the audio_jobs table."""

    id: str
    user_id: str
    file_name: str
    job_type: str
    result: dict[str, Any]
    mime_type: str | None = None
    status: str = "COMPLETED"
    created_at: datetime | None = None


@dataclass
class ProfileRecord:
    """Represents a row from the profiles table."""

    id: str
    is_admin: bool = False
    is_active: bool = True
    gemini_api_key: str | None = None
