class HistoryError(Exception):
    """Base exception for history storage errors."""


class HistoryRecordNotFoundError(HistoryError):
    """Raised when a history entry or its database row cannot be found."""
