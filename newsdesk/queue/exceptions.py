class QueueError(Exception):
    """Base exception for job queue errors."""


class JobNotFoundError(QueueError):
    """Raised when an operation needs a job that is not in the queue."""
