class AuthError(Exception):
    """Base exception for authentication errors."""


class AccountDeactivatedError(AuthError):
    """Raised when a signed-in user's profile has been deactivated."""
