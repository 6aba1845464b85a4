import httpx

from newsdesk.logging.logger import Log

RESET_PASSWORD_PATH = "/#/reset-password"
AUTH_ERROR_PATH = "/#/auth-error"


def auth_error_location(reason: str) -> str:
    return f"{AUTH_ERROR_PATH}?error={reason}"


class RecoveryConfirmer:
    """Verifies password-recovery links and picks where to redirect.

    The token is checked against the auth provider's verify endpoint using
    the service-role key, which never leaves the server.
    """

    def __init__(
        self,
        *,
        auth_url: str,
        service_role_key: str,
        timeout_seconds: int = 10,
        client: httpx.Client | None = None,
    ) -> None:
        self._verify_url = f"{auth_url.rstrip('/')}/auth/v1/verify"
        self._service_role_key = service_role_key
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def confirm(self, token_hash: str | None, type_: str | None) -> str:
        """Return the redirect location for a recovery link."""
        if not token_hash or type_ != "recovery":
            return auth_error_location("invalid_token")

        try:
            response = self._client.post(
                self._verify_url,
                json={"type": "recovery", "token_hash": token_hash},
                headers={
                    "apikey": self._service_role_key,
                    "Authorization": f"Bearer {self._service_role_key}",
                },
            )
        except httpx.HTTPError as exc:
            Log.error(f"Recovery confirmation failed: {exc}")
            return auth_error_location("server_error")

        if response.is_error:
            Log.warning(f"Recovery token rejected ({response.status_code})")
            return auth_error_location("token_expired")
        return RESET_PASSWORD_PATH

    def close(self) -> None:
        self._client.close()
