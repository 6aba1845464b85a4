import json

import httpx
from fastapi.testclient import TestClient

from newsdesk.api.auth_confirm import create_app
from newsdesk.auth.recovery import RESET_PASSWORD_PATH, RecoveryConfirmer

AUTH_URL = "https://auth.example.com/"


def _make_confirmer(handler) -> tuple[RecoveryConfirmer, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.Client(transport=httpx.MockTransport(record))
    confirmer = RecoveryConfirmer(auth_url=AUTH_URL, service_role_key="service-key", client=client)
    return confirmer, seen


class TestRecoveryConfirmer:
    def test_valid_token_redirects_to_reset_page(self) -> None:
        confirmer, seen = _make_confirmer(lambda request: httpx.Response(200, json={}))

        assert confirmer.confirm("abc", "recovery") == RESET_PASSWORD_PATH

        request = seen[0]
        assert str(request.url) == "https://auth.example.com/auth/v1/verify"
        assert request.headers["apikey"] == "service-key"
        assert request.headers["authorization"] == "Bearer service-key"
        assert json.loads(request.content) == {"type": "recovery", "token_hash": "abc"}

    def test_rejected_token_is_expired(self) -> None:
        confirmer, _seen = _make_confirmer(lambda request: httpx.Response(403))

        assert confirmer.confirm("abc", "recovery") == "/#/auth-error?error=token_expired"

    def test_missing_token_is_invalid_without_calling_provider(self) -> None:
        confirmer, seen = _make_confirmer(lambda request: httpx.Response(200))

        assert confirmer.confirm(None, "recovery") == "/#/auth-error?error=invalid_token"
        assert confirmer.confirm("abc", "signup") == "/#/auth-error?error=invalid_token"
        assert seen == []

    def test_transport_failure_is_server_error(self) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        confirmer, _seen = _make_confirmer(fail)

        assert confirmer.confirm("abc", "recovery") == "/#/auth-error?error=server_error"


class TestConfirmEndpoint:
    def test_redirects_with_303(self) -> None:
        confirmer, _seen = _make_confirmer(lambda request: httpx.Response(200))
        client = TestClient(create_app(confirmer=confirmer))

        response = client.get(
            "/api/auth/confirm",
            params={"token_hash": "abc", "type": "recovery"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == RESET_PASSWORD_PATH

    def test_missing_parameters_redirect_to_error_page(self) -> None:
        confirmer, _seen = _make_confirmer(lambda request: httpx.Response(200))
        client = TestClient(create_app(confirmer=confirmer))

        response = client.get("/api/auth/confirm", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/#/auth-error?error=invalid_token"

    def test_shutdown_closes_http_client(self) -> None:
        http_client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        confirmer = RecoveryConfirmer(auth_url=AUTH_URL, service_role_key="k", client=http_client)

        with TestClient(create_app(confirmer=confirmer)):
            assert not http_client.is_closed

        assert http_client.is_closed
