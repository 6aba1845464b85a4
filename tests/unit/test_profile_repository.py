from unittest.mock import MagicMock, patch

from newsdesk.database.repositories.profile_repository import (
    GLOBAL_API_KEY_SETTING,
    ProfileRepository,
)


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestFindProfile:
    @patch("newsdesk.database.repositories.profile_repository.get_connection")
    def test_returns_profile(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {
            "id": "user-1",
            "gemini_api_key": "sk-1",
            "is_admin": True,
            "is_active": None,
        }

        profile = ProfileRepository().find_profile("user-1")

        assert profile is not None
        assert profile.gemini_api_key == "sk-1"
        assert profile.is_admin is True
        assert profile.is_active is True

    @patch("newsdesk.database.repositories.profile_repository.get_connection")
    def test_inactive_profile(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {
            "id": "user-1",
            "gemini_api_key": None,
            "is_admin": False,
            "is_active": False,
        }

        profile = ProfileRepository().find_profile("user-1")

        assert profile is not None and profile.is_active is False

    @patch("newsdesk.database.repositories.profile_repository.get_connection")
    def test_returns_none_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert ProfileRepository().find_profile("ghost") is None


class TestGetGlobalApiKey:
    @patch("newsdesk.database.repositories.profile_repository.get_connection")
    def test_returns_value(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = ("sk-global",)

        assert ProfileRepository().get_global_api_key() == "sk-global"
        assert mock_cursor.execute.call_args.args[1] == (GLOBAL_API_KEY_SETTING,)

    @patch("newsdesk.database.repositories.profile_repository.get_connection")
    def test_empty_value_is_none(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = ("",)

        assert ProfileRepository().get_global_api_key() is None
