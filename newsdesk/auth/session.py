from collections.abc import Callable
from dataclasses import dataclass

from newsdesk.auth.exceptions import AccountDeactivatedError
from newsdesk.database.models import ProfileRecord
from newsdesk.database.repositories.profile_repository import ProfileRepository
from newsdesk.history.local_cache import LocalCache
from newsdesk.logging.logger import Log

SessionListener = Callable[["Session | None"], None]


@dataclass(frozen=True)
class Session:
    """An authenticated user session issued by the auth provider."""

    user_id: str
    email: str | None = None
    access_token: str | None = None


class AuthGate:
    """Current session plus the profile-derived flags the app depends on.

    API key precedence: organisation-wide key, then the profile's key,
    then the key cached on this device.
    """

    def __init__(
        self,
        *,
        profile_repo: ProfileRepository,
        cache: LocalCache,
        api_key_cache_key: str,
    ) -> None:
        self._profile_repo = profile_repo
        self._cache = cache
        self._api_key_cache_key = api_key_cache_key
        self._session: Session | None = None
        self._is_admin = False
        self._api_key = ""
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_admin(self) -> bool:
        return self._is_admin

    @property
    def api_key(self) -> str:
        return self._api_key

    def add_listener(self, listener: SessionListener) -> None:
        """Call listener(session) after every sign-in and sign-out."""
        self._listeners.append(listener)

    def sign_in(self, session: Session) -> None:
        """Adopt a session and load its profile.

        Raises:
            AccountDeactivatedError: if the profile is inactive; the gate
                is signed out again before raising.
        """
        self._session = session
        Log.info(f"Signed in as {session.email or session.user_id}")
        self.refresh_profile()
        self._notify()

    def sign_out(self) -> None:
        if self._session is not None:
            Log.info(f"Signed out {self._session.email or self._session.user_id}")
        self._session = None
        self._is_admin = False
        self._api_key = self._cached_api_key()
        self._notify()

    def store_api_key(self, api_key: str) -> None:
        """Remember a key entered on this device."""
        self._cache.write(self._api_key_cache_key, api_key)
        self._api_key = api_key

    def refresh_profile(self) -> None:
        cached_key = self._cached_api_key()
        if self._session is None:
            self._api_key = cached_key
            self._is_admin = False
            return

        profile = self._load_profile(self._session.user_id)
        if profile is None:
            self._api_key = cached_key
            self._is_admin = False
            return

        if profile.gemini_api_key:
            self._api_key = profile.gemini_api_key
            self._cache.write(self._api_key_cache_key, profile.gemini_api_key)
        else:
            self._api_key = cached_key
        self._is_admin = profile.is_admin

        global_key = self._load_global_api_key()
        if global_key:
            self._api_key = global_key

        if not profile.is_active:
            user_id = self._session.user_id
            self.sign_out()
            raise AccountDeactivatedError(
                f"Account {user_id} has been deactivated. Contact an administrator."
            )

    def _load_profile(self, user_id: str) -> ProfileRecord | None:
        try:
            return self._profile_repo.find_profile(user_id)
        except Exception as exc:
            Log.warning(f"Could not load profile for {user_id}: {exc}")
            return None

    def _load_global_api_key(self) -> str | None:
        try:
            return self._profile_repo.get_global_api_key()
        except Exception as exc:
            Log.warning(f"Could not load the global API key: {exc}")
            return None

    def _cached_api_key(self) -> str:
        return self._cache.read(self._api_key_cache_key) or ""

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._session)
