"""HTTP endpoint behind password-recovery e-mail links."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import RedirectResponse

from newsdesk.auth.recovery import RecoveryConfirmer
from newsdesk.config.settings import Settings

router = APIRouter()


@router.get("/api/auth/confirm")
def confirm(
    request: Request,
    token_hash: str | None = None,
    type: str | None = None,  # noqa: A002
) -> RedirectResponse:
    """Verify the recovery token and 303 to the reset page or an error page."""
    confirmer: RecoveryConfirmer = request.app.state.recovery_confirmer
    location = confirmer.confirm(token_hash, type)
    return RedirectResponse(url=location, status_code=303)


def create_app(
    settings: Settings | None = None,
    confirmer: RecoveryConfirmer | None = None,
) -> FastAPI:
    if confirmer is None:
        settings = settings or Settings()
        confirmer = RecoveryConfirmer(
            auth_url=settings.auth_url,
            service_role_key=settings.auth_service_role_key,
            timeout_seconds=settings.auth_timeout_seconds,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            confirmer.close()

    app = FastAPI(title="newsdesk-auth", lifespan=lifespan)
    app.state.recovery_confirmer = confirmer
    app.include_router(router)
    return app
