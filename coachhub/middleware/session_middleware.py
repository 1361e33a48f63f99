"""Session cookie middleware — carries the session id in and out of each request."""
from datetime import timedelta

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from coachhub.config import get_settings
from coachhub.models.base import SessionLocal
from coachhub.services.session_store import SessionStore


class SessionMiddleware(BaseHTTPMiddleware):
    """Reads the session id from the cookie into ``request.state.session_id``.

    Handlers replace that value on login and clear it on logout; the cookie is
    rewritten to match. A session that was used successfully has its expiry
    rolled forward.
    """

    async def dispatch(self, request: Request, call_next):
        settings = get_settings()
        cookie_name = settings.session_cookie_name
        incoming = request.cookies.get(cookie_name)

        request.state.session_id = incoming
        request.state.session_active = False

        response = await call_next(request)

        outgoing = getattr(request.state, "session_id", None)
        max_age = settings.session_lifetime_days * 24 * 60 * 60

        if outgoing != incoming or (outgoing and request.state.session_active):
            if outgoing:
                if outgoing == incoming:
                    db = SessionLocal()
                    try:
                        SessionStore(db, lifetime=timedelta(days=settings.session_lifetime_days)).touch(outgoing)
                    finally:
                        db.close()
                response.set_cookie(
                    key=cookie_name,
                    value=outgoing,
                    httponly=True,
                    secure=not settings.is_development,
                    samesite="lax",
                    max_age=max_age,
                    path="/",
                )
            else:
                response.delete_cookie(cookie_name, path="/")

        return response
