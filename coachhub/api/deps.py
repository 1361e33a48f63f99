"""Request-scoped dependencies: database, session store, calling principal"""
from datetime import timedelta

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from coachhub.config import get_settings
from coachhub.exceptions import Forbidden, NotAuthenticated
from coachhub.models.base import get_db
from coachhub.services import auth_service
from coachhub.services.principal import Principal
from coachhub.services.session_store import SessionStore


def get_session_store(db: Session = Depends(get_db)) -> SessionStore:
    return SessionStore(db, lifetime=timedelta(days=get_settings().session_lifetime_days))


def get_auth_status(
    request: Request,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
) -> auth_service.AuthStatus:
    """Resolve the session cookie against fresh account data."""
    session_id = getattr(request.state, "session_id", None)
    result = auth_service.status(db, store, session_id)
    if result.authenticated:
        request.state.session_active = True
    elif session_id:
        # Stale or invalid session: have the middleware clear the cookie
        request.state.session_id = None
    return result


def get_principal(status: auth_service.AuthStatus = Depends(get_auth_status)) -> Principal:
    """Dependency: raise 401 if nobody is logged in."""
    if not status.authenticated:
        raise NotAuthenticated()
    return status.principal


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """Dependency: raise 403 unless the caller is an administrator."""
    if not principal.is_admin:
        raise Forbidden()
    return principal
