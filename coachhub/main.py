"""
Coach Hub accounts service
Main FastAPI application
"""
import traceback
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from coachhub import __version__
from coachhub.config import get_settings
from coachhub.exceptions import CoachHubError, RegistrationValidationError
from coachhub.utils.logger import log

from coachhub.api import auth, health, invitations
from coachhub.middleware.session_middleware import SessionMiddleware

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    log.info(f"Starting {settings.app_name} v{__version__}")
    log.info(f"Environment: {settings.environment}")

    from coachhub.models.base import init_db, SessionLocal
    from coachhub.services import auth_service
    from coachhub.services.session_store import SessionStore

    init_db()
    db = SessionLocal()
    try:
        auth_service.seed_initial_admin(db)
        SessionStore(db, lifetime=timedelta(days=settings.session_lifetime_days)).cleanup_expired()
    finally:
        db.close()

    yield

    log.info("Shutting down application")


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="Invite-only staff accounts and session authentication for Coach Hub.",
    lifespan=lifespan,
)

app.add_middleware(SessionMiddleware)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router)
app.include_router(invitations.router)


@app.exception_handler(CoachHubError)
async def coachhub_exception_handler(request: Request, exc: CoachHubError):
    """Render domain errors as a single user-facing message."""
    log.warning(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message} {exc.details}"
    )
    content = {"message": exc.message}
    if isinstance(exc, RegistrationValidationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies get the same shape as field validation: message plus per-field errors."""
    errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = loc[-1] if loc else "body"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    log.warning(f"Request validation failed on {request.method} {request.url.path}: {sorted(errors)}")
    message = next(iter(errors.values()))[0] if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"message": message, "errors": errors})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log the traceback; never leak it to the client."""
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    log.error(f"Unhandled exception on {request.method} {request.url.path}:\n{tb}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("coachhub.main:app", host=settings.api_host, port=settings.api_port, reload=settings.debug)
