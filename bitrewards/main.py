import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from bitrewards.core import config
from bitrewards.core.auth import decode_session_token
from bitrewards.core.database import SessionLocal, init_db
from bitrewards.core.exceptions import RedirectException
from bitrewards.core.i18n import DEFAULT_LANGUAGE, load_locales, resolve_language
from bitrewards.core.rate_limiter import custom_rate_limit_handler, limiter
from bitrewards.core.schemas import BaseResponse
from bitrewards.core.sessions import build_session_store
from bitrewards.core.templating import render
from bitrewards.routes import admins, auth, users

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("bitrewards")

STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Database tables and seed admin exist before the first request is accepted
    init_db()
    logger.info("BitRewards started (%s)", config.APP_ENV)
    yield


app = FastAPI(title="BitRewards", version="1.0.0", lifespan=lifespan)

# <========== Startup state ==========>
app.state.locales = load_locales()
app.state.session_store = build_session_store()

# <========== Gzip Middleware ==========>
app.add_middleware(GZipMiddleware, minimum_size=1000)  # Compress responses > 1KB

# <========== Rate limiting middleware ==========>
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


# <========== Per-request language, session and DB session ==========>
@app.middleware("http")
async def load_request_context(request: Request, call_next):
    lang = resolve_language(request.cookies.get(config.LANG_COOKIE_NAME))
    request.state.lang = lang
    request.state.t = app.state.locales.get(lang, app.state.locales[DEFAULT_LANGUAGE])

    db = SessionLocal()
    request.state.db = db
    try:
        session_id = decode_session_token(
            request.cookies.get(config.SESSION_COOKIE_NAME)
        )
        request.state.session_id = session_id
        request.state.user_id = (
            app.state.session_store.get(session_id) if session_id else None
        )
        return await call_next(request)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database error while handling %s", request.url.path)
        return render(
            request,
            "error.html",
            {"message": "Something went wrong. Please try again."},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    finally:
        db.close()  # Always close the session


# <========== API routes ==========>
app.include_router(auth.router, tags=["Auth"])
app.include_router(users.router, tags=["User"])
app.include_router(admins.router, prefix="/admin", tags=["Admin"])


# <========== Exception Handlers ==========>
@app.exception_handler(RedirectException)
async def redirect_exception_handler(request: Request, exc: RedirectException):
    return RedirectResponse(exc.location, status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    request.state.db.rollback()
    logger.error("Database error while handling %s", request.url.path, exc_info=exc)
    return render(
        request,
        "error.html",
        {"message": "Something went wrong. Please try again."},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


# <========== System Endpoints ==========>
@app.get("/health", tags=["System"], response_model=BaseResponse)
def health_check():
    return {
        "success": True,
        "message": "System is healthy",
        "data": {"version": app.version, "environment": config.APP_ENV},
    }


# <========== Application Startup ==========>
if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))
    workers = int(os.getenv("WORKERS", 1))  # Default to 1 worker for dev
    uvicorn.run(
        "bitrewards.main:app",
        host="0.0.0.0",
        port=port,
        workers=workers,
        reload=os.getenv("RELOAD", "false").lower() == "true",  # Auto-reload in dev
    )
