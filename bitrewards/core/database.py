import logging
import threading
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi import Request

from bitrewards.core import config

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # A single shared connection, otherwise every checkout gets a fresh empty database
            options["poolclass"] = StaticPool
        return options
    # Database connection with pooling
    return {
        "pool_size": 5,  # Max connections in pool
        "max_overflow": 10,  # Extra connections if needed
        "pool_timeout": 30,  # Wait time for a connection
        "pool_recycle": 1800,  # Recycle connections every 30 minutes
        "pool_pre_ping": True,
    }


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

_init_lock = threading.Lock()
_initialized = False


def init_db(force: bool = False) -> None:
    """Create tables and seed the administrator.

    Runs once from the application lifespan before any request is served.
    Later calls are no-ops unless ``force`` is set.
    """
    global _initialized
    with _init_lock:
        if _initialized and not force:
            return
        # Imported here so every model is registered on Base.metadata
        from bitrewards.models import session, transaction, user  # noqa: F401
        from bitrewards.controllers.user_controller import seed_admin

        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            seed_admin(db)
        finally:
            db.close()
        _initialized = True
        logger.info("Database initialized")


# Dependency to get the DB session opened by the request middleware
def get_db(request: Request):
    return request.state.db
