import logging
from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import get_settings

settings = get_settings()
logger = logging.getLogger("Database")

engine_kwargs = {}
if settings.database_url.startswith("sqlite"):
    # For SQLite in local/dev, allow usage across threads.
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    if settings.database_url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory databases live on a single connection.
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
    **engine_kwargs,
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Provide a transactional database session for FastAPI dependencies."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create tables if absent and make sure the guest user exists."""

    # Import models so they register on Base.metadata.
    import models  # noqa: F401
    from services.storage import ensure_guest_user

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        guest = ensure_guest_user(db)
    logger.info(f"Database ready (guest user id={guest.id})")
