import logging
from contextlib import contextmanager
from urllib.parse import urlsplit, urlunsplit

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

Base = declarative_base()


def normalize_database_url(url: str) -> str:
    url = (url or "").strip()
    # Postgres URLs are often provided as postgresql:// or postgres://
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    return url


def database_url_for_log(url: str | None = None) -> str:
    url = normalize_database_url(DATABASE_URL if url is None else url)
    if not url:
        return ""
    parsed = urlsplit(url)
    if parsed.password is None:
        return url
    netloc = parsed.netloc.replace(f":{parsed.password}@", ":***@")
    return urlunsplit((parsed.scheme, netloc, parsed.path, parsed.query, parsed.fragment))


def make_engine(url: str) -> Engine:
    url = normalize_database_url(url)
    if not url:
        raise RuntimeError("DATABASE_URL is not set. Configure .env with the job postings database URL.")

    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(
            url,
            connect_args={"prepare_threshold": None},
            pool_pre_ping=True,
            poolclass=NullPool,
        )
    logger.info("Database connection URL: %s", database_url_for_log(url))
    return engine


# Built only when configured so the ORM models import without a store.
engine = make_engine(DATABASE_URL) if DATABASE_URL else None
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(factory=None):
    """Yield a read session and always close it."""
    if factory is None and engine is None:
        raise RuntimeError("DATABASE_URL is not set. Configure .env with the job postings database URL.")
    db = (factory or SessionLocal)()
    try:
        yield db
    finally:
        db.close()
