"""Database session management"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finance_gateway.config import settings

_is_sqlite = settings.database_url.startswith("sqlite")

# SQLite connections are shared with the threadpool FastAPI runs sync endpoints in
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create missing tables"""
    from finance_gateway.infrastructure.database.models import Base

    Base.metadata.create_all(bind=engine)
