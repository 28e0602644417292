from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from biopeak.core.config import settings

# SQLAlchemy Base class for models to inherit
Base = declarative_base()

# SQLite (tests, local dev) needs cross-thread access for the backfill pool
connect_args = (
    {"check_same_thread": False}
    if settings.database_url.startswith("sqlite")
    else {}
)

# Create SQLAlchemy engine (connects to Postgres)
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,   # helps avoid stale connections
    connect_args=connect_args,
)

# Factory that creates DB sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Dependency we will use in FastAPI routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Dependency for work that opens its own sessions (backfill workers)."""
    return SessionLocal
