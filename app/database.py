from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Engine configuration
#
# - SQLite (default): check_same_thread=False because FastAPI runs sync
#   endpoints on a threadpool; foreign keys are switched on per connection.
# - In-memory SQLite ("sqlite://"): a StaticPool keeps one shared
#   connection, otherwise every checkout would see an empty database.
# - Anything else (PostgreSQL): pool_pre_ping validates pooled connections.
# ---------------------------------------------------------

db_url = settings.DATABASE_URL

# Heroku/Azure style URLs use the legacy "postgres://" scheme
if db_url.startswith("postgres://"):
    db_url = db_url.replace("postgres://", "postgresql://", 1)

is_sqlite = db_url.startswith("sqlite")

engine_kwargs: dict = {}
if is_sqlite:
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool
else:
    engine_kwargs["pool_pre_ping"] = True

engine = create_engine(
    db_url,
    echo=settings.SQL_ECHO,
    **engine_kwargs,
)


if is_sqlite:

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Uncommitted work is rolled back when the session closes, so a request
    that fails half-way never leaves partial writes behind.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
