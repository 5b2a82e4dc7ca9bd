import logging

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from recurate.core.config import settings

logger = logging.getLogger(__name__)

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

# Create database engine - manages connection pool
# SQLite connections are shared across the request threadpool, so the
# same-thread check has to be off
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
    pool_pre_ping=True,
)


if _is_sqlite:
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # SQLite ships with FK enforcement off; posts.owner_id relies on it
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit (prevents accidental commits)
# autoflush=False: Don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()

# Columns added after the first schema shipped. Older databases get them
# through ALTER TABLE since create_all never touches existing tables.
_ADDITIVE_COLUMNS = {
    "users": {
        "is_admin": "BOOLEAN NOT NULL DEFAULT 0",
        "created_at": "DATETIME",
    },
    "posts": {
        "created_at": "DATETIME",
        "updated_at": "DATETIME",
    },
}


def get_db():
    """
    Dependency for getting database session.

    The session is always closed after the request completes, even if the
    handler raised.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def apply_additive_migrations(bind: Engine) -> list[str]:
    """Add any known-missing columns to existing tables. Returns what was added."""
    inspector = inspect(bind)
    added = []
    existing_tables = set(inspector.get_table_names())
    with bind.begin() as conn:
        for table, columns in _ADDITIVE_COLUMNS.items():
            if table not in existing_tables:
                continue
            present = {col["name"] for col in inspector.get_columns(table)}
            for name, ddl in columns.items():
                if name in present:
                    continue
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}"))
                added.append(f"{table}.{name}")
                logger.info(f"Migrated schema: added column {table}.{name}")
    return added


def init_db(bind: Engine = engine) -> None:
    """
    Bring the schema up to date.

    Importing the models registers them on Base.metadata. Raises RuntimeError
    with the (password-masked) URL when the store cannot be reached, which
    aborts application startup.
    """
    from recurate.models import post, user  # noqa: F401

    try:
        apply_additive_migrations(bind)
        Base.metadata.create_all(bind=bind)
    except SQLAlchemyError as e:
        safe_url = bind.url.render_as_string(hide_password=True)
        logger.critical(f"Database unreachable at {safe_url}: {e}")
        raise RuntimeError(f"Cannot initialise database at {safe_url}") from e
