"""
Database session configuration
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from chessview.app.core.config import settings


def build_engine(database_url: str):
    """Create an engine; SQLite gets foreign-key enforcement switched on per connection."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    eng = create_engine(database_url, echo=False, connect_args=connect_args)
    if eng.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(eng)
    return eng


def enable_sqlite_foreign_keys(eng) -> None:
    @event.listens_for(eng, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
