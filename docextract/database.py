# docextract/database.py
import logging

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy_utils import database_exists, create_database

logger = logging.getLogger(__name__)

Base = declarative_base()

def _log_invalidated_connection(dbapi_connection, connection_record, exception):
    logger.critical(f"Pooled database connection invalidated: {exception}")

def create_db_engine(database_url: str) -> Engine:
    """Builds the process-wide pooled engine."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False # Needed for SQLite
    engine = create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)
    event.listen(engine, "invalidate", _log_invalidated_connection)
    return engine

def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db(engine: Engine) -> None:
    """
    Checks the connection and creates the documents table if it doesn't exist.
    Errors propagate so that startup is aborted.
    """
    from docextract import models  # noqa: F401  registers the table on Base

    if not database_exists(engine.url):
        create_database(engine.url)
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    logger.info("Database connection test successful.")

    Base.metadata.create_all(bind=engine)
    logger.info('Table "documents" checked/created successfully.')

def get_db(request: Request):
    """Dependency to get a database session from the factory built at startup."""
    db = request.app.state.SessionLocal()
    try:
        yield db
    finally:
        db.close()
