"""Database connection, session management and the unit of work"""
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Callable, Generator, TypeVar
import logging

from campus_orders.services.errors import InternalFailure

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = None
SessionLocal = None

T = TypeVar("T")


def init_database(database_url: str):
    """Initialize database connection"""
    global engine, SessionLocal

    logger.info("Initializing database connection")

    if database_url.startswith("sqlite"):
        # In-memory SQLite must share one connection across threads
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False
        )
    else:
        engine = create_engine(
            database_url,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
            echo=False
        )

    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger.info("Database connection initialized")

    return engine


def create_tables():
    """Create all tables"""
    # Register every model on Base.metadata
    import campus_orders.models  # noqa: F401

    logger.info("Creating database tables")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_in_transaction(db: Session, work: Callable[[Session], T]) -> T:
    """
    Run ``work`` as one atomic unit of work

    ``work`` receives the session, stages its writes and either returns or
    raises. The session is committed exactly once on success and rolled back
    exactly once on failure. Driver errors surface as InternalFailure so storage
    details never reach the caller.
    """
    try:
        result = work(db)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Transaction rolled back after database error: {e}", exc_info=True)
        raise InternalFailure() from e
    except Exception:
        db.rollback()
        raise
    return result
