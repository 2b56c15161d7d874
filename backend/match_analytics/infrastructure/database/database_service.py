import logging
from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()

class DatabaseService:
    """
    Service for managing database connections and sessions.
    """

    def __init__(self, db_url: str):
        if not db_url:
            raise ValueError("A database URL is required")

        # Adjust URL for SQLAlchemy if it starts with postgres:// (old Heroku/Render format)
        if db_url.startswith("postgres://"):
            db_url = db_url.replace("postgres://", "postgresql://", 1)
        self.db_url = db_url

        try:
            # pool_pre_ping=True helps with dropped connections (common in cloud envs)
            self.engine = create_engine(
                self.db_url,
                pool_pre_ping=True,
                # SQLite doesn't support multiple threads by default in SQLAlchemy
                connect_args={"check_same_thread": False} if self.db_url.startswith("sqlite") else {}
            )

            self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

            logger.info(f"DatabaseService initialized with {self.db_url.split('@')[-1] if '@' in self.db_url else 'local DB'}")

        except Exception as e:
            logger.error(f"Failed to initialize DatabaseService: {e}")
            raise e

    def create_tables(self):
        """Create all tables defined in Base."""
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Failed to create database tables: {e}")
            raise e

    def get_session(self):
        """Get a new database session."""
        return self.SessionLocal()

    def dispose(self):
        self.engine.dispose()


def create_database_service(db_url: Optional[str]) -> Optional[DatabaseService]:
    """Build a DatabaseService, or None when no backend is configured."""
    if not db_url:
        logger.warning("DATABASE_URL not set. Match lookups will use the offline dataset.")
        return None
    return DatabaseService(db_url)
