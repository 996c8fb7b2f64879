# db_setup.py
from loguru import logger

from care.persistence.db import engine
from care.persistence.models import Base


def create_db_tables(bind=engine):
    """Create conversation, message and knowledge tables."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=bind)
    logger.info("Tables created successfully!")


if __name__ == "__main__":
    create_db_tables()
