"""
Database initialization script.
This script creates all database tables that do not exist yet.
Run this as: python init_db.py
"""

import logging
import sys
from pathlib import Path

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("db-init")

# Add current directory to path to ensure imports work
sys.path.append(str(Path(__file__).parent))

from sqlalchemy import inspect
from guildhall.core.config import settings
from guildhall.db.init_db import create_all_tables
from guildhall.db.session import engine

def init_db() -> bool:
    """Initialize the database by creating all tables."""
    logger.info(f"Initializing database at: {engine.url.render_as_string(hide_password=True)}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    if not create_all_tables(engine):
        return False

    logger.info(f"Tables after creation: {sorted(inspect(engine).get_table_names())}")
    return True

if __name__ == "__main__":
    logger.info("Starting database initialization")
    success = init_db()
    if success:
        logger.info("Database initialization completed successfully")
    else:
        logger.error("Database initialization failed")
        sys.exit(1)
