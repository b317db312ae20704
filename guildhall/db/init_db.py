import logging
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from guildhall.db.base import Base
from guildhall.db.session import engine as default_engine

logger = logging.getLogger(__name__)

def create_all_tables(engine: Optional[Engine] = None) -> bool:
    """Create any missing tables; existing tables are left untouched"""
    engine = engine or default_engine
    try:
        existing_tables = inspect(engine).get_table_names()

        Base.metadata.create_all(bind=engine)

        new_tables = set(inspect(engine).get_table_names()) - set(existing_tables)
        if new_tables:
            logger.info(f"Created new tables: {sorted(new_tables)}")

        return True
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        return False
