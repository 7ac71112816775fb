"""
Database connection and initialization.
"""

from pathlib import Path

import aiosqlite

from worldline.config import settings
from worldline.logging import get_logger

logger = get_logger('database')

SCHEMA_PATH = Path(__file__).parent / "init_db.sql"


async def connect(db_path: str) -> aiosqlite.Connection:
    """
    Open a connection with dict-style rows and foreign keys enforced.

    :param db_path: Path to the sqlite file
    :type db_path: str
    :return: Open connection; the caller closes it
    :rtype: aiosqlite.Connection
    """
    db = await aiosqlite.connect(db_path)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA foreign_keys = ON")
    return db


async def init_db(db_path: str | None = None):
    """
    Initialize database with schema.

    :param db_path: Database file; defaults to the configured DATABASE_PATH
    :type db_path: str | None
    :return: None
    :rtype: None
    """
    path = Path(db_path or settings.DATABASE_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(path) as db:
        with open(SCHEMA_PATH) as f:
            await db.executescript(f.read())
        await db.commit()
        logger.info(f"Database initialized at {path}")
