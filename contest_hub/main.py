# main.py
import asyncio
import logging

from contest_hub.config import Settings
from contest_hub.db.database import DataBase

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    settings = Settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


async def init_db() -> None:
    """Create the contest schema on the configured database."""
    db = DataBase()
    await db.create_all()
    logger.info("Contest schema is ready")


async def main() -> None:
    configure_logging()
    try:
        await init_db()
    finally:
        await DataBase().dispose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
