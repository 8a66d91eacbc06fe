import logging

from dotenv import load_dotenv

load_dotenv()

from eduai.infra.activity_db import ActivityRepository  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("init_db")


def init_db():
    logger.info("Initializing activity history schema...")
    try:
        ActivityRepository().ensure_schema()
    except Exception:
        logger.exception("Failed to initialize database")
        raise
    logger.info("Database initialized successfully")


if __name__ == "__main__":
    init_db()
