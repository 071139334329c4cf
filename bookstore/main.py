# bookstore/main.py
from fastapi import FastAPI
import uvicorn

from bookstore.api import include_routers
from bookstore.data.database import Base, engine
from bookstore.data import models  # noqa: F401  registers every table on Base.metadata
from bookstore.utils.logging import get_logger
from bookstore.utils.settings import require_settings

logger = get_logger(__name__)


def init_db():
    logger.info(f"Creating tables: {sorted(Base.metadata.tables)}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise


def create_app() -> FastAPI:
    require_settings()
    init_db()

    app = FastAPI(
        title="Bookstore API",
        version="1.0.0",
    )
    include_routers(app)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
