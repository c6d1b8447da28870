import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

import config
from api import auth, tasks
from database import get_db, init_db, ping
from errors import register_error_handlers
from logging_setup import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(level=config.LOG_LEVEL, log_file=config.LOG_FILE or None)
    init_db()
    logger.info("Task Tracker started")
    yield


def create_app(static_dir: str = config.STATIC_DIR) -> FastAPI:
    app = FastAPI(title="Task Tracker", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        # browsers refuse credentialed requests to a wildcard origin
        allow_credentials="*" not in config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(tasks.router)

    @app.get("/api/health")
    def health(db: Session = Depends(get_db)):
        ping(db)
        return {"status": "ok"}

    # The built single-page client, when it has been deployed next to the API.
    # Mounted last so /api routes win.
    if static_dir and os.path.isdir(static_dir):
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="client")
        logger.info("Serving client from %s", static_dir)

    return app


app = create_app()


if __name__ == "__main__":
    # log_config=None lets uvicorn's loggers propagate to the handlers set up in lifespan
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_config=None)
