from dotenv import load_dotenv
load_dotenv()

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from routes import api, events, live
from store import get_hive
from tracking.hive import Hive

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    clients: int
    sessions: int


class DashboardFiles(StaticFiles):
    """Static bundle with index.html fallback so client-side routes resolve."""

    async def get_response(self, path, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404:
                raise
            return await super().get_response("index.html", scope)


@asynccontextmanager
async def lifespan(app: FastAPI):
    base = f"{config.HOST if config.HOST != '0.0.0.0' else 'localhost'}:{config.PORT}"
    logger.info("Claude Hive agent visualization server")
    logger.info("  Dashboard:  http://%s", base)
    logger.info("  WebSocket:  ws://%s", base)
    logger.info("  Events:     POST http://%s/events", base)
    yield
    logger.info("Shutting down (%d clients connected)", len(app.state.hive.broadcaster))


def create_app(hive: Optional[Hive] = None, client_dist: Optional[str] = config.CLIENT_DIST) -> FastAPI:
    app = FastAPI(title="Claude Hive API", version="0.1.0", lifespan=lifespan)
    app.state.hive = hive or Hive(
        max_events=config.MAX_EVENTS,
        init_events=config.INIT_EVENTS,
        queue_size=config.SUBSCRIBER_QUEUE_SIZE,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials="*" not in config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(events.router)
    app.include_router(api.router)
    app.include_router(live.router)

    @app.get("/health", response_model=HealthResponse)
    def health(hive: Hive = Depends(get_hive)):
        return hive.health()

    # Registered last: "/" only reaches the bundle for plain HTTP requests.
    if client_dist and os.path.isdir(client_dist):
        app.mount("/", DashboardFiles(directory=client_dist, html=True), name="dashboard")
    else:
        logger.info("No dashboard bundle at %s, serving API only", client_dist)

    return app


app = create_app()


def run():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
