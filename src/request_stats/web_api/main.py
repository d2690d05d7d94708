"""
Example FastAPI host exposing request stats on a /stats endpoint.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, WebSocket
from dotenv import load_dotenv
import logging

from .. import setup_logging
from ..middleware import StatsMiddleware
from ..stats import Stats
from .startup_config import validate_startup_configuration

# Load environment variables from .env file
load_dotenv()

log = logging.getLogger(__name__)


def create_app(stats: Stats | None = None) -> FastAPI:
  """
  Build the host application around one Stats instance.

  Settings are validated here, when the server builds the app, never at
  import. The instance is owned by the app: its rotation thread starts with
  the lifespan and stops on shutdown.
  """
  settings, warnings = validate_startup_configuration()
  if stats is None:
    stats = Stats(reset_interval=settings.reset_interval, autostart=False)

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown"""
    for warning in warnings:
      log.warning("Startup config: %s", warning)
    app.state.stats.start()
    try:
      yield
    finally:
      app.state.stats.stop()

  app = FastAPI(
    title="Request Stats",
    description="Example API serving in-process request metrics",
    lifespan=lifespan,
  )
  app.state.stats = stats
  app.add_middleware(StatsMiddleware, stats=stats)

  @app.get(settings.stats_path)
  async def stats_endpoint(request: Request):
    """Current request metrics."""
    return request.app.state.stats.data().to_dict()

  @app.get("/hello")
  async def hello():
    return {"hello": "world"}

  @app.websocket("/ws")
  async def echo(websocket: WebSocket):
    await websocket.accept()
    async for text in websocket.iter_text():
      await websocket.send_text(text)

  return app


if __name__ == "__main__":
  import uvicorn
  setup_logging()
  uvicorn.run("request_stats.web_api.main:create_app",
              factory=True,
              host="127.0.0.1",
              port=8080,
              reload=False)
