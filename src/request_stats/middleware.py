"""
ASGI wiring that feeds request outcomes into a Stats instance.
"""
import logging
from time import perf_counter

from starlette.types import ASGIApp, Receive, Scope, Send

from .stats import Stats

log = logging.getLogger(__name__)

_RECORDED_SCOPES = ("http", "websocket")


class StatsMiddleware:
  """
  Pure ASGI middleware recording one completion per request.

  Websocket connections that get accepted are upgraded and never counted.
  A websocket refused with a denial response is counted under that status.
  """

  def __init__(self, app: ASGIApp, stats: Stats):
    self.app = app
    self.stats = stats

  async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
    if scope["type"] not in _RECORDED_SCOPES:
      await self.app(scope, receive, send)
      return

    start, recorder = self.stats.begin(send)
    try:
      await self.app(scope, receive, recorder)
    except Exception:
      if recorder.committed:
        self.stats.end(start, recorder=recorder)
      elif scope["type"] == "http":
        self.stats.end(start, status_code=500)
      log.exception("request_exception type=%s path=%s duration_ms=%.2f",
                    scope["type"], scope.get("path", ""),
                    (perf_counter() - start) * 1000.0)
      raise

    if not self.stats.end(start, recorder=recorder):
      log.debug("request_not_recorded type=%s path=%s upgraded=%s",
                scope["type"], scope.get("path", ""), recorder.upgraded)


def record_requests(stats: Stats):
  """
  Build a ``call_next`` style middleware for ``@app.middleware("http")``.

  Only the final response status is visible at this layer, so it is recorded
  as an explicit status code.
  """

  async def request_stats_middleware(request, call_next):
    start = perf_counter()
    try:
      response = await call_next(request)
    except Exception:
      stats.end(start, status_code=500)
      log.exception("request_exception method=%s path=%s duration_ms=%.2f",
                    request.method, request.url.path,
                    (perf_counter() - start) * 1000.0)
      raise
    stats.end(start, status_code=response.status_code)
    return response

  return request_stats_middleware
