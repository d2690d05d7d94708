"""
Shared request counters with a periodically rotated window.
"""
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from threading import Event, Lock, Thread
from time import perf_counter
from typing import Any, Dict, Optional, Tuple

from starlette.types import ASGIApp, Send

from . import recorder as _recorder
from .formatting import format_duration, format_time
from .recorder import StatusRecorder
from .rwlock import ReadWriteLock

log = logging.getLogger(__name__)

DEFAULT_RESET_INTERVAL = 1.0


@dataclass(frozen=True)
class StatsData:
  """Point-in-time view of a Stats instance."""
  pid: int
  uptime: str
  uptime_sec: float
  time: str
  unixtime: int
  status_code_count: Dict[str, int]
  total_status_code_count: Dict[str, int]
  count: int
  total_count: int
  total_response_time: str
  total_response_time_sec: float
  average_response_time: str
  average_response_time_sec: float

  def to_dict(self) -> Dict[str, Any]:
    """Return the JSON-ready record served by the stats endpoint."""
    return {
      "pid": self.pid,
      "uptime": self.uptime,
      "uptime_sec": self.uptime_sec,
      "time": self.time,
      "unixtime": self.unixtime,
      "status_code_count": dict(self.status_code_count),
      "total_status_code_count": dict(self.total_status_code_count),
      "count": self.count,
      "total_count": self.total_count,
      "total_response_time": self.total_response_time,
      "total_response_time_sec": self.total_response_time_sec,
      "average_response_time": self.average_response_time,
      "average_response_time_sec": self.average_response_time_sec,
    }


class Stats:
  """
  In-memory request metrics for one process.

  ``response_counts`` is the windowed status-code histogram, emptied every
  ``reset_interval`` seconds by a background thread. ``total_response_counts``
  and ``total_response_time`` accumulate since construction and are never
  reset. All three are guarded by a single reader/writer lock.
  """

  def __init__(self, reset_interval: float = DEFAULT_RESET_INTERVAL,
               autostart: bool = True):
    if reset_interval <= 0:
      raise ValueError("reset_interval must be positive")
    self.reset_interval = reset_interval
    self.pid = os.getpid()
    self.started_at = datetime.now().astimezone()
    self._started_clock = perf_counter()

    self._lock = ReadWriteLock()
    self._response_counts: Dict[str, int] = {}
    self._total_response_counts: Dict[str, int] = {}
    self._total_response_time = 0.0

    self._thread_lock = Lock()
    self._stop_event = Event()
    self._thread: Optional[Thread] = None
    if autostart:
      self.start()

  # Rotation

  def start(self) -> None:
    """Start the window rotation thread if it is not already running."""
    with self._thread_lock:
      if self._thread is not None and self._thread.is_alive():
        return
      self._stop_event = Event()
      self._thread = Thread(target=self._rotate_forever,
                            args=(self._stop_event, ),
                            name=f"request-stats-reset-{id(self):x}",
                            daemon=True)
      self._thread.start()
    log.info("Started stats window rotation every %.3fs", self.reset_interval)

  def stop(self, timeout: Optional[float] = None) -> None:
    """Stop the rotation thread. Counters remain usable."""
    with self._thread_lock:
      thread = self._thread
      self._thread = None
      self._stop_event.set()
    if thread is None:
      return
    thread.join(timeout)
    log.info("Stopped stats window rotation")

  @property
  def running(self) -> bool:
    thread = self._thread
    return thread is not None and thread.is_alive()

  def _rotate_forever(self, stop_event: Event) -> None:
    while not stop_event.wait(self.reset_interval):
      self.reset_response_counts()

  def reset_response_counts(self) -> None:
    """Empty the windowed histogram."""
    with self._lock.write_locked():
      self._response_counts = {}
    log.debug("Reset windowed response counts")

  def __enter__(self):
    self.start()
    return self

  def __exit__(self, exc_type, exc, tb):
    self.stop()

  # Recording

  def record_completion(self, start: float, status_code: int) -> None:
    """Record one finished request that began at ``start`` (perf_counter)."""
    elapsed = max(perf_counter() - start, 0.0)
    key = str(status_code)
    with self._lock.write_locked():
      self._response_counts[key] = self._response_counts.get(key, 0) + 1
      self._total_response_counts[key] = (
        self._total_response_counts.get(key, 0) + 1)
      self._total_response_time += elapsed

  def begin(self, send: Send) -> Tuple[float, StatusRecorder]:
    return _recorder.begin(send)

  def end(self, start: float, recorder: Optional[StatusRecorder] = None,
          status_code: Optional[int] = None) -> bool:
    """
    Finish a request started with ``begin``.

    Pass either the ``recorder`` that wrapped the response or an explicit
    ``status_code``. Returns False when the recorder never saw a committed
    status (an upgraded or hijacked connection), in which case nothing is
    counted.
    """
    if (recorder is None) == (status_code is None):
      raise TypeError("end() needs exactly one of recorder or status_code")
    if recorder is not None:
      if not recorder.committed:
        return False
      status_code = recorder.status_code
    self.record_completion(start, status_code)
    return True

  def handler(self, app: ASGIApp) -> ASGIApp:
    """Wrap an ASGI application so every request is recorded here."""
    from .middleware import StatsMiddleware
    return StatsMiddleware(app, stats=self)

  # Reading

  @property
  def response_counts(self) -> Dict[str, int]:
    with self._lock.read_locked():
      return dict(self._response_counts)

  @property
  def total_response_counts(self) -> Dict[str, int]:
    with self._lock.read_locked():
      return dict(self._total_response_counts)

  @property
  def total_response_time(self) -> float:
    with self._lock.read_locked():
      return self._total_response_time

  def data(self) -> StatsData:
    """Return a snapshot that shares no mutable state with this instance."""
    with self._lock.read_locked():
      response_counts = dict(self._response_counts)
      total_response_counts = dict(self._total_response_counts)
      total_response_time = self._total_response_time
      uptime = perf_counter() - self._started_clock
      now = datetime.now().astimezone()

    count = sum(response_counts.values())
    total_count = sum(total_response_counts.values())
    average_response_time = (total_response_time / total_count
                             if total_count else 0.0)

    return StatsData(
      pid=self.pid,
      uptime=format_duration(uptime),
      uptime_sec=uptime,
      time=format_time(now),
      unixtime=int(now.timestamp()),
      status_code_count=response_counts,
      total_status_code_count=total_response_counts,
      count=count,
      total_count=total_count,
      total_response_time=format_duration(total_response_time),
      total_response_time_sec=total_response_time,
      average_response_time=format_duration(average_response_time),
      average_response_time_sec=average_response_time,
    )
