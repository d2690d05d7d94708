"""
Reader/writer lock used to guard shared counter state.
"""
from contextlib import contextmanager
from threading import Condition, Lock


class ReadWriteLock:
  """
  Many concurrent readers or one exclusive writer.

  Waiting writers block new readers so a steady stream of snapshot reads
  cannot starve request recording.
  """

  def __init__(self):
    self._cond = Condition(Lock())
    self._readers = 0
    self._writer = False
    self._writers_waiting = 0

  def acquire_read(self) -> None:
    with self._cond:
      while self._writer or self._writers_waiting:
        self._cond.wait()
      self._readers += 1

  def release_read(self) -> None:
    with self._cond:
      self._readers -= 1
      if self._readers == 0:
        self._cond.notify_all()

  def acquire_write(self) -> None:
    with self._cond:
      self._writers_waiting += 1
      try:
        while self._writer or self._readers:
          self._cond.wait()
      finally:
        self._writers_waiting -= 1
      self._writer = True

  def release_write(self) -> None:
    with self._cond:
      self._writer = False
      self._cond.notify_all()

  @contextmanager
  def read_locked(self):
    self.acquire_read()
    try:
      yield
    finally:
      self.release_read()

  @contextmanager
  def write_locked(self):
    self.acquire_write()
    try:
      yield
    finally:
      self.release_write()
