"""
Unit tests for the reader/writer lock.
"""
from threading import Event, Thread

from request_stats.rwlock import ReadWriteLock


def test_readers_share_the_lock():
  lock = ReadWriteLock()
  lock.acquire_read()
  lock.acquire_read()
  lock.release_read()
  lock.release_read()

  with lock.write_locked():
    pass


def test_writer_waits_for_reader():
  lock = ReadWriteLock()
  acquired = Event()

  def write():
    with lock.write_locked():
      acquired.set()

  lock.acquire_read()
  writer = Thread(target=write)
  writer.start()
  try:
    assert not acquired.wait(0.1)
  finally:
    lock.release_read()
  writer.join(2.0)
  assert acquired.is_set()


def test_reader_waits_for_writer():
  lock = ReadWriteLock()
  acquired = Event()

  def read():
    with lock.read_locked():
      acquired.set()

  lock.acquire_write()
  reader = Thread(target=read)
  reader.start()
  try:
    assert not acquired.wait(0.1)
  finally:
    lock.release_write()
  reader.join(2.0)
  assert acquired.is_set()
