"""
Per-request status capture for ASGI responses.
"""
from time import perf_counter
from typing import Optional, Tuple

from starlette.types import Message, Send

DEFAULT_STATUS_CODE = 200
WEBSOCKET_REFUSED_STATUS_CODE = 403

# Messages that commit a status line to the client.
_STATUS_MESSAGES = ("http.response.start", "websocket.http.response.start")


class StatusRecorder:
  """
  Proxy for an ASGI ``send`` callable that latches the first committed status.

  Every message is forwarded unchanged. ``status_code`` stays ``None`` until
  the wrapped application commits a status through the normal response path,
  so a connection that was upgraded or taken over never reports one.
  """

  def __init__(self, send: Send):
    self._send = send
    self.status_code: Optional[int] = None
    self.upgraded = False

  @property
  def committed(self) -> bool:
    return self.status_code is not None

  def observe(self, message: Message) -> None:
    """Update recorder state from an outgoing message without sending it."""
    message_type = message.get("type")
    if message_type in _STATUS_MESSAGES:
      if self.status_code is None:
        self.status_code = int(message.get("status", DEFAULT_STATUS_CODE))
    elif message_type == "http.response.body":
      if self.status_code is None:
        self.status_code = DEFAULT_STATUS_CODE
    elif message_type == "websocket.accept":
      self.upgraded = True
    elif message_type == "websocket.close":
      # Closing before accept makes the server refuse the handshake with 403.
      if self.status_code is None and not self.upgraded:
        self.status_code = WEBSOCKET_REFUSED_STATUS_CODE

  async def __call__(self, message: Message) -> None:
    self.observe(message)
    await self._send(message)


def begin(send: Send) -> Tuple[float, StatusRecorder]:
  """Start timing a request and wrap its ``send`` callable."""
  return perf_counter(), StatusRecorder(send)
