"""Server-Sent Events connection lifecycle for the MCP transport."""

from __future__ import annotations

import json
import logging
import queue
import threading
import time
import uuid
from typing import Any, Callable, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

CONNECTING = "connecting"
OPEN = "open"
CLOSING = "closing"
CLOSED = "closed"

HEARTBEAT_FRAME = ": heartbeat\n\n"
INITIALIZED_NOTIFICATION = "notification/initialized"
TOOLS_CHANGED_NOTIFICATION = "notification/tools/list_changed"

_END_OF_STREAM = object()

TimerFactory = Callable[[float, Callable[[], None]], Any]


def encode_event(payload: Any) -> str:
    """Frame ``payload`` as a single SSE data event."""

    message = payload if isinstance(payload, str) else json.dumps(payload)
    return f"data: {message}\n\n"


class SSEConnection:
    """One client's SSE session.

    Frames are queued by ``push`` and drained by ``stream``, which the HTTP
    layer hands to the WSGI server as the response body. The connection owns
    a heartbeat timer, an absolute deadline timer and any delayed one-shot
    pushes; ``close`` cancels all of them exactly once, whichever teardown
    trigger fires first.
    """

    def __init__(
        self,
        *,
        heartbeat_interval: float = 25.0,
        max_duration: float = 50.0,
        tools_changed_delay: float = 0.1,
        close_delay: float = 0.1,
        timer_factory: TimerFactory = threading.Timer,
    ):
        self.id = uuid.uuid4().hex
        self.heartbeat_interval = heartbeat_interval
        self.max_duration = max_duration
        self.tools_changed_delay = tools_changed_delay
        self.close_delay = close_delay
        self.close_reason: Optional[str] = None
        self._timer_factory = timer_factory
        self._frames: "queue.Queue[Any]" = queue.Queue()
        self._lock = threading.RLock()
        self._state = CONNECTING
        self._heartbeat: Any = None
        self._deadline: Any = None
        self._pending: List[Any] = []
        self._opened_at: Optional[float] = None

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == OPEN

    def open(self, *, handshake: bool = True) -> None:
        """Enter ``open`` and arm the deadline.

        With ``handshake`` the ``initialized`` notification is pushed at once,
        ``tools/list_changed`` follows after a short delay and the heartbeat
        starts.
        """

        with self._lock:
            if self._state != CONNECTING:
                raise RuntimeError(f"Cannot open SSE connection in state {self._state}")
            self._state = OPEN
            self._opened_at = time.monotonic()
            self._deadline = self._start_timer(self.max_duration, self._expire)

            if handshake:
                self.push(_notification(INITIALIZED_NOTIFICATION))
                self.later(
                    self.tools_changed_delay,
                    lambda: self.push(_notification(TOOLS_CHANGED_NOTIFICATION)),
                )
                self._heartbeat = self._start_timer(self.heartbeat_interval, self._beat)

        logger.info("SSE connection %s opened", self.id)

    def push(self, payload: Any) -> bool:
        """Queue a data frame; a no-op returning ``False`` once torn down."""

        try:
            frame = encode_event(payload)
        except (TypeError, ValueError) as exc:
            logger.error("SSE connection %s failed to encode frame: %s", self.id, exc)
            self.close("stream error")
            return False
        return self._enqueue(frame)

    def push_comment(self, text: str) -> bool:
        return self._enqueue(f": {text}\n\n")

    def respond(self, response: Dict[str, Any]) -> bool:
        """Push the answer to a posted message, then close shortly after."""

        delivered = self.push(response)
        if delivered:
            self.later(self.close_delay, lambda: self.close("response delivered"))
        return delivered

    def fail(self, response: Dict[str, Any]) -> bool:
        """Push an error frame and close immediately."""

        delivered = self.push(response)
        self.close("request rejected")
        return delivered

    def later(self, delay: float, callback: Callable[[], Any]) -> None:
        """Schedule a one-shot callback that is cancelled on teardown."""

        with self._lock:
            if self._state != OPEN:
                return
            self._pending.append(self._start_timer(delay, callback))

    def close(self, reason: str = "closed") -> bool:
        """Tear the connection down; returns ``False`` if it was already closing."""

        with self._lock:
            if self._state in (CLOSING, CLOSED):
                return False
            self._state = CLOSING
            self.close_reason = reason
            timers = [self._heartbeat, self._deadline, *self._pending]
            self._heartbeat = None
            self._deadline = None
            self._pending = []
            for timer in timers:
                if timer is not None:
                    timer.cancel()
            self._frames.put(_END_OF_STREAM)
            self._state = CLOSED

        lifetime = 0.0
        if self._opened_at is not None:
            lifetime = time.monotonic() - self._opened_at
        logger.info("SSE connection %s closed (%s) after %.1fs", self.id, reason, lifetime)
        return True

    def stream(self) -> Iterator[str]:
        """Yield queued frames until the connection closes.

        The WSGI server closes this generator when the client goes away or a
        write fails, which tears the connection down and cancels every timer
        before ``close`` returns. A WSGI server only notices a vanished client
        when it writes, so on an idle stream the teardown happens on the next
        heartbeat, at most ``heartbeat_interval`` seconds after the disconnect.
        """

        try:
            while True:
                frame = self._frames.get()
                if frame is _END_OF_STREAM:
                    break
                yield frame
        finally:
            self.close("client disconnected")

    def _enqueue(self, frame: str) -> bool:
        with self._lock:
            if self._state != OPEN:
                logger.debug("Dropping frame for %s connection %s", self._state, self.id)
                return False
            self._frames.put(frame)
            return True

    def _beat(self) -> None:
        with self._lock:
            if self._state != OPEN:
                return
            self._enqueue(HEARTBEAT_FRAME)
            self._heartbeat = self._start_timer(self.heartbeat_interval, self._beat)

    def _expire(self) -> None:
        logger.info("SSE connection %s reached its %ss deadline", self.id, self.max_duration)
        self.close("deadline")

    def _start_timer(self, delay: float, callback: Callable[[], Any]) -> Any:
        timer = self._timer_factory(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


def _notification(method: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "method": method, "params": {}}
