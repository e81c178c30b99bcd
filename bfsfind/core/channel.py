# bfsfind/core/channel.py
"""
Bounded single-producer/single-consumer channel between the walker thread
and whoever reads search results.

The producer holds a ResultSender, the consumer a ResultReceiver. A full
queue blocks the producer (backpressure). Closing the receiver tells the
producer to stop: its next send, or the send it is blocked in, returns False.
End of stream is signalled by closing the sender; readers just see iteration
end, never a marker value.
"""
import queue
import threading
from typing import Iterator, Optional, Tuple
import structlog

from bfsfind.config.settings import DEFAULT_CHANNEL_CAPACITY
from bfsfind.core.results import ResultMessage
from bfsfind.exceptions import DiscoveryError

log = structlog.get_logger(__name__)

# how often a producer blocked on a full queue re-checks for a closed receiver.
SEND_POLL_INTERVAL_SECONDS = 0.05

_END_OF_STREAM = object()


class _ChannelState:
    def __init__(self, capacity: int):
        self.queue: "queue.Queue[object]" = queue.Queue(maxsize=capacity)
        self.receiver_closed = threading.Event()
        self.sender_closed = threading.Event()
        self.drained = False


class ResultSender:
    """Send-only end of a result channel."""

    def __init__(self, state: _ChannelState):
        self._state = state

    @property
    def receiver_closed(self) -> bool:
        return self._state.receiver_closed.is_set()

    def send(self, message: ResultMessage) -> bool:
        # returns False once the receiver is gone; the caller should stop producing.
        state = self._state
        if state.sender_closed.is_set():
            raise DiscoveryError("send on a closed result channel")
        while not state.receiver_closed.is_set():
            try:
                state.queue.put(message, timeout=SEND_POLL_INTERVAL_SECONDS)
                return True
            except queue.Full:
                continue
        return False

    def close(self) -> None:
        state = self._state
        if state.sender_closed.is_set():
            return
        state.sender_closed.set()
        if state.receiver_closed.is_set():
            return
        while not state.receiver_closed.is_set():
            try:
                state.queue.put(_END_OF_STREAM, timeout=SEND_POLL_INTERVAL_SECONDS)
                return
            except queue.Full:
                continue


class ResultReceiver:
    """Receive-only end of a result channel. Iterating drains it until closure."""

    def __init__(self, state: _ChannelState):
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.drained or self._state.receiver_closed.is_set()

    def receive(self, timeout: Optional[float] = None) -> Optional[ResultMessage]:
        """
        Blocks for the next message. Returns None once the stream has ended
        (sender closed and everything read) or the receiver was closed.
        Raises queue.Empty if *timeout* expires first.
        """
        if self.closed:
            return None
        item = self._state.queue.get(timeout=timeout)
        if item is _END_OF_STREAM:
            self._state.drained = True
            return None
        return item  # type: ignore[return-value]

    def close(self) -> None:
        # cancels the producer; anything still buffered is never read.
        state = self._state
        if state.receiver_closed.is_set():
            return
        state.receiver_closed.set()
        if not state.drained:
            log.debug("result_channel_closed_early", pending=state.queue.qsize())

    def __iter__(self) -> Iterator[ResultMessage]:
        while True:
            message = self.receive()
            if message is None:
                return
            yield message

    def __enter__(self) -> "ResultReceiver":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def open_channel(capacity: int = DEFAULT_CHANNEL_CAPACITY) -> Tuple[ResultSender, ResultReceiver]:
    if capacity < 1:
        raise DiscoveryError(f"result channel capacity must be at least 1, got {capacity}")
    state = _ChannelState(capacity)
    return ResultSender(state), ResultReceiver(state)
