"""Event log — what one preview, export or refresh run did.

The app layer creates one log per command, threads it through rendering,
asset decoding and feed refresh, then reads it back to print the summary
(and every event with ``--verbose``).

Thread Safety:
    Appends come from the asset decoding pool, so every access takes the
    lock.  Reads return snapshots.

"""

import threading
from collections import deque
from collections.abc import Iterator

from bentopress.observability.events import PipelineEvent


class EventLog:
    """Bounded, thread-safe list of pipeline events in recording order.

    When more than ``max_events`` are recorded the oldest are dropped and
    counted in :attr:`dropped`.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_dropped", "_events", "_lock")

    def __init__(self, max_events: int = 10_000) -> None:
        self._events: deque[PipelineEvent] = deque(maxlen=max_events)
        self._dropped = 0
        self._lock = threading.Lock()

    def append(self, event: PipelineEvent) -> None:
        with self._lock:
            if len(self._events) == self._events.maxlen:
                self._dropped += 1
            self._events.append(event)

    def query(self, event_type: type | tuple[type, ...]) -> list[PipelineEvent]:
        """Events of the given class (or classes), oldest first."""
        with self._lock:
            return [e for e in self._events if isinstance(e, event_type)]

    @property
    def dropped(self) -> int:
        """Events discarded because the log was full."""
        with self._lock:
            return self._dropped

    def __iter__(self) -> Iterator[PipelineEvent]:
        with self._lock:
            return iter(list(self._events))

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
