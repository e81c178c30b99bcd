# bfsfind/core/search.py
"""
Starts a walk on a background thread and hands back the consuming end.

    with start_search(SearchFilter(root_path=Path("src"), extensions={"py"})) as stream:
        for message in stream:
            ...

Leaving the block early (or calling close()) stops the walker.
"""
import threading
from typing import Iterator, Optional
import structlog

from bfsfind.config.settings import DEFAULT_CHANNEL_CAPACITY, SearchFilter
from bfsfind.core.channel import ResultReceiver, open_channel
from bfsfind.core.discovery.ignore_matcher import IgnoreMatcher
from bfsfind.core.discovery.walker import run as run_walker
from bfsfind.core.results import ResultMessage, SearchResults

log = structlog.get_logger(__name__)


class SearchStream:
    """Receive side of a running search plus the thread producing it."""

    def __init__(self, receiver: ResultReceiver, worker: threading.Thread):
        self._receiver = receiver
        self._worker = worker

    @property
    def running(self) -> bool:
        return self._worker.is_alive()

    def receive(self, timeout: Optional[float] = None) -> Optional[ResultMessage]:
        return self._receiver.receive(timeout=timeout)

    def close(self) -> None:
        # cancels the walk if it is still going; safe to call more than once.
        self._receiver.close()

    def join(self, timeout: Optional[float] = None) -> bool:
        self._worker.join(timeout)
        return not self._worker.is_alive()

    def __iter__(self) -> Iterator[ResultMessage]:
        return iter(self._receiver)

    def __enter__(self) -> "SearchStream":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def start_search(search_filter: SearchFilter, capacity: int = DEFAULT_CHANNEL_CAPACITY) -> SearchStream:
    sender, receiver = open_channel(capacity)

    # the matcher is only worth building when ignore rules are honored.
    ignore_matcher = None
    if not search_filter.include_ignored:
        ignore_matcher = IgnoreMatcher.from_root(search_filter.root_path)

    worker = threading.Thread(
        target=run_walker,
        args=(search_filter, sender, ignore_matcher),
        name=f"bfsfind-walker:{search_filter.root_path}",
        daemon=True,
    )
    worker.start()
    log.debug("search_started", root=str(search_filter.root_path), capacity=capacity)
    return SearchStream(receiver, worker)


def collect_search(
    search_filter: SearchFilter,
    sort: bool = False,
    capacity: int = DEFAULT_CHANNEL_CAPACITY,
) -> SearchResults:
    # drains a whole search; sorting (if asked) happens only after the walk is done.
    results = SearchResults()
    with start_search(search_filter, capacity=capacity) as stream:
        for message in stream:
            results.add(message)
    if sort:
        results.matches.sort()
    log.info("search_collected", matches=len(results.matches), failures=len(results.failures))
    return results
