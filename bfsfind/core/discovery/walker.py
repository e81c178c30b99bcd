# bfsfind/core/discovery/walker.py
import os
import stat
from collections import deque
from pathlib import Path
from typing import Deque, Iterator, Optional, Tuple
import structlog

from bfsfind.config.settings import SearchFilter
from bfsfind.core.channel import ResultSender
from bfsfind.core.discovery.filters import file_matches, is_hidden
from bfsfind.core.discovery.ignore_matcher import IgnoreMatcher
from bfsfind.core.results import Failure, FailureStage, Match

log = structlog.get_logger(__name__)


def _list_directory(directory: Path) -> Iterator[os.DirEntry]:
    # lazily lists one directory; opening or reading errors surface as OSError.
    with os.scandir(directory) as it:
        yield from it


def _entry_is_dir_hint(entry: os.DirEntry) -> bool:
    # cheap kind guess for the ignore check, which runs before the real metadata query.
    # follows symlinks so "build/" rules also hide a link to a directory; the
    # walker itself still never descends into links.
    try:
        return entry.is_dir()
    except OSError:
        return False


def crawl_bfs(
    search_filter: SearchFilter,
    sender: ResultSender,
    ignore_matcher: Optional[IgnoreMatcher] = None,
) -> bool:
    """
    Breadth-first walk from the filter's root using an explicit frontier
    queue. Matches and failures are sent as they are found.

    Returns False if the receiver went away before the walk finished.
    """
    root = search_filter.root_path
    max_depth = search_filter.max_depth
    honor_ignore = not search_filter.include_ignored and ignore_matcher is not None

    frontier: Deque[Tuple[Path, int]] = deque([(root, 0)])
    dirs_listed = 0
    matches_sent = 0

    while frontier:
        directory, depth = frontier.popleft()
        if max_depth is not None and depth > max_depth:
            continue

        try:
            for entry in _list_directory(directory):
                entry_path = directory / entry.name

                if honor_ignore and ignore_matcher.is_ignored(entry_path, _entry_is_dir_hint(entry)):
                    log.debug("entry_skipped_gitignored", path=str(entry_path))
                    continue

                try:
                    entry_stat = entry.stat(follow_symlinks=False)
                except OSError as e:
                    log.debug("entry_metadata_failed", path=str(entry_path), error=str(e))
                    if not sender.send(Failure.from_exception(entry_path, e, FailureStage.METADATA)):
                        return False
                    continue

                if not search_filter.include_hidden and is_hidden(entry.name, entry_stat):
                    continue

                if stat.S_ISDIR(entry_stat.st_mode):
                    if max_depth is None or depth < max_depth:
                        frontier.append((entry_path, depth + 1))
                elif file_matches(entry_path, search_filter.pattern, search_filter.extensions):
                    if not sender.send(Match(entry_path)):
                        return False
                    matches_sent += 1
        except OSError as e:
            log.debug("directory_listing_failed", path=str(directory), error=str(e))
            if not sender.send(Failure.from_exception(directory, e, FailureStage.LISTING)):
                return False
            continue
        dirs_listed += 1

    log.info("bfs_walk_finished", directories=dirs_listed, matches=matches_sent)
    return True


def run(
    search_filter: SearchFilter,
    sender: ResultSender,
    ignore_matcher: Optional[IgnoreMatcher] = None,
) -> None:
    """
    Producer entry point: walks the tree and always closes *sender* at the
    end, also when the walk dies on something unexpected (reported as one
    WALK failure first). A consumer that closed its end is a clean stop.

    Every event logged during the walk carries the search root.
    """
    with structlog.contextvars.bound_contextvars(root=str(search_filter.root_path)):
        log.info(
            "bfs_walk_started",
            pattern=search_filter.pattern,
            max_depth=search_filter.max_depth,
            gitignore_active=bool(ignore_matcher and ignore_matcher.has_rules and not search_filter.include_ignored),
        )
        try:
            if not crawl_bfs(search_filter, sender, ignore_matcher):
                log.debug("bfs_walk_stopped_receiver_closed")
        except Exception as e:
            log.error("bfs_walk_crashed", error=str(e), exc_info=True)
            sender.send(Failure.from_exception(search_filter.root_path, e, FailureStage.WALK))
        finally:
            sender.close()
