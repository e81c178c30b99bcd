from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional
import structlog

from bfsfind.exceptions import ConfigError

log = structlog.get_logger(__name__)

WILDCARD = "*"
DEFAULT_PATTERN = WILDCARD
HIDDEN_MARKER = "."
IGNORE_FILE_NAME = ".gitignore"
DEFAULT_CHANNEL_CAPACITY = 100

class SortMethod(Enum):
    # order in which matches are written out.
    DISCOVERY = "discovery"
    PATH = "path"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["SortMethod"]:
        if not s:
            return None
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_sort_method_string", input_string=s)
            return None

class OutputFormat(Enum):
    # how each result message is rendered.
    PLAIN = "plain"
    LABELED = "labeled"
    JSON = "json"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["OutputFormat"]:
        if not s:
            return None
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_output_format_string", input_string=s)
            return None

DEFAULT_SORT_METHOD = SortMethod.DISCOVERY
DEFAULT_OUTPUT_FORMAT = OutputFormat.PLAIN
DEFAULT_SHOW_SUMMARY = False

def normalize_extensions(extensions: Optional[Iterable[str]]) -> Optional[FrozenSet[str]]:
    # "TXT", ".txt" and " txt " all denote the same extension; None means unrestricted.
    if extensions is None:
        return None
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lstrip(".").lower()
        if ext:
            normalized.add(ext)
    return frozenset(normalized)

@dataclass(frozen=True)
class SearchFilter:
    """
    Everything the walker needs for one search. Immutable for the duration of
    the traversal; construct a new one to search again with other settings.
    """
    root_path: Path = Path(".")
    pattern: str = DEFAULT_PATTERN
    max_depth: Optional[int] = None
    extensions: Optional[FrozenSet[str]] = None
    include_hidden: bool = False
    include_ignored: bool = False

    def __post_init__(self):
        if self.max_depth is not None and self.max_depth < 0:
            raise ConfigError(f"max depth must be zero or positive, got {self.max_depth}")
        # frozen dataclass, so normalized values go through object.__setattr__.
        object.__setattr__(self, "root_path", Path(self.root_path))
        object.__setattr__(self, "pattern", self.pattern or DEFAULT_PATTERN)
        object.__setattr__(self, "extensions", normalize_extensions(self.extensions))

@dataclass
class RunConfig:
    # holds all configuration parameters for a single cli run.
    root_path: Path = field(default_factory=lambda: Path("."))
    pattern: str = DEFAULT_PATTERN
    max_depth: Optional[int] = None
    extensions: Optional[List[str]] = None
    include_hidden: bool = False
    include_ignored: bool = False
    sort_method: SortMethod = DEFAULT_SORT_METHOD
    output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT
    output_file: Optional[Path] = None
    show_summary: bool = DEFAULT_SHOW_SUMMARY
    fail_on_error: bool = False
    channel_capacity: int = DEFAULT_CHANNEL_CAPACITY
    save_profile_name: Optional[str] = None

    def to_search_filter(self) -> SearchFilter:
        return SearchFilter(
            root_path=self.root_path,
            pattern=self.pattern,
            max_depth=self.max_depth,
            extensions=frozenset(self.extensions) if self.extensions is not None else None,
            include_hidden=self.include_hidden,
            include_ignored=self.include_ignored,
        )
