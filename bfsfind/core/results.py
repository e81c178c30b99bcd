# bfsfind/core/results.py
"""
Messages the walker emits on its result channel, plus a small container for
callers that drain a whole search before looking at it.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Union


class FailureStage(Enum):
    # where in the walk a failure happened.
    LISTING = "listing"
    METADATA = "metadata"
    WALK = "walk"


@dataclass(frozen=True)
class Match:
    """A file that passed every filter."""
    path: Path

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "match", "path": str(self.path)}


@dataclass(frozen=True)
class Failure:
    """An error isolated to one directory listing or one entry."""
    path: Path
    description: str
    stage: FailureStage

    @classmethod
    def from_exception(cls, path: Path, error: BaseException, stage: FailureStage) -> "Failure":
        # OSError's str() already names the errno text and the path.
        return cls(path=path, description=str(error) or type(error).__name__, stage=stage)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "failure",
            "path": str(self.path),
            "stage": self.stage.value,
            "error": self.description,
        }

    def __str__(self) -> str:
        return f"{self.stage.value} failed for {self.path}: {self.description}"


ResultMessage = Union[Match, Failure]


@dataclass
class SearchResults:
    matches: List[Path] = field(default_factory=list)
    failures: List[Failure] = field(default_factory=list)

    def add(self, message: ResultMessage) -> None:
        if isinstance(message, Match):
            self.matches.append(message.path)
        else:
            self.failures.append(message)
