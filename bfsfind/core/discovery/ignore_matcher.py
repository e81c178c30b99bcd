# bfsfind/core/discovery/ignore_matcher.py
from pathlib import Path, PurePosixPath
from typing import Iterator, Optional, Tuple
import pathspec
import structlog

from bfsfind.config.settings import IGNORE_FILE_NAME

log = structlog.get_logger(__name__)

def load_gitignore_spec(gitignore_file_path: Path) -> Optional[pathspec.GitIgnoreSpec]:
    # loads and compiles a .gitignore file; any failure means "no rules", never an error.
    if not gitignore_file_path.is_file():
        return None
    try:
        with gitignore_file_path.open("r", encoding="utf-8", errors="ignore") as f_obj:
            return pathspec.GitIgnoreSpec.from_lines(f_obj)
    except Exception as e:
        log.warning("failed_to_parse_gitignore_file", path=str(gitignore_file_path), error=str(e))
    return None


class IgnoreMatcher:
    """
    Answers "is this path ignored?" from the single .gitignore at the search
    root. Nested, global and .git/info/exclude files are never read.

    Immutable after construction, so one instance is shared by every step of
    a walk (and is safe to query from any thread).
    """

    def __init__(self, root: Path, spec: Optional[pathspec.GitIgnoreSpec] = None):
        self.root = Path(root)
        self._spec = spec

    @classmethod
    def from_root(cls, root: Path) -> "IgnoreMatcher":
        root = Path(root)
        spec = load_gitignore_spec(root / IGNORE_FILE_NAME)
        if spec is not None:
            log.debug("gitignore_loaded", root=str(root), rule_count=len(spec))
        return cls(root, spec)

    @property
    def has_rules(self) -> bool:
        return self._spec is not None

    def is_ignored(self, path: Path, is_dir: bool) -> bool:
        """
        True if *path*, or one of its ancestors below the root, is excluded by
        a rule and not re-included by a later "!" rule. The path itself is
        checked first and then each parent, nearest first; the first one a rule
        decides about wins.
        """
        if self._spec is None:
            return False
        try:
            relative = PurePosixPath(Path(path).relative_to(self.root).as_posix())
        except ValueError:
            # outside the root: the root's rules don't apply.
            return False
        if not relative.parts or relative.parts == (".",):
            return False

        for candidate, candidate_is_dir in _self_and_parents(relative, is_dir):
            # directory-only rules ("build/") need the trailing slash to apply.
            candidate_str = f"{candidate}/" if candidate_is_dir else str(candidate)
            result = self._spec.check_file(candidate_str)
            if result.include is not None:
                return result.include
        return False


def _self_and_parents(relative: PurePosixPath, is_dir: bool) -> Iterator[Tuple[PurePosixPath, bool]]:
    yield relative, is_dir
    for parent in relative.parents:
        if parent == PurePosixPath("."):
            break
        yield parent, True
