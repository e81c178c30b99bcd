# bfsfind/core/discovery/filters.py
import os
import stat
from pathlib import Path
from typing import AbstractSet, Optional

from bfsfind.config.settings import HIDDEN_MARKER, WILDCARD

# windows exposes the attribute bits on stat results; elsewhere this is simply absent.
FILE_ATTRIBUTE_HIDDEN = getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0x2)

def match_name(file_name: str, pattern: str) -> bool:
    """
    Naive name filter: "*" matches everything, any other pattern has its
    wildcards removed and must then appear somewhere in the name
    (case-sensitive).

    This is deliberately not glob matching. "abc*" matches "xabc" just as
    well as "abcx", and "a*c" looks for the literal "ac".
    """
    if pattern == WILDCARD:
        return True
    return pattern.replace(WILDCARD, "") in file_name

def match_extension(path: Path, allowed_extensions: Optional[AbstractSet[str]]) -> bool:
    # allowed entries may carry a leading dot, comparison ignores case.
    if allowed_extensions is None:
        return True
    suffix = path.suffix
    if not suffix:
        # no extension at all (dotfiles like ".bashrc" count as extensionless).
        return False
    extension = suffix[1:].lower()
    return any(extension == allowed.lstrip(".").lower() for allowed in allowed_extensions)

def file_matches(path: Path, pattern: str, allowed_extensions: Optional[AbstractSet[str]]) -> bool:
    # combined filter applied to every file the walker sees.
    if not match_name(path.name, pattern):
        return False
    return match_extension(path, allowed_extensions)

def is_hidden(name: str, stat_result: Optional[os.stat_result] = None) -> bool:
    # leading-dot names are hidden everywhere; the attribute bit only exists on windows.
    if name.startswith(HIDDEN_MARKER) and name not in (".", ".."):
        return True
    if stat_result is None:
        return False
    attributes = getattr(stat_result, "st_file_attributes", 0)
    return bool(attributes & FILE_ATTRIBUTE_HIDDEN)
