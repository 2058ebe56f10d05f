# readtree/core/discovery/pattern_matching.py
from typing import Iterable, Optional
import pathspec
import structlog

from readtree.config.settings import SKIP_SUBTREE_MARKER, SKIP_TREE_MARKER
from readtree.exceptions import ConfigError

log = structlog.get_logger(__name__)

MARKER_FILENAMES = frozenset({SKIP_TREE_MARKER, SKIP_SUBTREE_MARKER})

def compile_glob_patterns_to_spec(glob_patterns: Iterable[str]) -> Optional[pathspec.PathSpec]:
    # compiles a list of glob patterns into a pathspec object for matching.
    glob_patterns = list(glob_patterns)
    if not glob_patterns:
        return None
    try:
        return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, glob_patterns)
    except Exception as e:
        raise ConfigError(f"error compiling exclude patterns {glob_patterns}: {e}") from e

def is_name_visible(name: str) -> bool:
    # dotfiles are invisible, except for the markers that carry instructions to readtree.
    return name in MARKER_FILENAMES or not name.startswith(".")

def is_entry_excluded(name: str, is_dir: bool, exclude_spec: Optional[pathspec.PathSpec]) -> bool:
    if exclude_spec is None or name in MARKER_FILENAMES:
        return False
    return exclude_spec.match_file(name + "/" if is_dir else name)
