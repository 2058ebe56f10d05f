# readtree/core/pipeline.py
from pathlib import Path
from typing import Any, Optional
import structlog

from readtree.config.settings import TreeSettings
from readtree.core.discovery.pattern_matching import compile_glob_patterns_to_spec
from readtree.core.lazy import force_all
from readtree.core.walker import Skip, read_tree_impl
from readtree.exceptions import RootSkippedError

log = structlog.get_logger(__name__)

class TreeReader:
    # reads directory trees with one set of settings and one argument bundle.
    def __init__(self, settings: Optional[TreeSettings] = None, args: Any = None):
        self.settings: TreeSettings = settings or TreeSettings()
        self.args = {} if args is None else args
        self.log = structlog.get_logger(f"{__name__}.{self.__class__.__name__}")
        self.exclude_spec = compile_glob_patterns_to_spec(self.settings.exclude_patterns)

    def read(self, path: Path, root_dir: Optional[bool] = None) -> Any:
        path = Path(path)
        root_dir = self.settings.root_dir if root_dir is None else root_dir
        self.log.info("tree_read_started", path=str(path), root_dir=root_dir, lazy=self.settings.lazy)

        tree = read_tree_impl(path, root_dir, self.args, self.settings, self.exclude_spec)
        if isinstance(tree, Skip):
            raise RootSkippedError(
                f"Top-level folder {path} has a .skip-tree marker and could not be read by readtree!"
            )

        if self.settings.lazy:
            return tree.value.force()
        namespace = force_all(tree.value)
        self.log.info("tree_read_complete", path=str(path))
        return namespace

def read_tree(path: Path, args: Any, root_dir: bool = True, settings: Optional[TreeSettings] = None) -> Any:
    """
    Reads a directory tree into a single namespace.

    Every module file is called with `args`. The result mirrors the directory
    structure: by default a plain nested dict, fully evaluated (fail-fast);
    with `settings.lazy` a LazyNamespace whose entries load on access.

    Raises:
        RootSkippedError: the root itself carries a .skip-tree marker.
        ConventionError: a loaded file does not export a callable.
    """
    return TreeReader(settings, args).read(path, root_dir=root_dir)
