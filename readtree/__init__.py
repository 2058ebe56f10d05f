"""readtree: load a directory tree of Python modules into one nested namespace.

    import readtree

    namespace = readtree.read_tree("ops/", {"env": "prod"})
    namespace["services"]["web"]
"""

__version__ = "0.1.0"

from readtree.config.settings import TreeSettings
from readtree.core.fixpoint import fix
from readtree.core.lazy import LazyNamespace, Thunk
from readtree.core.pipeline import TreeReader, read_tree
from readtree.exceptions import (
    ReadTreeError,
    ConventionError,
    ModuleLoadError,
    RootSkippedError,
    NameCollisionError,
    InfiniteRecursionError,
)

__all__ = [
    "__version__",
    "TreeSettings",
    "fix",
    "LazyNamespace",
    "Thunk",
    "TreeReader",
    "read_tree",
    "ReadTreeError",
    "ConventionError",
    "ModuleLoadError",
    "RootSkippedError",
    "NameCollisionError",
    "InfiniteRecursionError",
]
