# readtree/core/__init__.py
"""
The tree loader: directory listing, module loading, the recursive walker and
the top-level driver.
"""
from .fixpoint import fix
from .lazy import LazyNamespace, Thunk, force_all
from .pipeline import TreeReader, read_tree
from .walker import Ok, Skip, NodeResult, merge_node, read_tree_impl

__all__ = [
    "fix",
    "LazyNamespace",
    "Thunk",
    "force_all",
    "TreeReader",
    "read_tree",
    "Ok",
    "Skip",
    "NodeResult",
    "merge_node",
    "read_tree_impl",
]
