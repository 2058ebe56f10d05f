# readtree/core/discovery/__init__.py
"""
Directory listing for readtree.

Enumerates the visible entries of a directory, keeping the .skip-tree and
.skip-subtree markers while hiding every other dotfile.
"""
from .listing import DirEntry, EntryKind, iter_dir_visible, read_dir_visible

__all__ = ["DirEntry", "EntryKind", "iter_dir_visible", "read_dir_visible"]
