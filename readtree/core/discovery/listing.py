# readtree/core/discovery/listing.py
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, Optional
import pathspec
import structlog

from readtree.core.discovery.pattern_matching import is_entry_excluded, is_name_visible

log = structlog.get_logger(__name__)

class EntryKind(Enum):
    FILE = "regular"
    DIRECTORY = "directory"
    # never descended into, whatever the link points at.
    SYMLINK = "symlink"

def _entry_kind(entry: os.DirEntry) -> EntryKind:
    if entry.is_symlink():
        return EntryKind.SYMLINK
    if entry.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    return EntryKind.FILE

@dataclass(frozen=True)
class DirEntry:
    name: str
    kind: EntryKind

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

def iter_dir_visible(path: Path, exclude_spec: Optional[pathspec.PathSpec] = None) -> Iterator[DirEntry]:
    """
    Yields the visible entries of a directory, sorted by name.

    Hidden entries (leading dot) are dropped, except for the .skip-tree and
    .skip-subtree markers. Entries matching the exclude spec are dropped too.
    Symbolic links are reported as SYMLINK and are not followed.
    A missing path or a path that is not a directory raises from os.scandir.
    """
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if not is_name_visible(entry.name):
            continue
        kind = _entry_kind(entry)
        if is_entry_excluded(entry.name, kind is EntryKind.DIRECTORY, exclude_spec):
            log.debug("directory_entry_excluded", directory=str(path), name=entry.name)
            continue
        yield DirEntry(entry.name, kind)

def read_dir_visible(path: Path, exclude_spec: Optional[pathspec.PathSpec] = None) -> Dict[str, EntryKind]:
    # reads all visible contents of a directory, including the skip markers.
    listing = {entry.name: entry.kind for entry in iter_dir_visible(path, exclude_spec)}
    log.debug("directory_listed", directory=str(path), entries=len(listing))
    return listing
