# readtree/core/walker.py
"""
The tree walker: turns a directory into a node result.

Each directory node yields either ``Skip`` (the node and its subtree
contribute nothing) or ``Ok(value)``, where ``value`` is a ``Thunk`` for the
node's merged namespace. Directory listings happen while walking; module
files are only executed when the thunk holding their value is forced.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union
import pathspec
import structlog

from readtree.config.settings import (
    CollisionPolicy,
    SKIP_SUBTREE_MARKER,
    SKIP_TREE_MARKER,
    TreeSettings,
)
from readtree.core.discovery.listing import EntryKind, read_dir_visible
from readtree.core.lazy import LazyNamespace, Thunk
from readtree.core.module_loader import import_file, module_name_from_file
from readtree.exceptions import NameCollisionError

log = structlog.get_logger(__name__)

@dataclass(frozen=True)
class Skip:
    # the node carries a .skip-tree marker.
    pass

@dataclass(frozen=True)
class Ok:
    value: Thunk

NodeResult = Union[Skip, Ok]
Contribution = Tuple[str, Thunk]

SKIP = Skip()

def merge_node(own_value: Any, contributions: Sequence[Contribution]) -> Any:
    """
    Overlays a node's own value with its contributions.

    Own keys come first, then contributions in order, so later entries win
    (module files before subdirectories). A non-mapping own value is returned
    verbatim and the contributions are dropped without being forced.
    """
    if not isinstance(own_value, Mapping):
        return own_value
    if isinstance(own_value, LazyNamespace):
        entries = {key: own_value.thunk(key) for key in own_value}
    else:
        entries = {key: Thunk.of(value, label=str(key)) for key, value in own_value.items()}
    for name, thunk in contributions:
        entries[name] = thunk
    return LazyNamespace(entries)

def _module_file_thunk(path: Path, args: Any, settings: TreeSettings) -> Thunk:
    return Thunk(
        lambda: import_file(path, args, settings.export_name, settings.entry_point),
        label=str(path),
    )

def _check_collisions(init_path: Path, module_files: List[Contribution], children: List[Contribution]) -> None:
    clashing = sorted({name for name, _ in module_files} & {name for name, _ in children})
    if clashing:
        raise NameCollisionError(
            f"{init_path}: module files and subdirectories share the names {clashing}"
        )

def read_tree_impl(
    init_path: Path,
    root_dir: bool,
    args: Any,
    settings: TreeSettings,
    exclude_spec: Optional[pathspec.PathSpec] = None,
) -> NodeResult:
    init_path = Path(init_path)
    dir_listing = read_dir_visible(init_path, exclude_spec)

    # .skip-subtree still imports this node's entry point but merges nothing below it.
    # .skip-tree drops the folder entirely.
    skip_tree = SKIP_TREE_MARKER in dir_listing
    skip_subtree = skip_tree or SKIP_SUBTREE_MARKER in dir_listing

    if skip_tree:
        log.info("tree_skipped", path=str(init_path))
        return SKIP

    entry_file = init_path / settings.entry_point_file
    if root_dir:
        self_value = Thunk.of({}, label=str(init_path))
    else:
        self_value = _module_file_thunk(entry_file, args, settings)

    walked_children = [
        (name, read_tree_impl(init_path / name, False, args, settings, exclude_spec))
        for name, kind in dir_listing.items()
        if kind is EntryKind.DIRECTORY
    ]

    children: List[Contribution] = []
    if not skip_subtree:
        children = [(name, result.value) for name, result in walked_children if isinstance(result, Ok)]
    else:
        log.debug("subtree_skipped", path=str(init_path), dropped=len(walked_children))

    # module files may be symlinks; only real directories are walked.
    entry_kind = dir_listing.get(settings.entry_point_file)
    if entry_kind is not None and entry_kind is not EntryKind.DIRECTORY:
        node_value = self_value
        contributions = children
    else:
        node_value = Thunk.of({}, label=str(init_path))
        module_files: List[Contribution] = []
        for name, kind in dir_listing.items():
            module_name = module_name_from_file(name)
            if kind is not EntryKind.DIRECTORY and module_name is not None:
                module_files.append((module_name, _module_file_thunk(init_path / name, args, settings)))
        if settings.collisions is CollisionPolicy.ERROR:
            _check_collisions(init_path, module_files, children)
        contributions = module_files + children

    log.debug(
        "node_walked",
        path=str(init_path),
        entry_point=node_value is self_value,
        contributions=[name for name, _ in contributions],
    )
    return Ok(Thunk(lambda: merge_node(node_value.force(), contributions), label=str(init_path)))
