import json
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, List
from rich.markup import escape
from rich.tree import Tree
import structlog
from readtree.exceptions import OutputError

log = structlog.get_logger(__name__)

MAX_LEAF_REPR = 80

def write_to_stdout(text_content: str):
    # writes text to standard output.
    try:
        sys.stdout.write(text_content)
        sys.stdout.flush()
    except UnicodeEncodeError as e:
        log.warning("stdout_write_failed_trying_binary_fallback", error=str(e))
        sys.stdout.buffer.write(text_content.encode("utf-8", errors="replace"))
        sys.stdout.buffer.flush()

def write_to_file(output_file_path: Path, text_content: str):
    # writes text content to the specified file path.
    log.info("writing_output_to_file", path=str(output_file_path))
    try:
        output_file_path.write_text(text_content, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"failed to write to file '{output_file_path}': {e}") from e

def _to_plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value

def render_json(namespace: Any) -> str:
    # values json cannot encode (functions, objects) are rendered with repr.
    return json.dumps(_to_plain(namespace), indent=2, default=repr) + "\n"

def _leaf_repr(value: Any) -> str:
    text = repr(value)
    if len(text) > MAX_LEAF_REPR:
        text = text[: MAX_LEAF_REPR - 3] + "..."
    return text

def render_keys(namespace: Any, prefix: str = "") -> List[str]:
    # one dotted attribute path per leaf, in namespace order.
    if not isinstance(namespace, Mapping):
        return [prefix] if prefix else []
    lines: List[str] = []
    for key, value in namespace.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            lines.extend(render_keys(value, path))
        else:
            lines.append(path)
    return lines

def build_rich_tree(namespace: Any, label: str) -> Tree:
    tree = Tree(f"[bold cyan]{escape(label)}[/]")
    _add_branch(tree, namespace)
    return tree

def _add_branch(branch: Tree, value: Any):
    if not isinstance(value, Mapping):
        branch.add(f"[green]{escape(_leaf_repr(value))}[/]")
        return
    for key, child in value.items():
        if isinstance(child, Mapping):
            _add_branch(branch.add(f"[bold]{escape(str(key))}[/]"), child)
        else:
            branch.add(f"{escape(str(key))} = [green]{escape(_leaf_repr(child))}[/]")
