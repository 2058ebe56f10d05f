# readtree/core/module_loader.py
import runpy
from pathlib import Path
from typing import Any, Optional
import structlog

from readtree.config.settings import DEFAULT_ENTRY_POINT, DEFAULT_EXPORT_NAME, MODULE_EXTENSION
from readtree.exceptions import ConventionError, ModuleLoadError

log = structlog.get_logger(__name__)

_MISSING = object()

def module_name_from_file(file_name: str) -> Optional[str]:
    """
    Extracts the module name from a file name by removing the .py extension.

        module_name_from_file("foobar.py")    -> "foobar"
        module_name_from_file("sources.json") -> None
    """
    if file_name.endswith(MODULE_EXTENSION) and len(file_name) > len(MODULE_EXTENSION):
        return file_name[: -len(MODULE_EXTENSION)]
    return None

def _describe_kind(value: Any) -> str:
    if value is _MISSING:
        return "missing"
    return type(value).__name__

def load_export(path: Path, export_name: str = DEFAULT_EXPORT_NAME) -> Any:
    # executes a module file and returns its exported attribute, or _MISSING.
    try:
        namespace = runpy.run_path(str(path), run_name=f"readtree_module.{path.stem}")
    except FileNotFoundError as e:
        raise ModuleLoadError(path, "file does not exist") from e
    # sys.exit() at import time is reported against the file like any other failure.
    except (Exception, SystemExit) as e:
        raise ModuleLoadError(path, f"{type(e).__name__}: {e}") from e
    return namespace.get(export_name, _MISSING)

def import_file(
    path: Path,
    args: Any,
    export_name: str = DEFAULT_EXPORT_NAME,
    entry_point: str = DEFAULT_ENTRY_POINT,
) -> Any:
    """
    Imports a module file and calls its export with the argument bundle.

    A directory path stands for its entry-point file. The exported value must
    be callable; anything else is a ConventionError naming the file.
    """
    path = Path(path)
    if path.is_dir():
        path = path / (entry_point + MODULE_EXTENSION)

    exported = load_export(path, export_name)
    if not callable(exported):
        raise ConventionError(path, _describe_kind(exported), export_name)

    log.debug("module_file_imported", path=str(path), export=export_name)
    return exported(args)
