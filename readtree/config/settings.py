from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional
import structlog

log = structlog.get_logger(__name__)

MODULE_EXTENSION = ".py"
SKIP_TREE_MARKER = ".skip-tree"
SKIP_SUBTREE_MARKER = ".skip-subtree"

DEFAULT_ENTRY_POINT = "default"
DEFAULT_EXPORT_NAME = "tree"
DEFAULT_EXCLUDE_PATTERNS = ["__pycache__/"]

class CollisionPolicy(Enum):
    # what to do when a module file and a subdirectory share a name.
    OVERRIDE = "override"
    ERROR = "error"

    @classmethod
    def from_string(cls, s: Optional[str]) -> "CollisionPolicy":
        if not s:
            return cls.OVERRIDE
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_collision_policy_string", input_string=s)
            return cls.OVERRIDE

class OutputFormat(Enum):
    # how the cli renders the loaded namespace.
    JSON = "json"
    TREE = "tree"
    KEYS = "keys"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["OutputFormat"]:
        if not s:
            return None
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_output_format_string", input_string=s)
            return None

DEFAULT_OUTPUT_FORMAT = OutputFormat.JSON

@dataclass
class TreeSettings:
    # holds all configuration parameters for a single read.
    entry_point: str = DEFAULT_ENTRY_POINT
    export_name: str = DEFAULT_EXPORT_NAME
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    collisions: CollisionPolicy = CollisionPolicy.OVERRIDE
    lazy: bool = False
    root_dir: bool = True

    # cli-only settings.
    root_path: Path = field(default_factory=lambda: Path("."))
    args: Dict[str, Any] = field(default_factory=dict)
    args_files: List[Path] = field(default_factory=list)
    output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT
    output_file: Optional[Path] = None

    @property
    def entry_point_file(self) -> str:
        return self.entry_point + MODULE_EXTENSION
