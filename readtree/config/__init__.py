# readtree/config/__init__.py
"""
Settings and TOML configuration loading for readtree.
"""
from .settings import TreeSettings, CollisionPolicy, OutputFormat
from .loader import load_and_merge_configs, load_args_files, build_settings

__all__ = [
    "TreeSettings",
    "CollisionPolicy",
    "OutputFormat",
    "load_and_merge_configs",
    "load_args_files",
    "build_settings",
]
