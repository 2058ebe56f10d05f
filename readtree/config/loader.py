# readtree/config/loader.py
"""
Handles loading and merging of readtree settings and argument bundles from TOML files.
"""
import toml
from pathlib import Path
from typing import Any, Dict, Iterable, Optional
from dataclasses import fields as dataclass_fields
import structlog

from readtree.exceptions import ConfigError

from .settings import TreeSettings, CollisionPolicy, OutputFormat

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".readtree.toml", "readtree.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "readtree"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

CONFIG_KEY_TO_SETTINGS_ATTR_MAP: Dict[str, str] = {
    "entry_point": "entry_point",
    "export_name": "export_name",
    "exclude_patterns": "exclude_patterns",
    "collisions": "collisions",
    "lazy": "lazy",
    "root_dir": "root_dir",
    "args": "args",
    "args_files": "args_files",
    "output_format": "output_format",
    "output_file": "output_file",
}

def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file():
        return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except toml.TomlDecodeError as e:
        raise ConfigError(f"could not parse config file {file_path}: {e}") from e
    if file_path.name == "pyproject.toml":
        return data.get("tool", {}).get("readtree", {})
    return data

def load_and_merge_configs(project_dir: Optional[Path] = None) -> Dict[str, Any]:
    # user-global settings first, then the first project-local file found.
    merged: Dict[str, Any] = {}
    if USER_CONFIG_FILE.is_file():
        log.info("loading_user_global_config", path=str(USER_CONFIG_FILE))
        merged.update(_load_toml_file_data(USER_CONFIG_FILE))

    project_dir = project_dir or Path.cwd()
    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = project_dir / filename
        if not candidate.is_file():
            continue
        project_settings = _load_toml_file_data(candidate)
        if not project_settings:
            continue
        log.info("loading_project_local_config", path=str(candidate))
        # project profiles extend the user's profiles instead of replacing them.
        project_profiles = project_settings.pop("profiles", {})
        if isinstance(project_profiles, dict) and project_profiles:
            user_profiles = merged.get("profiles")
            if isinstance(user_profiles, dict):
                user_profiles.update(project_profiles)
            else:
                merged["profiles"] = project_profiles
        merged.update(project_settings)
        break

    if not merged:
        log.debug("no_configuration_files_loaded")
    return merged

def select_profile(raw_config: Dict[str, Any], profile_name: Optional[str]) -> Dict[str, Any]:
    # flattens the top-level settings and the chosen profile into one mapping.
    options = {k: v for k, v in raw_config.items() if k in CONFIG_KEY_TO_SETTINGS_ATTR_MAP}
    if not profile_name:
        return options
    profile = raw_config.get("profiles", {}).get(profile_name)
    if not isinstance(profile, dict):
        raise ConfigError(f"profile '{profile_name}' not found in configuration files")
    log.info("applying_profile_settings", profile=profile_name)
    for key, value in profile.items():
        if key in CONFIG_KEY_TO_SETTINGS_ATTR_MAP:
            options[key] = value
    return options

def load_args_files(paths: Iterable[Path]) -> Dict[str, Any]:
    # merges argument bundles from TOML files, later files win per top-level key.
    bundle: Dict[str, Any] = {}
    for path in paths:
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"arguments file not found: {path}")
        try:
            data = toml.load(path)
        except toml.TomlDecodeError as e:
            raise ConfigError(f"could not parse arguments file {path}: {e}") from e
        log.debug("arguments_file_loaded", path=str(path), keys=sorted(data))
        bundle.update(data)
    return bundle

def parse_key_value_args(pairs: Iterable[str]) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ConfigError(f"argument '{pair}' is not of the form KEY=VALUE")
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise ConfigError(f"argument '{pair}' has an empty key")
        result[key] = value
    return result

def build_settings(options: Dict[str, Any]) -> TreeSettings:
    # coerces raw option values (from TOML or the command line) into a TreeSettings.
    kwargs: Dict[str, Any] = {}
    valid_fields = {f.name for f in dataclass_fields(TreeSettings) if f.init}
    for key, value in options.items():
        attr = CONFIG_KEY_TO_SETTINGS_ATTR_MAP.get(key, key)
        if attr not in valid_fields or value is None:
            continue
        kwargs[attr] = value

    if "collisions" in kwargs and not isinstance(kwargs["collisions"], CollisionPolicy):
        kwargs["collisions"] = CollisionPolicy.from_string(str(kwargs["collisions"]))
    if "output_format" in kwargs and not isinstance(kwargs["output_format"], OutputFormat):
        parsed = OutputFormat.from_string(str(kwargs["output_format"]))
        if parsed is None:
            kwargs.pop("output_format")
        else:
            kwargs["output_format"] = parsed
    for path_attr in ("root_path", "output_file"):
        if isinstance(kwargs.get(path_attr), str):
            kwargs[path_attr] = Path(kwargs[path_attr])
    if "args_files" in kwargs:
        kwargs["args_files"] = [Path(p) for p in kwargs["args_files"]]
    if "exclude_patterns" in kwargs:
        kwargs["exclude_patterns"] = list(kwargs["exclude_patterns"])
    if "args" in kwargs and not isinstance(kwargs["args"], dict):
        raise ConfigError(f"'args' must be a table, got {type(kwargs['args']).__name__}")
    return TreeSettings(**kwargs)
