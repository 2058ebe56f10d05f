# readtree/cli/interface.py
import io
import sys
from pathlib import Path
from typing import Any, Dict

import click
from click_option_group import optgroup
from rich.console import Console as RichConsole
import structlog

from readtree import __version__ as app_version
from readtree.config.settings import (
    TreeSettings, CollisionPolicy, OutputFormat,
    DEFAULT_ENTRY_POINT, DEFAULT_EXPORT_NAME, DEFAULT_OUTPUT_FORMAT,
)
from readtree.config.loader import (
    load_and_merge_configs, select_profile, load_args_files, parse_key_value_args, build_settings,
)
from readtree.logging_setup import configure_logging
from readtree.core.output import (
    write_to_stdout, write_to_file, render_json, render_keys, build_rich_tree,
)
from readtree.core.pipeline import TreeReader
from readtree.exceptions import ReadTreeError

log = structlog.get_logger(__name__)

# cli parameter name -> TreeSettings attribute, for options layered over config files.
CLI_PARAM_TO_SETTINGS_ATTR: Dict[str, str] = {
    "root_path": "root_path",
    "entry_point": "entry_point",
    "export_name": "export_name",
    "exclude_patterns": "exclude_patterns",
    "collisions_str": "collisions",
    "lazy": "lazy",
    "not_root": "root_dir",
    "args_files": "args_files",
    "output_format_str": "output_format",
    "output_file": "output_file",
}

def _collect_options(ctx: click.Context, cli_params: Dict[str, Any]) -> Dict[str, Any]:
    raw_config = load_and_merge_configs()
    options = select_profile(raw_config, cli_params.get("active_config_profile_name"))

    for param_name, attr in CLI_PARAM_TO_SETTINGS_ATTR.items():
        if ctx.get_parameter_source(param_name) != click.core.ParameterSource.COMMANDLINE:
            continue
        value = cli_params[param_name]
        if param_name == "not_root":
            value = not value
        elif param_name in ("exclude_patterns", "args_files"):
            value = list(value)
        options[attr] = value
    return options

def _build_argument_bundle(settings: TreeSettings, cli_pairs) -> Dict[str, Any]:
    # precedence: config `args` table, then --args-file files, then --arg pairs.
    bundle: Dict[str, Any] = dict(settings.args)
    bundle.update(load_args_files(settings.args_files))
    bundle.update(parse_key_value_args(cli_pairs))
    return bundle

def _render(namespace: Any, settings: TreeSettings) -> str:
    if settings.output_format == OutputFormat.KEYS:
        keys = render_keys(namespace)
        return "\n".join(keys) + ("\n" if keys else "")
    if settings.output_format == OutputFormat.TREE:
        buffer = io.StringIO()
        console = RichConsole(file=buffer, force_terminal=False, width=120)
        console.print(build_rich_tree(namespace, settings.root_path.name or str(settings.root_path)))
        return buffer.getvalue()
    return render_json(namespace)

def _run_read_tree_flow(settings: TreeSettings, cli_pairs) -> None:
    args_bundle = _build_argument_bundle(settings, cli_pairs)
    log.info("tree_reading_orchestration_started", root=str(settings.root_path), args=sorted(args_bundle))

    reader = TreeReader(settings, args_bundle)
    namespace = reader.read(settings.root_path)
    output = _render(namespace, settings)

    if settings.output_file:
        write_to_file(settings.output_file, output)
        click.echo(f"Info: Output written to: {settings.output_file}", err=True)
    else:
        write_to_stdout(output)


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("root_path", required=False, default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@optgroup.group("Tree Options", help="Control how the directory tree is read.")
@optgroup.option("--entry-point", "entry_point", default=DEFAULT_ENTRY_POINT, help=f"Base name of a directory's own module file. Default: {DEFAULT_ENTRY_POINT}.")
@optgroup.option("--export-name", "export_name", default=DEFAULT_EXPORT_NAME, help=f"Module attribute holding the callable. Default: {DEFAULT_EXPORT_NAME}.")
@optgroup.option("-e", "--exclude", "exclude_patterns", multiple=True, help="Gitignore-style patterns for entries to ignore (replaces the default __pycache__/).")
@optgroup.option("--collisions", "collisions_str", type=click.Choice([c.value for c in CollisionPolicy]), default=CollisionPolicy.OVERRIDE.value, help="Module file and subdirectory with the same name: let the directory win, or fail.")
@optgroup.option("--lazy", "lazy", is_flag=True, default=False, help="Defer loading until values are rendered instead of loading everything first.")
@optgroup.option("--not-root", "not_root", is_flag=True, default=False, help="Load ROOT's own entry-point file instead of treating it as the synthetic root.")
@optgroup.group("Argument Bundle", help="The arguments passed to every loaded module.")
@optgroup.option("--arg", "arg_pairs", multiple=True, metavar="KEY=VALUE", help="Add a string argument to the bundle.")
@optgroup.option("--args-file", "args_files", multiple=True, type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path), help="TOML file(s) merged into the bundle.")
@optgroup.group("Output Options", help="Control how the namespace is printed.")
@optgroup.option("-F", "--output-format", "output_format_str", type=click.Choice([f.value for f in OutputFormat]), default=DEFAULT_OUTPUT_FORMAT.value, help=f"Output format. Default: {DEFAULT_OUTPUT_FORMAT.value}.")
@optgroup.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, writable=True, path_type=Path), default=None, help="Path to write the output to.")
@optgroup.group("Application Behavior", help="Configuration profiles and logging.")
@optgroup.option("--config-profile", "active_config_profile_name", default=None, help="Load a profile from config file(s).")
@optgroup.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@optgroup.option("--force-json-logs", "force_json_logs_cli", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="readtree", prog_name="readtree", help="Show version and exit.")
@click.pass_context
def main_cli_group(ctx: click.Context, **cli_params: Any):
    """readtree: load a directory of Python modules into one nested namespace
    that mirrors the directory structure."""

    log_level = "warning"
    if cli_params.get("verbosity_level", 0) == 1: log_level = "info"
    elif cli_params.get("verbosity_level", 0) >= 2: log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=cli_params.get("force_json_logs_cli", False))

    log.debug("cli_command_invoked", params={k: v for k, v in cli_params.items() if v is not None})

    try:
        settings = build_settings(_collect_options(ctx, cli_params))
        _run_read_tree_flow(settings, cli_params.get("arg_pairs") or ())
    except click.exceptions.Exit as e: raise e
    except ReadTreeError as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except OSError as e:
        log.error("filesystem_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except click.ClickException as e:
        log.error("click_exception_in_cli", error_type=type(e).__name__, message=str(e))
        e.show(); sys.exit(e.exit_code)
    except Exception as e:
        log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
        click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
        sys.exit(1)
