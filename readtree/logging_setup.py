"""
Logging for the readtree CLI.

The library modules only emit events, each through its own
``structlog.get_logger(__name__)``. The events are snake_case names with
key/value context:

- ``directory_listed`` and ``directory_entry_excluded`` from the lister
- ``node_walked``, ``tree_skipped`` and ``subtree_skipped`` from the walker
- ``module_file_imported`` from the loader
- ``tree_read_started`` and ``tree_read_complete`` from the driver

Nothing is configured until the CLI calls ``configure_logging``, so an
application embedding ``read_tree`` keeps its own logging setup.
"""
import logging
import sys
import structlog

READTREE_LOGGER_NAME = "readtree"

def _select_renderer(force_json_logs: bool):
    # JSON for log collectors; otherwise colour only when stderr is a terminal.
    if force_json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

def configure_logging(log_level_str: str = "warning", force_json_logs: bool = False):
    # -v maps to "info" (one line per read), -vv to "debug" (one line per directory and module).
    log_level = getattr(logging, log_level_str.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_select_renderer(force_json_logs),
            foreign_pre_chain=[structlog.stdlib.add_log_level],
        )
    )

    # only the readtree hierarchy; loaded module files keep whatever logging they set up.
    readtree_logger = logging.getLogger(READTREE_LOGGER_NAME)
    readtree_logger.handlers.clear()
    readtree_logger.addHandler(handler)
    readtree_logger.setLevel(log_level)

    structlog.get_logger(__name__).info("logging_configured", level=log_level_str, json=force_json_logs)
