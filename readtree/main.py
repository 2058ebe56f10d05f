"""Main entry point for the readtree CLI application."""

from readtree.cli.interface import main_cli_group


def entrypoint():
    """Function to be called by the script defined in pyproject.toml."""
    main_cli_group(prog_name="readtree")

if __name__ == '__main__':
    entrypoint()
