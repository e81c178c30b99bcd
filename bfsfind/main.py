# bfsfind/main.py
"""Main entry point for the bfsfind CLI application."""

from bfsfind.cli.interface import main_cli


def entrypoint():
    """Function to be called by the script defined in pyproject.toml."""
    main_cli(prog_name="bfsfind")

if __name__ == '__main__':
    entrypoint()
