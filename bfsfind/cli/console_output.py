# bfsfind/cli/console_output.py
"""
Handles printing summary information to the console (stderr) after a search.
"""
import click
import structlog

from bfsfind.config.settings import RunConfig

log = structlog.get_logger(__name__)

def print_cli_summary_output(config: RunConfig, match_count: int, failure_count: int, elapsed_seconds: float):
    """
    Prints match/failure counts to stderr when the summary is enabled.
    Failures are counted, not repeated; they were already printed as they happened.
    """
    log.debug("console_summary_output_requested", enabled=config.show_summary)
    if not config.show_summary:
        return

    click.secho("--- search summary ---", fg="cyan", err=True)
    click.echo(f"Root: {config.root_path}", err=True)
    click.echo(f"Matches: {match_count:,}", err=True)
    failure_color = "red" if failure_count else None
    click.secho(f"Errors: {failure_count:,}", fg=failure_color, err=True)
    click.echo(f"Elapsed: {elapsed_seconds:.2f}s", err=True)
