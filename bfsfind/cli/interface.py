# bfsfind/cli/interface.py
import os
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import fields as dataclass_fields, MISSING

import click
from click_option_group import optgroup
import structlog

from bfsfind import __version__ as app_version
from bfsfind.config.settings import (
    RunConfig, SortMethod, OutputFormat,
    DEFAULT_PATTERN, DEFAULT_OUTPUT_FORMAT, DEFAULT_SORT_METHOD, DEFAULT_CHANNEL_CAPACITY,
)
from bfsfind.config.loader import load_and_merge_configs, save_config_to_profile, config_values_to_options
from bfsfind.logging_setup import configure_logging
from bfsfind.cli.console_output import print_cli_summary_output
from bfsfind.core.output import format_failure, format_match, open_output_file, write_line
from bfsfind.core.results import Failure, Match
from bfsfind.core.search import start_search
from bfsfind.exceptions import BfsFindError, ConfigError

log = structlog.get_logger(__name__)

# exit status when --fail-on-error is set and at least one error was reported.
EXIT_SEARCH_ERRORS = 2

ENUM_OPTIONS = {
    "sort_method": SortMethod,
    "output_format": OutputFormat,
}

def _split_extensions(values: Any) -> Optional[List[str]]:
    # accepts "rs,py", ["rs", "py"] or ("rs,py", "txt"); None stays unrestricted.
    if values is None:
        return None
    if isinstance(values, str):
        values = [values]
    extensions: List[str] = []
    for value in values:
        extensions.extend(part.strip() for part in str(value).split(",") if part.strip())
    return extensions

def _default_options() -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    for fd in dataclass_fields(RunConfig):
        options[fd.name] = fd.default_factory() if fd.default_factory is not MISSING else fd.default
    return options

def _coerce_option_types(options: Dict[str, Any]) -> Dict[str, Any]:
    # values from toml arrive as plain strings/lists; bring them to RunConfig types.
    defaults = _default_options()
    for attr_name in ("root_path", "output_file"):
        if isinstance(options.get(attr_name), str):
            options[attr_name] = Path(options[attr_name]) if options[attr_name] else defaults[attr_name]
    for attr_name, enum_cls in ENUM_OPTIONS.items():
        value = options.get(attr_name)
        if isinstance(value, str):
            parsed = enum_cls.from_string(value)
            options[attr_name] = parsed if parsed is not None else defaults[attr_name]
    if "extensions" in options:
        options["extensions"] = _split_extensions(options["extensions"])
    if options.get("max_depth") is not None and not isinstance(options["max_depth"], int):
        raise ConfigError(f"max_depth must be an integer, got {options['max_depth']!r}")
    return options

def build_run_config(ctx: click.Context, cli_params: Dict[str, Any]) -> RunConfig:
    """
    Layers configuration: RunConfig defaults, then config files, then the
    selected profile, then anything given explicitly on the command line.
    """
    effective_options = _default_options()

    raw_configs = load_and_merge_configs()
    effective_options.update(config_values_to_options(raw_configs))

    profile_name = cli_params.get("active_config_profile_name")
    if profile_name:
        profile_values = raw_configs.get("profiles", {}).get(profile_name, {})
        if profile_values:
            log.info("applying_profile_settings", profile=profile_name)
            effective_options.update(config_values_to_options(profile_values))
        else:
            log.warning("profile_not_found_in_config_files", profile_name=profile_name)

    cli_to_attr = {
        "root_path": "root_path",
        "pattern": "pattern",
        "max_depth": "max_depth",
        "extensions": "extensions",
        "include_hidden": "include_hidden",
        "include_ignored": "include_ignored",
        "sort_method_str": "sort_method",
        "output_format_str": "output_format",
        "output_file": "output_file",
        "show_summary": "show_summary",
        "fail_on_error": "fail_on_error",
        "channel_capacity": "channel_capacity",
        "save_profile_name": "save_profile_name",
    }
    for param_name, attr_name in cli_to_attr.items():
        if ctx.get_parameter_source(param_name) == click.core.ParameterSource.COMMANDLINE:
            effective_options[attr_name] = cli_params[param_name]

    return RunConfig(**_coerce_option_types(effective_options))

def _run_search_flow(config: RunConfig) -> Tuple[int, int]:
    search_filter = config.to_search_filter()
    log.info("search_orchestration_started", root=str(search_filter.root_path))

    output_stream = open_output_file(config.output_file) if config.output_file else None
    # the output file may live inside ROOT; it must not report itself.
    own_output_path = config.output_file.resolve() if config.output_file else None
    match_count = 0
    failure_count = 0
    buffered_matches: List[Match] = []
    started_at = time.monotonic()

    try:
        with start_search(search_filter, capacity=config.channel_capacity) as stream:
            for message in stream:
                if isinstance(message, Failure):
                    failure_count += 1
                    click.echo(format_failure(message, config.output_format), err=True)
                    continue
                if own_output_path is not None and message.path.resolve() == own_output_path:
                    log.debug("output_file_skipped", path=str(message.path))
                    continue
                match_count += 1
                if config.sort_method == SortMethod.PATH:
                    buffered_matches.append(message)
                else:
                    write_line(format_match(message, config.output_format), output_stream)

        # sorting needs the complete result set, so it happens after the stream ends.
        for match in sorted(buffered_matches, key=lambda m: m.path):
            write_line(format_match(match, config.output_format), output_stream)
    finally:
        if output_stream is not None:
            output_stream.close()

    if config.output_file:
        click.echo(f"Info: Output written to: {config.output_file}", err=True)

    print_cli_summary_output(config, match_count, failure_count, time.monotonic() - started_at)
    log.info("search_orchestration_complete", matches=match_count, failures=failure_count)
    return match_count, failure_count


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("root_path", required=False, default=".", type=click.Path(file_okay=True, dir_okay=True, path_type=Path))
@optgroup.group("Filtering Options", help="Control which files are reported.")
@optgroup.option("-p", "--pattern", "pattern", default=DEFAULT_PATTERN, show_default=True, help="Name pattern. '*' matches everything; otherwise '*' is dropped and the rest must appear in the file name.")
@optgroup.option("-m", "--max-depth", "max_depth", type=click.IntRange(min=0), default=None, help="Maximum directory depth below ROOT (0 = files directly in ROOT). Default: unlimited.")
@optgroup.option("-e", "--extensions", "extensions", multiple=True, help="Only report files with these extensions (comma-separated, repeatable, case-insensitive).")
@optgroup.option("-H", "--hidden", "include_hidden", is_flag=True, default=False, help="Include hidden files and directories.")
@optgroup.option("--include-gitignored", "include_ignored", is_flag=True, default=False, help="Do not apply the rules in ROOT/.gitignore.")
@optgroup.group("Output Options", help="How results are written.")
@optgroup.option("-F", "--output-format", "output_format_str", type=click.Choice([f.value for f in OutputFormat]), default=None, help=f"Result format. Default: {DEFAULT_OUTPUT_FORMAT.value}.")
@optgroup.option("--sort", "sort_method_str", type=click.Choice([s.value for s in SortMethod]), default=None, help=f"Order of matches. 'path' waits for the whole walk. Default: {DEFAULT_SORT_METHOD.value}.")
@optgroup.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, writable=True, path_type=Path), default=None, help="Write matches to this file instead of stdout.")
@optgroup.option("--summary/--no-summary", "show_summary", default=None, help="Print match and error counts to stderr at the end.")
@optgroup.option("--fail-on-error", "fail_on_error", is_flag=True, default=False, help=f"Exit with status {EXIT_SEARCH_ERRORS} if any directory or entry could not be read.")
@optgroup.option("--channel-capacity", "channel_capacity", type=click.IntRange(min=1), default=DEFAULT_CHANNEL_CAPACITY, show_default=True, help="Results buffered between the walker and the writer.")
@optgroup.group("Application Behavior", help="Configuration profiles, saving, and logging.")
@optgroup.option("--config-profile", "active_config_profile_name", default=None, help="Load a profile from config file(s).")
@optgroup.option("--save", "save_profile_name", type=str, metavar="PROFILE_NAME", default=None, help="Save options to a profile in the project's .bfsfind.toml. Exits after saving.")
@optgroup.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@optgroup.option("--force-json-logs", "force_json_logs_cli", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="bfsfind", prog_name="bfsfind", help="Show version and exit.")
@click.pass_context
def main_cli(ctx: click.Context, **cli_params: Any):
    """bfsfind: breadth-first file search under ROOT (default: current
    directory), honoring ROOT/.gitignore and skipping hidden entries by
    default. Matches are printed as they are found."""

    log_level = "warning"
    if cli_params.get("verbosity_level", 0) == 1: log_level = "info"
    elif cli_params.get("verbosity_level", 0) >= 2: log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=cli_params.get("force_json_logs_cli", False))

    log.debug("cli_command_invoked", params=cli_params)

    try:
        final_config = build_run_config(ctx, cli_params)

        if final_config.save_profile_name:
            if save_config_to_profile(final_config, final_config.save_profile_name):
                click.echo(f"Info: Saved profile '{final_config.save_profile_name}'.", err=True)
            else:
                click.echo("Info: Nothing to save, all options are at their defaults.", err=True)
            ctx.exit(0)

        _, failure_count = _run_search_flow(final_config)
        if final_config.fail_on_error and failure_count:
            ctx.exit(EXIT_SEARCH_ERRORS)

    except click.exceptions.Exit as e: raise e
    except BrokenPipeError:
        # reader went away (e.g. `| head`); leaving the search block already stopped the walker.
        log.debug("stdout_closed_by_reader")
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(1)
    except BfsFindError as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except click.ClickException as e:
        log.error("click_exception_in_cli", error_type=type(e).__name__, message=str(e))
        e.show(); sys.exit(e.exit_code)
    except Exception as e:
        log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
        click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
        sys.exit(1)
