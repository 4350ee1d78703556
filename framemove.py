#!/usr/bin/env python3
"""
Frame Mover CLI

Moves image files whose names end in selected frame numbers from a source
tree into a destination tree, skipping content already present there.
"""

import sys
import logging
import click
import yaml
from pathlib import Path
from colorama import init, Fore, Style
from tqdm import tqdm

from frame_mover import (
    Config,
    InvalidConfiguration,
    MoveRunner,
    Phase,
    RunReporter,
)

# Initialize colorama for cross-platform colored output
init()

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_INVALID_CONFIGURATION = 2

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_console_handler = None
_file_handler = None


def setup_logging(level: str = 'INFO', log_dir: Path = None):
    """Set up logging configuration."""
    global _console_handler
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Replace the handler from a previous invocation
    if _console_handler is not None:
        root_logger.removeHandler(_console_handler)
    _console_handler = logging.StreamHandler(sys.stdout)
    _console_handler.setFormatter(formatter)
    root_logger.addHandler(_console_handler)

    if log_dir:
        _setup_file_logging(Path(log_dir), formatter, root_logger)


def _setup_file_logging(log_dir: Path, formatter: logging.Formatter, root_logger: logging.Logger,
                        log_name: str = 'framemove'):
    """Add file handler to root logger."""
    global _file_handler
    log_dir.mkdir(parents=True, exist_ok=True)

    if _file_handler is not None:
        root_logger.removeHandler(_file_handler)
        _file_handler.close()

    _file_handler = logging.FileHandler(log_dir / f'{log_name}.log')
    _file_handler.setFormatter(formatter)
    root_logger.addHandler(_file_handler)


def print_header(title: str):
    """Print a formatted header."""
    click.echo(f"\n{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    click.echo(f"{Fore.CYAN}{title.center(60)}{Style.RESET_ALL}")
    click.echo(f"{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}\n")


def print_success(message: str):
    click.echo(f"{Fore.GREEN}OK: {message}{Style.RESET_ALL}")


def print_warning(message: str):
    click.echo(f"{Fore.YELLOW}WARN: {message}{Style.RESET_ALL}")


def print_error(message: str):
    click.echo(f"{Fore.RED}ERROR: {message}{Style.RESET_ALL}")


def print_info(message: str):
    click.echo(f"{Fore.BLUE}INFO: {message}{Style.RESET_ALL}")


@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--log-level', '-l', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Logging level (overrides config)')
@click.pass_context
def cli(ctx, config, log_level):
    """Frame Mover - move photos by filename suffix without duplicating content."""

    try:
        config_obj = Config(config)
    except Exception as e:
        setup_logging(log_level or 'INFO')
        print_error(f"Failed to load configuration: {e}")
        sys.exit(EXIT_INVALID_CONFIGURATION)

    setup_logging(log_level or config_obj.get_log_level(), config_obj.get_log_dir())

    errors = config_obj.validate_config()
    if errors:
        print_error("Configuration validation failed:")
        for error in errors:
            click.echo(f"  - {error}")
        sys.exit(EXIT_INVALID_CONFIGURATION)

    ctx.ensure_object(dict)
    ctx.obj['config'] = config_obj


def _watch(runner: MoveRunner, show_progress: bool) -> None:
    """Render snapshots until the background run finishes."""
    bar = tqdm(total=100, unit='%', desc='scanning', disable=not show_progress,
               bar_format='{desc:<10} {percentage:3.0f}%|{bar}| {postfix}')
    try:
        while True:
            try:
                snapshot = runner.channel.get(timeout=0.2)
                if snapshot is not None:
                    bar.set_description_str(snapshot.phase.value)
                    bar.n = snapshot.percent
                    bar.set_postfix(moved=snapshot.moved, dup=snapshot.skipped_duplicates,
                                    err=snapshot.errors, refresh=False)
                    bar.refresh()
                    if snapshot.phase.is_terminal:
                        break
                elif not runner.is_running:
                    break
            except KeyboardInterrupt:
                print_warning("Interrupted - finishing current file, then stopping")
                runner.cancel()
    finally:
        bar.close()


@cli.command()
@click.option('--source', '-s', required=True, help='Source directory tree')
@click.option('--dest', '-d', required=True, help='Destination directory tree')
@click.option('--suffixes', '-x', required=True,
              help='Frame numbers to match, separated by commas or spaces')
@click.option('--dry-run/--no-dry-run', default=None, help='Report without moving (override config)')
@click.option('--verbose', '-v', is_flag=True, help='Log every matched file')
@click.option('--progress', is_flag=True, help='Show a progress bar')
@click.option('--report', '-r', help='Save a JSON report to this file')
@click.pass_context
def move(ctx, source, dest, suffixes, dry_run, verbose, progress, report):
    """Move matching images from SOURCE into DEST."""

    config = ctx.obj['config']
    if dry_run is None:
        dry_run = config.is_dry_run()

    print_header("FRAME MOVER")
    if dry_run:
        print_info("Running in DRY RUN mode - no files will be moved")

    runner = MoveRunner(config)
    try:
        runner.start(source, dest, suffixes, dry_run=dry_run, verbose=verbose)
    except InvalidConfiguration as e:
        print_error(str(e))
        sys.exit(EXIT_INVALID_CONFIGURATION)

    _watch(runner, progress)

    try:
        result = runner.wait()
    except Exception as e:
        print_error(f"Run failed: {e}")
        sys.exit(EXIT_ERRORS)

    reporter = RunReporter()
    click.echo("\n" + reporter.generate_summary_report(result))

    if report:
        report_file = reporter.save_report(result, report)
        print_success(f"Report saved: {report_file}")

    stats = result.snapshot
    if stats.phase is Phase.CANCELLED:
        print_warning("Run cancelled; files already moved stay in place")
    if stats.errors:
        print_warning(f"Completed with {stats.errors:,} errors")
    else:
        print_success(f"{'Would move' if dry_run else 'Moved'} {stats.moved:,} files, "
                      f"skipped {stats.skipped_duplicates:,} duplicates")

    sys.exit(result.exit_code)


@cli.command('show-config')
@click.pass_context
def show_config(ctx):
    """Show the effective configuration."""

    config = ctx.obj['config']
    click.echo(f"Configuration file: {config.config_path or '(none, using defaults)'}")
    click.echo(yaml.safe_dump(config.as_dict(), default_flow_style=False, sort_keys=False))


if __name__ == '__main__':
    cli()
