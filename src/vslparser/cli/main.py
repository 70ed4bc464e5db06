#!/usr/bin/env python3
"""vslparse CLI - Turn varnishlog output into structured entries.

This is the main entry point for the vslparse command-line tool.
"""

from collections import Counter
from pathlib import Path
from typing import Iterable, Optional

import click

from vslparser import __version__
from vslparser.cli import progress
from vslparser.config.loader import load_config as load_config_file
from vslparser.exceptions import VSLParseError
from vslparser.lines import open_log, spawn_command
from vslparser.models.config import Config
from vslparser.models.entry import Entry, EntryKind
from vslparser.parser import iter_entries
from vslparser.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)

KIND_CHOICES = [kind.value for kind in EntryKind]


def load_config(config_path: Optional[Path]) -> Config:
    """
    Load configuration, falling back to defaults when no file exists.

    Args:
        config_path: Explicit config file, or None for the default location

    Returns:
        Validated Config instance

    Raises:
        click.ClickException: If the config file is invalid
    """
    try:
        config = load_config_file(config_path)
        logger.info("config_loaded", path=str(config_path) if config_path else None)
        return config
    except ValueError as e:
        logger.error("config_validation_error", error=str(e))
        raise click.ClickException(f"Configuration validation failed:\n{e}")


def select_kinds(config: Config, kinds: tuple[str, ...]) -> set[EntryKind]:
    """Combine --kind options with the configured kinds (options win)."""
    if kinds:
        return {EntryKind(kind) for kind in kinds}
    return set(config.output.kinds)


def print_entries(entries: Iterable[Entry], kinds: set[EntryKind], output_format: str) -> int:
    """
    Print entries until the input ends.

    Args:
        entries: Entry iterator (parse errors propagate out of it)
        kinds: Kinds to print; empty prints all
        output_format: "jsonl" or "summary"

    Returns:
        Number of entries printed

    Raises:
        click.ClickException: On the first parse error
    """
    printed = 0
    try:
        for entry in entries:
            if kinds and entry.kind not in kinds:
                continue
            progress.show_entry(entry, output_format)
            printed += 1
    except VSLParseError as e:
        logger.error("parse_failed", error=str(e), printed=printed)
        raise click.ClickException(str(e))
    return printed


@click.group()
@click.version_option(version=__version__, prog_name="vslparse")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/vslparser/config.yaml)",
)
@click.option("--verbose", is_flag=True, help="Log every parse error at debug level")
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: bool):
    """vslparse: Read varnishlog transactions as structured entries."""
    configure_logging(level="DEBUG" if verbose else None)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command()
@click.argument("log_file", default="-", type=click.Path(allow_dash=True, dir_okay=False))
@click.option("--kind", "kinds", multiple=True, type=click.Choice(KIND_CHOICES), help="Only print this kind (repeatable)")
@click.option("--format", "output_format", type=click.Choice(["jsonl", "summary"]), help="Output format")
@click.pass_context
def parse(ctx: click.Context, log_file: str, kinds: tuple[str, ...], output_format: Optional[str]):
    """
    Parse a varnishlog text dump.

    Reads LOG_FILE (or standard input) and prints one line per entry.

    Examples:
        vslparse parse varnish.log
        varnishlog -d | vslparse parse --kind Request --format summary
    """
    config = load_config(ctx.obj["config_path"])
    output_format = output_format or config.output.format
    logger.info("parse_command_started", log_file=log_file, output_format=output_format)

    try:
        with open_log(log_file, config.reader.encoding, config.reader.errors) as reader:
            printed = print_entries(iter_entries(reader), select_kinds(config, kinds), output_format)
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {log_file}: {e}")

    logger.info("parse_command_finished", printed=printed)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("argv", nargs=-1, type=click.UNPROCESSED)
@click.option("--kind", "kinds", multiple=True, type=click.Choice(KIND_CHOICES), help="Only print this kind (repeatable)")
@click.option("--format", "output_format", type=click.Choice(["jsonl", "summary"]), help="Output format")
@click.pass_context
def follow(ctx: click.Context, argv: tuple[str, ...], kinds: tuple[str, ...], output_format: Optional[str]):
    """
    Run varnishlog and parse its output as it arrives.

    The command defaults to the configured one (varnishlog). Pass a
    different one after "--".

    Examples:
        vslparse follow
        vslparse follow --format summary -- varnishlog -g request -q 'ReqURL ~ "^/api"'
    """
    config = load_config(ctx.obj["config_path"])
    command = list(argv) or list(config.command.argv)
    output_format = output_format or config.output.format
    logger.info("follow_command_started", argv=command, output_format=output_format)

    try:
        with spawn_command(command, config.reader.encoding, config.reader.errors) as reader:
            printed = print_entries(iter_entries(reader), select_kinds(config, kinds), output_format)
    except FileNotFoundError:
        raise click.ClickException(f"Command not found: {command[0]}")
    except KeyboardInterrupt:
        progress.show_warning("Interrupted")
        return

    logger.info("follow_command_finished", argv=command, printed=printed)


@cli.command()
@click.argument("log_file", default="-", type=click.Path(allow_dash=True, dir_okay=False))
@click.option("--top", default=10, show_default=True, type=click.IntRange(min=1), help="Number of tags to list")
@click.pass_context
def stats(ctx: click.Context, log_file: str, top: int):
    """
    Count entries per kind and records per tag.

    Examples:
        vslparse stats varnish.log
    """
    config = load_config(ctx.obj["config_path"])
    kinds: Counter = Counter()
    tags: Counter = Counter()

    try:
        with open_log(log_file, config.reader.encoding, config.reader.errors) as reader:
            for entry in iter_entries(reader):
                kinds[entry.kind.value] += 1
                for tag, values in entry.fields.items():
                    tags[tag] += len(values)
    except VSLParseError as e:
        logger.error("parse_failed", error=str(e))
        raise click.ClickException(str(e))
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {log_file}: {e}")

    progress.show_stats(kinds, tags, top)


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
