"""Output helpers for CLI commands.

Entries go to stdout; status and errors go to stderr so that JSON output
stays clean when piped.
"""

import json
from collections import Counter

import click
from rich.console import Console
from rich.table import Table

from vslparser.models.entry import Entry


console = Console()


def show_entry(entry: Entry, output_format: str) -> None:
    """Print one entry.

    Args:
        entry: Parsed entry
        output_format: "jsonl" or "summary"
    """
    if output_format == "summary":
        click.echo(format_summary(entry))
    else:
        click.echo(json.dumps(entry.to_dict(), ensure_ascii=False))


def format_summary(entry: Entry) -> str:
    """Format an entry as a single human-readable line.

    Examples:
        >>> format_summary(entry)
        'Request 32770 GET /index.html (12 records)'
    """
    parts = [entry.kind.value, str(entry.transaction_id)]
    method = entry.get("ReqMethod") or entry.get("BereqMethod")
    url = entry.get("ReqURL") or entry.get("BereqURL")
    if method:
        parts.append(method)
    if url:
        parts.append(url)
    records = sum(len(values) for values in entry.fields.values())
    parts.append(f"({records} records)")
    return " ".join(parts)


def show_stats(kinds: Counter, tags: Counter, top: int) -> None:
    """Print entry and tag counts as tables.

    Args:
        kinds: Entry count per kind name
        tags: Record count per tag
        top: Number of tags to list
    """
    kind_table = Table(title=f"Entries: {sum(kinds.values())}")
    kind_table.add_column("Kind")
    kind_table.add_column("Count", justify="right")
    for kind, count in sorted(kinds.items()):
        kind_table.add_row(kind, str(count))
    console.print(kind_table)

    if tags:
        tag_table = Table(title=f"Top {min(top, len(tags))} tags")
        tag_table.add_column("Tag")
        tag_table.add_column("Records", justify="right")
        for tag, count in tags.most_common(top):
            tag_table.add_row(tag, str(count))
        console.print(tag_table)


def show_warning(message: str) -> None:
    """Show warning message.

    Args:
        message: Warning message to display
    """
    click.echo(f"Warning: {message}", err=True)
