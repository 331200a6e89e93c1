# ABOUTME: Rich table utilities for styled, colorful CLI output
# ABOUTME: Provides pre-configured table generators for entries, build results, and logging status

from typing import Any

from rich.box import ROUNDED, SIMPLE
from rich.console import Console
from rich.table import Table

from pokedict.core.models import EntryRecord
from pokedict.extraction.base import ExtractionError


def create_key_value_table(
    title: str,
    data: dict[str, str],
    title_style: str = "bold cyan",
    key_style: str = "bold blue",
    value_style: str = "green",
    box_style=ROUNDED,
) -> Table:
    """Create a key-value table.

    Args:
        title: Table title with emoji/styling
        data: Dictionary of key-value pairs to display
        title_style: Style for the table title
        key_style: Style for the key column
        value_style: Style for the value column
        box_style: Border style for the table

    Returns:
        Formatted Rich table ready for printing
    """
    table = Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=box_style,
        show_header=True,
        header_style="bold magenta",
        border_style="cyan",
        title_justify="left",
        expand=False,
    )

    table.add_column("Field", style=key_style, width=None, no_wrap=False)
    table.add_column("Value", style=value_style, width=None, no_wrap=False)

    for key, value in data.items():
        table.add_row(key, str(value))

    return table


def create_multi_column_table(
    title: str,
    columns: list[tuple[str, str]],
    rows: list[list[str]],
    title_style: str = "bold cyan",
    header_style: str = "bold magenta",
    alternate_row_styles: list[str] | None = None,
    box_style=ROUNDED,
) -> Table:
    """Create a multi-column table with zebra striping.

    Args:
        title: Table title with emoji/styling
        columns: List of (column_name, column_style) tuples
        rows: List of row data
        title_style: Style for the table title
        header_style: Style for column headers
        alternate_row_styles: Alternating row styles for zebra striping
        box_style: Border style for the table

    Returns:
        Formatted Rich table ready for printing
    """
    table = Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=box_style,
        show_header=True,
        header_style=header_style,
        border_style="cyan",
        title_justify="left",
        row_styles=alternate_row_styles or ["", "dim"],
        expand=True,
    )

    for name, style in columns:
        table.add_column(name, style=style)

    for row in rows:
        table.add_row(*row)

    return table


def _truncate(text: str, length: int) -> str:
    return text[:length] + "..." if len(text) > length else text


def create_entry_table(entry: EntryRecord) -> Table:
    """Create a styled table summarizing one extracted entry.

    Args:
        entry: Extracted entry record

    Returns:
        Entry overview table
    """
    captions = [image.caption_text.strip() for image in entry.images if image.caption_text]
    entry_data = {
        "🆔 Dex Number": str(entry.dex_id),
        "📛 Name": entry.name,
        "🈯 Japanese Name": entry.name_jp_text,
        "🌐 Page": entry.url,
        "🏷️ Categories": str(len(entry.categories_html)),
        "🖼️ Images": f"{len(entry.images)} ({sum(1 for image in entry.images if image.flex)} flex)",
        "💬 Captions": ", ".join(captions) or "None",
        "📋 Info Rows": f"{len(entry.top_info_boxes_html)} top, {len(entry.extra_info_boxes_html)} extra",
        "📄 Summary": f"{len(entry.summary_html):,} chars",
        "📚 Body": f"{len(entry.body_html):,} chars" if entry.body_html else "Empty",
        "🎨 Info Box Style": _truncate("; ".join(f"{k}: {v}" for k, v in entry.info_box_style.items()), 80)
        or "None",
    }

    return create_key_value_table(
        title=f"📖 {entry.name}",
        data=entry_data,
        title_style="bold yellow",
        key_style="bold blue",
        value_style="white",
    )


def create_failures_table(failures: dict[Any, ExtractionError]) -> Table:
    """Create a table listing failed entries and where each one failed.

    Args:
        failures: Mapping of dex number to the extraction error

    Returns:
        Styled failures table
    """
    columns = [
        ("Dex", "cyan"),
        ("Stage", "magenta"),
        ("Error", "red"),
    ]

    rows = [
        [str(dex_id), " > ".join(error.stages) or "-", _truncate(error.message, 120)]
        for dex_id, error in sorted(failures.items())
    ]

    return create_multi_column_table(
        title=f"❌ {len(failures)} Failed Entries",
        columns=columns,
        rows=rows,
        title_style="bold red",
    )


def create_build_summary_table(summary: Any) -> Table:
    """Create a build completion summary table.

    Args:
        summary: BuildSummary of the finished run

    Returns:
        Build summary table
    """
    failed = len(summary.failures)
    summary_data = {
        "📁 Output": str(summary.output_path),
        "🔢 Selected": str(summary.selected),
        "✅ Written": str(summary.entries_written),
        "❌ Failed": f"[bold red]{failed}[/bold red]" if failed else "0",
        "⏱️ Duration": f"{summary.duration_seconds:.1f}s",
    }

    return create_key_value_table(
        title="📚 Dictionary Build",
        data=summary_data,
        title_style="bold green",
        key_style="cyan",
        value_style="white",
        box_style=SIMPLE,
    )


def create_logging_status_table(status: dict[str, Any]) -> Table:
    """Create a logging configuration status table.

    Args:
        status: Logging status dictionary

    Returns:
        Styled logging configuration table
    """
    logging_data = {
        "🔧 Mode": status["mode"].title(),
        "📁 Log Directory": status["log_directory"] or "N/A (production mode)",
        "🔇 Suppressed Libraries": ", ".join(status["third_party_suppressed"]),
    }

    # Add log files if they exist
    if status["log_files"]["main"]:
        logging_data["📝 Main Log"] = status["log_files"]["main"]
    if status["log_files"]["json"]:
        logging_data["📊 JSON Log"] = status["log_files"]["json"]
    if status["log_files"]["errors"]:
        logging_data["🚨 Error Log"] = status["log_files"]["errors"]

    return create_key_value_table(
        title="🔍 Logging Configuration",
        data=logging_data,
        title_style="bold green",
        key_style="blue",
        value_style="white",
    )


def print_rich_table(console: Console, table: Table) -> None:
    """Print a rich table with consistent spacing and style.

    Args:
        console: Rich console instance
        table: Configured table to print
    """
    console.print()  # Add spacing before
    console.print(table)
    console.print()  # Add spacing after
