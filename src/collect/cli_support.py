"""Shared helpers for the Collect CLI."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Tuple, TypeVar
from uuid import UUID

import click
from click.core import ParameterSource
from rich.table import Table

from collect.config import CollectConfig, ConfigManager
from collect.library import Category, FileRecord, LibraryError, LibraryIndex
from collect.logs import configure_logging
from collect.service import LibraryService
from collect.state.models import Metadata

F = TypeVar("F", bound=Callable[..., Any])

SHORT_ID_LENGTH = 8


def output_options(func: F) -> F:
    """Attach the shared ``--json``, ``--summary`` and ``--quiet`` flags."""
    func = click.option("--quiet", is_flag=True, help="Suppress non-error output.")(func)
    func = click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")(
        func
    )
    func = click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")(func)
    return func


def load_config(ctx: click.Context) -> CollectConfig:
    """Load the effective configuration, honoring the group-level ``--root``."""
    manager = ConfigManager()
    manager.ensure_exists()
    overrides = {}
    root = (ctx.find_root().obj or {}).get("root")
    if root:
        overrides["library.source_directory"] = str(Path(root).expanduser())
    return manager.load(cli_overrides=overrides or None)


def resolve_output_modes(
    ctx: click.Context,
    config: CollectConfig,
    *,
    json_output: bool,
    quiet: bool,
    summary_mode: bool,
) -> Tuple[bool, bool]:
    """Combine output flags with configured defaults.

    Returns:
        Tuple[bool, bool]: Effective ``(quiet, summary_only)`` flags.

    Raises:
        click.ClickException: If the flags conflict.
    """
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def open_library(
    config: CollectConfig, root: Optional[str] = None, *, refresh: bool = True
) -> LibraryService:
    """Build the service for the configured library and optionally scan it.

    Logging is directed to the library's data directory before anything runs.
    """
    service = LibraryService.from_config(config, root)
    configure_logging(config.logging, service.data_dir)
    if refresh:
        service.refresh()
    return service


def parse_file_id(raw: str, index: LibraryIndex) -> UUID:
    """Resolve a full identifier or a unique prefix of one.

    Raises:
        LibraryError: If nothing or more than one document matches.
    """
    needle = raw.strip().lower()
    try:
        file_id = UUID(needle)
    except ValueError:
        file_id = None
    if file_id is not None:
        index.get(file_id)
        return file_id

    matches = [candidate for candidate in index.files if str(candidate).startswith(needle)]
    if not needle or not matches:
        raise LibraryError(f"No document matches id {raw!r}.")
    if len(matches) > 1:
        raise LibraryError(f"Id prefix {raw!r} is ambiguous ({len(matches)} documents).")
    return matches[0]


def short_id(file_id: UUID) -> str:
    return str(file_id)[:SHORT_ID_LENGTH]


def _format_time(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def record_payload(index: LibraryIndex, record: FileRecord) -> dict[str, Any]:
    """Return a JSON-ready view of a file and its metadata."""
    metadata = index.metadata.get(record.id)
    payload: dict[str, Any] = {
        "id": str(record.id),
        "path": str(record.path),
        "filename": record.filename,
        "title": index.title_for(record.id),
        "size_bytes": record.size_bytes,
        "date_added": record.date_added.isoformat(),
        "date_modified": record.date_modified.isoformat(),
        "metadata": metadata.model_dump(mode="json", by_alias=True) if metadata else None,
    }
    return payload


def category_payload(category: Category) -> dict[str, Any]:
    return category.model_dump(mode="json")


def files_table(index: LibraryIndex, records: Iterable[FileRecord], *, title: str) -> Table:
    """Render ``records`` as a rich table."""
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Authors")
    table.add_column("Tags")
    table.add_column("Added")
    table.add_column("Opened")
    for record in records:
        metadata = index.metadata.get(record.id)
        table.add_row(
            short_id(record.id),
            index.title_for(record.id),
            ", ".join(metadata.authors) if metadata else "",
            ", ".join(metadata.tags) if metadata else "",
            _format_time(record.date_added),
            _format_time(metadata.last_opened if metadata else None),
        )
    return table


def metadata_table(record: FileRecord, metadata: Optional[Metadata], title: str) -> Table:
    """Render one document as a two-column field/value table."""
    table = Table(title=title)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("ID", str(record.id))
    table.add_row("Path", str(record.path))
    table.add_row("Size", f"{record.size_bytes} bytes")
    table.add_row("Added", _format_time(record.date_added))
    table.add_row("Modified", _format_time(record.date_modified))
    if metadata is None:
        table.add_row("Metadata", "(none)")
        return table
    table.add_row("Authors", ", ".join(metadata.authors) or "-")
    table.add_row("Year", str(metadata.year) if metadata.year is not None else "-")
    table.add_row("Tags", ", ".join(metadata.tags) or "-")
    table.add_row("Pages", str(metadata.pages) if metadata.pages is not None else "-")
    table.add_row("Card color", metadata.card_color)
    table.add_row("Reading list", "yes" if metadata.is_in_reading_list else "no")
    table.add_row("Last opened", _format_time(metadata.last_opened))
    table.add_row("Notes", metadata.notes or "-")
    return table


__all__ = [
    "category_payload",
    "files_table",
    "load_config",
    "metadata_table",
    "open_library",
    "output_options",
    "parse_file_id",
    "record_payload",
    "resolve_output_modes",
    "short_id",
]
