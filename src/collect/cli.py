"""Command line interface for the Collect project."""

from __future__ import annotations

import difflib
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from collect.cli_support import (
    category_payload,
    files_table,
    load_config,
    metadata_table,
    open_library,
    output_options,
    parse_file_id,
    record_payload,
    resolve_output_modes,
    short_id,
)
from collect.config import (
    CollectConfig,
    ConfigError,
    ConfigManager,
    assign_path,
    flatten_for_env,
    resolve_with_precedence,
)
from collect.ingestion import DownloadFailed, IngestError
from collect.library import CategoryError, LibraryError, Selection, SortOption, ViewFilter
from collect.palette import CARD_PALETTE, CATEGORY_PALETTE
from collect.state import StateError

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


@contextmanager
def _cli_errors(action: str, *, json_output: bool) -> Iterator[None]:
    """Translate library exceptions raised inside a command into CLI errors."""
    try:
        yield
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except DownloadFailed as exc:
        _handle_cli_error(
            str(exc),
            code="download_failed",
            json_output=json_output,
            details={"outcome": exc.result.outcome.value},
            original=exc,
        )
    except IngestError as exc:
        _handle_cli_error(str(exc), code="ingest_error", json_output=json_output, original=exc)
    except CategoryError as exc:
        _handle_cli_error(str(exc), code="category_error", json_output=json_output, original=exc)
    except LibraryError as exc:
        _handle_cli_error(str(exc), code="library_error", json_output=json_output, original=exc)
    except StateError as exc:
        _handle_cli_error(str(exc), code="state_error", json_output=json_output, original=exc)
    except (click.Abort, click.exceptions.Exit):
        raise
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while {action}: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands.

    Args:
        command: Command name to include in the summary.
        root: Library root relevant to the command.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary string.
    """

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _emit_errors(errors: list[str], *, quiet: bool, summary_only: bool) -> None:
    if not errors:
        return
    _emit_message(
        "[red]Errors encountered:[/red]", mode="error", quiet=quiet, summary_only=summary_only
    )
    for entry in errors:
        _emit_message(f"  - {entry}", mode="error", quiet=quiet, summary_only=summary_only)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="collect")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=str),
    help="Library directory; overrides library.source_directory.",
)
@click.pass_context
def cli(ctx: click.Context, root: Optional[str]) -> None:
    """Collect keeps a local library of PDF documents with tags and notes."""
    ctx.ensure_object(dict)
    ctx.obj["root"] = root


@cli.command()
@click.argument("root", required=False, type=click.Path(file_okay=False, path_type=str))
@output_options
@click.pass_context
def scan(
    ctx: click.Context,
    root: Optional[str],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Scan ROOT (or the configured library) and register new documents.

    Args:
        ctx: Click context used for parameter source inspection.
        root: Optional library directory overriding configuration.
        json_output: If True, emit JSON describing the scan.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
    """
    with _cli_errors("scanning the library", json_output=json_output):
        config = load_config(ctx)
        quiet_enabled, summary_only = resolve_output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        service = open_library(config, root, refresh=False)
        report = service.refresh()
        index = service.index

        if json_output:
            console.print_json(
                data={
                    "context": {"root": str(service.root)},
                    "counts": report.counts,
                    "created": [str(file_id) for file_id in report.created],
                    "categories": [category_payload(item) for item in index.categories],
                    "errors": report.errors,
                }
            )
            return

        for file_id in report.created:
            _emit_message(
                f"[cyan]Added {index.get(file_id).filename} ({short_id(file_id)})[/cyan]",
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        _emit_errors(report.errors, quiet=quiet_enabled, summary_only=summary_only)
        _emit_message(
            _format_summary_line("Scan", service.root, report.counts),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )


@cli.command("list")
@click.option("--category", "categories", multiple=True, help="Show documents in CATEGORY.")
@click.option("--author", "authors", multiple=True, help="Show documents by AUTHOR.")
@click.option("--search", default="", help="Case-insensitive text matched against titles.")
@click.option("--sort", "sort_option", type=str, help="Sort option, e.g. 'title_az'.")
@click.option("--recent", is_flag=True, help="Only documents added recently.")
@click.option("--reading-list", is_flag=True, help="Only documents on the reading list.")
@output_options
@click.pass_context
def list_documents(
    ctx: click.Context,
    categories: tuple[str, ...],
    authors: tuple[str, ...],
    search: str,
    sort_option: Optional[str],
    recent: bool,
    reading_list: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """List library documents matching the given filters."""
    with _cli_errors("listing documents", json_output=json_output):
        config = load_config(ctx)
        quiet_enabled, summary_only = resolve_output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        if recent and reading_list:
            raise click.ClickException("--recent cannot be combined with --reading-list.")
        try:
            sort = SortOption.parse(sort_option or config.index.default_sort)
        except ValueError as exc:
            choices = ", ".join(option.name.lower() for option in SortOption)
            raise click.BadParameter(
                f"{exc}. Choose from: {choices}.", param_hint="--sort"
            ) from exc

        service = open_library(config)
        index = service.index
        view = ViewFilter.ALL
        if recent:
            view = ViewFilter.RECENT
        elif reading_list:
            view = ViewFilter.READING_LIST
        index.selection = Selection(
            categories=frozenset(categories),
            authors=frozenset(authors),
            search_text=search,
            sort=sort,
            view=view,
        )
        records = index.filtered_files()

        if json_output:
            console.print_json(
                data={
                    "context": {"root": str(service.root), "sort": sort.value, "view": view.value},
                    "counts": {"shown": len(records), "total": len(index.files)},
                    "documents": [record_payload(index, record) for record in records],
                    "authors": index.filtered_author_counts(),
                }
            )
            return

        _emit_message(
            files_table(index, records, title=f"Documents in {service.root}"),
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
        _emit_message(
            _format_summary_line(
                "List", service.root, {"shown": len(records), "total": len(index.files)}
            ),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )


@cli.command()
@click.argument("file_id", metavar="ID")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def show(ctx: click.Context, file_id: str, json_output: bool) -> None:
    """Show the metadata for document ID (a full id or unique prefix)."""
    with _cli_errors("showing the document", json_output=json_output):
        service = open_library(load_config(ctx))
        index = service.index
        resolved = parse_file_id(file_id, index)
        record = index.get(resolved)
        if json_output:
            console.print_json(data=record_payload(index, record))
            return
        title = index.title_for(resolved)
        console.print(metadata_table(record, index.metadata.get(resolved), title))


@cli.command()
@click.argument("file_id", metavar="ID")
@click.option("--title", help="New title.")
@click.option("--author", "authors", multiple=True, help="Replace authors (repeatable).")
@click.option("--year", type=int, help="Publication year.")
@click.option("--tag", "tags", multiple=True, help="Replace tags (repeatable).")
@click.option("--add-tag", "add_tags", multiple=True, help="Add a tag (repeatable).")
@click.option("--remove-tag", "remove_tags", multiple=True, help="Remove a tag (repeatable).")
@click.option("--notes", help="Free-form notes.")
@click.option("--color", type=click.Choice(CARD_PALETTE), help="Card color.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def edit(
    ctx: click.Context,
    file_id: str,
    title: Optional[str],
    authors: tuple[str, ...],
    year: Optional[int],
    tags: tuple[str, ...],
    add_tags: tuple[str, ...],
    remove_tags: tuple[str, ...],
    notes: Optional[str],
    color: Optional[str],
    json_output: bool,
) -> None:
    """Edit the metadata of document ID."""
    with _cli_errors("editing metadata", json_output=json_output):
        service = open_library(load_config(ctx))
        index = service.index
        resolved = parse_file_id(file_id, index)

        changes: dict[str, Any] = {}
        if title is not None:
            changes["title"] = title
        if authors:
            changes["authors"] = [author.strip() for author in authors if author.strip()]
        if year is not None:
            changes["year"] = year
        if notes is not None:
            changes["notes"] = notes
        if color is not None:
            changes["card_color"] = color
        if tags or add_tags or remove_tags:
            current = list(tags) if tags else index.tags_for(resolved)
            current.extend(add_tags)
            changes["tags"] = [
                tag.strip() for tag in current if tag.strip() and tag not in remove_tags
            ]
        if not changes:
            raise click.ClickException("Nothing to change; pass at least one option.")

        index.edit(resolved, **changes)
        record = index.get(resolved)
        if json_output:
            console.print_json(data=record_payload(index, record))
            return
        console.print(f"[green]Updated {index.title_for(resolved)} ({short_id(resolved)}).[/green]")


@cli.command("open")
@click.argument("file_id", metavar="ID")
@click.option("--no-launch", is_flag=True, help="Only record the document as opened.")
@click.pass_context
def open_document(ctx: click.Context, file_id: str, no_launch: bool) -> None:
    """Open document ID with the default application and record the time."""
    with _cli_errors("opening the document", json_output=False):
        service = open_library(load_config(ctx))
        resolved = parse_file_id(file_id, service.index)
        opener = None if no_launch else (lambda path: click.launch(str(path)))
        service.open_document(resolved, opener=opener)
        console.print(f"[green]Opened {service.index.title_for(resolved)}.[/green]")


@cli.command("reading-list")
@click.argument("file_id", metavar="ID")
@click.option("--remove", is_flag=True, help="Take the document off the reading list.")
@click.pass_context
def reading_list(ctx: click.Context, file_id: str, remove: bool) -> None:
    """Put document ID on the reading list (or take it off with --remove)."""
    with _cli_errors("updating the reading list", json_output=False):
        service = open_library(load_config(ctx))
        index = service.index
        resolved = parse_file_id(file_id, index)
        index.set_reading_list(resolved, not remove)
        verb = "Removed" if remove else "Added"
        preposition = "from" if remove else "to"
        console.print(
            f"[green]{verb} {index.title_for(resolved)} {preposition} the reading list "
            f"({index.reading_list_count()} total).[/green]"
        )


@cli.command()
@click.argument(
    "paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@output_options
@click.pass_context
def add(
    ctx: click.Context,
    paths: tuple[Path, ...],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Copy PATHS into the library and register them."""
    with _cli_errors("adding documents", json_output=json_output):
        config = load_config(ctx)
        quiet_enabled, summary_only = resolve_output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        with open_library(config) as service:
            for path in paths:
                service.submit_copy(path)
            outcomes = service.drain(wait=True)

        added = [outcome for outcome in outcomes if outcome.ok and outcome.record is not None]
        errors = [f"{outcome.label}: {outcome.error}" for outcome in outcomes if not outcome.ok]
        counts = {"added": len(added), "errors": len(errors)}

        if json_output:
            console.print_json(
                data={
                    "context": {"root": str(service.root)},
                    "counts": counts,
                    "documents": [record_payload(service.index, item.record) for item in added],
                    "errors": errors,
                }
            )
            return

        for outcome in added:
            _emit_message(
                f"[cyan]Added {outcome.record.filename} ({short_id(outcome.record.id)})[/cyan]",
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        _emit_errors(errors, quiet=quiet_enabled, summary_only=summary_only)
        _emit_message(
            _format_summary_line("Add", service.root, counts),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )


@cli.command()
@click.argument("url")
@output_options
@click.pass_context
def download(
    ctx: click.Context,
    url: str,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Download the PDF at URL into the library."""
    with _cli_errors("downloading", json_output=json_output):
        config = load_config(ctx)
        quiet_enabled, summary_only = resolve_output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        service = open_library(config)
        record = service.download(url)
        if json_output:
            console.print_json(data=record_payload(service.index, record))
            return
        _emit_message(
            f"[green]Downloaded {record.filename} ({short_id(record.id)}).[/green]",
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )


@cli.command()
@click.argument("file_id", metavar="ID")
@click.argument("name")
@click.pass_context
def rename(ctx: click.Context, file_id: str, name: str) -> None:
    """Rename the file of document ID to NAME."""
    with _cli_errors("renaming the document", json_output=False):
        service = open_library(load_config(ctx))
        resolved = parse_file_id(file_id, service.index)
        previous = service.index.get(resolved).filename
        record = service.rename_file(resolved, name)
        console.print(f"[green]Renamed {previous} to {record.filename}.[/green]")


@cli.command("rm")
@click.argument("file_id", metavar="ID")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def remove(ctx: click.Context, file_id: str, yes: bool) -> None:
    """Delete document ID from disk together with its metadata."""
    with _cli_errors("deleting the document", json_output=False):
        service = open_library(load_config(ctx))
        resolved = parse_file_id(file_id, service.index)
        title = service.index.title_for(resolved)
        if not yes:
            click.confirm(f"Delete {title} permanently?", abort=True)
        service.delete_file(resolved)
        console.print(f"[green]Deleted {title}.[/green]")


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def categories(ctx: click.Context, json_output: bool) -> None:
    """List categories with their colors and document counts."""
    with _cli_errors("listing categories", json_output=json_output):
        index = open_library(load_config(ctx)).index
        if json_output:
            console.print_json(data={"categories": [category_payload(c) for c in index.categories]})
            return
        table = Table(title="Categories")
        table.add_column("Name")
        table.add_column("Color")
        table.add_column("Documents", justify="right")
        for category in index.categories:
            table.add_row(category.name, category.color, str(category.item_count))
        console.print(table)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def authors(ctx: click.Context, json_output: bool) -> None:
    """List authors and how many documents reference each."""
    with _cli_errors("listing authors", json_output=json_output):
        index = open_library(load_config(ctx)).index
        counts = index.author_counts()
        if json_output:
            console.print_json(
                data={"authors": [{"name": name, "count": counts[name]} for name in sorted(counts)]}
            )
            return
        table = Table(title="Authors")
        table.add_column("Author")
        table.add_column("Documents", justify="right")
        for name in index.all_authors():
            table.add_row(name, str(counts[name]))
        console.print(table)


@cli.command()
@click.option("--limit", type=int, help="Entries per list; defaults to index.recent_limit.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def recent(ctx: click.Context, limit: Optional[int], json_output: bool) -> None:
    """Show recently opened and recently added documents."""
    with _cli_errors("listing recent documents", json_output=json_output):
        config = load_config(ctx)
        index = open_library(config).index
        count = limit if limit is not None else config.index.recent_limit
        opened = [
            record
            for record in index.last_opened_files()
            if (meta := index.metadata.get(record.id)) is not None and meta.last_opened
        ][:count]
        added = index.last_added_files(count)
        if json_output:
            console.print_json(
                data={
                    "last_opened": [record_payload(index, record) for record in opened],
                    "last_added": [record_payload(index, record) for record in added],
                    "recent_count": len(index.recent_files()),
                    "reading_list_count": index.reading_list_count(),
                }
            )
            return
        console.print(files_table(index, opened, title="Last opened"))
        console.print(files_table(index, added, title="Last added"))
        console.print(
            f"[cyan]{len(index.recent_files())} added in the last {index.recent_days} days; "
            f"{index.reading_list_count()} on the reading list.[/cyan]"
        )


@cli.group()
def category() -> None:
    """Create, rename, and delete categories."""


@category.command("create")
@click.argument("name")
@click.option("--color", type=click.Choice(CATEGORY_PALETTE), help="Category palette color.")
@click.pass_context
def category_create(ctx: click.Context, name: str, color: Optional[str]) -> None:
    """Create category NAME before any document carries it."""
    with _cli_errors("creating the category", json_output=False):
        index = open_library(load_config(ctx)).index
        assigned = index.create_category(name, color)
        console.print(f"[green]Category {name.strip()} uses {assigned}.[/green]")


@category.command("rename")
@click.argument("old")
@click.argument("new")
@click.option(
    "--color", type=click.Choice(CATEGORY_PALETTE), help="New palette color for the category."
)
@click.pass_context
def category_rename(ctx: click.Context, old: str, new: str, color: Optional[str]) -> None:
    """Rename category OLD to NEW on every document."""
    with _cli_errors("renaming the category", json_output=False):
        index = open_library(load_config(ctx)).index
        index.rename_category(old, new, color)
        console.print(f"[green]Renamed category {old} to {new.strip()}.[/green]")


@category.command("delete")
@click.argument("name")
@click.pass_context
def category_delete(ctx: click.Context, name: str) -> None:
    """Remove category NAME from every document."""
    with _cli_errors("deleting the category", json_output=False):
        index = open_library(load_config(ctx)).index
        index.delete_category(name)
        console.print(f"[green]Deleted category {name}.[/green]")


@cli.group()
def config() -> None:
    """Manage Collect configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.option(
    "--as-env", is_flag=True, help="Print settings as COLLECT__SECTION__KEY=value assignments."
)
def config_view(no_env: bool, as_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.
        as_env: If True, print environment assignments instead of YAML.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_env:
        for env_key, env_value in flatten_for_env(loaded).items():
            console.print(f"{env_key}={env_value}", markup=False, highlight=False, soft_wrap=True)
        return

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'index.recent_days'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        assign_path(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=CollectConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    # The timestamp header always changes; compare the settings body only.
    diff = list(
        difflib.unified_diff(
            [line for line in before if not line.startswith("#")],
            [line for line in after if not line.startswith("#")],
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )

    if diff:
        console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    else:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=CollectConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
