"""Block ID Janitor CLI - find and remove block IDs that nothing links to."""
import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console as RichConsole
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .analyzer.extractor import BlockDefinition
from .analyzer.vault import DocumentNotFoundError, FileSystemVault
from .config import Config, parse_extensions
from .janitor import BlockIdJanitor, ScanResult, find_block_line
from .reaper.snapshots import SnapshotStore
from .utils.logger import configure_logging, printable
from .utils.safe_console import SafeConsole

app = typer.Typer(
    name="blockid-janitor",
    help="Find and remove unused block IDs in a Markdown vault",
    add_completion=False
)
console = SafeConsole()

settings_app = typer.Typer(name="settings", help="View and change persisted settings")
trash_app = typer.Typer(name="trash", help="Inspect and restore pre-edit snapshots")


def _resolve_vault(vault_path: str) -> Path:
    path = Path(vault_path).resolve()
    if not path.is_dir():
        console.print(f"[bold red]Error:[/bold red] Vault path does not exist: {escape(str(path))}")
        raise typer.Exit(1)
    return path


def run_scan(janitor: BlockIdJanitor, show_progress: bool = True) -> ScanResult:
    """Run a scan, with a progress bar unless disabled.

    Raises:
        typer.Exit: On I/O failure during the scan
    """
    try:
        if not show_progress:
            return asyncio.run(janitor.scan())

        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True
        ) as progress:
            task = progress.add_task("[cyan]Searching for unused block IDs...", total=None)

            def advance(file_path: str, total: int):
                progress.update(task, total=total, advance=1)

            return asyncio.run(janitor.scan(on_document=advance))
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


def _unused_table(unused: List[BlockDefinition]) -> Table:
    table = Table(title="Unused Block IDs")
    table.add_column("Block ID", style="cyan")
    table.add_column("File", style="magenta", no_wrap=False)
    table.add_column("Line", style="green", justify="right")
    table.add_column("Text", style="dim", no_wrap=False)

    for definition in unused:
        table.add_row(
            escape(definition.block_id),
            escape(printable(definition.file_path)),
            str(definition.line_number),
            escape(printable(definition.display_line)),
        )
    return table


def _print_summary(result: ScanResult):
    console.print("\n[bold yellow]Summary:[/bold yellow]")
    console.print(f"  Files scanned: {result.files_scanned}")
    console.print(f"  Block IDs: {result.definitions_found}")
    console.print(f"  Referenced: {result.references_found}")
    console.print(f"  Unused: {len(result.unused)}")
    if result.unresolved_references:
        console.print(f"  [dim]Unresolved links ignored: {result.unresolved_references}[/dim]")


def _build_janitor(vault_root: Path, exclude: Optional[str]) -> BlockIdJanitor:
    config = Config(vault_root)
    return BlockIdJanitor(
        FileSystemVault(vault_root),
        excluded_extensions=config.excluded_extensions(exclude),
    )


@app.command()
def scan(
    vault_path: str = typer.Argument(".", help="Vault root directory"),
    exclude: str = typer.Option(None, "--exclude", "-e", help="Comma-separated file extensions to skip (overrides settings)"),
    as_json: bool = typer.Option(False, "--json", help="Print unused block IDs as JSON"),
):
    """List block IDs that no link in the vault points to."""
    vault_root = _resolve_vault(vault_path)
    janitor = _build_janitor(vault_root, exclude)

    result = run_scan(janitor, show_progress=not as_json)

    if as_json:
        typer.echo(json.dumps([definition.to_dict() for definition in result.unused], indent=2))
        return

    if result.nothing_found:
        console.print("[bold green]No unused block IDs found.[/bold green]")
        _print_summary(result)
        return

    console.print(_unused_table(result.unused))
    _print_summary(result)
    console.print("[dim]Use 'blockid-janitor clean' to remove them[/dim]")


@app.command()
def clean(
    vault_path: str = typer.Argument(".", help="Vault root directory"),
    exclude: str = typer.Option(None, "--exclude", "-e", help="Comma-separated file extensions to skip (overrides settings)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed without changing anything"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    no_backup: bool = typer.Option(False, "--no-backup", help="Do not snapshot documents before editing"),
):
    """Remove unused block IDs from the lines that define them."""
    vault_root = _resolve_vault(vault_path)
    config = Config(vault_root)
    janitor = _build_janitor(vault_root, exclude)

    result = run_scan(janitor)

    if result.nothing_found:
        console.print("[bold green]No unused block IDs found.[/bold green]")
        return

    console.print(_unused_table(result.unused))
    console.print(f"\n[bold yellow]Found {len(result.unused)} unused block ID(s).[/bold yellow]")

    if dry_run:
        console.print("\n[bold blue]DRY RUN - No changes were made[/bold blue]")
        return

    if not yes:
        confirm = typer.confirm("Delete all of them?", default=False)
        if not confirm:
            console.print("[red]Aborted[/red]")
            return

    if not no_backup:
        janitor.snapshots = SnapshotStore(vault_root, config.trash_path)

    try:
        report = asyncio.run(janitor.delete(result.unused))
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[bold green]Removed {report.removed_count} unused block IDs.[/bold green]")
    if report.modified_files:
        console.print(f"  Modified {len(report.modified_files)} file(s)")
    if report.drifted:
        console.print(f"  [yellow]Skipped {len(report.drifted)} block ID(s) whose line changed since the scan[/yellow]")
    for file_path in report.missing_files:
        console.print(f"  [yellow]Skipped missing file: {escape(file_path)}[/yellow]")
    if report.snapshot_ids:
        console.print(f"[dim]Snapshots saved to {escape(str(config.trash_path))} "
                      f"(restore with 'blockid-janitor trash restore <id>')[/dim]")


@app.command()
def locate(
    vault_path: str = typer.Argument(..., help="Vault root directory"),
    file_path: str = typer.Argument(..., help="Document path relative to the vault"),
    block_id: str = typer.Argument(..., help="Block ID, with or without the leading ^"),
):
    """Print the file:line where a block ID is defined."""
    vault_root = _resolve_vault(vault_path)
    vault = FileSystemVault(vault_root)
    block_id = block_id.lstrip('^')

    try:
        content = asyncio.run(vault.read(file_path))
    except DocumentNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    index = find_block_line(content, block_id)
    if index is None:
        console.print(f"[bold red]Error:[/bold red] Block ID ^{escape(block_id)} not found in {escape(file_path)}")
        raise typer.Exit(1)

    typer.echo(f"{file_path}:{index + 1}")


@settings_app.command("show")
def settings_show(
    vault_path: str = typer.Argument(".", help="Vault root directory"),
):
    """Show the effective excluded extensions."""
    vault_root = _resolve_vault(vault_path)
    config = Config(vault_root)

    table = Table(title=f"Settings: {escape(str(config.settings_path))}", show_header=True, header_style="bold cyan")
    table.add_column("Excluded Extension", style="cyan")
    for ext in config.excluded_extensions():
        if ext:
            table.add_row(escape(ext))

    console.print(table)
    if config.excluded_extensions_override is not None:
        console.print("[dim]Overridden by BLOCKID_JANITOR_EXCLUDED_EXTENSIONS[/dim]")


@settings_app.command("set-excluded")
def settings_set_excluded(
    extensions: str = typer.Argument(..., help="Comma-separated extensions, e.g. '.excalidraw.md, .canvas.md'"),
    vault_path: str = typer.Argument(".", help="Vault root directory"),
):
    """Persist the excluded extensions. Pass '' to scan every document."""
    vault_root = _resolve_vault(vault_path)
    config = Config(vault_root)

    settings = config.load_settings()
    settings.excluded_extensions = parse_extensions(extensions)
    config.save_settings(settings)

    shown = ", ".join(ext for ext in settings.excluded_extensions if ext) or "(none)"
    console.print(f"[green]✓ Excluded extensions: {escape(shown)}[/green]")


@trash_app.command("list")
def trash_list(
    vault_path: str = typer.Argument(".", help="Vault root directory"),
):
    """List snapshots taken before documents were edited."""
    vault_root = _resolve_vault(vault_path)
    info = SnapshotStore(vault_root, Config(vault_root).trash_path).get_trash_info()

    if not info["total_snapshots"]:
        console.print("[dim]No snapshots.[/dim]")
        return

    table = Table(title="Snapshots", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan")
    table.add_column("File", style="magenta")
    table.add_column("Created", style="green")
    table.add_column("Restored", justify="center")

    for snapshot in info["snapshots"]:
        table.add_row(
            snapshot["id"],
            escape(snapshot["file_path"]),
            snapshot["created_at"],
            "yes" if snapshot.get("restored") else "no",
        )

    console.print(table)
    console.print(f"  Unrestored: {info['unrestored_count']} / {info['total_snapshots']}")


@trash_app.command("restore")
def trash_restore(
    snapshot_id: str = typer.Argument(..., help="Snapshot ID from 'trash list'"),
    vault_path: str = typer.Argument(".", help="Vault root directory"),
):
    """Write a snapshot back over its document."""
    vault_root = _resolve_vault(vault_path)
    store = SnapshotStore(vault_root, Config(vault_root).trash_path)

    try:
        store.restore(snapshot_id)
    except (ValueError, IOError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]✓ Restored snapshot {escape(snapshot_id)}[/green]")


app.add_typer(settings_app)
app.add_typer(trash_app)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log skipped lines and unresolved links"),
):
    """Block ID Janitor - find and remove unused block IDs."""
    configure_logging(verbose, console=RichConsole(stderr=True))


if __name__ == "__main__":
    app()
