"""CLI commands for ebookkit.

Commands:
- convert: extract a file and write export artifacts directly
- import: extract a file and add it to the ebook library
- list: show library ebooks
- export: write artifacts for a library ebook
- remove: delete a library ebook
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from ebookkit.config.app_config import load_app_config
from ebookkit.core.ebook_processor import export_ebook, process_upload
from ebookkit.core.errors import EbookError
from ebookkit.db.database import init_db
from ebookkit.db.ebooks_repository import delete_ebook, get_ebook, list_ebook_ids, list_ebooks
from ebookkit.renderers import EXPORT_FORMATS, RenderedArtifact, render_print, trigger_print
from ebookkit.utils.validators import (
    AmbiguousEbookIdError,
    EbookNotFoundError,
    resolve_ebook_id,
)

app = typer.Typer(
    name="ebookkit",
    help="Extract ebook content and export it as slides, documents and print files.",
    no_args_is_help=True,
)

console = Console()

FORMAT_HELP = "Export format: ppt, docx, pdf or all"


def _init_library() -> None:
    config = load_app_config()
    init_db(Path(config.paths.db_path))


def _resolve_formats(fmt: str) -> list[str]:
    """Expand 'all' and reject unknown formats."""
    if fmt == "all":
        return list(EXPORT_FORMATS)
    if fmt not in EXPORT_FORMATS:
        console.print(f"[red]✗ Unknown format '{fmt}'. Use: {', '.join(EXPORT_FORMATS)}, all[/red]")
        raise typer.Exit(code=1)
    return [fmt]


def _resolve_ebook_id_or_exit(prefix: str) -> str:
    """Resolve ebook id prefix to full id, or exit with helpful error."""
    candidates = list_ebook_ids()
    try:
        return resolve_ebook_id(prefix, candidates)
    except EbookNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        if candidates:
            console.print("\nAvailable ebooks:")
            for c in candidates:
                console.print(f"  - {c}")
        raise typer.Exit(code=1)
    except AmbiguousEbookIdError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


def _write_artifacts(artifacts: list[RenderedArtifact], out_dir: Path) -> None:
    for artifact in artifacts:
        path = artifact.write_to(out_dir)
        console.print(f"  [dim]wrote:[/dim] {path} ({artifact.size:,} bytes)")


def _read_file_or_exit(file: str) -> tuple[Path, bytes]:
    file_path = Path(file).expanduser().resolve()
    if not file_path.is_file():
        console.print(f"[red]✗ File not found: {file_path}[/red]")
        raise typer.Exit(code=1)
    return file_path, file_path.read_bytes()


@app.command()
def convert(
    file: str = typer.Argument(..., help="Path to a PDF, EPUB, MOBI or TXT file"),
    fmt: str = typer.Option("all", "--format", "-f", help=FORMAT_HELP),
    out: Path | None = typer.Option(None, "--out", "-o", help="Output directory (default: paths.output_dir)"),
    print_pdf: bool = typer.Option(False, "--print", help="Open the print dialog for the PDF export"),
) -> None:
    """Extract a file and write its export artifacts (no library entry)."""
    formats = _resolve_formats(fmt)
    file_path, data = _read_file_or_exit(file)
    config = load_app_config()
    out = out or Path(config.paths.output_dir)

    console.print(f"[blue]Extracting {file_path.name}...[/blue]")
    try:
        ebook = asyncio.run(process_upload(data, file_path.name, config=config, persist=False))
        content = ebook.extracted_content
        console.print(f"[green]✓ {content.title}[/green] ({len(content.chapters)} chapters)")
        if content.is_placeholder:
            console.print("[yellow]⚠ No text could be extracted; exporting a placeholder[/yellow]")

        for export_format in formats:
            if export_format == "pdf" and print_pdf:
                bundle = render_print(ebook.name, content, ebook.file_name)
                opened = trigger_print(bundle, out)
                console.print(f"  [dim]wrote:[/dim] {out / bundle.html.file_name}")
                console.print(f"  [dim]wrote:[/dim] {out / bundle.text.file_name}")
                if not opened:
                    console.print("[yellow]⚠ Could not open a browser; the .txt copy is available[/yellow]")
                continue
            _write_artifacts(export_ebook(ebook, export_format, config=config), out)

    except EbookError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


@app.command(name="import")
def import_ebook(
    file: str = typer.Argument(..., help="Path to a PDF, EPUB, MOBI or TXT file"),
) -> None:
    """Extract a file and add it to the ebook library."""
    _init_library()
    file_path, data = _read_file_or_exit(file)

    try:
        ebook = asyncio.run(process_upload(data, file_path.name))
    except EbookError as e:
        console.print(f"[red]✗ Failed to process \"{file_path.name}\": {e}[/red]")
        raise typer.Exit(code=1)

    content = ebook.extracted_content
    console.print(f"[green]✓ Successfully processed \"{file_path.name}\"[/green]")
    console.print(f"  [dim]id:[/dim]       {ebook.id}")
    console.print(f"  [dim]title:[/dim]    {content.title}")
    console.print(f"  [dim]chapters:[/dim] {len(content.chapters)}")
    if content.language:
        console.print(f"  [dim]language:[/dim] {content.language}")


@app.command(name="list")
def list_library() -> None:
    """List all ebooks in the library."""
    _init_library()
    ebooks = list_ebooks()

    if not ebooks:
        console.print("[yellow]No ebooks in the library[/yellow]")
        console.print("  Use: ebookkit import <book.pdf>")
        return

    console.print(f"\n[bold]Ebooks ({len(ebooks)}):[/bold]\n")

    for ebook in ebooks:
        status_color = "green" if ebook.status == "ready" else "yellow"
        formats = [name for name, available in ebook.formats.to_dict().items() if available]
        console.print(f"  [bold]{ebook.id}[/bold]")
        console.print(f"    [dim]file:[/dim]    {ebook.file_name} ({ebook.file_size:,} bytes)")
        console.print(f"    [dim]status:[/dim]  [{status_color}]{ebook.status}[/{status_color}]")
        console.print(f"    [dim]formats:[/dim] {', '.join(formats) or '-'}")
        console.print()


@app.command()
def export(
    ebook_id: str = typer.Argument(..., help="Ebook id or unique prefix"),
    fmt: str = typer.Option("all", "--format", "-f", help=FORMAT_HELP),
    out: Path | None = typer.Option(None, "--out", "-o", help="Output directory (default: paths.output_dir)"),
) -> None:
    """Write export artifacts for a library ebook."""
    _init_library()
    out = out or Path(load_app_config().paths.output_dir)
    formats = _resolve_formats(fmt)
    resolved_id = _resolve_ebook_id_or_exit(ebook_id)

    ebook = get_ebook(resolved_id)
    if ebook is None:
        console.print(f"[red]✗ Ebook not found: {resolved_id}[/red]")
        raise typer.Exit(code=1)

    try:
        for export_format in formats:
            _write_artifacts(export_ebook(ebook, export_format), out)
    except EbookError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Exported {resolved_id}[/green]")


@app.command()
def remove(
    ebook_id: str = typer.Argument(..., help="Ebook id or unique prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Remove an ebook from the library."""
    _init_library()
    resolved_id = _resolve_ebook_id_or_exit(ebook_id)

    if not yes and not typer.confirm(f"Remove {resolved_id}?"):
        console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(code=0)

    delete_ebook(resolved_id)
    console.print(f"[green]✓ Ebook removed: {resolved_id}[/green]")


if __name__ == "__main__":
    app()
