"""directupload CLI - Main commands."""
import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from directupload.core.exceptions import UploadError
from directupload.core.logging import configure_logging

app = typer.Typer(
    name="directupload",
    help="Upload local files with the direct binary upload protocol",
    add_completion=False
)
console = Console()


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def parse_headers(values: Optional[List[str]]) -> Dict[str, str]:
    """Parse repeated 'Name: value' options into a dict."""
    headers = {}
    for value in values or []:
        name, sep, content = value.partition(':')
        if not sep or not name.strip():
            raise typer.BadParameter(f"Header must look like 'Name: value', got '{value}'")
        headers[name.strip()] = content.strip()
    return headers


def render_result(result) -> None:
    """Print a batch result as tables."""
    table = Table(title="Files")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Parts", justify="right")
    table.add_column("Put (ms)", justify="right")
    table.add_column("Complete (ms)", justify="right")
    table.add_column("Status")

    for item in result.detailed_result:
        status = "[green]ok[/green]" if item.success else f"[red]{item.message}[/red]"
        table.add_row(
            item.target_path,
            item.file_size_str,
            str(item.part_count),
            str(item.put_spent_final),
            str(item.complete_spent),
            status
        )
    console.print(table)

    console.print(f"[bold]Completed:[/bold] {result.total_completed}/{result.total_files}")
    console.print(f"[bold]Initiate:[/bold] {result.init_spent} ms")
    console.print(f"[bold]Total time:[/bold] {result.final_spent} ms")
    if result.total_file_size is not None:
        console.print(f"[bold]Total size:[/bold] {result.total_file_size_str}")
        console.print(f"[bold]Average size:[/bold] {result.avg_file_size_str}")
        console.print(f"[bold]Average put:[/bold] {result.avg_put_spent} ms")
        console.print(f"[bold]Average complete:[/bold] {result.avg_complete_spent} ms")
        console.print(f"[bold]90th percentile:[/bold] {result.ninety_percentile_total} ms")


@app.command()
def upload(
    url: str = typer.Argument(..., help="Target folder URL"),
    paths: List[Path] = typer.Argument(..., help="Local files or directories"),
    header: Optional[List[str]] = typer.Option(None, "--header", "-H", help="Request header 'Name: value'"),
    serial: bool = typer.Option(False, "--serial", help="Upload files and parts one at a time"),
    max_concurrency: Optional[int] = typer.Option(None, "--max-concurrency", "-c", min=1, help="Cap on in-flight uploads"),
    continue_on_error: bool = typer.Option(False, "--continue-on-error", help="Record failed files instead of aborting"),
    retries: int = typer.Option(0, "--retries", min=0, help="Transport retries for 502/503/504 and connection errors"),
    insecure: bool = typer.Option(False, "--insecure", "-k", help="Disable SSL verification"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Upload files to a repository folder."""
    from directupload import FileSystemUpload, HttpConfig, RetryConfig, UploadOptions

    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        options = UploadOptions(
            url=url,
            headers=parse_headers(header),
            concurrent=not serial,
            max_concurrency=max_concurrency,
            continue_on_error=continue_on_error
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)

    config = HttpConfig.insecure() if insecure else HttpConfig.default()
    config.retry = RetryConfig(max_retries=retries)

    async def do_upload():
        async with FileSystemUpload(config=config) as uploader:
            return await uploader.upload(options, paths)

    try:
        result = run_async(do_upload())
    except (UploadError, OSError) as e:
        console.print(f"[red]Upload failed: {e}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
    else:
        render_result(result)

    if result.total_completed < result.total_files:
        raise typer.Exit(1)


@app.command()
def version():
    """Show the installed version."""
    from directupload import __version__
    console.print(__version__)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
