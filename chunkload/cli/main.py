"""chunkload CLI - Main commands."""
import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn, DownloadColumn
from rich.table import Table

app = typer.Typer(
    name="chunkload",
    help="Chunked HTTP file uploader",
    add_completion=False
)
console = Console()


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def parse_pairs(values: Optional[List[str]], option: str) -> Dict[str, str]:
    """Parse repeated ``key=value`` options."""
    pairs = {}
    for value in values or []:
        if '=' not in value:
            raise typer.BadParameter(f"Expected key=value, got {value!r}", param_hint=option)
        key, _, val = value.partition('=')
        pairs[key.strip()] = val
    return pairs


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    url: str = typer.Argument(..., help="Upload endpoint"),
    chunk_size: int = typer.Option(0, "--chunk-size", "-c", help="Chunk size in bytes (0 = whole file)"),
    multipart: bool = typer.Option(True, "--multipart/--raw", help="Send multipart/form-data or raw octet stream"),
    field: List[str] = typer.Option(None, "--field", "-f", help="Extra form field key=value (repeatable)"),
    header: List[str] = typer.Option(None, "--header", "-H", help="Extra request header key=value (repeatable)"),
    file_field: str = typer.Option("file", "--file-field", help="Form field name of the file part"),
    name: str = typer.Option(None, "--name", "-n", help="File name sent to the server"),
    insecure: bool = typer.Option(False, "--insecure", "-k", help="Skip TLS certificate verification"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Upload a file to an HTTP endpoint."""
    from chunkload import (
        UploadClient,
        UploadSettings,
        TransportConfig,
        CallbackEventSink,
        TransferStatus,
        setup_logging,
    )

    if verbose:
        logging.basicConfig(format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        setup_logging(logging.DEBUG)

    settings = UploadSettings(
        chunk_size=chunk_size,
        multipart=multipart,
        multipart_params_extra=parse_pairs(field, "--field"),
        file_field_name=file_field,
        headers=parse_pairs(header, "--header"),
    )
    config = TransportConfig.insecure() if insecure else TransportConfig.default()

    async def do_upload():
        async with UploadClient(config=config, settings=settings) as client:
            handle = client.add_file(file_path, target_name=name)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                DownloadColumn(),
                console=console
            ) as progress:
                task = progress.add_task(f"Uploading {handle.upload_name}", total=max(handle.size, 1))
                sink = CallbackEventSink(
                    on_progress=lambda e: progress.update(task, completed=e.bytes_loaded),
                    on_chunk_uploaded=lambda e: progress.console.log(
                        f"chunk {e.chunk_index + 1}/{e.total_chunks}: HTTP {e.status}"
                    ) if verbose else None,
                    on_error=lambda e: console.print(f"[red]{e.message}[/red]"),
                )
                state = await client.upload(handle, url, sink=sink)

            table = Table(show_header=False)
            table.add_row("File", handle.upload_name)
            table.add_row("Size", f"{handle.size:,} bytes")
            table.add_row("Chunks", str(state.total_chunks))
            table.add_row("Status", state.status.value)
            if state.response_status is not None:
                table.add_row("HTTP status", str(state.response_status))
            console.print(table)

            if state.status is not TransferStatus.DONE:
                raise typer.Exit(1)

            if state.response_body:
                console.print(state.response_body)

    run_async(do_upload())


@app.command()
def capabilities():
    """Show the detected transport capabilities."""
    from chunkload import CapabilityProfile

    profile = CapabilityProfile.detect()
    table = Table()
    table.add_column("Capability", style="cyan")
    table.add_column("Supported")
    for key, value in vars(profile).items():
        table.add_row(key, "[green]yes[/green]" if value else "[red]no[/red]")
    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
