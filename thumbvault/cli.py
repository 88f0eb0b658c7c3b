"""CLI commands for ThumbVault."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import BinaryIO

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from thumbvault.assets.resolver import AssetFound
from thumbvault.errors import ThumbVaultError
from thumbvault.models.artifact import ThumbnailSaveResult
from thumbvault.models.config import ThumbVaultSettings
from thumbvault.vault import ThumbVault

console = Console()


def get_vault(config: str | None, output_dir: str | None) -> ThumbVault:
    settings = ThumbVaultSettings.load(
        Path(config) if config else None, output_dir=output_dir
    )
    return ThumbVault(settings)


def _print_result(result: ThumbnailSaveResult) -> None:
    table = Table(title="Stored Artifact")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Hash", result.hash)
    table.add_row("Format", result.format.value)
    table.add_row("File", result.file_name)
    table.add_row("Path", result.full_path)
    table.add_row("Already existed", "yes" if result.already_existed else "no")

    console.print(table)


def _run(vault: ThumbVault, coro):
    async def run():
        try:
            return await coro
        finally:
            await vault.close()

    try:
        return asyncio.run(run())
    except ThumbVaultError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--config", "-c", default=None, help="YAML config file")
@click.option("--output-dir", "-o", default=None, help="Thumbnail output directory")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context, config: str | None, output_dir: str | None, verbose: bool
) -> None:
    """ThumbVault - content-addressed thumbnail cache CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.ensure_object(dict)
    ctx.obj["vault"] = get_vault(config, output_dir)


@main.command()
@click.argument("source", type=click.File("rb"))
@click.option("--base64", "is_base64", is_flag=True, help="Input is base64 text or a data URI")
@click.pass_context
def ingest(ctx: click.Context, source: BinaryIO, is_base64: bool) -> None:
    """Store an image file (or - for stdin) by content hash."""
    vault: ThumbVault = ctx.obj["vault"]
    data = source.read()

    if is_base64:
        coro = vault.store.save_base64_async(data.decode("ascii", errors="replace"))
    else:
        coro = vault.store.save_bytes_async(data)

    _print_result(_run(vault, coro))


@main.command()
@click.argument("type")
@click.argument("subject_id", type=int)
@click.option("--width", "-w", type=int, default=None, help="Override width")
@click.option("--height", "-h", type=int, default=None, help="Override height")
@click.pass_context
def render(
    ctx: click.Context,
    type: str,
    subject_id: int,
    width: int | None,
    height: int | None,
) -> None:
    """Render an avatar image remotely and store it."""
    vault: ThumbVault = ctx.obj["vault"]

    with console.status(f"Rendering {type} for {subject_id}..."):
        result = _run(vault, vault.render(type, subject_id, width, height))

    _print_result(result)


@main.command()
@click.argument("base_hash")
@click.option("--variant", default="bust", help="Derivative variant tag")
@click.option("--width", "-w", type=int, required=True, help="Target width")
@click.option("--height", "-h", type=int, required=True, help="Target height")
@click.option("--format", "-f", "fmt", default="png", help="png or jpg")
@click.pass_context
def derive(
    ctx: click.Context,
    base_hash: str,
    variant: str,
    width: int,
    height: int,
    fmt: str,
) -> None:
    """Create (or find) a resized derivative."""
    vault: ThumbVault = ctx.obj["vault"]
    path = _run(vault, vault.derive(base_hash, variant, width, height, fmt))

    if not path.exists():
        console.print(f"[red]Base thumbnail not found: {base_hash}[/red]")
        raise SystemExit(1)
    console.print(f"[green]{path}[/green]")


@main.command()
@click.argument("base_hash")
@click.option("--variant", default="full", help="Derivative variant tag")
@click.option("--format", "-f", "fmt", default="jpg", help="png or jpg")
@click.pass_context
def convert(ctx: click.Context, base_hash: str, variant: str, fmt: str) -> None:
    """Re-encode a stored thumbnail in another format."""
    vault: ThumbVault = ctx.obj["vault"]
    path = _run(vault, vault.convert(base_hash, variant, fmt))

    if not path.exists():
        console.print(f"[red]Base thumbnail not found: {base_hash}[/red]")
        raise SystemExit(1)
    console.print(f"[green]{path}[/green]")


@main.command()
@click.argument("request_path")
@click.pass_context
def resolve(ctx: click.Context, request_path: str) -> None:
    """Show which file the asset server would serve for a path."""
    vault: ThumbVault = ctx.obj["vault"]
    result = vault.resolve_asset(request_path)

    if isinstance(result, AssetFound):
        how = "search" if result.via_search else "direct"
        console.print(f"[green]{result.path}[/green] ({result.media_type}, {how})")
    else:
        console.print(f"[yellow]{result.value}[/yellow]")
        raise SystemExit(1)


@main.command()
@click.option("--host", default="127.0.0.1", help="Host to bind")
@click.option("--port", "-p", default=8000, help="Port to bind")
@click.option("--prefix", default="", help="API prefix")
@click.option("--assets/--no-assets", default=True, help="Also serve the asset root")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, prefix: str, assets: bool) -> None:
    """Start the API server."""
    import uvicorn
    from fastapi import FastAPI

    from thumbvault.api import create_router
    from thumbvault.assets import create_asset_router

    vault: ThumbVault = ctx.obj["vault"]

    app = FastAPI(title="ThumbVault API")
    app.include_router(create_router(vault, prefix=prefix))
    if assets:
        vault.settings.assets_root.mkdir(parents=True, exist_ok=True)
        app.include_router(create_asset_router(vault.assets))

    console.print(f"[green]Starting server at http://{host}:{port}{prefix}[/green]")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
