"""CLI commands for typetester."""

import asyncio
import base64
import logging
import re
import secrets
import sys
from pathlib import Path

import click

from typetester.config import get_settings, set_config_path
from typetester.fonts.errors import FontOperationError
from typetester.fonts.validator import UploadCandidate
from typetester.operations import (
    ACTIVATE,
    DEACTIVATE,
    DELETE_FONT,
    LIST_FONTS,
    UPLOAD_FONT,
)
from typetester.runtime import build_runtime

LOG_LEVELS = ["debug", "info", "warning", "error"]


@click.group()
@click.version_option(package_name="typetester")
@click.option(
    "-f",
    "--config-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to app.yaml",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(LOG_LEVELS),
    help="Logging level",
)
def cli(config_file, log_level):
    """typetester - upload fonts and preview them in the browser."""
    if config_file is not None:
        set_config_path(config_file)
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
def serve(host, port, reload, workers):
    """Run the typetester server."""
    import signal

    from hypercorn.asyncio import serve as hypercorn_serve
    from hypercorn.config import Config

    config = Config()
    config.application_path = "typetester.asgi:app"
    config.bind = [f"{host}:{port}"]
    config.workers = 1 if reload else workers
    config.loglevel = get_settings().log_level.upper()
    config.include_server_header = False

    if reload:
        config.use_reloader = True
        from hypercorn.run import run
        run(config)
        return

    from typetester.asgi import create_asgi_app

    app = create_asgi_app()
    shutdown_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_event.set)
    try:
        loop.run_until_complete(
            hypercorn_serve(app, config, shutdown_trigger=shutdown_event.wait)
        )
    finally:
        loop.close()


@cli.command()
@click.option(
    "--write",
    type=click.Path(),
    default=None,
    help="Write SECRET_KEY to a .env file",
)
@click.option(
    "--format",
    "fmt",
    default="urlsafe",
    type=click.Choice(["urlsafe", "hex", "base64"]),
    help="Output format for the secret key",
)
@click.option("--length", default=32, type=int, help="Number of random bytes")
def secret(write, fmt, length):
    """Generate a secure secret key."""
    if fmt == "urlsafe":
        key = secrets.token_urlsafe(length)
    elif fmt == "hex":
        key = secrets.token_hex(length)
    else:  # base64
        key = base64.b64encode(secrets.token_bytes(length)).decode("ascii")

    if not write:
        click.echo(key)
        return

    env_path = Path(write)
    env_content = env_path.read_text() if env_path.exists() else ""

    secret_key_pattern = re.compile(r"^SECRET_KEY=.*$", re.MULTILINE)
    new_line = f"SECRET_KEY={key}"

    if secret_key_pattern.search(env_content):
        env_content = secret_key_pattern.sub(new_line, env_content)
    else:
        if env_content and not env_content.endswith("\n"):
            env_content += "\n"
        env_content += new_line + "\n"

    env_path.write_text(env_content)
    click.echo(f"SECRET_KEY written to {env_path}")


async def _run_operation(name: str, *args, **kwargs):
    """Build a runtime without auto-activation and run one operation."""
    settings = get_settings()
    settings = settings.model_copy(
        update={"fonts": settings.fonts.model_copy(update={"activate_on_startup": False})}
    )
    runtime = await build_runtime(settings)
    try:
        return runtime, await runtime.operations.dispatch(name, *args, **kwargs)
    finally:
        await runtime.shutdown()


def _run(name: str, *args, **kwargs):
    try:
        return asyncio.run(_run_operation(name, *args, **kwargs))
    except FontOperationError as exc:
        click.echo(f"Error ({exc.reason.value}): {exc.detail}", err=True)
        sys.exit(1)


@cli.command()
def activate():
    """Create the font directory and database table."""
    _run(ACTIVATE)
    click.echo("Font storage activated.")


@cli.command()
@click.confirmation_option(prompt="Remove every stored font file and flush the cache?")
def deactivate():
    """Remove the font directory and flush the cache. Metadata is kept."""
    _run(DEACTIVATE)
    click.echo("Font storage deactivated. Database records were kept.")


@cli.group()
def fonts():
    """Manage uploaded fonts."""
    pass


@fonts.command("list")
def list_fonts():
    """List uploaded fonts, newest first."""
    runtime, records = _run(LIST_FONTS)
    if not records:
        click.echo("No fonts uploaded yet.")
        return
    for record in records:
        url = runtime.store.resolve_public_url(record.stored_filename)
        click.echo(
            f"{record.id:>5}  {record.display_name}  "
            f"({record.original_filename}, {record.uploaded_at:%Y-%m-%d %H:%M:%S})  {url}"
        )


@fonts.command("upload")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", "display_name", default=None, help="Display name (defaults to the filename)")
def upload_font(path, display_name):
    """Upload a font file from disk."""
    with open(path, "rb") as stream:
        candidate = UploadCandidate(
            filename=path.name,
            size=path.stat().st_size,
            stream=stream,
        )
        runtime, record = _run(UPLOAD_FONT, candidate, display_name)
    click.echo(
        f"Uploaded {record.original_filename} as {record.stored_filename} (id {record.id})"
    )


@fonts.command("delete")
@click.argument("font_id", type=int)
def delete_font(font_id):
    """Delete a font and its stored file."""
    runtime, result = _run(DELETE_FONT, font_id)
    click.echo(f"Deleted font {result.record.id}.")
    if not result.file_removed:
        click.echo("Warning: the stored file could not be removed.", err=True)


if __name__ == "__main__":
    cli()
