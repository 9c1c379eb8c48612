"""
CLI commands for tgscribe.

Uses Typer for command-line interface.
"""

import asyncio
import logging
import mimetypes
import signal
from pathlib import Path
from typing import Optional

import typer
from tgscribe.app import build_http_client, build_pipeline
from tgscribe.channels.telegram import TelegramClient
from tgscribe.config import Config, load_config, save_config
from tgscribe.config.loader import DEFAULT_CONFIG_PATH
from tgscribe.media.types import MediaStream
from tgscribe.server import WebhookServer
from tgscribe.transcribe.whisper import Transcriber


app = typer.Typer(
    name="tgscribe",
    help="tgscribe — Telegram voice message transcription relay",
)

ConfigOption = typer.Option(
    None, "-c", "--config", help="Config file (default ~/.tgscribe/config.json)"
)


def _setup_logging(config: Config) -> None:
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # httpx logs every request URL at INFO, and Telegram URLs carry the token
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _mask(secret: str) -> str:
    if not secret:
        return "✗ not set"
    return f"{secret[:4]}…{secret[-2:]}" if len(secret) > 8 else "****"


def _require_secrets(config: Config) -> None:
    missing = []
    if not config.telegram.token:
        missing.append("TELEGRAM_BOT_TOKEN")
    if not config.transcription.api_key:
        missing.append("OPENAI_API_KEY")
    if missing:
        typer.echo(f"Missing configuration: {', '.join(missing)}", err=True)
        raise typer.Exit(code=1)


@app.command()
def serve(
    config_path: Optional[Path] = ConfigOption,
    port: Optional[int] = typer.Option(None, "-p", "--port", help="Override listen port"),
):
    """
    Run the webhook server.

    Telegram must be pointed at it with `tgscribe set-webhook`.
    """
    config = load_config(config_path)
    if port is not None:
        config.server.port = port
    _require_secrets(config)
    _setup_logging(config)

    logging.getLogger("tgscribe").info("Starting tgscribe webhook relay")
    asyncio.run(_serve(config))


async def _serve(config: Config) -> None:
    """Serve webhooks until SIGINT/SIGTERM."""
    shutdown_event = asyncio.Event()

    async with build_http_client(config) as http:
        telegram = TelegramClient(config.telegram)
        await telegram.start()

        server = WebhookServer(
            pipeline=build_pipeline(config, http, telegram),
            host=config.server.host,
            port=config.server.port,
            webhook_path=config.server.webhook_path,
        )
        await server.start()
        typer.echo(f"✓ Listening on {config.server.host}:{server.port}{config.server.webhook_path}")
        serve_task = asyncio.create_task(server.serve_forever())

        loop = asyncio.get_running_loop()

        def _handle_signal():
            """Handle shutdown signal from within asyncio context."""
            typer.echo("\nShutdown signal received, stopping...")
            shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _handle_signal)

        try:
            await shutdown_event.wait()
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)

            serve_task.cancel()
            await asyncio.gather(serve_task, return_exceptions=True)
            await server.stop()
            await telegram.stop()
            typer.echo("Goodbye!")


@app.command()
def init(
    config_path: Optional[Path] = ConfigOption,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
):
    """
    Write a config file.

    Values already present in the environment (TELEGRAM_BOT_TOKEN,
    OPENAI_API_KEY, TGSCRIBE_*) are written into it.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if path.exists() and not force:
        typer.echo(f"Config already exists at {path} (use --force to overwrite)", err=True)
        raise typer.Exit(code=1)

    save_config(load_config(path), path)
    typer.echo(f"✓ Config written to {path}")


@app.command()
def status(config_path: Optional[Path] = ConfigOption):
    """Show configuration."""
    config = load_config(config_path)

    typer.echo("\n=== tgscribe Status ===")
    typer.echo(f"Telegram token: {_mask(config.telegram.token)}")
    typer.echo(f"Telegram API: {config.telegram.api_base}")
    typer.echo(f"Transcription key: {_mask(config.transcription.api_key)}")
    typer.echo(f"Transcription endpoint: {config.transcription.endpoint}")
    typer.echo(f"Model: {config.transcription.model}")
    typer.echo(f"Language: {config.transcription.language or 'auto'}")
    typer.echo(f"Max file size: {config.max_file_size // (1024 * 1024)}MB")
    typer.echo(
        f"Server: {config.server.host}:{config.server.port}{config.server.webhook_path}"
    )
    typer.echo("")


@app.command()
def transcribe(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Audio or video file"),
    config_path: Optional[Path] = ConfigOption,
):
    """Transcribe a local file with the configured provider."""
    config = load_config(config_path)
    if not config.transcription.api_key:
        typer.echo("Missing configuration: OPENAI_API_KEY", err=True)
        raise typer.Exit(code=1)

    content = path.read_bytes()
    if len(content) > config.max_file_size:
        typer.echo(
            f"File is too large ({len(content)} bytes, max {config.max_file_size})",
            err=True,
        )
        raise typer.Exit(code=1)

    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    stream = MediaStream(content=content, filename=path.name, content_type=content_type)
    text = asyncio.run(_transcribe(config, stream))
    typer.echo(text.strip() or "(no speech detected)")


async def _transcribe(config: Config, stream: MediaStream) -> str:
    async with build_http_client(config) as http:
        return await Transcriber(config.transcription, http).transcribe(stream)


@app.command("set-webhook")
def set_webhook(
    url: str = typer.Argument(..., help="Public HTTPS URL of the webhook endpoint"),
    config_path: Optional[Path] = ConfigOption,
):
    """Register the webhook URL with Telegram."""
    config = load_config(config_path)
    if not config.telegram.token:
        typer.echo("Missing configuration: TELEGRAM_BOT_TOKEN", err=True)
        raise typer.Exit(code=1)

    ok = asyncio.run(_set_webhook(config, url))
    typer.echo(f"✓ Webhook set to {url}" if ok else "✗ Telegram rejected the webhook")
    if not ok:
        raise typer.Exit(code=1)


async def _set_webhook(config: Config, url: str) -> bool:
    telegram = TelegramClient(config.telegram)
    await telegram.start()
    try:
        return await telegram.set_webhook(url)
    finally:
        await telegram.stop()


def main() -> None:
    """Entry point for CLI."""
    app()
