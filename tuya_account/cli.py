"""Command-line utilities for the Tuya account endpoints."""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Optional, Sequence

import typer
from dotenv import load_dotenv

from .client import TuyaClient
from .config import ConfigError, load_client_config
from .errors import TuyaApiError
from .signing import calc_sign, timestamp_ms

app = typer.Typer(add_completion=False, help="Sign requests and query Tuya account endpoints")


def _setup_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.getenv("TUYA_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def _echo_json(data: object) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _fail(message: str, exc: Exception) -> None:
    typer.secho(f"{message}: {exc}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1) from exc


def _build_client(ctx: typer.Context) -> TuyaClient:
    options = ctx.obj or {}
    try:
        config = load_client_config(options.get("config"), region=options.get("region"))
    except (ConfigError, FileNotFoundError) as exc:
        _fail("Configuration error", exc)
    return TuyaClient(config)


@app.callback()
def main_options(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", help="Path to a YAML file with Tuya credentials"),
    region: Optional[str] = typer.Option(None, "--region", help="cn, us or eu (defaults to config/TUYA_REGION, then eu)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each request"),
) -> None:
    load_dotenv(".env")
    _setup_logging(verbose)
    ctx.obj = {"config": config, "region": region}


@app.command()
def token(
    ctx: typer.Context,
    show_secrets: bool = typer.Option(False, help="Print tokens unmasked"),
) -> None:
    """Request an access token and show the session state."""
    with _build_client(ctx) as client:
        try:
            state = client.request_token()
        except TuyaApiError as exc:
            _fail("Tuya API error", exc)
    _echo_json(state.model_dump() if show_secrets else state.masked())


@app.command()
def countries(ctx: typer.Context) -> None:
    """List countries supported by the platform."""
    with _build_client(ctx) as client:
        try:
            payload = client.get_countries()
        except TuyaApiError as exc:
            _fail("Tuya API error", exc)
    _echo_json(payload)


@app.command()
def user(
    ctx: typer.Context,
    username: str = typer.Argument(..., help="Email address or phone number"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Account password"),
) -> None:
    """Look up a user record by username and password."""
    with _build_client(ctx) as client:
        try:
            client.request_token()
            payload = client.get_user(username, password)
        except TuyaApiError as exc:
            _fail("Tuya API error", exc)
    _echo_json(payload)


@app.command()
def sign(
    client_id: str = typer.Option(..., help="Cloud project access id"),
    secret: str = typer.Option(..., help="Cloud project secret"),
    access_token: str = typer.Option("", help="Access token, empty before authentication"),
    timestamp: Optional[str] = typer.Option(None, help="13 digit millisecond timestamp (defaults to now)"),
) -> None:
    """Compute a request signature offline."""
    ts = timestamp or timestamp_ms()
    _echo_json({"t": ts, "sign": calc_sign(client_id, access_token, ts, secret)})


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entrypoint for invocation via python -m tuya_account.cli."""
    try:
        app(prog_name="tuya-account", args=list(argv) if argv is not None else None)
    except typer.Exit as exc:
        raise SystemExit(exc.exit_code)


if __name__ == "__main__":
    main(sys.argv[1:])
