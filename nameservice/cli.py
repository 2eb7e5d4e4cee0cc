# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
nameservice.cli
---------------

Inspection CLI for names, identifiers and credential keys. It works on
values only and never touches a store.

Commands:
  - namehash   : Namehash of a dotted name.
  - encode     : Length-prefixed encoding of a dotted name (hex).
  - decode     : Dotted name from its hex encoding.
  - identifier : Address-based name and encoded identifier for an account.
  - route      : Namespaces a credential key routes to, most specific first.
  - config     : Effective configuration (environment, or a JSON/YAML file).

Example:
  python -m nameservice.cli namehash foo.eth
  python -m nameservice.cli identifier 0xF8e0...b4EF --chain-id 1 --suffix addr.ecs.eth
"""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, NoReturn, Optional, Sequence

import typer

from . import codec
from .config import NameServiceConfig
from .dispatcher import candidate_names
from .errors import NameServiceError
from .logging import get_logger, setup_logging
from .resolvers.base import split_key
from .utils.bytes import from_hex, to_hex

__all__ = ["app", "main"]

app = typer.Typer(
    name="nameservice",
    help="Animica name service tools (names, identifiers, credential keys).",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _root(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: NAMESERVICE_LOG_LEVEL or INFO)."),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="json or console (default: NAMESERVICE_LOG_FORMAT or json)."),
) -> None:
    """Configure logging once for the process, then run the command."""
    try:
        cfg = NameServiceConfig.from_env()
    except ValueError as e:
        _fail(e)
    setup_logging(level=log_level or cfg.log_level, log_format=log_format or cfg.log_format)
    get_logger(__name__).debug("cli_invoked", command=ctx.invoked_subcommand, log_format=log_format or cfg.log_format)


def _emit(obj: Dict[str, Any]) -> None:
    typer.echo(json.dumps(obj, indent=2))


def _fail(e: Exception) -> NoReturn:
    typer.echo(f"error: {e}", err=True)
    raise typer.Exit(code=2)


@app.command("namehash")
def cmd_namehash(name: str = typer.Argument(..., help="Dotted name, e.g. foo.eth ('' for root).")) -> None:
    """Print the namehash of NAME."""
    try:
        node = codec.namehash_name(name)
    except NameServiceError as e:
        _fail(e)
    _emit({"name": name, "node": to_hex(node)})


@app.command("encode")
def cmd_encode(name: str = typer.Argument(..., help="Dotted name.")) -> None:
    """Print the length-prefixed encoding of NAME."""
    try:
        typer.echo(to_hex(codec.encode(name)))
    except NameServiceError as e:
        _fail(e)


@app.command("decode")
def cmd_decode(data: str = typer.Argument(..., help="0x-hex encoded name.")) -> None:
    """Print the dotted name encoded in DATA."""
    try:
        typer.echo(codec.decode(from_hex(data)))
    except (NameServiceError, ValueError) as e:
        _fail(e)


@app.command("identifier")
def cmd_identifier(
    address: str = typer.Argument(..., help="Account address (0x-hex)."),
    network: Optional[int] = typer.Option(None, "--network", "-n", help="Network id / coin type."),
    chain_id: Optional[int] = typer.Option(None, "--chain-id", "-c", help="EVM chain id (converted to a coin type)."),
    suffix: str = typer.Option("", "--suffix", "-s", help="Namespace appended after the identifier."),
) -> None:
    """Print the address-based name and identifier for ADDRESS."""
    if (network is None) == (chain_id is None):
        typer.echo("error: pass exactly one of --network or --chain-id", err=True)
        raise typer.Exit(code=2)
    try:
        net = network if network is not None else codec.coin_type_for_chain(chain_id)
        name = codec.identifier_name(address, net, suffix)
        identifier = codec.identifier_from_name(name)
    except (NameServiceError, ValueError) as e:
        _fail(e)
    _emit({"name": name, "network": net, "identifier": to_hex(identifier)})


@app.command("route")
def cmd_route(key: str = typer.Argument(..., help="Credential key, e.g. eth.ecs.controlled-accounts.accounts:1")) -> None:
    """Show how KEY is split and which namespaces it may route to."""
    base, params = split_key(key)
    try:
        candidates = [{"name": n, "node": to_hex(codec.namehash_name(n))} for n in candidate_names(key)]
    except NameServiceError as e:
        _fail(e)
    _emit({"base": base, "params": params, "candidates": candidates})


@app.command("config")
def cmd_config(
    file: Optional[str] = typer.Option(None, "--file", "-f", help="JSON or YAML config file (default: environment)."),
) -> None:
    """Print the effective configuration."""
    try:
        cfg = NameServiceConfig.from_file(file) if file else NameServiceConfig.from_env()
        cfg.validate()
    except (OSError, ValueError) as e:
        _fail(e)
    typer.echo(cfg.to_json())


def main(argv: Optional[Sequence[str]] = None) -> None:  # pragma: no cover - thin wrapper
    """Entry-point to run as `python -m nameservice.cli`."""
    try:
        app(args=list(argv) if argv is not None else None, prog_name="nameservice")
    except KeyboardInterrupt:
        typer.echo("", err=True)
        sys.exit(130)


if __name__ == "__main__":  # pragma: no cover
    main()
