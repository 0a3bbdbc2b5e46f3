#!/usr/bin/env python3
"""
tickoracle CLI

Reads the synthetic pool oracle for a Pyth feed (or a pair of feeds) through
Hermes, or converts a single mantissa/exponent price offline.

Examples:
    tickoracle tick --mantissa 200000000000 --exponent -8 --decimal-difference -12
    tickoracle slot0 --feed-id 0xff61...ace --max-age 60
    tickoracle observe --feed-id 0xff61...ace --ages 0,60,3600
    tickoracle twap --feed-id 0xff61...ace --quote-feed-id 0xe62d...b43 --seconds-ago 1800
"""

from __future__ import annotations

import contextlib
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import DEFAULT_HERMES_URL, DEFAULT_HTTP_TIMEOUT, DEFAULT_MAX_AGE, AdapterConfig
from ..core.tick_math import DEFAULT_TICK_PRECISION, MAX_TICK_PRECISION, tick_to_price
from ..exceptions import OracleAdapterError
from ..feeds.hermes import HermesPriceFeed
from ..feeds.memory import InMemoryPriceFeed
from ..logging_config import setup_logging
from ..oracle.adapter import create_adapter
from ..oracle.twap import consult

logger = logging.getLogger(__name__)
console = Console()

OFFLINE_FEED_ID = "offline"


def _handle_cli_error(exc: Exception, exit_code: int = 1) -> None:
    """Centralized CLI error handler for consistent messaging/exit codes."""
    logger.error("CLI error: %s", exc, exc_info=True)
    console.print(f"[bold red]Error:[/] {exc}")
    sys.exit(exit_code)


def _parse_ages(value: str) -> list[int]:
    try:
        ages = [int(part) for part in value.split(",") if part.strip()]
    except ValueError as exc:
        raise click.BadParameter("ages must be a comma separated list of integers") from exc
    if any(age < 0 for age in ages):
        raise click.BadParameter("ages must be non-negative")
    return ages


def _emit(ctx: click.Context, title: str, payload: Dict[str, Any]) -> None:
    if ctx.obj.get("json_output"):
        click.echo(json.dumps(payload, indent=2))
        return

    table = Table(show_header=False, box=box.ROUNDED)
    for key, value in payload.items():
        table.add_row(f"[bold cyan]{key}", str(value))
    console.print(Panel(table, title=f"[bold green]{title}", border_style="green"))


def _status(ctx: click.Context):
    """Spinner for network reads; suppressed when emitting JSON."""
    if ctx.obj.get("json_output"):
        return contextlib.nullcontext()
    return console.status("[bold cyan]Reading price feed...")


def _build_config(
    config_path: Optional[Path],
    feed_id: Optional[str],
    quote_feed_id: Optional[str],
    max_age: int,
    decimal_difference: int,
    invert: bool,
) -> AdapterConfig:
    if config_path is not None:
        return AdapterConfig.from_yaml(config_path)
    if not feed_id:
        raise click.UsageError("--feed-id or --config is required")
    return AdapterConfig(
        feed_id=feed_id,
        quote_feed_id=quote_feed_id,
        max_age=max_age,
        decimal_difference=decimal_difference,
        invert=invert,
    )


def feed_options(func):
    """Options shared by commands that read a live feed."""
    options = [
        click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
                     help="YAML adapter configuration (overrides the feed options)."),
        click.option("--feed-id", help="Base price feed id."),
        click.option("--quote-feed-id", help="Quote feed id; enables the cross price feed_id/quote_feed_id."),
        click.option("--max-age", type=click.IntRange(min=0), default=DEFAULT_MAX_AGE, show_default=True,
                     help="Maximum sample age in seconds."),
        click.option("--decimal-difference", type=int, default=0, show_default=True,
                     help="token1 decimals minus token0 decimals of the target market."),
        click.option("--invert", is_flag=True, help="Report the reciprocal price (single feed only)."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--hermes-url", default=DEFAULT_HERMES_URL, show_default=True, help="Hermes endpoint.")
@click.option("--timeout", type=float, default=DEFAULT_HTTP_TIMEOUT, show_default=True,
              help="HTTP timeout in seconds.")
@click.option("--json-output", is_flag=True, help="Emit JSON instead of tables.")
@click.option("--log-level", default="WARNING", show_default=True,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.pass_context
def cli(ctx: click.Context, hermes_url: str, timeout: float, json_output: bool, log_level: str):
    """Synthetic Uniswap V3 pool oracle over Pyth price feeds."""
    ctx.ensure_object(dict)
    setup_logging(name="tickoracle", level=log_level)
    ctx.obj.setdefault("feed", HermesPriceFeed(base_url=hermes_url, timeout=timeout))
    ctx.obj["json_output"] = json_output


@cli.command("tick")
@click.option("--mantissa", type=int, required=True, help="Price mantissa.")
@click.option("--exponent", type=int, required=True, help="Power-of-ten exponent.")
@click.option("--decimal-difference", type=int, default=0, show_default=True,
              help="token1 decimals minus token0 decimals of the target market.")
@click.option("--invert", is_flag=True, help="Report the reciprocal price.")
@click.option("--precision", type=click.IntRange(1, MAX_TICK_PRECISION), default=DEFAULT_TICK_PRECISION,
              show_default=True, help="Fractional bits of the binary logarithm.")
@click.pass_context
def tick_command(
    ctx: click.Context,
    mantissa: int,
    exponent: int,
    decimal_difference: int,
    invert: bool,
    precision: int,
):
    """Convert one mantissa/exponent price to a tick and sqrt price, offline."""
    try:
        now = int(time.time())
        feed = InMemoryPriceFeed(clock=lambda: now)
        feed.update_price(OFFLINE_FEED_ID, mantissa, exponent, publish_time=now)
        config = AdapterConfig(
            feed_id=OFFLINE_FEED_ID,
            max_age=0,
            decimal_difference=decimal_difference,
            invert=invert,
        )
        oracle = create_adapter(feed, config, clock=lambda: now, precision=precision)
        slot0 = oracle.slot0()
    except OracleAdapterError as exc:
        _handle_cli_error(exc)

    _emit(ctx, "Tick", {
        "tick": slot0.tick,
        "sqrt_price_x96": str(slot0.sqrt_price_x96),
        "price": tick_to_price(slot0.tick),
    })


@cli.command("slot0")
@feed_options
@click.pass_context
def slot0_command(ctx: click.Context, config_path, feed_id, quote_feed_id, max_age, decimal_difference, invert):
    """Read the current synthetic slot0."""
    try:
        config = _build_config(config_path, feed_id, quote_feed_id, max_age, decimal_difference, invert)
        oracle = create_adapter(ctx.obj["feed"], config)
        with _status(ctx):
            slot0 = oracle.slot0()
    except OracleAdapterError as exc:
        _handle_cli_error(exc)

    payload = slot0._asdict()
    payload["sqrt_price_x96"] = str(payload["sqrt_price_x96"])
    _emit(ctx, "slot0", payload)


@cli.command("observe")
@feed_options
@click.option("--ages", default="0", show_default=True, help="Comma separated seconds-ago values.")
@click.pass_context
def observe_command(ctx: click.Context, config_path, feed_id, quote_feed_id, max_age, decimal_difference,
                    invert, ages):
    """Read cumulative ticks at the given ages."""
    seconds_agos = _parse_ages(ages)
    try:
        config = _build_config(config_path, feed_id, quote_feed_id, max_age, decimal_difference, invert)
        oracle = create_adapter(ctx.obj["feed"], config)
        with _status(ctx):
            result = oracle.observe(seconds_agos)
    except OracleAdapterError as exc:
        _handle_cli_error(exc)

    if ctx.obj.get("json_output"):
        click.echo(json.dumps({
            "seconds_agos": seconds_agos,
            "tick_cumulatives": result.tick_cumulatives,
            "seconds_per_liquidity_cumulative_x128s": result.seconds_per_liquidity_cumulative_x128s,
        }, indent=2))
        return

    table = Table(title="Observations", box=box.ROUNDED)
    table.add_column("Seconds ago", justify="right", style="cyan")
    table.add_column("Tick cumulative", justify="right")
    for age, cumulative in zip(seconds_agos, result.tick_cumulatives):
        table.add_row(str(age), str(cumulative))
    console.print(table)


@cli.command("twap")
@feed_options
@click.option("--seconds-ago", type=click.IntRange(min=1), required=True, help="TWAP window in seconds.")
@click.pass_context
def twap_command(ctx: click.Context, config_path, feed_id, quote_feed_id, max_age, decimal_difference,
                 invert, seconds_ago):
    """Arithmetic mean tick over a window, as a pool consumer computes it."""
    try:
        config = _build_config(config_path, feed_id, quote_feed_id, max_age, decimal_difference, invert)
        oracle = create_adapter(ctx.obj["feed"], config)
        with _status(ctx):
            mean_tick = consult(oracle, seconds_ago)
    except OracleAdapterError as exc:
        _handle_cli_error(exc)

    _emit(ctx, "TWAP", {
        "seconds_ago": seconds_ago,
        "mean_tick": mean_tick,
        "price": tick_to_price(mean_tick),
    })


def main() -> int:
    return cli(obj={})


if __name__ == "__main__":
    sys.exit(main() or 0)
