"""Command line entry point.

Usage:
  proteus balance
  proteus roll [--from-stage STAGE]
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Coroutine
from typing import Any, TypeVar

import click
from loguru import logger

from proteus.core.clients.ChainClient import chain_client_from_config
from proteus.core.config import load_wallet_config
from proteus.core.errors import ConfigError, ProteusError
from proteus.strategies.onsen_roll import (
    ROLL_STAGES,
    PositionSnapshotBuilder,
    RollAbortedError,
    RollConfig,
    RollPipeline,
    RollReport,
    RollStage,
    render_snapshot,
)

USAGE = """usage:

Check your Proteus balance:
proteus balance

Roll your pending SUSHI/gOHM rewards back into the pool:
proteus roll"""


class _UsageGroup(click.Group):
    """Prints the usage text and exits cleanly for a missing or unknown command."""

    def resolve_command(self, ctx: click.Context, args: list[str]):
        if not args or self.get_command(ctx, args[0]) is None:
            click.echo(USAGE)
            ctx.exit(0)
        return super().resolve_command(ctx, args)


T = TypeVar("T")


def _run(coro: Coroutine[Any, Any, T], timeout: float | None) -> T:
    if timeout:
        return asyncio.run(asyncio.wait_for(coro, timeout))
    return asyncio.run(coro)


def _load_wallet(ctx: click.Context):
    try:
        return load_wallet_config(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(str(exc), err=True)
        ctx.exit(1)


def _echo_report(report: RollReport) -> None:
    click.echo("\nSUMMARY")
    for line in report.summary_lines():
        click.echo(line)


def _echo_partial(report: RollReport) -> None:
    _echo_report(report)
    resume = report.resume_stage
    if resume is not None:
        click.echo(f"\nresume with: proteus roll --from-stage {resume.value}")


@click.group(
    cls=_UsageGroup,
    invoke_without_command=True,
    help="Report and roll the SushiSwap gOHM/WETH onsen position.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Wallet config file (default: ~/.wallet or $PROTEUS_CONFIG_PATH).",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Abort the whole command after this many seconds.",
)
@click.option("--debug", is_flag=True, default=False)
@click.pass_context
def cli(
    ctx: click.Context, config_path: str | None, timeout: float | None, debug: bool
) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "INFO")
    ctx.obj = {"config_path": config_path, "timeout": timeout}
    if ctx.invoked_subcommand is None:
        click.echo(USAGE)


async def _balance(rpc_url: str, private_key: str, config: RollConfig) -> list[str]:
    async with chain_client_from_config(
        rpc_url, private_key, chain_id=config.chain_id
    ) as client:
        snapshot = await PositionSnapshotBuilder(client, config).build()
    return [client.address, *render_snapshot(snapshot)]


async def _roll(
    rpc_url: str,
    private_key: str,
    config: RollConfig,
    start_at: RollStage,
    started: list[RollPipeline],
) -> RollReport:
    async with chain_client_from_config(
        rpc_url, private_key, chain_id=config.chain_id
    ) as client:
        click.echo(client.address)
        pipeline = RollPipeline(client, config)
        started.append(pipeline)
        return await pipeline.run(start_at=start_at)


@cli.command(name="balance", help="Show wallet, liquidity and pending reward balances.")
@click.pass_context
def balance_cmd(ctx: click.Context) -> None:
    wallet = _load_wallet(ctx)
    try:
        lines = _run(
            _balance(wallet["rpc_url"], wallet["private_key"], RollConfig()),
            ctx.obj["timeout"],
        )
    except (ProteusError, TimeoutError) as exc:
        click.echo(f"balance failed: {str(exc) or 'timed out'}", err=True)
        ctx.exit(1)
    for line in lines:
        click.echo(line)


@cli.command(name="roll", help="Harvest rewards, rebalance them into liquidity and re-stake.")
@click.option(
    "--from-stage",
    "from_stage",
    type=click.Choice([s.value for s in ROLL_STAGES]),
    default=RollStage.HARVEST.value,
    show_default=True,
    help="Resume a failed roll at this stage; earlier stages are not repeated.",
)
@click.pass_context
def roll_cmd(ctx: click.Context, from_stage: str) -> None:
    wallet = _load_wallet(ctx)
    started: list[RollPipeline] = []
    try:
        report = _run(
            _roll(
                wallet["rpc_url"],
                wallet["private_key"],
                RollConfig(),
                RollStage(from_stage),
                started,
            ),
            ctx.obj["timeout"],
        )
    except RollAbortedError as exc:
        click.echo(f"roll aborted at {exc.stage.value}: {exc.cause}", err=True)
        _echo_partial(exc.report)
        ctx.exit(1)
    except TimeoutError:
        click.echo(f"roll timed out after {ctx.obj['timeout']}s", err=True)
        report = started[0].report if started else None
        if report is not None:
            _echo_partial(report)
        ctx.exit(1)
    except ProteusError as exc:
        click.echo(f"roll failed: {exc}", err=True)
        ctx.exit(1)
    click.echo("roll done")
    _echo_report(report)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
