from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import asynccontextmanager
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner
from loguru import logger

from proteus.cli import USAGE, cli
from proteus.core.errors import RemoteWriteError
from proteus.strategies.onsen_roll import (
    RollAbortedError,
    RollReport,
    RollStage,
    StageOutcome,
    StageStatus,
)
from proteus.testing.fake_chain import OWNER, FakeOnsen


@pytest.fixture
def runner() -> Iterator[CliRunner]:
    yield CliRunner()
    # the CLI rebinds loguru to the runner's captured stderr
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def wallet(tmp_path: Path) -> Path:
    path = tmp_path / "wallet.json"
    path.write_text(
        json.dumps({"arbitrum": "https://arb.example/rpc", "key": "0x" + "11" * 32})
    )
    return path


@pytest.fixture
def onsen() -> FakeOnsen:
    onsen = FakeOnsen()
    onsen.set_native(OWNER, 10**18)
    return onsen


def _patch_client(onsen: FakeOnsen):
    @asynccontextmanager
    async def _fake_client(rpc_url, private_key, *, chain_id, **_):
        assert rpc_url == "https://arb.example/rpc"
        yield onsen.client

    return patch("proteus.cli.chain_client_from_config", _fake_client)


def _patch_config(onsen: FakeOnsen):
    return patch("proteus.cli.RollConfig", return_value=onsen.config)


def test_no_command_prints_usage(runner: CliRunner) -> None:
    result = runner.invoke(cli, [])
    assert result.exit_code == 0
    assert USAGE in result.output


def test_unknown_command_prints_usage(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["withdraw"])
    assert result.exit_code == 0
    assert USAGE in result.output


def test_missing_config_exits_nonzero(runner: CliRunner, tmp_path: Path) -> None:
    missing = tmp_path / ".wallet"
    result = runner.invoke(cli, ["--config", str(missing), "balance"])
    assert result.exit_code == 1
    assert "please place it at" in result.output
    assert str(missing) in result.output


def test_balance(runner: CliRunner, wallet: Path, onsen: FakeOnsen) -> None:
    with _patch_client(onsen), _patch_config(onsen):
        result = runner.invoke(cli, ["--config", str(wallet), "balance"])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == OWNER
    assert lines[1] == "ETH 1.0"
    for section in ("LIQUIDITY", "PENDING", "REWARDER"):
        assert section in lines
    assert onsen.client.submits == []


def test_roll_prints_summary(runner: CliRunner, wallet: Path, onsen: FakeOnsen) -> None:
    onsen.pending_reward[OWNER] = 10**18
    with _patch_client(onsen), _patch_config(onsen):
        result = runner.invoke(cli, ["--config", str(wallet), "roll"])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines()[0] == OWNER
    assert "roll done" in result.output
    assert "SUMMARY" in result.output
    assert "sell_reward_a: skipped (no SUSHI to sell)" in result.output
    assert "stake: completed" in result.output


def test_roll_abort_prints_resume_hint(
    runner: CliRunner, wallet: Path, onsen: FakeOnsen
) -> None:
    report = RollReport(owner=OWNER)
    report.record(
        StageOutcome(RollStage.HARVEST, StageStatus.COMPLETED, tx_hashes=("0x01",))
    )
    report.record(StageOutcome(RollStage.SELL_REWARD_A, StageStatus.FAILED))
    error = RollAbortedError(
        RollStage.SELL_REWARD_A, report, RemoteWriteError("0xrouter", "swap")
    )

    with (
        _patch_client(onsen),
        _patch_config(onsen),
        patch("proteus.cli.RollPipeline") as pipeline_cls,
    ):
        pipeline_cls.return_value.run = AsyncMock(side_effect=error)
        result = runner.invoke(cli, ["--config", str(wallet), "roll"])

    assert result.exit_code == 1
    assert "roll aborted at sell_reward_a" in result.output
    assert "harvest: completed tx=0x01" in result.output
    assert "sell_reward_b: not attempted" in result.output
    assert "resume with: proteus roll --from-stage sell_reward_a" in result.output


def test_roll_from_stage(runner: CliRunner, wallet: Path, onsen: FakeOnsen) -> None:
    with (
        _patch_client(onsen),
        _patch_config(onsen),
        patch("proteus.cli.RollPipeline") as pipeline_cls,
    ):
        pipeline_cls.return_value.run = AsyncMock(return_value=RollReport(owner=OWNER))
        result = runner.invoke(
            cli, ["--config", str(wallet), "roll", "--from-stage", "stake"]
        )

    assert result.exit_code == 0, result.output
    pipeline_cls.return_value.run.assert_awaited_once_with(start_at=RollStage.STAKE)


def test_roll_rejects_unknown_stage(runner: CliRunner, wallet: Path) -> None:
    result = runner.invoke(
        cli, ["--config", str(wallet), "roll", "--from-stage", "withdraw"]
    )
    assert result.exit_code == 2


def test_roll_timeout_prints_partial_summary(
    runner: CliRunner, wallet: Path, onsen: FakeOnsen
) -> None:
    onsen.pending_reward[OWNER] = 10**18
    onsen.client.submit_delay["addLiquidityETH"] = 10
    with _patch_client(onsen), _patch_config(onsen):
        result = runner.invoke(
            cli, ["--config", str(wallet), "--timeout", "0.5", "roll"]
        )

    assert result.exit_code == 1
    assert "roll timed out after 0.5s" in result.output
    assert "SUMMARY" in result.output
    assert "harvest: completed" in result.output
    assert "sell_reward_b: completed" in result.output
    assert "add_liquidity: interrupted" in result.output
    assert "stake: not attempted" in result.output
    assert "resume with: proteus roll --from-stage add_liquidity" in result.output
