from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

from proteus.adapters.minichef_adapter.adapter import MiniChefAdapter
from proteus.adapters.sushiswap_adapter.adapter import SushiswapAdapter
from proteus.adapters.token_adapter.adapter import TokenAdapter
from proteus.core.clients.protocols import ChainClientProtocol
from proteus.core.errors import ProteusError

from .constants import (
    DEADLINE_SECONDS,
    LIQUIDITY_SLIPPAGE,
    MINICHEF,
    POOL_ID,
    REWARD_B_SELL_DIVISOR,
    REWARD_TOKEN_A,
    REWARD_TOKEN_B,
    ROLL_CHAIN_ID,
    ROUTER,
    TRACKED_TOKENS,
    WRAPPED_NATIVE,
)


class RollConfig(BaseModel):
    """Identities and tolerances for one pool pair and one reward program."""

    model_config = ConfigDict(frozen=True)

    chain_id: int = ROLL_CHAIN_ID
    router: str = ROUTER
    minichef: str = MINICHEF
    pool_id: int = POOL_ID
    reward_token_a: str = REWARD_TOKEN_A
    reward_token_b: str = REWARD_TOKEN_B
    wrapped_native: str = WRAPPED_NATIVE
    tracked_tokens: tuple[str, ...] = TRACKED_TOKENS
    liquidity_slippage: int = LIQUIDITY_SLIPPAGE
    reward_b_sell_divisor: int = REWARD_B_SELL_DIVISOR
    deadline_seconds: int = DEADLINE_SECONDS

    @field_validator("liquidity_slippage")
    @classmethod
    def _slippage_in_range(cls, v: int) -> int:
        if not 0 <= v <= 1000:
            raise ValueError("liquidity_slippage is in thousandths and must be 0..1000")
        return v

    @field_validator("reward_b_sell_divisor")
    @classmethod
    def _divisor_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("reward_b_sell_divisor must be >= 1")
        return v


class OnsenAdapters(NamedTuple):
    token: TokenAdapter
    sushiswap: SushiswapAdapter
    minichef: MiniChefAdapter

    @classmethod
    def create(cls, client: ChainClientProtocol, config: RollConfig) -> OnsenAdapters:
        token = TokenAdapter(client)
        return cls(
            token=token,
            sushiswap=SushiswapAdapter(
                client,
                router_address=config.router,
                token_adapter=token,
                deadline_seconds=config.deadline_seconds,
            ),
            minichef=MiniChefAdapter(
                client, minichef_address=config.minichef, token_adapter=token
            ),
        )


class RollStage(Enum):
    HARVEST = "harvest"
    SELL_REWARD_A = "sell_reward_a"
    SELL_REWARD_B = "sell_reward_b"
    ADD_LIQUIDITY = "add_liquidity"
    STAKE = "stake"

    @property
    def index(self) -> int:
        return ROLL_STAGES.index(self)


ROLL_STAGES: list[RollStage] = list(RollStage)


class StageStatus(Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"
    # cancelled mid-stage; its write may or may not have been mined
    INTERRUPTED = "interrupted"
    RESUMED_PAST = "resumed past"


@dataclass(frozen=True)
class StageOutcome:
    stage: RollStage
    status: StageStatus
    tx_hashes: tuple[str, ...] = ()
    detail: str = ""


@dataclass
class RollReport:
    """Which stages of one roll were committed, skipped or failed.

    There is no rollback: a failed stage leaves every earlier completed stage
    committed on-chain and the later stages unattempted.
    """

    owner: str
    outcomes: list[StageOutcome] = field(default_factory=list)

    def record(self, outcome: StageOutcome) -> None:
        self.outcomes.append(outcome)

    def outcome_for(self, stage: RollStage) -> StageOutcome | None:
        return next((o for o in self.outcomes if o.stage == stage), None)

    @property
    def failed_stage(self) -> RollStage | None:
        return next(
            (o.stage for o in self.outcomes if o.status == StageStatus.FAILED), None
        )

    @property
    def interrupted_stage(self) -> RollStage | None:
        return next(
            (o.stage for o in self.outcomes if o.status == StageStatus.INTERRUPTED),
            None,
        )

    @property
    def resume_stage(self) -> RollStage | None:
        """First stage a re-run should start at, or ``None`` when the roll finished."""
        stopped = self.failed_stage or self.interrupted_stage
        if stopped is not None:
            return stopped
        attempted = {o.stage for o in self.outcomes}
        return next((s for s in ROLL_STAGES if s not in attempted), None)

    def summary_lines(self) -> list[str]:
        lines = []
        for stage in ROLL_STAGES:
            outcome = self.outcome_for(stage)
            if outcome is None:
                lines.append(f"{stage.value}: not attempted")
                continue
            line = f"{stage.value}: {outcome.status.value}"
            if outcome.detail:
                line += f" ({outcome.detail})"
            if outcome.tx_hashes:
                line += f" tx={', '.join(outcome.tx_hashes)}"
            lines.append(line)
        return lines


class RollAbortedError(ProteusError):
    def __init__(self, stage: RollStage, report: RollReport, cause: Exception):
        self.stage = stage
        self.report = report
        self.cause = cause
        super().__init__(f"roll aborted at stage {stage.value}: {cause}")
