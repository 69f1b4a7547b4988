"""Roll accrued onsen rewards back into the gOHM/WETH pool.

Stages run strictly in order, each one awaiting confirmation of its own
transactions before the next reads fresh balances:

    harvest -> sell reward A -> sell half of reward B -> add liquidity -> stake

Nothing is rolled back. A failure at stage N leaves stages 1..N-1 committed
on-chain; ``run(start_at=...)`` re-enters at the failed stage.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

from proteus.core.clients.protocols import ChainClientProtocol
from proteus.core.constants.base import NATIVE_DECIMALS
from proteus.core.errors import InsufficientBalanceError, ProteusError
from proteus.core.models import RollContext
from proteus.core.utils.units import apply_slippage, format_units

from .types import (
    ROLL_STAGES,
    OnsenAdapters,
    RollAbortedError,
    RollConfig,
    RollReport,
    RollStage,
    StageOutcome,
    StageStatus,
)


class RollPipeline:
    name = "Onsen gOHM/WETH roll"

    def __init__(
        self,
        client: ChainClientProtocol,
        config: RollConfig | None = None,
        *,
        adapters: OnsenAdapters | None = None,
    ):
        self.client = client
        self.config = config or RollConfig()
        self.adapters = adapters or OnsenAdapters.create(client, self.config)
        self.logger = logger.bind(strategy=self.__class__.__name__)
        self.current_stage: RollStage | None = None
        # Filled in as stages finish, so a caller that cancels run() still sees it.
        self.report: RollReport | None = None
        # What the running stage is about to submit; reported if the submit fails.
        self._intent = ""

        self._handlers: dict[
            RollStage, Callable[[RollContext], Awaitable[StageOutcome]]
        ] = {
            RollStage.HARVEST: self._harvest,
            RollStage.SELL_REWARD_A: self._sell_reward_a,
            RollStage.SELL_REWARD_B: self._sell_reward_b,
            RollStage.ADD_LIQUIDITY: self._add_liquidity,
            RollStage.STAKE: self._stake,
        }

    async def run(self, *, start_at: RollStage = RollStage.HARVEST) -> RollReport:
        context = RollContext(owner=self.client.address, pool_id=self.config.pool_id)
        report = self.report = RollReport(owner=context.owner)

        for stage in ROLL_STAGES:
            if stage.index < start_at.index:
                report.record(
                    StageOutcome(
                        stage,
                        StageStatus.RESUMED_PAST,
                        detail="committed by an earlier run",
                    )
                )
                continue

            self.current_stage = stage
            self._intent = ""
            self.logger.info(f"[{stage.value}] starting")
            try:
                outcome = await self._handlers[stage](context)
            except ProteusError as exc:
                detail = f"{self._intent}: {exc}" if self._intent else str(exc)
                self.logger.error(f"[{stage.value}] failed: {detail}")
                report.record(StageOutcome(stage, StageStatus.FAILED, detail=detail))
                raise RollAbortedError(stage, report, exc) from exc
            except asyncio.CancelledError:
                detail = (
                    f"cancelled during: {self._intent}"
                    if self._intent
                    else "cancelled before submitting"
                )
                self.logger.warning(f"[{stage.value}] interrupted: {detail}")
                report.record(
                    StageOutcome(stage, StageStatus.INTERRUPTED, detail=detail)
                )
                raise
            finally:
                self.current_stage = None

            report.record(outcome)
            self.logger.info(f"[{stage.value}] {outcome.status.value}")

        self.logger.info("roll done")
        return report

    async def _harvest(self, context: RollContext) -> StageOutcome:
        self._intent = f"harvest pool {context.pool_id}"
        tx_hash = await self.adapters.minichef.harvest(context.pool_id, context.owner)
        return StageOutcome(
            RollStage.HARVEST,
            StageStatus.COMPLETED,
            tx_hashes=(tx_hash,),
            detail=f"pool {context.pool_id}",
        )

    async def _sell_reward_a(self, context: RollContext) -> StageOutcome:
        return await self._sell_reward(
            RollStage.SELL_REWARD_A, context, self.config.reward_token_a, divisor=1
        )

    async def _sell_reward_b(self, context: RollContext) -> StageOutcome:
        return await self._sell_reward(
            RollStage.SELL_REWARD_B,
            context,
            self.config.reward_token_b,
            divisor=self.config.reward_b_sell_divisor,
        )

    async def _sell_reward(
        self,
        stage: RollStage,
        context: RollContext,
        token_address: str,
        *,
        divisor: int,
    ) -> StageOutcome:
        balance = await self.adapters.token.balance_of(token_address, context.owner)
        amount_in = balance.amount // divisor
        quote = await self.adapters.sushiswap.quote(
            token_address, amount_in, self.config.wrapped_native
        )
        sold = format_units(amount_in, balance.decimals)
        received = format_units(quote.amount_out, NATIVE_DECIMALS)
        self.logger.info(f"sell {balance.symbol}->ETH: {sold} {received}")

        if amount_in <= 0:
            return StageOutcome(
                stage, StageStatus.SKIPPED, detail=f"no {balance.symbol} to sell"
            )

        self._intent = f"sell {sold} {balance.symbol} for >= {received} ETH"
        # TODO: sells accept exactly the quoted output while add-liquidity applies
        # liquidity_slippage; decide whether sells should use apply_slippage too.
        tx_hash = await self.adapters.sushiswap.swap_exact_tokens_for_eth(
            amount_in,
            quote.amount_out,
            [token_address, self.config.wrapped_native],
            context.owner,
        )
        return StageOutcome(
            stage,
            StageStatus.COMPLETED,
            tx_hashes=(tx_hash,),
            detail=f"sold {sold} {balance.symbol} for >= {received} ETH",
        )

    async def _add_liquidity(self, context: RollContext) -> StageOutcome:
        token = self.config.reward_token_b
        native, token_balance = await asyncio.gather(
            self.adapters.token.native_balance(context.owner),
            self.adapters.token.balance_of(token, context.owner),
        )
        if token_balance.amount == 0:
            return StageOutcome(
                RollStage.ADD_LIQUIDITY,
                StageStatus.SKIPPED,
                detail=f"no {token_balance.symbol} to pair",
            )

        quote = await self.adapters.sushiswap.quote(
            token, token_balance.amount, self.config.wrapped_native
        )
        amount_native = quote.amount_out
        if native.amount < amount_native:
            shortfall = InsufficientBalanceError(
                native.symbol, amount_native, native.amount
            )
            self.logger.warning(f"insufficient ETH for LP: {shortfall}")
            return StageOutcome(
                RollStage.ADD_LIQUIDITY, StageStatus.SKIPPED, detail=str(shortfall)
            )

        token_amount = format_units(token_balance.amount, token_balance.decimals)
        native_amount = format_units(amount_native, native.decimals)
        self.logger.info(
            f"add liquidity {token_balance.symbol} {token_amount} ETH {native_amount}"
        )
        self._intent = (
            f"add {token_amount} {token_balance.symbol} + {native_amount} ETH"
        )
        tolerance = self.config.liquidity_slippage
        tx_hash = await self.adapters.sushiswap.add_liquidity_eth(
            token,
            token_balance.amount,
            apply_slippage(token_balance.amount, tolerance),
            apply_slippage(amount_native, tolerance),
            context.owner,
            value=amount_native,
        )
        return StageOutcome(
            RollStage.ADD_LIQUIDITY,
            StageStatus.COMPLETED,
            tx_hashes=(tx_hash,),
            detail=f"{token_amount} {token_balance.symbol} + {native_amount} ETH",
        )

    async def _stake(self, context: RollContext) -> StageOutcome:
        minichef = self.adapters.minichef
        lp_address = await minichef.lp_token(context.pool_id)
        lp_balance = await self.adapters.token.balance_of(lp_address, context.owner)
        amount = format_units(lp_balance.amount, lp_balance.decimals)
        self.logger.info(f"deposit LP {amount}")
        self._intent = f"stake {amount} {lp_balance.symbol}"
        tx_hash = await minichef.deposit(
            context.pool_id, lp_balance.amount, context.owner, lp_address=lp_address
        )
        return StageOutcome(
            RollStage.STAKE,
            StageStatus.COMPLETED,
            tx_hashes=(tx_hash,),
            detail=f"staked {amount} {lp_balance.symbol}",
        )
