from __future__ import annotations

import asyncio

from eth_utils import to_checksum_address
from loguru import logger

from proteus.core.clients.protocols import ChainClientProtocol
from proteus.core.models import PairState, PositionSnapshot, TokenBalance
from proteus.core.utils.units import scale_by_ratio

from .types import OnsenAdapters, RollConfig


def compute_liquidity_share(
    user_amount: int, pair: PairState
) -> tuple[TokenBalance, TokenBalance]:
    """The owner's proportional claim on each reserve for ``user_amount`` pool tokens."""
    if pair.total_supply == 0:
        return pair.token0.with_amount(0), pair.token1.with_amount(0)
    return (
        pair.token0.with_amount(
            scale_by_ratio(user_amount, pair.total_supply, pair.token0.amount)
        ),
        pair.token1.with_amount(
            scale_by_ratio(user_amount, pair.total_supply, pair.token1.amount)
        ),
    )


class PositionSnapshotBuilder:
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

    async def build(self, owner: str | None = None) -> PositionSnapshot:
        owner = to_checksum_address(owner or self.client.address)
        pool_id = self.config.pool_id

        native, erc20_balances, (liquidity, pending), rewarder = await asyncio.gather(
            self.adapters.token.native_balance(owner),
            self._tracked_balances(owner),
            self._staked_breakdown(owner),
            self.adapters.minichef.rewarder_balance(
                pool_id, self.config.reward_token_b
            ),
        )
        return PositionSnapshot(
            owner=owner,
            native_balance=native,
            erc20_balances=erc20_balances,
            liquidity_share=liquidity,
            pending_rewards=pending,
            rewarder_balance=rewarder,
        )

    async def _tracked_balances(self, owner: str) -> list[TokenBalance]:
        return list(
            await asyncio.gather(
                *[
                    self.adapters.token.balance_of(token, owner)
                    for token in self.config.tracked_tokens
                ]
            )
        )

    async def _staked_pair(self) -> PairState:
        lp_address = await self.adapters.minichef.lp_token(self.config.pool_id)
        return await self.adapters.sushiswap.read_pair(lp_address)

    async def _staked_breakdown(
        self, owner: str
    ) -> tuple[tuple[TokenBalance, TokenBalance], list[TokenBalance]]:
        pool_id = self.config.pool_id
        minichef = self.adapters.minichef
        pair, pending_sushi, pending_reward, user = await asyncio.gather(
            self._staked_pair(),
            minichef.pending_sushi(pool_id, owner),
            minichef.pending_rewarder_token(pool_id, owner),
            minichef.user_info(pool_id, owner),
        )
        self.logger.debug(
            f"pool {pool_id}: staked={user.amount} total_supply={pair.total_supply}"
        )
        return compute_liquidity_share(user.amount, pair), [pending_reward, pending_sushi]


def render_snapshot(snapshot: PositionSnapshot) -> list[str]:
    """Human-readable report lines, amounts shown at each token's decimals."""
    lines = [f"{snapshot.native_balance.symbol} {snapshot.native_balance.formatted()}"]
    lines.extend(f"{b.symbol} {b.formatted()}" for b in snapshot.erc20_balances)
    lines.append("")
    lines.append("LIQUIDITY")
    lines.extend(f"{b.symbol} {b.formatted()}" for b in snapshot.liquidity_share)
    lines.append("")
    lines.append("PENDING")
    lines.extend(f"{b.symbol} {b.formatted()}" for b in snapshot.pending_rewards)
    lines.append("")
    lines.append("REWARDER")
    lines.append(f"{snapshot.rewarder_balance.symbol} {snapshot.rewarder_balance.formatted()}")
    return lines
