from __future__ import annotations

import asyncio
from typing import NamedTuple

from eth_utils import to_checksum_address

from proteus.adapters.token_adapter.adapter import TokenAdapter
from proteus.core.adapters.BaseAdapter import BaseAdapter
from proteus.core.clients.protocols import ChainClientProtocol
from proteus.core.constants.minichef_abi import MINICHEF_V2_ABI, REWARDER_ABI
from proteus.core.models import TokenBalance


class UserInfo(NamedTuple):
    amount: int
    reward_debt: int


class MiniChefAdapter(BaseAdapter):
    """SushiSwap MiniChefV2 staking program plus the pool's secondary rewarder."""

    adapter_type = "MINICHEF"

    def __init__(
        self,
        client: ChainClientProtocol,
        *,
        minichef_address: str,
        token_adapter: TokenAdapter | None = None,
    ):
        super().__init__("minichef_adapter", client)
        self.minichef_address = to_checksum_address(minichef_address)
        self.token_adapter = token_adapter or TokenAdapter(client)

    async def _read(self, fn_name: str, *args):
        return await self.client.call(self.minichef_address, MINICHEF_V2_ABI, fn_name, *args)

    async def lp_token(self, pool_id: int) -> str:
        return await self._read("lpToken", int(pool_id))

    async def sushi_token(self) -> str:
        return await self._read("SUSHI")

    async def rewarder(self, pool_id: int) -> str:
        return await self._read("rewarder", int(pool_id))

    async def user_info(self, pool_id: int, owner: str) -> UserInfo:
        amount, reward_debt = await self._read(
            "userInfo", int(pool_id), to_checksum_address(owner)
        )
        return UserInfo(amount=int(amount), reward_debt=int(reward_debt))

    async def pending_sushi(self, pool_id: int, owner: str) -> TokenBalance:
        async def _sushi_info():
            return await self.token_adapter.resolve(await self.sushi_token())

        token, pending = await asyncio.gather(
            _sushi_info(),
            self._read("pendingSushi", int(pool_id), to_checksum_address(owner)),
        )
        return token.with_amount(int(pending))

    async def pending_rewarder_token(self, pool_id: int, owner: str) -> TokenBalance:
        rewarder_address = await self.rewarder(pool_id)

        async def _reward_token():
            token_address = await self.client.call(
                rewarder_address, REWARDER_ABI, "rewardToken"
            )
            return await self.token_adapter.resolve(token_address)

        token, pending = await asyncio.gather(
            _reward_token(),
            self.client.call(
                rewarder_address,
                REWARDER_ABI,
                "pendingToken",
                int(pool_id),
                to_checksum_address(owner),
            ),
        )
        return token.with_amount(int(pending))

    async def rewarder_balance(self, pool_id: int, reward_token: str) -> TokenBalance:
        """How much of ``reward_token`` the pool's rewarder still holds for payouts."""
        rewarder_address = await self.rewarder(pool_id)
        return await self.token_adapter.balance_of(reward_token, rewarder_address)

    async def harvest(self, pool_id: int, to: str) -> str:
        return await self.client.submit(
            self.minichef_address,
            MINICHEF_V2_ABI,
            "harvest",
            [int(pool_id), to_checksum_address(to)],
        )

    async def deposit(
        self, pool_id: int, amount: int, to: str, *, lp_address: str | None = None
    ) -> str:
        if lp_address is None:
            lp_address = await self.lp_token(pool_id)
        await self.token_adapter.ensure_allowance(
            lp_address, self.client.address, self.minichef_address, int(amount)
        )
        return await self.client.submit(
            self.minichef_address,
            MINICHEF_V2_ABI,
            "deposit",
            [int(pool_id), int(amount), to_checksum_address(to)],
        )
