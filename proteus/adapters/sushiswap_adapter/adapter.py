from __future__ import annotations

import asyncio
import time

from eth_utils import to_checksum_address

from proteus.adapters.token_adapter.adapter import TokenAdapter
from proteus.core.adapters.BaseAdapter import BaseAdapter
from proteus.core.clients.protocols import ChainClientProtocol
from proteus.core.constants.base import DEFAULT_DEADLINE_SECONDS
from proteus.core.constants.sushiswap_abi import (
    UNISWAP_V2_FACTORY_ABI,
    UNISWAP_V2_PAIR_ABI,
    UNISWAP_V2_ROUTER_ABI,
)
from proteus.core.models import PairState, Quote


def select_reserves(pair: PairState, input_token: str) -> tuple[int, int]:
    """Return ``(reserve_in, reserve_out)`` for a trade that sells ``input_token``.

    Direction is chosen by token identity, not by position in the pair.
    """
    if to_checksum_address(input_token) == to_checksum_address(pair.token0.address):
        return pair.token0.amount, pair.token1.amount
    return pair.token1.amount, pair.token0.amount


def deadline(seconds: int = DEFAULT_DEADLINE_SECONDS) -> int:
    return int(time.time()) + seconds


class SushiswapAdapter(BaseAdapter):
    adapter_type = "SUSHISWAP"

    def __init__(
        self,
        client: ChainClientProtocol,
        *,
        router_address: str,
        token_adapter: TokenAdapter | None = None,
        deadline_seconds: int = DEFAULT_DEADLINE_SECONDS,
    ):
        super().__init__("sushiswap_adapter", client)
        self.router_address = to_checksum_address(router_address)
        self.token_adapter = token_adapter or TokenAdapter(client)
        self.deadline_seconds = int(deadline_seconds)

    async def read_pair(self, pair_address: str) -> PairState:
        address = to_checksum_address(pair_address)

        async def _token(fn_name: str):
            token_address = await self.client.call(address, UNISWAP_V2_PAIR_ABI, fn_name)
            return await self.token_adapter.resolve(token_address)

        total_supply, token0, token1, reserves = await asyncio.gather(
            self.client.call(address, UNISWAP_V2_PAIR_ABI, "totalSupply"),
            _token("token0"),
            _token("token1"),
            self.client.call(address, UNISWAP_V2_PAIR_ABI, "getReserves"),
        )
        return PairState(
            address=address,
            total_supply=int(total_supply),
            token0=token0.with_amount(int(reserves[0])),
            token1=token1.with_amount(int(reserves[1])),
        )

    async def factory(self) -> str:
        return await self.client.call(self.router_address, UNISWAP_V2_ROUTER_ABI, "factory")

    async def get_pair_address(self, token_a: str, token_b: str) -> str:
        factory_address = await self.factory()
        return await self.client.call(
            factory_address,
            UNISWAP_V2_FACTORY_ABI,
            "getPair",
            to_checksum_address(token_a),
            to_checksum_address(token_b),
        )

    async def quote(self, input_token: str, amount_in: int, other_token: str) -> Quote:
        """Quote selling ``amount_in`` of ``input_token`` for ``other_token`` at current reserves.

        The output comes from the router's own ``getAmountOut`` so the quote
        matches what the router will enforce on-chain.
        """
        amount_in = int(amount_in)
        if amount_in == 0:
            return Quote(amount_in=0, amount_out=0)

        pair_address = await self.get_pair_address(input_token, other_token)
        pair = await self.read_pair(pair_address)
        reserve_in, reserve_out = select_reserves(pair, input_token)
        amount_out = await self.client.call(
            self.router_address,
            UNISWAP_V2_ROUTER_ABI,
            "getAmountOut",
            amount_in,
            reserve_in,
            reserve_out,
        )
        self.logger.debug(
            f"quote {input_token}->{other_token}: in={amount_in} out={amount_out} "
            f"reserves=({reserve_in}, {reserve_out})"
        )
        return Quote(amount_in=amount_in, amount_out=int(amount_out))

    async def swap_exact_tokens_for_eth(
        self,
        amount_in: int,
        amount_out_min: int,
        path: list[str],
        to: str,
    ) -> str:
        await self.token_adapter.ensure_allowance(
            path[0], self.client.address, self.router_address, int(amount_in)
        )
        return await self.client.submit(
            self.router_address,
            UNISWAP_V2_ROUTER_ABI,
            "swapExactTokensForETH",
            [
                int(amount_in),
                int(amount_out_min),
                [to_checksum_address(p) for p in path],
                to_checksum_address(to),
                deadline(self.deadline_seconds),
            ],
        )

    async def add_liquidity_eth(
        self,
        token: str,
        amount_token_desired: int,
        amount_token_min: int,
        amount_eth_min: int,
        to: str,
        *,
        value: int,
    ) -> str:
        await self.token_adapter.ensure_allowance(
            token, self.client.address, self.router_address, int(amount_token_desired)
        )
        return await self.client.submit(
            self.router_address,
            UNISWAP_V2_ROUTER_ABI,
            "addLiquidityETH",
            [
                to_checksum_address(token),
                int(amount_token_desired),
                int(amount_token_min),
                int(amount_eth_min),
                to_checksum_address(to),
                deadline(self.deadline_seconds),
            ],
            value=int(value),
        )
