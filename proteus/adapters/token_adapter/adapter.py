import asyncio

from eth_utils import to_checksum_address

from proteus.core.adapters.BaseAdapter import BaseAdapter
from proteus.core.clients.protocols import ChainClientProtocol
from proteus.core.constants.base import NATIVE_DECIMALS, NATIVE_SYMBOL
from proteus.core.constants.erc20_abi import ERC20_ABI
from proteus.core.models import TokenBalance, TokenInfo

NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"


def _coerce_symbol(value) -> str:
    # Some ERC20s return bytes32 for symbol.
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).rstrip(b"\x00").decode("utf-8", errors="ignore")
    return str(value)


class TokenAdapter(BaseAdapter):
    adapter_type = "TOKEN"

    def __init__(self, client: ChainClientProtocol):
        super().__init__("token_adapter", client)
        # In-flight lookups are shared, so concurrent resolves of one token read it once.
        self._info_tasks: dict[str, asyncio.Task[TokenInfo]] = {}

    async def resolve(self, token_address: str) -> TokenInfo:
        address = to_checksum_address(token_address)
        task = self._info_tasks.get(address)
        if task is None:
            task = asyncio.ensure_future(self._fetch_info(address))
            self._info_tasks[address] = task
        try:
            return await asyncio.shield(task)
        except Exception:
            if self._info_tasks.get(address) is task:
                del self._info_tasks[address]
            raise

    async def _fetch_info(self, address: str) -> TokenInfo:
        symbol, decimals = await asyncio.gather(
            self.client.call(address, ERC20_ABI, "symbol"),
            self.client.call(address, ERC20_ABI, "decimals"),
        )
        return TokenInfo(
            address=address, symbol=_coerce_symbol(symbol), decimals=int(decimals)
        )

    async def balance_of(self, token_address: str, owner: str) -> TokenBalance:
        address = to_checksum_address(token_address)
        info, balance = await asyncio.gather(
            self.resolve(address),
            self.client.call(address, ERC20_ABI, "balanceOf", to_checksum_address(owner)),
        )
        return info.with_amount(int(balance))

    async def native_balance(self, owner: str) -> TokenBalance:
        balance = await self.client.get_balance(to_checksum_address(owner))
        return TokenBalance(
            address=NATIVE_TOKEN_ADDRESS,
            symbol=NATIVE_SYMBOL,
            decimals=NATIVE_DECIMALS,
            amount=int(balance),
        )

    async def allowance(self, token_address: str, owner: str, spender: str) -> int:
        value = await self.client.call(
            to_checksum_address(token_address),
            ERC20_ABI,
            "allowance",
            to_checksum_address(owner),
            to_checksum_address(spender),
        )
        return int(value)

    async def ensure_allowance(
        self,
        token_address: str,
        owner: str,
        spender: str,
        amount: int,
        *,
        approval_amount: int | None = None,
    ) -> str | None:
        """Approve ``spender`` when its allowance is below ``amount``; returns the approval tx hash."""
        current = await self.allowance(token_address, owner, spender)
        if current >= amount:
            return None

        self.logger.info(
            f"Approving {spender} to spend {token_address} (allowance {current} < {amount})"
        )
        return await self.client.submit(
            to_checksum_address(token_address),
            ERC20_ABI,
            "approve",
            [
                to_checksum_address(spender),
                int(approval_amount if approval_amount is not None else amount),
            ],
        )
