from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from eth_account import Account
from loguru import logger
from web3 import AsyncWeb3

from proteus.core.constants.base import DEFAULT_CONFIRMATIONS
from proteus.core.constants.chains import CHAIN_ID_ARBITRUM
from proteus.core.errors import RemoteReadError, RemoteWriteError
from proteus.core.utils.transaction import (
    encode_call,
    make_sign_callback,
    send_transaction,
)
from proteus.core.utils.web3 import web3_from_rpc


class ChainClient:
    """Reads view functions and submits signed, confirmed calls on one chain.

    Bound to a single signing key; every write is sent from that account and
    awaited until the ledger confirms it.
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        private_key: str,
        *,
        chain_id: int = CHAIN_ID_ARBITRUM,
        confirmations: int = DEFAULT_CONFIRMATIONS,
    ):
        self.web3 = web3
        self.chain_id = int(chain_id)
        self.confirmations = int(confirmations)
        self._account = Account.from_key(private_key)
        self._sign_callback = make_sign_callback(private_key)
        self.logger = logger.bind(client=self.__class__.__name__)

    @property
    def address(self) -> str:
        return self._account.address

    def _contract(self, target: str, abi: list[dict[str, Any]]):
        return self.web3.eth.contract(
            address=self.web3.to_checksum_address(target), abi=abi
        )

    async def call(
        self, target: str, abi: list[dict[str, Any]], fn_name: str, *args: Any
    ) -> Any:
        try:
            fn = getattr(self._contract(target, abi).functions, fn_name)
            return await fn(*args).call(block_identifier="latest")
        except Exception as exc:
            raise RemoteReadError(target, fn_name, exc) from exc

    async def get_balance(self, address: str) -> int:
        try:
            balance = await self.web3.eth.get_balance(
                self.web3.to_checksum_address(address), block_identifier="latest"
            )
        except Exception as exc:
            raise RemoteReadError(address, "eth_getBalance", exc) from exc
        return int(balance)

    async def submit(
        self,
        target: str,
        abi: list[dict[str, Any]],
        fn_name: str,
        args: list[Any],
        *,
        value: int = 0,
    ) -> str:
        try:
            tx = encode_call(
                self.web3,
                target=target,
                abi=abi,
                fn_name=fn_name,
                args=args,
                from_address=self.address,
                chain_id=self.chain_id,
                value=value,
            )
            tx_hash = await send_transaction(
                self.web3,
                tx,
                self._sign_callback,
                confirmations=self.confirmations,
            )
        except RemoteWriteError as exc:
            exc.target = target
            exc.call = fn_name
            raise
        except Exception as exc:
            raise RemoteWriteError(target, fn_name, exc) from exc
        self.logger.info(f"{fn_name} on {target} confirmed: {tx_hash}")
        return tx_hash


@asynccontextmanager
async def chain_client_from_config(
    rpc_url: str,
    private_key: str,
    *,
    chain_id: int = CHAIN_ID_ARBITRUM,
    confirmations: int = DEFAULT_CONFIRMATIONS,
):
    async with web3_from_rpc(rpc_url) as web3:
        yield ChainClient(
            web3, private_key, chain_id=chain_id, confirmations=confirmations
        )
