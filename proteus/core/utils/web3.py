from contextlib import asynccontextmanager

from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3


def _get_web3(rpc: str) -> AsyncWeb3:
    provider = AsyncHTTPProvider(
        rpc, request_kwargs={"headers": AsyncHTTPProvider.get_request_headers()}
    )
    return AsyncWeb3(provider)


def get_transaction_chain_id(transaction: dict) -> int:
    if "chainId" not in transaction:
        raise ValueError("Transaction does not contain chainId")
    return int(transaction["chainId"])


@asynccontextmanager
async def web3_from_rpc(rpc: str):
    if not rpc:
        raise ValueError("An RPC endpoint is required")
    web3 = _get_web3(rpc)
    logger.debug(f"Opened RPC connection to {web3.provider.endpoint_uri}")
    try:
        yield web3
    finally:
        await web3.provider.disconnect()
