from proteus.core.constants.base import MAX_UINT256, NATIVE_DECIMALS, NATIVE_SYMBOL
from proteus.core.constants.chains import CHAIN_ID_ARBITRUM

__all__ = [
    "CHAIN_ID_ARBITRUM",
    "MAX_UINT256",
    "NATIVE_DECIMALS",
    "NATIVE_SYMBOL",
]
