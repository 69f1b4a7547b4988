"""Fixed identities for the SushiSwap gOHM/WETH onsen on Arbitrum."""

from __future__ import annotations

from proteus.core.constants.base import (
    DEFAULT_DEADLINE_SECONDS,
    DEFAULT_LIQUIDITY_SLIPPAGE,
)
from proteus.core.constants.chains import CHAIN_ID_ARBITRUM
from proteus.core.constants.contracts import (
    GOHM,
    GOHM_WETH_POOL_ID,
    SUSHI,
    SUSHI_MINICHEF,
    SUSHISWAP_ROUTER,
    WETH,
)

ROLL_CHAIN_ID = CHAIN_ID_ARBITRUM

# Sold in full after each harvest.
REWARD_TOKEN_A = SUSHI
# Half sold, half paired with the proceeds into liquidity.
REWARD_TOKEN_B = GOHM
WRAPPED_NATIVE = WETH

TRACKED_TOKENS: tuple[str, ...] = (SUSHI, GOHM)

ROUTER = SUSHISWAP_ROUTER
MINICHEF = SUSHI_MINICHEF
POOL_ID = GOHM_WETH_POOL_ID

LIQUIDITY_SLIPPAGE = DEFAULT_LIQUIDITY_SLIPPAGE
DEADLINE_SECONDS = DEFAULT_DEADLINE_SECONDS

# Fraction of reward token B sold before adding liquidity.
REWARD_B_SELL_DIVISOR = 2
