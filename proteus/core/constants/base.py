GAS_BUFFER_MULTIPLIER = 1.1
SUGGESTED_PRIORITY_FEE_MULTIPLIER = 1.5
MAX_BASE_FEE_GROWTH_MULTIPLIER = 2

# Slippage is expressed in thousandths: 5 == 0.5%.
DEFAULT_LIQUIDITY_SLIPPAGE = 5

# Router calls revert when mined later than now + this many seconds.
DEFAULT_DEADLINE_SECONDS = 100

DEFAULT_TRANSACTION_TIMEOUT = 180  # Transaction receipt timeout (seconds)
DEFAULT_CONFIRMATIONS = 1

NATIVE_SYMBOL = "ETH"
NATIVE_DECIMALS = 18

MAX_UINT256 = 2**256 - 1
