from eth_utils import to_checksum_address

# Arbitrum One
SUSHI = to_checksum_address("0xd4d42F0b6DEF4CE0383636770eF773390d85c61A")
GOHM = to_checksum_address("0x8D9bA570D6cb60C7e3e0F31343Efe75AB8E65FB1")
WETH = to_checksum_address("0x82aF49447D8a07e3bd95BD0d56f35241523fBab1")

SUSHISWAP_ROUTER = to_checksum_address("0x1b02da8cb0d097eb8d57a175b88c7d8b47997506")
SUSHI_MINICHEF = to_checksum_address("0xF4d73326C13a4Fc5FD7A064217e12780e9Bd62c3")

# MiniChef pool for the gOHM/WETH SLP.
GOHM_WETH_POOL_ID = 12
