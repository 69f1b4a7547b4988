CHAIN_ID_ARBITRUM = 42161
