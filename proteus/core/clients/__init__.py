from proteus.core.clients.ChainClient import ChainClient, chain_client_from_config
from proteus.core.clients.protocols import ChainClientProtocol

__all__ = [
    "ChainClient",
    "ChainClientProtocol",
    "chain_client_from_config",
]
