from proteus.core.adapters.BaseAdapter import BaseAdapter
from proteus.core.clients.protocols import ChainClientProtocol

__all__ = [
    "BaseAdapter",
    "ChainClientProtocol",
]
