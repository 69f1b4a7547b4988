__version__ = "0.1.0"

from proteus.core import BaseAdapter, ChainClientProtocol

__all__ = [
    "__version__",
    "BaseAdapter",
    "ChainClientProtocol",
]
