from __future__ import annotations

from abc import ABC
from typing import Any

from loguru import logger

from proteus.core.clients.protocols import ChainClientProtocol


class BaseAdapter(ABC):
    adapter_type: str | None = None

    def __init__(
        self,
        name: str,
        client: ChainClientProtocol,
        config: dict[str, Any] | None = None,
    ):
        self.name = name
        self.client = client
        self.config = config or {}
        self.logger = logger.bind(adapter=self.__class__.__name__)
