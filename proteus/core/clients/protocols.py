from __future__ import annotations

from typing import Any, Protocol


class ChainClientProtocol(Protocol):
    """What adapters need from the ledger: view calls, native balances, confirmed writes."""

    @property
    def address(self) -> str: ...

    async def call(
        self, target: str, abi: list[dict[str, Any]], fn_name: str, *args: Any
    ) -> Any: ...

    async def get_balance(self, address: str) -> int: ...

    async def submit(
        self,
        target: str,
        abi: list[dict[str, Any]],
        fn_name: str,
        args: list[Any],
        *,
        value: int = 0,
    ) -> str: ...
