from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from proteus.core.utils.units import format_units


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class TokenInfo(_Frozen):
    address: str
    symbol: str
    decimals: int

    def with_amount(self, amount: int) -> TokenBalance:
        return TokenBalance(
            address=self.address,
            symbol=self.symbol,
            decimals=self.decimals,
            amount=int(amount),
        )


class TokenBalance(TokenInfo):
    amount: int

    def formatted(self) -> str:
        return format_units(self.amount, self.decimals)


class PairState(_Frozen):
    """Total supply and reserves of a constant-product pair.

    ``token0`` carries ``reserves[0]`` and ``token1`` carries ``reserves[1]``,
    in the pair contract's own (address-sorted) order.
    """

    address: str
    total_supply: int
    token0: TokenBalance
    token1: TokenBalance


class Quote(_Frozen):
    amount_in: int
    amount_out: int


class PositionSnapshot(_Frozen):
    owner: str
    native_balance: TokenBalance
    erc20_balances: list[TokenBalance]
    liquidity_share: tuple[TokenBalance, TokenBalance]
    pending_rewards: list[TokenBalance]
    rewarder_balance: TokenBalance


class RollContext(_Frozen):
    owner: str
    pool_id: int
