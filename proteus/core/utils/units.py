from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext

# Wide enough that a uint256 ratio times a uint256 amount rounds exactly.
_RATIO_PRECISION = 160

SLIPPAGE_DENOMINATOR = 1000


def scale_by_ratio(numerator: int, denominator: int, amount: int) -> int:
    """Return ``round(amount * numerator / denominator)``, rounding half up.

    The ratio is formed first and then applied to ``amount``, matching the
    off-chain accounting this tool is compared against. Floats are never used;
    native token amounts routinely exceed 2**53.
    """
    if int(denominator) == 0:
        raise ValueError("denominator must be non-zero")
    with localcontext() as ctx:
        ctx.prec = _RATIO_PRECISION
        ctx.rounding = ROUND_HALF_UP
        ratio = Decimal(int(numerator)) / Decimal(int(denominator))
        scaled = ratio * Decimal(int(amount))
        return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def apply_slippage(amount: int, tolerance: int) -> int:
    """Minimum acceptable amount after allowing ``tolerance`` thousandths of slippage."""
    amount = int(amount)
    tolerance = int(tolerance)
    if amount < 0:
        raise ValueError("Amount must be non-negative")
    if tolerance < 0:
        raise ValueError("Slippage tolerance must be non-negative")
    return max(0, amount - (amount * tolerance) // SLIPPAGE_DENOMINATOR)


def format_units(amount: int, decimals: int) -> str:
    amount = int(amount)
    decimals = int(decimals)
    if decimals < 0:
        raise ValueError("decimals must be non-negative")
    sign = "-" if amount < 0 else ""
    whole, fraction = divmod(abs(amount), 10**decimals)
    if decimals == 0:
        return f"{sign}{whole}"
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_str}"
