"""Integer share arithmetic shared by the vault hub and the share ledger.

Every function is stateless and operates on plain Python ints. Rounding is
always floor (`//`); callers never see fractional shares or values.
"""

from __future__ import annotations

BPS_SCALE: int = 10_000
MAX_UINT: int = (1 << 256) - 1


def is_uint(x: object) -> bool:
    """True for non-bool ints in ``[0, MAX_UINT]``."""
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= MAX_UINT


def is_bps(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= BPS_SCALE


def mul_div_floor(a: int, b: int, d: int) -> int:
    """``floor(a * b / d)`` for non-negative operands. Raises on ``d == 0``."""
    if d == 0:
        raise ZeroDivisionError("mul_div_floor: zero denominator")
    return (a * b) // d


def bps_of(amount: int, bps: int) -> int:
    """``floor(amount * bps / 10000)``."""
    return (amount * bps) // BPS_SCALE


def pooled_value_by_shares(shares: int, total_shares: int, total_pooled_value: int) -> int:
    """Value represented by *shares*; identity while no shares exist."""
    if total_shares == 0:
        return shares
    return mul_div_floor(shares, total_pooled_value, total_shares)


def shares_by_pooled_value(value: int, total_shares: int, total_pooled_value: int) -> int:
    """Shares represented by *value*; identity while the pool is empty."""
    if total_pooled_value == 0:
        return value
    return mul_div_floor(value, total_shares, total_pooled_value)
