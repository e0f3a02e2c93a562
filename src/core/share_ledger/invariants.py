"""Invariant checkers for the share ledger.

`check_all()` returns the list of violated invariant IDs (empty = all pass).
Share conservation is the load-bearing one: every holder's shares sum to
`total_shares` after every accepted transition.
"""

from __future__ import annotations

from typing import Callable

from ..shares import is_uint
from .types import LedgerState


def inv_share_conservation(s: LedgerState) -> bool:
    return sum(a.shares for a in s.holders.values()) == s.total_shares


def inv_shares_unsigned(s: LedgerState) -> bool:
    return is_uint(s.total_shares) and all(is_uint(a.shares) for a in s.holders.values())


def inv_pooled_value_unsigned(s: LedgerState) -> bool:
    return is_uint(s.total_pooled_value)


def inv_allowances_positive(s: LedgerState) -> bool:
    return all(
        is_uint(v) and v > 0
        for a in s.holders.values()
        for v in a.allowances.values()
    )


def inv_no_empty_accounts(s: LedgerState) -> bool:
    return all(a.shares > 0 or a.allowances for a in s.holders.values())


INVARIANT_REGISTRY: dict[str, Callable[[LedgerState], bool]] = {
    "inv_share_conservation": inv_share_conservation,
    "inv_shares_unsigned": inv_shares_unsigned,
    "inv_pooled_value_unsigned": inv_pooled_value_unsigned,
    "inv_allowances_positive": inv_allowances_positive,
    "inv_no_empty_accounts": inv_no_empty_accounts,
}


def check_all(state: LedgerState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]
