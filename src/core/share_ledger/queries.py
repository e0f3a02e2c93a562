"""Side-effect-free reads over a LedgerState.

Balances are derived, never stored:
``balance_of(h) = floor(shares_h * total_pooled_value / total_shares)``,
with the identity ratio while no shares exist.
"""

from __future__ import annotations

from ..shares import pooled_value_by_shares, shares_by_pooled_value
from .types import LedgerState


def get_shares_of(state: LedgerState, holder: str) -> int:
    account = state.holders.get(holder)
    return 0 if account is None else account.shares


def get_total_shares(state: LedgerState) -> int:
    return state.total_shares


def get_total_pooled_value(state: LedgerState) -> int:
    return state.total_pooled_value


def get_balance_of(state: LedgerState, holder: str) -> int:
    return pooled_value_by_shares(get_shares_of(state, holder), state.total_shares, state.total_pooled_value)


def get_shares_by_pooled_value(state: LedgerState, value: int) -> int:
    return shares_by_pooled_value(value, state.total_shares, state.total_pooled_value)


def get_pooled_value_by_shares(state: LedgerState, shares: int) -> int:
    return pooled_value_by_shares(shares, state.total_shares, state.total_pooled_value)


def get_allowance(state: LedgerState, owner: str, spender: str) -> int:
    account = state.holders.get(owner)
    return 0 if account is None else account.allowances.get(spender, 0)


def get_registry(state: LedgerState) -> str | None:
    return state.registry


def get_holders(state: LedgerState) -> list[str]:
    """Holders with a non-zero share count, sorted."""
    return sorted(h for h, a in state.holders.items() if a.shares > 0)
