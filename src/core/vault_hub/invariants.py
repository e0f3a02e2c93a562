"""Invariant checkers for the vault hub.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass). The engine runs
`check_all()` on every post-state and refuses the transition on any violation.

The reserve-ratio bound is not checked here: it is a precondition of
minting, not a state invariant, because an oracle report may legitimately
push a vault below its reserve (bad debt).
"""

from __future__ import annotations

from typing import Callable

from ..shares import is_bps, is_uint
from .types import HubState


def inv_total_minted_matches_liabilities(s: HubState) -> bool:
    return s.total_shares_minted == sum(r.liability_shares for r in s.vaults.values())


def inv_connected_within_share_limit(s: HubState) -> bool:
    return all(r.liability_shares <= r.share_limit for r in s.vaults.values() if r.connected)


def inv_counters_unsigned(s: HubState) -> bool:
    if not (is_uint(s.total_shares_minted) and is_uint(s.outbound_seq)):
        return False
    return all(
        is_uint(r.liability_shares) and is_uint(r.accumulated_fee) and is_uint(r.share_limit)
        and is_uint(r.report_timestamp)
        for r in s.vaults.values()
    )


def inv_fee_params_in_range(s: HubState) -> bool:
    return all(
        is_bps(r.reserve_ratio_bp) and is_bps(r.infra_fee_bp) and is_bps(r.liquidity_fee_bp)
        for r in s.vaults.values()
    )


def inv_unreported_zeroed(s: HubState) -> bool:
    return all(
        r.total_value == 0 and r.in_out_delta == 0
        for r in s.vaults.values()
        if r.report_timestamp == 0
    )


def inv_identities_set(s: HubState) -> bool:
    return s.admin != "" and s.oracle != ""


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[HubState], bool]] = {
    "inv_total_minted_matches_liabilities": inv_total_minted_matches_liabilities,
    "inv_connected_within_share_limit": inv_connected_within_share_limit,
    "inv_counters_unsigned": inv_counters_unsigned,
    "inv_fee_params_in_range": inv_fee_params_in_range,
    "inv_unreported_zeroed": inv_unreported_zeroed,
    "inv_identities_set": inv_identities_set,
}


def check_all(state: HubState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]
