"""State construction and serialization for the share ledger.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s` for all valid states.
"""

from __future__ import annotations

from typing import Any, Mapping

from ...state.canonical import digest_document
from ...state.replay import guard_from_dict, guard_to_dict
from ..shares import is_uint
from .invariants import check_all
from .types import HolderAccount, LedgerState


def initial_state(deployer: str, *, registry: str | None = None) -> LedgerState:
    if not deployer:
        raise ValueError("deployer identity is required")
    return LedgerState(deployer=deployer, registry=registry)


def _uint(val: Any, *, name: str) -> int:
    if not is_uint(val):
        raise TypeError(f"{name} must be a non-negative int, got {val!r}")
    return int(val)


def state_to_dict(state: LedgerState) -> dict[str, Any]:
    """Serialize a LedgerState to a JSON-compatible dict."""
    return {
        "deployer": state.deployer,
        "registry": state.registry,
        "total_shares": state.total_shares,
        "total_pooled_value": state.total_pooled_value,
        "holders": {
            holder: {"shares": a.shares, "allowances": dict(sorted(a.allowances.items()))}
            for holder, a in sorted(state.holders.items())
        },
        "replay": guard_to_dict(state.replay),
    }


def state_from_dict(d: Mapping[str, Any]) -> LedgerState:
    """Deserialize a dict to a LedgerState.

    Raises KeyError on missing fields, TypeError on wrong types and
    ValueError when the decoded state violates an invariant.
    """
    holders: dict[str, HolderAccount] = {}
    for holder, raw in d["holders"].items():
        allowances = {
            spender: _uint(v, name=f"allowance[{holder}][{spender}]")
            for spender, v in raw["allowances"].items()
        }
        holders[holder] = HolderAccount(
            shares=_uint(raw["shares"], name=f"shares[{holder}]"),
            allowances=allowances,
        )
    state = LedgerState(
        deployer=d["deployer"],
        registry=d["registry"],
        total_shares=_uint(d["total_shares"], name="total_shares"),
        total_pooled_value=_uint(d["total_pooled_value"], name="total_pooled_value"),
        holders=holders,
        replay=guard_from_dict(d["replay"]),
    )
    violations = check_all(state)
    if violations:
        raise ValueError(f"invalid ledger state (invariants {','.join(violations)})")
    return state


def state_digest(state: LedgerState) -> str:
    """Stable SHA-256 commitment to the full ledger state."""
    return digest_document("ledger-state", state_to_dict(state))
