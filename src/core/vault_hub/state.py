"""State construction and serialization for the vault hub.

`initial_state()` returns a fresh hub with no vaults and no consumed ids.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s` for all valid states.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping

from ...state.canonical import digest_document
from ...state.replay import guard_from_dict, guard_to_dict
from .invariants import check_all
from .types import HubState, RegistryParams, VaultRecord

# Auto-derived from VaultRecord field definitions (single source of truth).
RECORD_VAR_NAMES: tuple[str, ...] = tuple(f.name for f in fields(VaultRecord))
PARAM_VAR_NAMES: tuple[str, ...] = tuple(f.name for f in fields(RegistryParams))


def initial_state(
    admin: str,
    oracle: str,
    *,
    factory: str | None = None,
    share_ledger: str | None = None,
    params: RegistryParams | None = None,
) -> HubState:
    if not admin or not oracle:
        raise ValueError("admin and oracle identities are required")
    return HubState(
        admin=admin,
        oracle=oracle,
        factory=factory,
        share_ledger=share_ledger,
        params=params if params is not None else RegistryParams(),
    )


def record_to_dict(record: VaultRecord) -> dict[str, bool | int]:
    return {name: getattr(record, name) for name in RECORD_VAR_NAMES}


def record_from_dict(d: Mapping[str, Any]) -> VaultRecord:
    kwargs: dict[str, Any] = {}
    for name in RECORD_VAR_NAMES:
        val = d[name]
        if name == "connected":
            if not isinstance(val, bool):
                raise TypeError(f"record var {name!r} must be bool, got {type(val).__name__}")
            kwargs[name] = val
        elif isinstance(val, int) and not isinstance(val, bool):
            kwargs[name] = int(val)
        else:
            raise TypeError(f"record var {name!r} must be int, got {type(val).__name__}")
    return VaultRecord(**kwargs)


def params_from_dict(d: Mapping[str, Any]) -> RegistryParams:
    kwargs: dict[str, Any] = {}
    for f in fields(RegistryParams):
        val = d[f.name]
        if isinstance(f.default, bool):
            if not isinstance(val, bool):
                raise TypeError(f"param {f.name!r} must be bool, got {type(val).__name__}")
        elif not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"param {f.name!r} must be int, got {type(val).__name__}")
        kwargs[f.name] = val
    return RegistryParams(**kwargs)


def state_to_dict(state: HubState) -> dict[str, Any]:
    """Serialize a HubState to a JSON-compatible dict."""
    return {
        "admin": state.admin,
        "oracle": state.oracle,
        "factory": state.factory,
        "share_ledger": state.share_ledger,
        "paused": state.paused,
        "vaults": {vault: record_to_dict(r) for vault, r in sorted(state.vaults.items())},
        "total_shares_minted": state.total_shares_minted,
        "outbound_seq": state.outbound_seq,
        "params": {name: getattr(state.params, name) for name in PARAM_VAR_NAMES},
        "replay": guard_to_dict(state.replay),
    }


def state_from_dict(d: Mapping[str, Any]) -> HubState:
    """Deserialize a dict to a HubState.

    Raises KeyError on missing fields, TypeError on wrong types and
    ValueError when the decoded state violates an invariant.
    """
    if not isinstance(d["paused"], bool):
        raise TypeError(f"paused must be bool, got {type(d['paused']).__name__}")
    state = HubState(
        admin=d["admin"],
        oracle=d["oracle"],
        factory=d["factory"],
        share_ledger=d["share_ledger"],
        paused=d["paused"],
        vaults={vault: record_from_dict(r) for vault, r in d["vaults"].items()},
        total_shares_minted=int(d["total_shares_minted"]),
        outbound_seq=int(d["outbound_seq"]),
        params=params_from_dict(d["params"]),
        replay=guard_from_dict(d["replay"]),
    )
    violations = check_all(state)
    if violations:
        raise ValueError(f"invalid hub state (invariants {','.join(violations)})")
    return state


def state_digest(state: HubState) -> str:
    """Stable SHA-256 commitment to the full hub state."""
    return digest_document("hub-state", state_to_dict(state))
