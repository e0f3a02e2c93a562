"""Side-effect-free reads over a HubState. Allowed at any time, including while paused."""

from __future__ import annotations

from .math import aggregate_pooled_value, has_bad_debt, mint_capacity
from .types import HubState, VaultRecord


def get_vault_record(state: HubState, vault: str) -> VaultRecord | None:
    """Record for *vault*, including disconnected (audit) records."""
    return state.vaults.get(vault)


def get_is_vault_connected(state: HubState, vault: str) -> bool:
    record = state.vaults.get(vault)
    return record is not None and record.connected


def get_vault_count(state: HubState) -> int:
    """Number of currently connected vaults."""
    return sum(1 for r in state.vaults.values() if r.connected)


def get_accumulated_fees(state: HubState, vault: str) -> int:
    record = state.vaults.get(vault)
    return 0 if record is None else record.accumulated_fee


def get_has_bad_debt(state: HubState, vault: str) -> bool:
    record = state.vaults.get(vault)
    return record is not None and has_bad_debt(record)


def get_mint_capacity(state: HubState, vault: str) -> int:
    record = state.vaults.get(vault)
    if record is None or not record.connected:
        return 0
    return mint_capacity(record)


def get_total_shares_minted(state: HubState) -> int:
    return state.total_shares_minted


def get_total_pooled_value(state: HubState) -> int:
    return aggregate_pooled_value(state.vaults.values())


def get_admin(state: HubState) -> str:
    return state.admin


def get_oracle(state: HubState) -> str:
    return state.oracle


def get_factory(state: HubState) -> str | None:
    return state.factory


def get_share_ledger(state: HubState) -> str | None:
    return state.share_ledger


def get_paused(state: HubState) -> bool:
    return state.paused
