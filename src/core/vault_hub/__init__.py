"""`vault_hub`: the vault collateral registry actor.

Tracks one `VaultRecord` per connected vault, enforces the solvency bound
(share limit and reserve ratio) on every mint, accrues infrastructure fees,
and emits one-way Mint / Burn / Rebase messages to the share ledger.

Design:
- deterministic, integer-only transitions,
- immutable state (frozen dataclasses),
- fail-closed guards, invariant checks and replay protection.

Public API:
- `initial_state(admin, oracle, ...) -> HubState`
- `step(state, envelope) -> StepResult`
- `step_or_raise(state, envelope) -> StepResult` (raises on rejection)
- read-only `get_*` queries
"""

from .engine import step, step_or_raise
from .queries import (
    get_accumulated_fees,
    get_admin,
    get_factory,
    get_has_bad_debt,
    get_is_vault_connected,
    get_mint_capacity,
    get_oracle,
    get_paused,
    get_share_ledger,
    get_total_pooled_value,
    get_total_shares_minted,
    get_vault_count,
    get_vault_record,
)
from .state import initial_state, state_digest, state_from_dict, state_to_dict
from .types import (
    REPORT_FRESHNESS_SECONDS,
    ApplyVaultReport,
    BindShareLedger,
    BurnShares,
    ConnectVault,
    DisconnectVault,
    HubState,
    MintShares,
    Pause,
    RegisterVault,
    RegistryParams,
    Resume,
    SetFactory,
    StepResult,
    UpdateConnection,
    VaultRecord,
)

__all__ = [
    "step",
    "step_or_raise",
    "initial_state",
    "state_digest",
    "state_from_dict",
    "state_to_dict",
    "REPORT_FRESHNESS_SECONDS",
    "ApplyVaultReport",
    "BindShareLedger",
    "BurnShares",
    "ConnectVault",
    "DisconnectVault",
    "HubState",
    "MintShares",
    "Pause",
    "RegisterVault",
    "RegistryParams",
    "Resume",
    "SetFactory",
    "StepResult",
    "UpdateConnection",
    "VaultRecord",
    "get_accumulated_fees",
    "get_admin",
    "get_factory",
    "get_has_bad_debt",
    "get_is_vault_connected",
    "get_mint_capacity",
    "get_oracle",
    "get_paused",
    "get_share_ledger",
    "get_total_pooled_value",
    "get_total_shares_minted",
    "get_vault_count",
    "get_vault_record",
]
