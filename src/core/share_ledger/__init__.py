"""`share_ledger`: the rebasing share token actor.

Holders own shares; their balance is derived from the global
``total_pooled_value / total_shares`` ratio, so a single Rebase from the
registry moves every balance proportionally without touching any share count.

Public API:
- `initial_state(deployer, registry=...) -> LedgerState`
- `step(state, envelope) -> StepResult`
- `step_or_raise(state, envelope) -> StepResult` (raises on rejection)
- read-only `get_*` queries
"""

from .engine import step, step_or_raise
from .queries import (
    get_allowance,
    get_balance_of,
    get_holders,
    get_pooled_value_by_shares,
    get_registry,
    get_shares_by_pooled_value,
    get_shares_of,
    get_total_pooled_value,
    get_total_shares,
)
from .state import initial_state, state_digest, state_from_dict, state_to_dict
from .types import (
    Approve,
    BindRegistry,
    Burn,
    HolderAccount,
    LedgerState,
    Mint,
    Rebase,
    StepResult,
    TransferFrom,
    TransferShares,
)

__all__ = [
    "step",
    "step_or_raise",
    "initial_state",
    "state_digest",
    "state_from_dict",
    "state_to_dict",
    "Approve",
    "BindRegistry",
    "Burn",
    "HolderAccount",
    "LedgerState",
    "Mint",
    "Rebase",
    "StepResult",
    "TransferFrom",
    "TransferShares",
    "get_allowance",
    "get_balance_of",
    "get_holders",
    "get_pooled_value_by_shares",
    "get_registry",
    "get_shares_by_pooled_value",
    "get_shares_of",
    "get_total_pooled_value",
    "get_total_shares",
]
