"""Data types for the rebasing share ledger actor.

Balances are never stored. Each holder owns `shares`; the value those shares
represent is derived from the global ratio ``total_pooled_value / total_shares``
at read time (see `queries.py`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Union

from ...state.replay import ReplayGuard
from ..errors import Rejection


@dataclass(frozen=True)
class HolderAccount:
    shares: int = 0
    # spender -> share allowance (overwritten by Approve, never added to)
    allowances: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class LedgerState:
    """Complete state of one share ledger instance."""

    deployer: str
    registry: str | None = None
    total_shares: int = 0
    total_pooled_value: int = 0
    holders: Mapping[str, HolderAccount] = field(default_factory=dict)
    replay: ReplayGuard = field(default_factory=ReplayGuard)


# -- Inbound messages --------------------------------------------------------

@dataclass(frozen=True)
class Mint:
    query_id: int
    recipient: str
    share_amount: int


@dataclass(frozen=True)
class Burn:
    query_id: int
    account: str
    share_amount: int


@dataclass(frozen=True)
class Rebase:
    query_id: int
    new_total_pooled_value: int


@dataclass(frozen=True)
class TransferShares:
    query_id: int
    to: str
    share_amount: int


@dataclass(frozen=True)
class Approve:
    query_id: int
    spender: str
    share_amount: int


@dataclass(frozen=True)
class TransferFrom:
    query_id: int
    from_: str
    to: str
    share_amount: int


@dataclass(frozen=True)
class BindRegistry:
    query_id: int
    registry: str


LedgerMessage = Union[Mint, Burn, Rebase, TransferShares, Approve, TransferFrom, BindRegistry]

# Messages only the bound registry may send.
REGISTRY_MESSAGES: tuple[type, ...] = (Mint, Burn, Rebase)


@dataclass(frozen=True)
class StepResult:
    """Result of a single ledger transition. The ledger never emits messages."""

    accepted: bool
    state: LedgerState | None = None
    rejection: Rejection | None = None

    @property
    def outbox(self) -> tuple:
        return ()
