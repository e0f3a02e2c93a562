"""Data types for the vault hub (collateral registry) actor.

All types are frozen dataclasses (immutable). Transitions build new values via
`dataclasses.replace()`; maps are copied, never mutated in place.

Units/conventions:
- `*_bp` are basis points (1/10_000).
- `total_value` / `in_out_delta` are signed collateral units as reported by the oracle.
- `*_shares` are share units of the rebasing ledger.
- timestamps are integer seconds; `report_timestamp == 0` means never reported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Union

from ...state.replay import ReplayGuard
from ..errors import Rejection
from ..messages import Outbound

REPORT_FRESHNESS_SECONDS: int = 2 * 24 * 60 * 60


@dataclass(frozen=True)
class RegistryParams:
    """Deployment tunables; fixed for the lifetime of a hub instance."""

    report_freshness_seconds: int = REPORT_FRESHNESS_SECONDS
    # Disconnect policy: when False a vault must have zero liability shares.
    allow_disconnect_with_liability: bool = False


@dataclass(frozen=True)
class VaultRecord:
    connected: bool = False
    share_limit: int = 0
    reserve_ratio_bp: int = 0
    infra_fee_bp: int = 0
    liquidity_fee_bp: int = 0
    total_value: int = 0
    in_out_delta: int = 0
    liability_shares: int = 0
    accumulated_fee: int = 0
    report_timestamp: int = 0


@dataclass(frozen=True)
class HubState:
    """Complete state of one vault hub instance."""

    admin: str
    oracle: str
    factory: str | None = None
    share_ledger: str | None = None
    paused: bool = False
    vaults: Mapping[str, VaultRecord] = field(default_factory=dict)
    total_shares_minted: int = 0
    # Next message id for hub -> ledger messages (unique per sender at the ledger).
    outbound_seq: int = 0
    params: RegistryParams = field(default_factory=RegistryParams)
    replay: ReplayGuard = field(default_factory=ReplayGuard)


# -- Inbound messages --------------------------------------------------------

@dataclass(frozen=True)
class ConnectVault:
    query_id: int
    vault: str
    share_limit: int
    reserve_ratio_bp: int
    infra_fee_bp: int
    liquidity_fee_bp: int


@dataclass(frozen=True)
class RegisterVault:
    """ConnectVault issued by the vault factory at creation time."""

    query_id: int
    vault: str
    share_limit: int
    reserve_ratio_bp: int
    infra_fee_bp: int
    liquidity_fee_bp: int


@dataclass(frozen=True)
class DisconnectVault:
    query_id: int
    vault: str


@dataclass(frozen=True)
class UpdateConnection:
    query_id: int
    vault: str
    share_limit: int
    reserve_ratio_bp: int
    infra_fee_bp: int


@dataclass(frozen=True)
class ApplyVaultReport:
    query_id: int
    vault: str
    total_value: int
    in_out_delta: int


@dataclass(frozen=True)
class MintShares:
    query_id: int
    vault: str
    amount: int
    recipient: str


@dataclass(frozen=True)
class BurnShares:
    query_id: int
    vault: str
    amount: int
    # Ledger holder the shares are burned from; defaults to the vault itself.
    account: str | None = None


@dataclass(frozen=True)
class Pause:
    query_id: int


@dataclass(frozen=True)
class Resume:
    query_id: int


@dataclass(frozen=True)
class BindShareLedger:
    query_id: int
    ledger: str


@dataclass(frozen=True)
class SetFactory:
    query_id: int
    factory: str


HubMessage = Union[
    ConnectVault,
    RegisterVault,
    DisconnectVault,
    UpdateConnection,
    ApplyVaultReport,
    MintShares,
    BurnShares,
    Pause,
    Resume,
    BindShareLedger,
    SetFactory,
]


@dataclass(frozen=True)
class StepResult:
    """Result of a single hub transition."""

    accepted: bool
    state: HubState | None = None
    outbox: tuple[Outbound, ...] = ()
    rejection: Rejection | None = None
