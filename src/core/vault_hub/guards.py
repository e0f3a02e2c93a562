"""Guard functions for the vault hub.

One pure function per message type. Each returns None when the message is
allowed in the given PRE-state, else the `Rejection` to surface.

Check order inside a guard is fixed: sender authorization, pause, record
state, then economics.

Pause policy: while paused every mutation is refused except `Pause`,
`Resume` and `BurnShares` (burning only reduces liabilities).
"""

from __future__ import annotations

from ..errors import ErrorCode, Rejection
from ..messages import Envelope
from .math import is_report_fresh, is_solvent
from .types import HubState, VaultRecord

_UNAUTHORIZED = Rejection(ErrorCode.UNAUTHORIZED)
_PAUSED = Rejection(ErrorCode.PAUSED)


def _connected_record(state: HubState, vault: str) -> VaultRecord | None:
    record = state.vaults.get(vault)
    if record is None or not record.connected:
        return None
    return record


def _unknown(vault: str) -> Rejection:
    return Rejection(ErrorCode.UNKNOWN_VAULT, vault)


def _admin_only(state: HubState, env: Envelope) -> Rejection | None:
    return None if env.sender == state.admin else _UNAUTHORIZED


def _guard_connect(state: HubState, vault: str) -> Rejection | None:
    if state.paused:
        return _PAUSED
    existing = state.vaults.get(vault)
    if existing is None:
        return None
    if existing.connected:
        return Rejection(ErrorCode.ALREADY_CONNECTED, vault)
    if existing.liability_shares != 0:
        # Frozen liability from a disconnect must not be wiped by a fresh record.
        return Rejection(ErrorCode.OUTSTANDING_LIABILITY, vault)
    return None


def guard_connect_vault(state: HubState, env: Envelope) -> Rejection | None:
    return _admin_only(state, env) or _guard_connect(state, env.message.vault)


def guard_register_vault(state: HubState, env: Envelope) -> Rejection | None:
    if state.factory is None or env.sender != state.factory:
        return _UNAUTHORIZED
    return _guard_connect(state, env.message.vault)


def guard_disconnect_vault(state: HubState, env: Envelope) -> Rejection | None:
    denied = _admin_only(state, env)
    if denied:
        return denied
    if state.paused:
        return _PAUSED
    record = _connected_record(state, env.message.vault)
    if record is None:
        return _unknown(env.message.vault)
    if record.liability_shares != 0 and not state.params.allow_disconnect_with_liability:
        return Rejection(ErrorCode.OUTSTANDING_LIABILITY, env.message.vault)
    return None


def guard_update_connection(state: HubState, env: Envelope) -> Rejection | None:
    denied = _admin_only(state, env)
    if denied:
        return denied
    if state.paused:
        return _PAUSED
    record = _connected_record(state, env.message.vault)
    if record is None:
        return _unknown(env.message.vault)
    if record.liability_shares > env.message.share_limit:
        return Rejection(ErrorCode.MAX_LIABILITY, "share limit below outstanding liability")
    return None


def guard_apply_vault_report(state: HubState, env: Envelope) -> Rejection | None:
    if env.sender != state.oracle:
        return _UNAUTHORIZED
    if state.paused:
        return _PAUSED
    if _connected_record(state, env.message.vault) is None:
        return _unknown(env.message.vault)
    return None


def guard_mint_shares(state: HubState, env: Envelope) -> Rejection | None:
    denied = _admin_only(state, env)
    if denied:
        return denied
    if state.paused:
        return _PAUSED
    msg = env.message
    record = _connected_record(state, msg.vault)
    if record is None:
        return _unknown(msg.vault)
    if state.share_ledger is None:
        return Rejection(ErrorCode.LEDGER_NOT_BOUND)
    if not is_report_fresh(record.report_timestamp, env.now, state.params.report_freshness_seconds):
        return Rejection(ErrorCode.ORACLE_STALE, msg.vault)
    if not is_solvent(
        record.liability_shares + msg.amount,
        record.share_limit,
        record.total_value,
        record.reserve_ratio_bp,
    ):
        return Rejection(ErrorCode.MAX_LIABILITY, msg.vault)
    return None


def guard_burn_shares(state: HubState, env: Envelope) -> Rejection | None:
    denied = _admin_only(state, env)
    if denied:
        return denied
    msg = env.message
    record = _connected_record(state, msg.vault)
    if record is None:
        return _unknown(msg.vault)
    if state.share_ledger is None:
        return Rejection(ErrorCode.LEDGER_NOT_BOUND)
    if msg.amount > record.liability_shares:
        return Rejection(ErrorCode.INSUFFICIENT_SHARES, msg.vault)
    return None


def guard_pause(state: HubState, env: Envelope) -> Rejection | None:
    return _admin_only(state, env)


def guard_resume(state: HubState, env: Envelope) -> Rejection | None:
    return _admin_only(state, env)


def guard_bind_share_ledger(state: HubState, env: Envelope) -> Rejection | None:
    denied = _admin_only(state, env)
    if denied:
        return denied
    if state.share_ledger is not None:
        return Rejection(ErrorCode.ALREADY_BOUND, state.share_ledger)
    return None


def guard_set_factory(state: HubState, env: Envelope) -> Rejection | None:
    denied = _admin_only(state, env)
    if denied:
        return denied
    if state.paused:
        return _PAUSED
    return None
