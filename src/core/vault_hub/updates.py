"""State transition functions for the vault hub.

One pure function per message type. Each returns ``(new_state, outbox)``.

Semantics:
- updates evaluate against the PRE-state (guards already passed),
- records are replaced, never mutated (`dataclasses.replace()` + map copies),
- ledger-bound messages get ids from `outbound_seq`, so a redelivered
  message carries the same id and is dropped by the ledger's replay guard.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from ..messages import Envelope, Outbound
from ..share_ledger.types import Burn, Mint, Rebase
from .math import aggregate_pooled_value, mint_fee
from .types import HubState, VaultRecord

Transition = tuple[HubState, tuple[Outbound, ...]]


def _with_record(state: HubState, vault: str, record: VaultRecord) -> HubState:
    vaults = dict(state.vaults)
    vaults[vault] = record
    return replace(state, vaults=vaults)


def _to_ledger(state: HubState, build: Any) -> tuple[HubState, Outbound]:
    """Allocate the next outbound id and address *build(id)* to the ledger."""
    assert state.share_ledger is not None
    message = build(state.outbound_seq)
    return replace(state, outbound_seq=state.outbound_seq + 1), Outbound(state.share_ledger, message)


def _rebase(state: HubState) -> Transition:
    """Emit the current aggregate pooled value, or nothing while unbound."""
    if state.share_ledger is None:
        return state, ()
    pooled = aggregate_pooled_value(state.vaults.values())
    state, out = _to_ledger(state, lambda qid: Rebase(query_id=qid, new_total_pooled_value=pooled))
    return state, (out,)


def _connect(state: HubState, env: Envelope) -> Transition:
    msg = env.message
    record = VaultRecord(
        connected=True,
        share_limit=msg.share_limit,
        reserve_ratio_bp=msg.reserve_ratio_bp,
        infra_fee_bp=msg.infra_fee_bp,
        liquidity_fee_bp=msg.liquidity_fee_bp,
    )
    return _with_record(state, msg.vault, record), ()


def apply_connect_vault(state: HubState, env: Envelope) -> Transition:
    return _connect(state, env)


def apply_register_vault(state: HubState, env: Envelope) -> Transition:
    return _connect(state, env)


def apply_disconnect_vault(state: HubState, env: Envelope) -> Transition:
    vault = env.message.vault
    record = state.vaults[vault]
    state = _with_record(state, vault, replace(record, connected=False))
    if record.total_value <= 0:
        return state, ()
    return _rebase(state)


def apply_update_connection(state: HubState, env: Envelope) -> Transition:
    msg = env.message
    record = replace(
        state.vaults[msg.vault],
        share_limit=msg.share_limit,
        reserve_ratio_bp=msg.reserve_ratio_bp,
        infra_fee_bp=msg.infra_fee_bp,
    )
    return _with_record(state, msg.vault, record), ()


def apply_vault_report(state: HubState, env: Envelope) -> Transition:
    msg = env.message
    record = replace(
        state.vaults[msg.vault],
        total_value=msg.total_value,
        in_out_delta=msg.in_out_delta,
        report_timestamp=env.now,
    )
    return _rebase(_with_record(state, msg.vault, record))


def apply_mint_shares(state: HubState, env: Envelope) -> Transition:
    msg = env.message
    current = state.vaults[msg.vault]
    record = replace(
        current,
        liability_shares=current.liability_shares + msg.amount,
        accumulated_fee=current.accumulated_fee + mint_fee(msg.amount, current.infra_fee_bp),
    )
    state = _with_record(state, msg.vault, record)
    state = replace(state, total_shares_minted=state.total_shares_minted + msg.amount)
    state, out = _to_ledger(
        state, lambda qid: Mint(query_id=qid, recipient=msg.recipient, share_amount=msg.amount),
    )
    return state, (out,)


def apply_burn_shares(state: HubState, env: Envelope) -> Transition:
    msg = env.message
    current = state.vaults[msg.vault]
    record = replace(current, liability_shares=current.liability_shares - msg.amount)
    state = _with_record(state, msg.vault, record)
    state = replace(state, total_shares_minted=state.total_shares_minted - msg.amount)
    account = msg.account if msg.account is not None else msg.vault
    state, out = _to_ledger(
        state, lambda qid: Burn(query_id=qid, account=account, share_amount=msg.amount),
    )
    return state, (out,)


def apply_pause(state: HubState, env: Envelope) -> Transition:
    return replace(state, paused=True), ()


def apply_resume(state: HubState, env: Envelope) -> Transition:
    return replace(state, paused=False), ()


def apply_bind_share_ledger(state: HubState, env: Envelope) -> Transition:
    return replace(state, share_ledger=env.message.ledger), ()


def apply_set_factory(state: HubState, env: Envelope) -> Transition:
    return replace(state, factory=env.message.factory), ()
