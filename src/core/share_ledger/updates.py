"""State transition functions for the share ledger.

One pure function per message type. Each returns a new `LedgerState`.
Holder accounts with no shares and no allowances are dropped to keep the
table sparse.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Mapping

from ..messages import Envelope
from .types import HolderAccount, LedgerState

_EMPTY = HolderAccount()


def _adjust(
    holders: Mapping[str, HolderAccount], holder: str, delta: int,
) -> dict[str, HolderAccount]:
    out = dict(holders)
    account = out.get(holder, _EMPTY)
    account = replace(account, shares=account.shares + delta)
    if account.shares == 0 and not account.allowances:
        out.pop(holder, None)
    else:
        out[holder] = account
    return out


def _move(state: LedgerState, src: str, dst: str, amount: int) -> dict[str, HolderAccount]:
    return _adjust(_adjust(state.holders, src, -amount), dst, amount)


def apply_mint(state: LedgerState, env: Envelope) -> LedgerState:
    msg = env.message
    return replace(
        state,
        holders=_adjust(state.holders, msg.recipient, msg.share_amount),
        total_shares=state.total_shares + msg.share_amount,
    )


def apply_burn(state: LedgerState, env: Envelope) -> LedgerState:
    msg = env.message
    return replace(
        state,
        holders=_adjust(state.holders, msg.account, -msg.share_amount),
        total_shares=state.total_shares - msg.share_amount,
    )


def apply_rebase(state: LedgerState, env: Envelope) -> LedgerState:
    return replace(state, total_pooled_value=env.message.new_total_pooled_value)


def apply_transfer_shares(state: LedgerState, env: Envelope) -> LedgerState:
    msg = env.message
    return replace(state, holders=_move(state, env.sender, msg.to, msg.share_amount))


def _set_allowance(
    holders: Mapping[str, HolderAccount], owner: str, spender: str, amount: int,
) -> dict[str, HolderAccount]:
    out = dict(holders)
    account = out.get(owner, _EMPTY)
    allowances = dict(account.allowances)
    if amount == 0:
        allowances.pop(spender, None)
    else:
        allowances[spender] = amount
    account = replace(account, allowances=allowances)
    if account.shares == 0 and not account.allowances:
        out.pop(owner, None)
    else:
        out[owner] = account
    return out


def apply_approve(state: LedgerState, env: Envelope) -> LedgerState:
    msg = env.message
    return replace(
        state, holders=_set_allowance(state.holders, env.sender, msg.spender, msg.share_amount),
    )


def apply_transfer_from(state: LedgerState, env: Envelope) -> LedgerState:
    msg = env.message
    remaining = state.holders[msg.from_].allowances[env.sender] - msg.share_amount
    holders = _set_allowance(state.holders, msg.from_, env.sender, remaining)
    holders = _adjust(_adjust(holders, msg.from_, -msg.share_amount), msg.to, msg.share_amount)
    return replace(state, holders=holders)


def apply_bind_registry(state: LedgerState, env: Envelope) -> LedgerState:
    return replace(state, registry=env.message.registry)
