"""Guard functions for the share ledger.

One pure function per message type. Each returns None when the message is
allowed in the given PRE-state, else the `Rejection` to surface.

Supply-affecting messages (Mint, Burn, Rebase) are accepted only from the
bound registry identity; this sender comparison is the whole trust boundary
between the two actors.
"""

from __future__ import annotations

from ..errors import ErrorCode, Rejection
from ..messages import Envelope
from .types import HolderAccount, LedgerState

_UNAUTHORIZED = Rejection(ErrorCode.LEDGER_UNAUTHORIZED)
_EMPTY = HolderAccount()


def _account(state: LedgerState, holder: str) -> HolderAccount:
    return state.holders.get(holder, _EMPTY)


def _registry_only(state: LedgerState, env: Envelope) -> Rejection | None:
    if state.registry is None or env.sender != state.registry:
        return _UNAUTHORIZED
    return None


def _has_shares(state: LedgerState, holder: str, amount: int) -> Rejection | None:
    if _account(state, holder).shares < amount:
        return Rejection(ErrorCode.INSUFFICIENT_BALANCE, holder)
    return None


def guard_mint(state: LedgerState, env: Envelope) -> Rejection | None:
    return _registry_only(state, env)


def guard_burn(state: LedgerState, env: Envelope) -> Rejection | None:
    return _registry_only(state, env) or _has_shares(state, env.message.account, env.message.share_amount)


def guard_rebase(state: LedgerState, env: Envelope) -> Rejection | None:
    return _registry_only(state, env)


def guard_transfer_shares(state: LedgerState, env: Envelope) -> Rejection | None:
    return _has_shares(state, env.sender, env.message.share_amount)


def guard_approve(state: LedgerState, env: Envelope) -> Rejection | None:
    return None


def guard_transfer_from(state: LedgerState, env: Envelope) -> Rejection | None:
    msg = env.message
    allowance = _account(state, msg.from_).allowances.get(env.sender, 0)
    if allowance < msg.share_amount:
        return Rejection(ErrorCode.INSUFFICIENT_ALLOWANCE, f"{msg.from_}->{env.sender}")
    return _has_shares(state, msg.from_, msg.share_amount)


def guard_bind_registry(state: LedgerState, env: Envelope) -> Rejection | None:
    if env.sender != state.deployer:
        return _UNAUTHORIZED
    if state.registry is not None:
        return Rejection(ErrorCode.REGISTRY_ALREADY_BOUND, state.registry)
    return None
