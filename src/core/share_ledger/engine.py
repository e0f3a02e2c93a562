"""Dispatch-table engine for the share ledger.

Same pipeline as the hub engine: dispatch, replay check, parameter domains,
guard, update, invariants, then the message id is recorded together with the
accepted post-state.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable

from ...state.replay import is_message_id
from ..errors import ErrorCode, Rejection, error_for
from ..messages import Envelope
from ..shares import is_uint
from .guards import (
    guard_approve,
    guard_bind_registry,
    guard_burn,
    guard_mint,
    guard_rebase,
    guard_transfer_from,
    guard_transfer_shares,
)
from .invariants import check_all
from .types import (
    Approve,
    BindRegistry,
    Burn,
    LedgerState,
    Mint,
    Rebase,
    StepResult,
    TransferFrom,
    TransferShares,
)
from .updates import (
    apply_approve,
    apply_bind_registry,
    apply_burn,
    apply_mint,
    apply_rebase,
    apply_transfer_from,
    apply_transfer_shares,
)

GuardFn = Callable[[LedgerState, Envelope], "Rejection | None"]
UpdateFn = Callable[[LedgerState, Envelope], LedgerState]

_DISPATCH: dict[type, tuple[GuardFn, UpdateFn]] = {
    Mint: (guard_mint, apply_mint),
    Burn: (guard_burn, apply_burn),
    Rebase: (guard_rebase, apply_rebase),
    TransferShares: (guard_transfer_shares, apply_transfer_shares),
    Approve: (guard_approve, apply_approve),
    TransferFrom: (guard_transfer_from, apply_transfer_from),
    BindRegistry: (guard_bind_registry, apply_bind_registry),
}


def _is_address(x: Any) -> bool:
    return isinstance(x, str) and x != ""


def _is_amount(x: Any) -> bool:
    return is_uint(x) and x >= 1


_PARAM_DOMAINS: dict[type, list[tuple[str, Callable[[Any], bool]]]] = {
    Mint: [("recipient", _is_address), ("share_amount", _is_amount)],
    Burn: [("account", _is_address), ("share_amount", _is_amount)],
    Rebase: [("new_total_pooled_value", is_uint)],
    TransferShares: [("to", _is_address), ("share_amount", _is_amount)],
    # Zero revokes.
    Approve: [("spender", _is_address), ("share_amount", is_uint)],
    TransferFrom: [("from_", _is_address), ("to", _is_address), ("share_amount", _is_amount)],
    BindRegistry: [("registry", _is_address)],
}


def _validate_params(env: Envelope) -> Rejection | None:
    for name, ok in _PARAM_DOMAINS[type(env.message)]:
        if not ok(getattr(env.message, name)):
            return Rejection(ErrorCode.LEDGER_INVALID_PARAM, name)
    return None


def step(state: LedgerState, env: Envelope) -> StepResult:
    """Execute one inbound message against the given state."""
    entry = _DISPATCH.get(type(env.message))
    if entry is None:
        return StepResult(
            accepted=False,
            rejection=Rejection(
                ErrorCode.LEDGER_INVALID_PARAM, f"unknown_message:{type(env.message).__name__}",
            ),
        )

    query_id = env.message.query_id
    if not is_message_id(query_id):
        return StepResult(accepted=False, rejection=Rejection(ErrorCode.LEDGER_INVALID_PARAM, "query_id"))
    if state.replay.seen(env.sender, query_id):
        return StepResult(accepted=False, rejection=Rejection(ErrorCode.REPLAY, str(query_id)))

    domain_err = _validate_params(env)
    if domain_err is not None:
        return StepResult(accepted=False, rejection=domain_err)

    guard_fn, update_fn = entry

    denied = guard_fn(state, env)
    if denied is not None:
        return StepResult(accepted=False, rejection=denied)

    new_state = update_fn(state, env)

    violations = check_all(new_state)
    if violations:
        return StepResult(
            accepted=False,
            rejection=Rejection(ErrorCode.INVARIANT_VIOLATION, ",".join(violations)),
        )

    new_state = replace(new_state, replay=new_state.replay.record(env.sender, query_id))
    return StepResult(accepted=True, state=new_state)


def step_or_raise(state: LedgerState, env: Envelope) -> StepResult:
    """Like ``step()`` but raises the `ActorError` subclass matching the rejection."""
    result = step(state, env)
    if result.accepted:
        return result
    assert result.rejection is not None
    raise error_for(result.rejection)
