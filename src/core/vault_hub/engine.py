"""Dispatch-table engine for the vault hub.

``step(state, envelope)`` is the single entry point. It:

1. Dispatches on the message type.
2. Rejects a message id already consumed for this sender (replay).
3. Validates parameter domains.
4. Runs the guard (authorization, pause, record state, economics).
5. Applies the update and collects outbound ledger messages.
6. Checks all invariants on the post-state.
7. Records the message id in the same post-state.

Every rejection returns the pre-state untouched; the message id is consumed
only by an accepted transition, so a sender may retry the same id after a
non-replay failure.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable

from ...state.replay import is_message_id
from ..errors import ErrorCode, Rejection, error_for
from ..messages import Envelope
from ..shares import MAX_UINT, is_bps, is_uint
from .guards import (
    guard_apply_vault_report,
    guard_bind_share_ledger,
    guard_burn_shares,
    guard_connect_vault,
    guard_disconnect_vault,
    guard_mint_shares,
    guard_pause,
    guard_register_vault,
    guard_resume,
    guard_set_factory,
    guard_update_connection,
)
from .invariants import check_all
from .types import (
    ApplyVaultReport,
    BindShareLedger,
    BurnShares,
    ConnectVault,
    DisconnectVault,
    HubState,
    MintShares,
    Pause,
    RegisterVault,
    Resume,
    SetFactory,
    StepResult,
    UpdateConnection,
)
from .updates import (
    Transition,
    apply_bind_share_ledger,
    apply_burn_shares,
    apply_connect_vault,
    apply_disconnect_vault,
    apply_mint_shares,
    apply_pause,
    apply_register_vault,
    apply_resume,
    apply_set_factory,
    apply_update_connection,
    apply_vault_report,
)

GuardFn = Callable[[HubState, Envelope], "Rejection | None"]
UpdateFn = Callable[[HubState, Envelope], Transition]

_DISPATCH: dict[type, tuple[GuardFn, UpdateFn]] = {
    ConnectVault: (guard_connect_vault, apply_connect_vault),
    RegisterVault: (guard_register_vault, apply_register_vault),
    DisconnectVault: (guard_disconnect_vault, apply_disconnect_vault),
    UpdateConnection: (guard_update_connection, apply_update_connection),
    ApplyVaultReport: (guard_apply_vault_report, apply_vault_report),
    MintShares: (guard_mint_shares, apply_mint_shares),
    BurnShares: (guard_burn_shares, apply_burn_shares),
    Pause: (guard_pause, apply_pause),
    Resume: (guard_resume, apply_resume),
    BindShareLedger: (guard_bind_share_ledger, apply_bind_share_ledger),
    SetFactory: (guard_set_factory, apply_set_factory),
}

# -- Parameter domains --------------------------------------------------------

def _is_address(x: Any) -> bool:
    return isinstance(x, str) and x != ""


def _is_amount(x: Any) -> bool:
    return is_uint(x) and x >= 1


def _is_signed(x: Any) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and -MAX_UINT <= x <= MAX_UINT


def _is_optional_address(x: Any) -> bool:
    return x is None or _is_address(x)


_CONNECT_FIELDS = [
    ("vault", _is_address),
    ("share_limit", is_uint),
    ("reserve_ratio_bp", is_bps),
    ("infra_fee_bp", is_bps),
    ("liquidity_fee_bp", is_bps),
]

# Per-message checks: list of (field_name, predicate).
_PARAM_DOMAINS: dict[type, list[tuple[str, Callable[[Any], bool]]]] = {
    ConnectVault: _CONNECT_FIELDS,
    RegisterVault: _CONNECT_FIELDS,
    DisconnectVault: [("vault", _is_address)],
    UpdateConnection: [
        ("vault", _is_address),
        ("share_limit", is_uint),
        ("reserve_ratio_bp", is_bps),
        ("infra_fee_bp", is_bps),
    ],
    ApplyVaultReport: [
        ("vault", _is_address),
        ("total_value", _is_signed),
        ("in_out_delta", _is_signed),
    ],
    MintShares: [
        ("vault", _is_address),
        ("amount", _is_amount),
        ("recipient", _is_address),
    ],
    BurnShares: [
        ("vault", _is_address),
        ("amount", _is_amount),
        ("account", _is_optional_address),
    ],
    Pause: [],
    Resume: [],
    BindShareLedger: [("ledger", _is_address)],
    SetFactory: [("factory", _is_address)],
}


def _validate_params(env: Envelope) -> Rejection | None:
    """Check envelope and parameter domains. Returns rejection or None."""
    if not is_uint(env.now):
        return Rejection(ErrorCode.INVALID_PARAM, "now")
    if isinstance(env.message, ApplyVaultReport) and env.now == 0:
        # report_timestamp == 0 is reserved for "never reported".
        return Rejection(ErrorCode.INVALID_PARAM, "now")
    for name, ok in _PARAM_DOMAINS[type(env.message)]:
        if not ok(getattr(env.message, name)):
            return Rejection(ErrorCode.INVALID_PARAM, name)
    return None


def step(state: HubState, env: Envelope) -> StepResult:
    """Execute one inbound message against the given state.

    Returns ``StepResult`` with ``accepted=True`` on success, or
    ``accepted=False`` with a ``rejection`` carrying a stable error code.
    """
    entry = _DISPATCH.get(type(env.message))
    if entry is None:
        return StepResult(
            accepted=False,
            rejection=Rejection(ErrorCode.INVALID_PARAM, f"unknown_message:{type(env.message).__name__}"),
        )

    query_id = env.message.query_id
    if not is_message_id(query_id):
        return StepResult(accepted=False, rejection=Rejection(ErrorCode.INVALID_PARAM, "query_id"))
    if state.replay.seen(env.sender, query_id):
        return StepResult(accepted=False, rejection=Rejection(ErrorCode.REPLAY, str(query_id)))

    domain_err = _validate_params(env)
    if domain_err is not None:
        return StepResult(accepted=False, rejection=domain_err)

    guard_fn, update_fn = entry

    denied = guard_fn(state, env)
    if denied is not None:
        return StepResult(accepted=False, rejection=denied)

    new_state, outbox = update_fn(state, env)

    violations = check_all(new_state)
    if violations:
        return StepResult(
            accepted=False,
            rejection=Rejection(ErrorCode.INVARIANT_VIOLATION, ",".join(violations)),
        )

    new_state = _record(new_state, env)
    return StepResult(accepted=True, state=new_state, outbox=outbox)


def _record(state: HubState, env: Envelope) -> HubState:
    return replace(state, replay=state.replay.record(env.sender, env.message.query_id))


def step_or_raise(state: HubState, env: Envelope) -> StepResult:
    """Like ``step()`` but raises on rejection instead of returning a result.

    Raises:
        AuthorizationError: Sender is not admin / oracle / factory.
        StateValidationError: Unknown or already-connected vault, bad parameter.
        EconomicError: Stale report, solvency breach, insufficient liability.
        OperationalError: Hub is paused.
        ReplayError: Message id already consumed for this sender.
    """
    result = step(state, env)
    if result.accepted:
        return result
    assert result.rejection is not None
    raise error_for(result.rejection)
