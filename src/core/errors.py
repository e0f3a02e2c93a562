"""Error taxonomy shared by the vault hub and the share ledger.

Every rejected transition is surfaced as a `Rejection` carrying a stable
`ErrorCode`. The numeric codes never change between releases; transports map
them to their own status fields.

``step_or_raise()`` in each engine converts a `Rejection` into the matching
`ActorError` subclass for callers that prefer exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique


@unique
class ErrorClass(Enum):
    AUTHORIZATION = "authorization"
    STATE_VALIDATION = "state_validation"
    ECONOMIC = "economic"
    OPERATIONAL = "operational"
    REPLAY = "replay"


@unique
class ErrorCode(Enum):
    """(numeric code, class). Hub codes are 2xx, replay 3xx, ledger 7xx."""

    UNAUTHORIZED = (200, ErrorClass.AUTHORIZATION)
    ALREADY_CONNECTED = (201, ErrorClass.STATE_VALIDATION)
    UNKNOWN_VAULT = (202, ErrorClass.STATE_VALIDATION)
    INVALID_PARAM = (203, ErrorClass.STATE_VALIDATION)
    ALREADY_BOUND = (204, ErrorClass.STATE_VALIDATION)
    LEDGER_NOT_BOUND = (205, ErrorClass.STATE_VALIDATION)
    PAUSED = (206, ErrorClass.OPERATIONAL)
    INVARIANT_VIOLATION = (207, ErrorClass.STATE_VALIDATION)
    ORACLE_STALE = (210, ErrorClass.ECONOMIC)
    MAX_LIABILITY = (211, ErrorClass.ECONOMIC)
    OUTSTANDING_LIABILITY = (212, ErrorClass.ECONOMIC)
    INSUFFICIENT_SHARES = (213, ErrorClass.ECONOMIC)
    REPLAY = (300, ErrorClass.REPLAY)
    LEDGER_UNAUTHORIZED = (700, ErrorClass.AUTHORIZATION)
    INSUFFICIENT_BALANCE = (702, ErrorClass.ECONOMIC)
    INSUFFICIENT_ALLOWANCE = (703, ErrorClass.ECONOMIC)
    LEDGER_INVALID_PARAM = (704, ErrorClass.STATE_VALIDATION)
    REGISTRY_ALREADY_BOUND = (705, ErrorClass.STATE_VALIDATION)

    def __init__(self, code: int, error_class: ErrorClass) -> None:
        self.code = code
        self.error_class = error_class

    @classmethod
    def from_code(cls, code: int) -> "ErrorCode":
        for member in cls:
            if member.code == code:
                return member
        raise ValueError(f"unknown error code: {code}")


@dataclass(frozen=True)
class Rejection:
    """Why a transition was refused. The pre-state is left untouched."""

    code: ErrorCode
    detail: str = ""

    @property
    def error_class(self) -> ErrorClass:
        return self.code.error_class

    def __str__(self) -> str:
        if self.detail:
            return f"{self.code.name}({self.code.code}): {self.detail}"
        return f"{self.code.name}({self.code.code})"


class ActorError(Exception):
    """Base class for exceptions raised by ``step_or_raise()``."""

    def __init__(self, rejection: Rejection) -> None:
        self.rejection = rejection
        super().__init__(str(rejection))

    @property
    def code(self) -> ErrorCode:
        return self.rejection.code


class AuthorizationError(ActorError):
    """Sender is not allowed to issue this message."""


class StateValidationError(ActorError):
    """Target record is missing, already present, or a parameter is out of domain."""


class EconomicError(ActorError):
    """Solvency, freshness or balance precondition not met."""


class OperationalError(ActorError):
    """Actor is paused."""


class ReplayError(ActorError):
    """Message id was already consumed for this sender."""


_EXCEPTION_BY_CLASS: dict[ErrorClass, type[ActorError]] = {
    ErrorClass.AUTHORIZATION: AuthorizationError,
    ErrorClass.STATE_VALIDATION: StateValidationError,
    ErrorClass.ECONOMIC: EconomicError,
    ErrorClass.OPERATIONAL: OperationalError,
    ErrorClass.REPLAY: ReplayError,
}


def error_for(rejection: Rejection) -> ActorError:
    return _EXCEPTION_BY_CLASS[rejection.error_class](rejection)
