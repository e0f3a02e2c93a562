"""
Functional core: the vault hub and share ledger actors
"""

from .errors import (
    ActorError,
    AuthorizationError,
    EconomicError,
    ErrorClass,
    ErrorCode,
    OperationalError,
    Rejection,
    ReplayError,
    StateValidationError,
)
from .messages import Envelope, Outbound

__all__ = [
    "ActorError",
    "AuthorizationError",
    "EconomicError",
    "ErrorClass",
    "ErrorCode",
    "OperationalError",
    "Rejection",
    "ReplayError",
    "StateValidationError",
    "Envelope",
    "Outbound",
]
