"""Transport-level wrappers shared by both actors.

An actor never sees the network. It receives one `Envelope` at a time (sender
identity as authenticated by the transport, delivery timestamp, message
payload) and answers with outbound messages addressed by identity only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Envelope:
    sender: str
    now: int
    message: Any


@dataclass(frozen=True)
class Outbound:
    """One-way message emitted by a transition; delivered after it commits."""

    to: str
    message: Any
