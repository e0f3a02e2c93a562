"""
In-process message bus for the hub and ledger actors.

This is the imperative shell around the two functional cores:
- each delivery runs exactly one `step()` against the target actor's state,
- accepted outbound messages are queued per (sender, receiver) pair and
  delivered FIFO, so order is preserved within a pair,
- nothing is delivered synchronously inside a transition; the emitting step
  has committed before its outbox is looked at.

Delivery is at-least-once: `redeliver()` re-injects a message that was already
delivered, and the receiver's replay guard turns the duplicate into a
`REPLAY` rejection with no state change. Rejected deliveries are kept in
`dead_letters` for the operator; the bus never retries on its own.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional, Tuple

from ..core import share_ledger, vault_hub
from ..core.errors import ErrorCode, Rejection
from ..core.messages import Envelope
from ..core.share_ledger.types import LedgerState
from ..core.vault_hub.types import HubState
from .config import DeploymentConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Delivery:
    sender: str
    to: str
    message: Any
    now: int
    accepted: bool
    rejection: Optional[Rejection] = None


class MessageBus:
    """Routes messages between external senders, the hub and the ledger."""

    def __init__(
        self,
        *,
        hub_address: str,
        ledger_address: str,
        hub_state: HubState,
        ledger_state: LedgerState,
    ) -> None:
        if hub_address == ledger_address:
            raise ValueError("hub and ledger addresses must differ")
        self.hub_address = hub_address
        self.ledger_address = ledger_address
        self.hub_state = hub_state
        self.ledger_state = ledger_state
        self._queues: Dict[Tuple[str, str], Deque[Any]] = {}
        self.deliveries: List[Delivery] = []
        self.dead_letters: List[Delivery] = []

    # -- delivery -------------------------------------------------------------

    def send(self, sender: str, to: str, message: Any, *, now: int, drain: bool = True) -> Delivery:
        """Deliver one external message, then (by default) flush actor-to-actor queues."""
        delivery = self._deliver(sender, to, message, now)
        if drain:
            self.drain(now=now)
        return delivery

    def drain(self, *, now: int) -> List[Delivery]:
        """Deliver queued actor-to-actor messages until every queue is empty."""
        out: List[Delivery] = []
        while self.pending():
            for pair in sorted(self._queues):
                queue = self._queues[pair]
                if queue:
                    sender, to = pair
                    out.append(self._deliver(sender, to, queue.popleft(), now))
        return out

    def pending(self) -> int:
        return sum(len(q) for q in self._queues.values())

    def redeliver(self, delivery: Delivery, *, now: Optional[int] = None) -> Delivery:
        """Deliver *delivery*'s message again, as an at-least-once transport may."""
        when = delivery.now if now is None else now
        logger.info("redelivering %s from %s to %s", type(delivery.message).__name__, delivery.sender, delivery.to)
        return self._deliver(delivery.sender, delivery.to, delivery.message, when)

    def _deliver(self, sender: str, to: str, message: Any, now: int) -> Delivery:
        env = Envelope(sender=sender, now=now, message=message)
        if to == self.hub_address:
            result = vault_hub.step(self.hub_state, env)
            if result.accepted:
                self.hub_state = result.state
        elif to == self.ledger_address:
            result = share_ledger.step(self.ledger_state, env)
            if result.accepted:
                self.ledger_state = result.state
        else:
            raise ValueError(f"unknown destination: {to}")

        delivery = Delivery(
            sender=sender,
            to=to,
            message=message,
            now=now,
            accepted=result.accepted,
            rejection=result.rejection,
        )
        self.deliveries.append(delivery)

        if result.accepted:
            logger.debug("%s -> %s: %s accepted", sender, to, type(message).__name__)
            for out in result.outbox:
                self._queues.setdefault((to, out.to), deque()).append(out.message)
        else:
            self.dead_letters.append(delivery)
            if result.rejection is not None and result.rejection.code is ErrorCode.REPLAY:
                logger.warning("%s -> %s: duplicate %s dropped (%s)", sender, to, type(message).__name__, result.rejection)
            else:
                logger.warning("%s -> %s: %s rejected (%s)", sender, to, type(message).__name__, result.rejection)
        return delivery

    # -- reads ----------------------------------------------------------------

    def last_accepted(self, message_type: type) -> Optional[Delivery]:
        for delivery in reversed(self.deliveries):
            if delivery.accepted and isinstance(delivery.message, message_type):
                return delivery
        return None

    def is_consistent(self) -> bool:
        """True when the ledger has caught up with the hub's issued supply.

        Only meaningful once `pending() == 0` and no ledger message was
        dead-lettered; the two actors are otherwise eventually consistent.
        """
        return (
            self.pending() == 0
            and self.ledger_state.total_shares == self.hub_state.total_shares_minted
            and self.ledger_state.total_pooled_value == vault_hub.get_total_pooled_value(self.hub_state)
        )


def build_bus(config: DeploymentConfig) -> MessageBus:
    """Create both actors from *config*, bound to each other, behind one bus."""
    hub_state = vault_hub.initial_state(
        config.hub.admin,
        config.hub.oracle,
        factory=config.hub.factory,
        share_ledger=config.ledger.address,
        params=config.hub.registry_params(),
    )
    ledger_state = share_ledger.initial_state(config.ledger.deployer, registry=config.hub.address)
    logger.info(
        "bus ready: hub=%s ledger=%s admin=%s oracle=%s",
        config.hub.address,
        config.ledger.address,
        config.hub.admin,
        config.hub.oracle,
    )
    return MessageBus(
        hub_address=config.hub.address,
        ledger_address=config.ledger.address,
        hub_state=hub_state,
        ledger_state=ledger_state,
    )
