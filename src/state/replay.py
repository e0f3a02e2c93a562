"""
Replay guard (v1).

We track, per sender identity, which message ids have been consumed. A message
id may be consumed at most once; a second delivery of the same id is a replay.

Storage is a watermark plus a sparse set:
- every id strictly below `consumed_below` is consumed,
- `pending` holds consumed ids at or above the watermark.

Recording an id compacts the contiguous run starting at the watermark, so a
sender that numbers its messages sequentially from 0 costs O(1) state.

The watermark also trails the highest recorded id by at most `REPLAY_WINDOW`:
ids that far behind count as consumed whether or not they were ever seen.
This bounds `pending` for senders that start above 0 or leave a gap (an id
that was rejected and never retried), and the gap compacts away once it falls
out of the window. Inside the window out-of-order ids are remembered exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

MAX_MESSAGE_ID: int = (1 << 64) - 1
REPLAY_WINDOW: int = 1024


def is_message_id(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= MAX_MESSAGE_ID


@dataclass(frozen=True)
class SenderWindow:
    """Consumed ids for one sender."""

    consumed_below: int = 0
    pending: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        if self.consumed_below < 0:
            raise ValueError("consumed_below must be non-negative")
        if any(i < self.consumed_below for i in self.pending):
            raise ValueError("pending ids must be >= consumed_below")
        if self.consumed_below in self.pending:
            raise ValueError("window is not compacted")
        if self.pending and max(self.pending) - self.consumed_below >= REPLAY_WINDOW:
            raise ValueError("pending ids span more than the replay window")

    def contains(self, message_id: int) -> bool:
        return message_id < self.consumed_below or message_id in self.pending

    def add(self, message_id: int) -> "SenderWindow":
        if self.contains(message_id):
            raise ValueError(f"message id already consumed: {message_id}")
        pending = set(self.pending)
        pending.add(message_id)
        floor = max(self.consumed_below, max(pending) + 1 - REPLAY_WINDOW)
        pending = {i for i in pending if i >= floor}
        while floor in pending:
            pending.remove(floor)
            floor += 1
        return SenderWindow(consumed_below=floor, pending=frozenset(pending))


@dataclass(frozen=True)
class ReplayGuard:
    """Immutable mapping: sender -> SenderWindow."""

    windows: Mapping[str, SenderWindow] = field(default_factory=dict)

    def seen(self, sender: str, message_id: int) -> bool:
        window = self.windows.get(sender)
        return window is not None and window.contains(message_id)

    def record(self, sender: str, message_id: int) -> "ReplayGuard":
        """Return a new guard with *message_id* consumed for *sender*.

        Raises ValueError if the id was already consumed; callers check
        `seen()` first and surface a replay rejection instead.
        """
        if not is_message_id(message_id):
            raise TypeError(f"message id must be a u64 int, got {message_id!r}")
        window = self.windows.get(sender, SenderWindow())
        windows = dict(self.windows)
        windows[sender] = window.add(message_id)
        return replace(self, windows=windows)

    def consumed_count(self, sender: str) -> int:
        """Ids treated as consumed for *sender*, including any the window passed over."""
        window = self.windows.get(sender)
        if window is None:
            return 0
        return window.consumed_below + len(window.pending)


def guard_to_dict(guard: ReplayGuard) -> dict[str, dict[str, Any]]:
    return {
        sender: {
            "consumed_below": w.consumed_below,
            "pending": sorted(w.pending),
        }
        for sender, w in sorted(guard.windows.items())
    }


def guard_from_dict(d: Mapping[str, Any]) -> ReplayGuard:
    windows: dict[str, SenderWindow] = {}
    for sender, raw in d.items():
        if not isinstance(sender, str):
            raise TypeError("replay guard sender must be a str")
        pending = raw["pending"]
        if not isinstance(pending, list):
            raise TypeError(f"pending ids for {sender!r} must be a list")
        for i in pending:
            if not is_message_id(i):
                raise TypeError(f"invalid pending id for {sender!r}: {i!r}")
        floor = raw["consumed_below"]
        if not is_message_id(floor):
            raise TypeError(f"invalid consumed_below for {sender!r}: {floor!r}")
        windows[sender] = SenderWindow(consumed_below=int(floor), pending=frozenset(pending))
    return ReplayGuard(windows=windows)
