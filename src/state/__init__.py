"""
State primitives shared by both actors
"""

from .replay import ReplayGuard, SenderWindow

__all__ = [
    "ReplayGuard",
    "SenderWindow",
]
