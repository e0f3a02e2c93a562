"""Pure arithmetic for the vault hub.

Solvency is checked by cross-multiplication so no division rounds in the
vault's favour: ``liability * reserve_ratio_bp <= total_value * 10000``.
"""

from __future__ import annotations

from typing import Iterable

from ..shares import BPS_SCALE, bps_of
from .types import VaultRecord


def max_liability_by_reserve(total_value: int, reserve_ratio_bp: int) -> int | None:
    """Largest liability the reserve bound admits (floor), or None if unbounded."""
    if reserve_ratio_bp == 0:
        return None if total_value >= 0 else 0
    if total_value <= 0:
        return 0
    return (total_value * BPS_SCALE) // reserve_ratio_bp


def within_reserve(liability: int, total_value: int, reserve_ratio_bp: int) -> bool:
    return liability * reserve_ratio_bp <= total_value * BPS_SCALE


def is_solvent(liability: int, share_limit: int, total_value: int, reserve_ratio_bp: int) -> bool:
    """Both the hard share cap and the reserve-ratio bound hold."""
    return liability <= share_limit and within_reserve(liability, total_value, reserve_ratio_bp)


def mint_capacity(record: VaultRecord) -> int:
    """Shares that can still be minted against *record* (0 when at or over a bound)."""
    by_limit = record.share_limit
    by_reserve = max_liability_by_reserve(record.total_value, record.reserve_ratio_bp)
    cap = by_limit if by_reserve is None else min(by_limit, by_reserve)
    return max(0, cap - record.liability_shares)


def mint_fee(amount: int, infra_fee_bp: int) -> int:
    return bps_of(amount, infra_fee_bp)


def has_bad_debt(record: VaultRecord) -> bool:
    return record.total_value < record.liability_shares


def is_report_fresh(report_timestamp: int, now: int, freshness_seconds: int) -> bool:
    """True when a report exists and is at most *freshness_seconds* old."""
    if report_timestamp == 0:
        return False
    return now - report_timestamp <= freshness_seconds


def aggregate_pooled_value(records: Iterable[VaultRecord]) -> int:
    """System-wide collateral backing the ledger: connected vaults only, negatives as zero."""
    return sum(max(0, r.total_value) for r in records if r.connected)
