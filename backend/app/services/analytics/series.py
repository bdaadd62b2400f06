# backend/app/services/analytics/series.py
"""
Ledger normalization for the Analytics Service.

The storage layer records one row per movement: its type, the amount moved,
and the account balance after the movement (`new_value`). The metrics
engine needs one BalancePoint per date instead. This module bridges the two.

Rules:
    - Rows are grouped by date (rows within a date keep their given order)
    - The period value is the last known new_value of that date; rows
      without a new_value carry the running balance forward
    - Flow sign comes from the type, amounts are taken as absolute values:
        +amount: initial_balance, contribution, income, transfer_in
        -amount: withdrawal, expense, fee, transfer_out
        no flow: anything else (valuation updates, gains, losses)
    - Transfers to or from a sibling account (internal_account_ids) are
      reallocations inside the same parent and carry no flow
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from itertools import groupby

from app.services.analytics.types import BalancePoint
from app.services.constants import (
    INFLOW_TRANSACTION_TYPES,
    OUTFLOW_TRANSACTION_TYPES,
    TRANSFER_TRANSACTION_TYPES,
)

logger = logging.getLogger(__name__)


@dataclass
class LedgerEntry:
    """
    One ledger row as stored by the persistence layer.

    Attributes:
        date: Date the movement applies to
        type: Transaction type (contribution, withdrawal, transfer_in, ...)
        amount: Amount moved (sign is ignored, the type decides it)
        new_value: Account balance after the movement, if recorded
        counterparty_account_id: Other account of a transfer, if any
    """
    date: date
    type: str
    amount: float = 0.0
    new_value: float | None = None
    counterparty_account_id: int | str | None = None


def signed_flow(
        entry: LedgerEntry,
        internal_account_ids: frozenset = frozenset(),
) -> float:
    """
    External cash flow carried by a single ledger row.

    Args:
        entry: The ledger row
        internal_account_ids: Accounts whose transfers are internal

    Returns:
        Positive for money entering, negative for money leaving, else 0
    """
    kind = entry.type.lower()

    if (
            kind in TRANSFER_TRANSACTION_TYPES
            and entry.counterparty_account_id is not None
            and entry.counterparty_account_id in internal_account_ids
    ):
        return 0.0

    if kind in INFLOW_TRANSACTION_TYPES:
        return abs(entry.amount)
    if kind in OUTFLOW_TRANSACTION_TYPES:
        return -abs(entry.amount)
    return 0.0


def build_balance_series(
        entries: Iterable[LedgerEntry],
        internal_account_ids: Iterable[int | str] = (),
) -> list[BalancePoint]:
    """
    Build an ascending BalancePoint series from ledger rows.

    Args:
        entries: Ledger rows of a single account, in any date order
        internal_account_ids: Sibling accounts whose transfers are not flows

    Returns:
        One BalancePoint per distinct date, ascending

    Example:
        >>> build_balance_series([
        ...     LedgerEntry(date(2024, 1, 1), "initial_balance", 100, 100),
        ...     LedgerEntry(date(2024, 1, 2), "contribution", 50, 150),
        ...     LedgerEntry(date(2024, 1, 3), "valuation", 0, 160),
        ... ])  # doctest: +NORMALIZE_WHITESPACE
        [BalancePoint(date=datetime.date(2024, 1, 1), value=100, flow=100.0),
         BalancePoint(date=datetime.date(2024, 1, 2), value=150, flow=50.0),
         BalancePoint(date=datetime.date(2024, 1, 3), value=160, flow=0.0)]
    """
    internal = frozenset(internal_account_ids)
    ordered = sorted(entries, key=lambda e: e.date)

    series: list[BalancePoint] = []
    running_value = 0.0

    for day, rows in groupby(ordered, key=lambda e: e.date):
        flow = 0.0
        for row in rows:
            flow += signed_flow(row, internal)
            if row.new_value is not None:
                running_value = row.new_value
        series.append(BalancePoint(date=day, value=running_value, flow=flow))

    logger.debug(f"Built balance series with {len(series)} points")

    return series
