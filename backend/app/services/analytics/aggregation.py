# backend/app/services/analytics/aggregation.py
"""
Account and portfolio rollups for the Analytics Service.

Combines per-account metrics and projections into consolidated views:
- Parent accounts absorb their sub-accounts (values, flows, histories)
- Every account receives an allocation share of the whole portfolio
- The portfolio summary totals all top-level accounts

Amounts from different currencies are added only after conversion through
the injected `to_common_unit(value, currency)` collaborator. Rate lookup is
the caller's concern.

Consolidation rules:
    current_value    = own current value + Σ children current values
    gain             = current_value - start_value - net_flow
    invested_capital = start_value + gross positive flow
    roi              = gain / invested_capital * 100   (0 if invested <= 0)
    volatility       = unweighted mean of own and children volatilities

The volatility rule is a deliberate simplification (no covariance terms);
changing it would change the risk buckets users already see.

Flows on the first point of a history are not counted in net_flow: that
money is already part of start_value.

Sums are carried in float; monetary results are quantized to Decimal cents
only when a rollup or summary is built.

Aggregation never raises for missing or degenerate histories; they
contribute zeros. Errors raised by the conversion collaborator propagate.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from app.services.analytics.metrics import calculate_win_rate, compute_metrics
from app.services.analytics.projection import project_horizons
from app.services.analytics.types import (
    AccountRollup,
    AccountSeries,
    BalancePoint,
    PortfolioSummary,
    RiskLevel,
    TrendDirection,
)
from app.services.constants import (
    METRIC_DECIMALS,
    MONEY_QUANTUM,
    PROJECTION_HORIZONS,
    RISK_LEVEL_THRESHOLDS,
    TREND_HORIZON_DAYS,
)
from app.utils.fx_conversion import ToCommonUnit, identity_conversion

logger = logging.getLogger(__name__)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def classify_risk(volatility: float) -> RiskLevel:
    """
    Map an annualized volatility (%) to its risk bucket.

    Thresholds: > 30 muy alto, > 15 alto, > 8 medio, otherwise bajo.
    """
    for threshold, label in RISK_LEVEL_THRESHOLDS:
        if volatility > threshold:
            return RiskLevel(label)
    return RiskLevel.LOW


def to_money(value: float) -> Decimal:
    """Quantize a float amount to cents (ROUND_HALF_UP)."""
    return Decimal(str(value)).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _roi(gain: float, invested_capital: float) -> float:
    """ROI in percent, 0 when no capital was invested."""
    if invested_capital <= 0:
        return 0.0
    return gain / invested_capital * 100


def _convert_series(
        points: list[BalancePoint],
        currency: str,
        to_common_unit: ToCommonUnit,
) -> list[BalancePoint]:
    """Convert values and flows of a series to the common unit."""
    return [
        BalancePoint(
            date=p.date,
            value=to_common_unit(p.value, currency),
            flow=to_common_unit(p.flow, currency),
        )
        for p in points
    ]


def _collect_histories(
        account: AccountSeries,
        to_common_unit: ToCommonUnit,
) -> list[list[BalancePoint]]:
    """Converted histories of an account and all of its descendants."""
    histories = [_convert_series(account.points, account.currency, to_common_unit)]
    for child in account.children:
        histories.extend(_collect_histories(child, to_common_unit))
    return histories


def merge_series(histories: list[list[BalancePoint]]) -> list[BalancePoint]:
    """
    Merge several histories into one series over the union of their dates.

    On every date each history contributes its latest known value
    (0 before its first point). Flows on a date are summed.

    A history that starts after the merged series begins enters with its
    whole first value as flow, so its arrival is not mistaken for a gain.

    Args:
        histories: Ascending-date series, all in the same unit

    Returns:
        Merged ascending-date series (empty if every history is empty)
    """
    histories = [h for h in histories if h]
    if not histories:
        return []

    all_dates = sorted({p.date for h in histories for p in h})
    first_date = all_dates[0]

    values: dict[date, float] = {d: 0.0 for d in all_dates}
    flows: dict[date, float] = {d: 0.0 for d in all_dates}

    for history in histories:
        by_date = {p.date: p for p in history}
        start = history[0].date
        latest = 0.0

        for d in all_dates:
            point = by_date.get(d)
            if point is not None:
                latest = point.value
                if d == start and start != first_date:
                    flows[d] += point.value
                else:
                    flows[d] += point.flow
            values[d] += latest

    return [BalancePoint(date=d, value=values[d], flow=flows[d]) for d in all_dates]


# =============================================================================
# ACCOUNT ROLLUP
# =============================================================================

def _build_rollup(
        account: AccountSeries,
        to_common_unit: ToCommonUnit,
        horizons: tuple[int, ...],
) -> AccountRollup:
    """
    Build the consolidated rollup of one account (first pass).

    Allocation fields stay at 0 until the portfolio total is known.
    """
    children = [
        _build_rollup(child, to_common_unit, horizons)
        for child in account.children
    ]
    children.sort(key=lambda r: r.current_value, reverse=True)

    points = account.points
    own_metrics = compute_metrics(points)

    own_current_native = points[-1].value if points else 0.0
    own_current = to_common_unit(own_current_native, account.currency)
    own_start = to_common_unit(points[0].value, account.currency) if points else 0.0

    later_flows = [to_common_unit(p.flow, account.currency) for p in points[1:]]
    own_net_flow = sum(later_flows)
    own_positive_flow = sum(f for f in later_flows if f > 0)

    current_value = own_current + sum(float(c.current_value) for c in children)
    current_value_native = own_current_native + sum(
        float(c.current_value_native) for c in children if c.currency == account.currency
    )
    start_value = own_start + sum(float(c.start_value) for c in children)
    net_flow = own_net_flow + sum(float(c.net_flow) for c in children)
    invested_capital = own_start + own_positive_flow + sum(
        float(c.invested_capital) for c in children
    )
    gain = current_value - start_value - net_flow

    volatility = _mean([own_metrics.volatility] + [c.volatility for c in children])

    merged = merge_series(_collect_histories(account, to_common_unit))
    consolidated_metrics = compute_metrics(merged)
    merged_values = [p.value for p in merged]

    projections = project_horizons(
        merged_values,
        consolidated_metrics,
        end_value=current_value,
        volatility=volatility,
        horizons=horizons,
    )
    trend_projection = project_horizons(
        merged_values,
        consolidated_metrics,
        end_value=current_value,
        volatility=volatility,
        horizons=(TREND_HORIZON_DAYS,),
    )[0]

    return AccountRollup(
        account_id=account.account_id,
        name=account.name,
        currency=account.currency,
        current_value=to_money(current_value),
        current_value_native=to_money(current_value_native),
        start_value=to_money(start_value),
        net_flow=to_money(net_flow),
        invested_capital=to_money(invested_capital),
        gain=to_money(gain),
        roi=round(_roi(gain, invested_capital), METRIC_DECIMALS),
        volatility=round(volatility, METRIC_DECIMALS),
        sharpe=consolidated_metrics.sharpe,
        max_drawdown=consolidated_metrics.max_drawdown,
        avg_return=consolidated_metrics.avg_return,
        risk_level=classify_risk(volatility),
        win_rate=calculate_win_rate(points),
        trend=(
            TrendDirection.UP
            if trend_projection.value > current_value
            else TrendDirection.DOWN
        ),
        projections=projections,
        metrics=own_metrics,
        children=children,
    )


def _assign_allocations(rollup: AccountRollup, total_value: float) -> None:
    """Second pass: fill allocation shares once the portfolio total is known."""
    current_value = float(rollup.current_value)
    own_value = current_value - sum(float(c.current_value) for c in rollup.children)

    if total_value > 0:
        rollup.allocation = round(current_value / total_value * 100, METRIC_DECIMALS)
        rollup.own_allocation = round(own_value / total_value * 100, METRIC_DECIMALS)
    else:
        rollup.allocation = 0.0
        rollup.own_allocation = 0.0

    for child in rollup.children:
        _assign_allocations(child, total_value)


def rollup(
        accounts: list[AccountSeries],
        to_common_unit: ToCommonUnit = identity_conversion,
        horizons: tuple[int, ...] = PROJECTION_HORIZONS,
) -> list[AccountRollup]:
    """
    Build consolidated rollups for every top-level account.

    Args:
        accounts: Top-level accounts, each with its sub-accounts
        to_common_unit: Conversion collaborator (value, currency) -> common unit
        horizons: Projection horizons in days

    Returns:
        Rollups sorted by consolidated current value, descending.
        Allocation is each rollup's share of the summed top-level values;
        for every rollup own_allocation + Σ children allocation == allocation.
    """
    rollups = [
        _build_rollup(account, to_common_unit, horizons)
        for account in accounts
    ]

    total_value = sum(float(r.current_value) for r in rollups)
    for r in rollups:
        _assign_allocations(r, total_value)

    rollups.sort(key=lambda r: r.current_value, reverse=True)

    logger.debug(f"Rolled up {len(rollups)} accounts, total value {total_value:.2f}")

    return rollups


# =============================================================================
# PORTFOLIO SUMMARY
# =============================================================================

def _flow_totals(
        histories: list[list[BalancePoint]],
        as_of: date | None,
) -> tuple[float, float, float, float]:
    """
    Gross inflows and outflows after the first point of each history.

    Returns:
        (total_in, total_out, month_in, month_out), outflows as positive
        amounts. "Month" is the calendar month of as_of; with no as_of
        the monthly figures are 0.
    """
    total_in = total_out = month_in = month_out = 0.0

    for history in histories:
        for point in history[1:]:
            in_month = (
                as_of is not None
                and point.date.year == as_of.year
                and point.date.month == as_of.month
            )
            if point.flow > 0:
                total_in += point.flow
                if in_month:
                    month_in += point.flow
            elif point.flow < 0:
                total_out -= point.flow
                if in_month:
                    month_out -= point.flow

    return total_in, total_out, month_in, month_out


def summarize_portfolio(
        accounts: list[AccountSeries],
        rollups: list[AccountRollup],
        to_common_unit: ToCommonUnit = identity_conversion,
        horizons: tuple[int, ...] = PROJECTION_HORIZONS,
        as_of: date | None = None,
) -> PortfolioSummary:
    """
    Total all top-level rollups into portfolio-level figures.

    Metrics and projections come from the merged history of every account
    (all in the common unit); volatility follows the same unweighted-mean
    rule as account rollups.

    Args:
        accounts: The accounts the rollups were built from
        rollups: Output of rollup() for the same accounts
        to_common_unit: Conversion collaborator used for the rollups
        horizons: Projection horizons in days
        as_of: Reference date for the monthly flow totals
               (defaults to the latest date in any history)

    Returns:
        PortfolioSummary (all zeros for an empty portfolio)
    """
    if not rollups:
        return PortfolioSummary()

    total_value = sum(float(r.current_value) for r in rollups)
    start_value = sum(float(r.start_value) for r in rollups)
    net_flow = sum(float(r.net_flow) for r in rollups)
    invested_capital = sum(float(r.invested_capital) for r in rollups)
    gain = total_value - start_value - net_flow
    volatility = _mean([r.volatility for r in rollups])

    currency_totals: dict[str, float] = {}
    for r in rollups:
        currency_totals[r.currency] = currency_totals.get(r.currency, 0.0) + float(r.current_value)

    histories: list[list[BalancePoint]] = []
    for account in accounts:
        histories.extend(_collect_histories(account, to_common_unit))
    merged = merge_series(histories)
    metrics = compute_metrics(merged)

    if as_of is None and merged:
        as_of = merged[-1].date
    total_in, total_out, month_in, month_out = _flow_totals(histories, as_of)

    projections = project_horizons(
        [p.value for p in merged],
        metrics,
        end_value=total_value,
        volatility=volatility,
        horizons=horizons,
    )

    return PortfolioSummary(
        total_value=to_money(total_value),
        start_value=to_money(start_value),
        net_flow=to_money(net_flow),
        invested_capital=to_money(invested_capital),
        gain=to_money(gain),
        roi=round(_roi(gain, invested_capital), METRIC_DECIMALS),
        volatility=round(volatility, METRIC_DECIMALS),
        risk_level=classify_risk(volatility),
        metrics=metrics,
        projections=projections,
        currency_distribution={
            currency: to_money(value) for currency, value in currency_totals.items()
        },
        total_contributions=to_money(total_in),
        total_withdrawals=to_money(total_out),
        monthly_contributions=to_money(month_in),
        monthly_withdrawals=to_money(month_out),
    )
