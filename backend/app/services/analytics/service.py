# backend/app/services/analytics/service.py
"""
Analytics Service orchestrator.

This is the main entry point for the Analytics Service. It:
1. Validates series handed in by the caller (ascending, unique dates)
2. Delegates to the metrics, projection and aggregation modules
3. Builds the currency converter for multi-currency portfolios
4. Combines results into SeriesAnalysis / PortfolioAnalysis

The service holds no state between calls: every result is recomputed from
the series it receives. Fetching and persisting series is the caller's job.

Architecture:
    AnalyticsService
        ├── uses → metrics (Volatility, Sharpe, Drawdown, Avg return, Win rate)
        ├── uses → projection (Linear / compound extrapolation)
        ├── uses → aggregation (Parent + sub-account rollups, portfolio summary)
        ├── uses → goals (Savings goal progress)
        └── uses → CurrencyConverter (to_common_unit collaborator)

Usage:
    from app.services.analytics import AnalyticsService

    service = AnalyticsService()

    # Single series
    analysis = service.analyze_series(points)
    print(f"Volatility: {analysis.metrics.volatility}")

    # Whole portfolio (USD accounts converted to COP)
    portfolio = service.analyze_portfolio(accounts, usd_to_cop_rate=4000)
    print(f"Total: {portfolio.summary.total_value}")
"""

import logging
from datetime import date

from app.services.analytics.aggregation import classify_risk, rollup, summarize_portfolio
from app.services.analytics.goals import goal_progress
from app.services.analytics.metrics import calculate_win_rate, compute_metrics
from app.services.analytics.projection import (
    daily_growth_rate,
    linear_trend_delta,
    project_horizons,
    project_linear,
)
from app.services.analytics.types import (
    AccountSeries,
    BalancePoint,
    GoalProgress,
    PortfolioAnalysis,
    SeriesAnalysis,
    TrendDirection,
)
from app.services.constants import (
    BASE_CURRENCY,
    DEFAULT_USD_TO_COP_RATE,
    PROJECTION_HORIZONS,
    TREND_HORIZON_DAYS,
)
from app.services.exceptions import ValidationError
from app.utils.fx_conversion import CurrencyConverter, ToCommonUnit

logger = logging.getLogger(__name__)


def validate_series(points: list[BalancePoint], field: str = "points") -> None:
    """
    Check that a series has strictly ascending (hence unique) dates.

    Raises:
        ValidationError: If two consecutive points are out of order or repeat
    """
    for prev, cur in zip(points, points[1:]):
        if cur.date <= prev.date:
            raise ValidationError(
                f"Dates must be strictly ascending: {cur.date} follows {prev.date}",
                field=field,
            )


class AnalyticsService:
    """
    Stateless orchestrator for account and portfolio analytics.

    Attributes:
        base_currency: Common unit for multi-currency rollups
        default_usd_rate: USD→base rate used when the caller supplies none
    """

    def __init__(
            self,
            base_currency: str = BASE_CURRENCY,
            default_usd_rate: float = DEFAULT_USD_TO_COP_RATE,
    ):
        self.base_currency = base_currency.upper()
        self.default_usd_rate = default_usd_rate

        logger.info(
            f"AnalyticsService initialized (base={self.base_currency}, "
            f"default USD rate={self.default_usd_rate})"
        )

    # =========================================================================
    # SINGLE SERIES
    # =========================================================================

    def analyze_series(
            self,
            points: list[BalancePoint],
            horizons: tuple[int, ...] = PROJECTION_HORIZONS,
    ) -> SeriesAnalysis:
        """
        Compute metrics, win rate and projections for one series.

        Args:
            points: Ascending-date balance points
            horizons: Projection horizons in days

        Returns:
            SeriesAnalysis (zeros for fewer than 2 points)

        Raises:
            ValidationError: If dates are not strictly ascending
        """
        validate_series(points)

        metrics = compute_metrics(points)
        values = [p.value for p in points]
        current = values[-1] if values else 0.0

        projections = project_horizons(values, metrics, horizons=horizons)
        trend_projection = project_horizons(
            values, metrics, horizons=(TREND_HORIZON_DAYS,)
        )[0]

        logger.debug(
            f"Analyzed series of {len(points)} points: "
            f"vol={metrics.volatility}, sharpe={metrics.sharpe}"
        )

        return SeriesAnalysis(
            metrics=metrics,
            win_rate=calculate_win_rate(points),
            risk_level=classify_risk(metrics.volatility),
            trend=(
                TrendDirection.UP
                if trend_projection.value > current
                else TrendDirection.DOWN
            ),
            projections=projections,
        )

    def project_values(self, values: list[float], days_ahead: int) -> float:
        """Linear-trend projection of a plain value list."""
        return project_linear(values, days_ahead)

    # =========================================================================
    # PORTFOLIO
    # =========================================================================

    def build_converter(
            self,
            usd_to_cop_rate: float | None = None,
            rates: dict[str, float] | None = None,
    ) -> CurrencyConverter:
        """
        Build the conversion collaborator for a portfolio request.

        Explicit `rates` win; otherwise a USD rate (or the configured
        default) is used.
        """
        if rates:
            return CurrencyConverter(rates=rates, base_currency=self.base_currency)
        if self.base_currency == "COP":
            return CurrencyConverter.for_usd_rate(
                usd_to_cop_rate, fallback_rate=self.default_usd_rate
            )
        return CurrencyConverter(base_currency=self.base_currency)

    def analyze_portfolio(
            self,
            accounts: list[AccountSeries],
            to_common_unit: ToCommonUnit | None = None,
            usd_to_cop_rate: float | None = None,
            horizons: tuple[int, ...] = PROJECTION_HORIZONS,
            as_of: date | None = None,
    ) -> PortfolioAnalysis:
        """
        Roll up every account and summarize the portfolio.

        Args:
            accounts: Top-level accounts with their sub-accounts
            to_common_unit: Conversion collaborator (built from
                            usd_to_cop_rate when omitted)
            usd_to_cop_rate: USD→COP rate for the default converter
            horizons: Projection horizons in days
            as_of: Reference date for the monthly flow totals

        Returns:
            PortfolioAnalysis with rollups and summary

        Raises:
            ValidationError: If any series has non-ascending dates
            FXConversionError: If an account currency cannot be converted
        """
        self._validate_accounts(accounts)

        if to_common_unit is None:
            to_common_unit = self.build_converter(usd_to_cop_rate)

        rollups = rollup(accounts, to_common_unit, horizons=horizons)
        summary = summarize_portfolio(
            accounts, rollups, to_common_unit, horizons=horizons, as_of=as_of
        )

        logger.info(
            f"Analyzed portfolio of {len(accounts)} accounts: "
            f"total={summary.total_value} {self.base_currency}, roi={summary.roi}%"
        )

        return PortfolioAnalysis(
            accounts=rollups,
            summary=summary,
            currency=self.base_currency,
        )

    def _validate_accounts(self, accounts: list[AccountSeries]) -> None:
        for account in accounts:
            validate_series(account.points, field=f"accounts[{account.account_id}].points")
            self._validate_accounts(account.children)

    # =========================================================================
    # GOALS
    # =========================================================================

    def goal_progress(
            self,
            target_amount: float,
            points: list[BalancePoint] | None = None,
            current_amount: float | None = None,
    ) -> GoalProgress:
        """
        Progress toward a savings target, optionally backed by a series.

        The series supplies the current amount (its last value, unless
        current_amount is given) and the growth used for the estimate.

        Raises:
            ValidationError: If the target is not positive or the series
                             dates are not strictly ascending
        """
        if target_amount <= 0:
            raise ValidationError("Target amount must be positive", field="target_amount")

        points = points or []
        validate_series(points)

        if current_amount is None:
            current_amount = points[-1].value if points else 0.0

        metrics = compute_metrics(points)
        values = [p.value for p in points]

        return goal_progress(
            target_amount,
            current_amount,
            daily_growth_rate=daily_growth_rate(metrics.avg_return),
            daily_trend_delta=linear_trend_delta(values),
        )
