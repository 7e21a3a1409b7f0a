"""
Newsvendor decision layer: production quantity, prediction interval and
expected profit, all derived from one PoissonDemandModel.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from bakeplan.ml.contracts import ForecastEconomics, ServiceLevelSource
from bakeplan.ml.demand import PoissonDemandModel


def critical_fractile(price: float, cost: float) -> float:
    """(price - cost) / price: the stock level where one more unit has zero expected margin."""
    return (price - cost) / price


def resolve_service_level(
    service_level_target: Optional[float],
    price: float,
    cost: float,
) -> Tuple[float, ServiceLevelSource]:
    """An explicit target wins; the critical fractile only fills in when it is absent."""
    if service_level_target is not None:
        return float(service_level_target), ServiceLevelSource.TARGET
    return critical_fractile(price, cost), ServiceLevelSource.CRITICAL_FRACTILE


@dataclass(frozen=True)
class QuantityDecision:
    optimal_quantity: int
    stockout_probability: float
    waste_probability: float


class QuantityOptimizer:

    def optimal_quantity(self, demand: PoissonDemandModel, probability: float) -> int:
        return max(0, int(demand.quantile(probability)))

    def decide(self, demand: PoissonDemandModel, probability: float) -> QuantityDecision:
        quantity = self.optimal_quantity(demand, probability)
        waste = demand.cdf(quantity - 1)
        return QuantityDecision(
            optimal_quantity=quantity,
            stockout_probability=1.0 - waste,
            waste_probability=waste,
        )


class UncertaintyEstimator:

    def interval(self, demand: PoissonDemandModel, confidence_level: float) -> Tuple[float, float]:
        tail = (1.0 - confidence_level) / 2.0
        lower = float(demand.quantile(tail))
        upper = float(demand.quantile(1.0 - tail))
        expected = demand.mean
        return min(lower, expected), max(upper, expected)


class ProfitEstimator:
    """
    Unsold units are a total loss (perishable goods, no salvage value).
    A salvage term would add `salvage * E[max(Q - D, 0)]`.
    """

    def expected_profit(self, demand: PoissonDemandModel, price: float, cost: float, quantity: int) -> float:
        return price * demand.truncated_expected_min(quantity) - cost * quantity

    def economics(self, demand: PoissonDemandModel, price: float, cost: float, quantity: int) -> ForecastEconomics:
        expected_sales = demand.truncated_expected_min(quantity)
        revenue = price * expected_sales
        production_cost = cost * quantity
        return ForecastEconomics(
            expected_sales=expected_sales,
            expected_waste=max(0.0, quantity - expected_sales),
            expected_revenue=revenue,
            expected_cost=production_cost,
            expected_profit=revenue - production_cost,
        )
