"""
Sensitivity ladders re-derived from the analytical pricer.

Each point is an independent Black-Scholes evaluation at a shifted input;
no point is extrapolated from another point's Greeks.
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace

from option_engine.analytics.black_scholes import Greeks, price_contract
from option_engine.params import ContractParameters


@dataclass(frozen=True)
class LadderPoint:
    """Price and Greeks at one grid value ``x``."""

    x: float
    price: float
    greeks: Greeks


def spot_ladder(params: ContractParameters, spots: Iterable[float]) -> list[LadderPoint]:
    """Reprice ``params`` at every spot in ``spots``."""
    points = []
    for spot in spots:
        price, greeks = price_contract(replace(params, S0=spot))
        points.append(LadderPoint(x=float(spot), price=price, greeks=greeks))
    return points


def vol_ladder(params: ContractParameters, vols: Iterable[float]) -> list[LadderPoint]:
    """Reprice ``params`` at every volatility in ``vols``."""
    points = []
    for vol in vols:
        price, greeks = price_contract(replace(params, sigma=vol))
        points.append(LadderPoint(x=float(vol), price=price, greeks=greeks))
    return points
