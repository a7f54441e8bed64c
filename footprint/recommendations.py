"""
recommendations.py – Footprint categories and rule-based reduction suggestions.

Categorizer
-----------
``categorize`` maps a daily total onto an ordinal label.  Two threshold
schemes exist: ``footprint`` (5 / 15 / 25, the default) and ``impact``
(10 / 20 / 30, "… Impact" labels used in coaching prompts).

Recommendation rules
--------------------
Each rule is an independent predicate over the profile and total.  Matches
are collected in declaration order and capped (5 by default); when no rule
matches a single generic encouragement is returned.  The registry is not
consulted.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from footprint.constants import (
    CATEGORY_SCHEMES,
    DEFAULT_CATEGORY_SCHEME,
    RECOMMENDATION_LIMIT,
)
from footprint.emission_factors import normalise_key as _key
from footprint.schemas import Profile, parse_profile

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Categorizer
# ─────────────────────────────────────────────────────────────

def categorize(total: float, scheme: str = DEFAULT_CATEGORY_SCHEME) -> str:
    """
    Return the category label for a daily *total*.

    Lower bounds are inclusive: with the default scheme ``5.0`` is
    ``"Moderate"`` and ``24.99`` is ``"High"``.

    Raises
    ------
    ValueError
        If *scheme* is not a known threshold scheme.
    """
    bands = CATEGORY_SCHEMES.get(scheme)
    if bands is None:
        raise ValueError(
            f"Unknown category scheme {scheme!r}; expected one of {sorted(CATEGORY_SCHEMES)}"
        )
    for upper, label in bands:
        if upper is None or total < upper:
            return label
    return bands[-1][1]


# ─────────────────────────────────────────────────────────────
# Recommendation rules
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Recommendation:
    category: str
    suggestion: str
    potential_saving: str


@dataclass(frozen=True)
class _Rule:
    name: str
    applies: Callable[[Profile, float], bool]
    recommendation: Recommendation


def _uses_combustion_vehicle(p: Profile, _total: float) -> bool:
    t = p.transport
    return (
        t is not None
        and _key(t.primary_mode) in {"personal_car", "two_wheeler"}
        and _key(t.fuel_type) not in {"electric"}
    )


def _charges_ev_from_grid(p: Profile, _total: float) -> bool:
    t = p.transport
    return (
        t is not None
        and _key(t.fuel_type) == "electric"
        and _key(t.ev_charging_source) in {"home_grid", "public_stations"}
    )


def _long_commute(p: Profile, _total: float) -> bool:
    t = p.transport
    return t is not None and _key(t.daily_distance) in {"31_50km", "51plus_km"}


def _frequent_flyer(p: Profile, _total: float) -> bool:
    t = p.transport
    return t is not None and _key(t.flights_per_year) in {"3_5", "6plus"}


def _meat_heavy(p: Profile, _total: float) -> bool:
    return p.diet is not None and (p.diet.meat_percentage or 0) > 50


def _orders_often(p: Profile, _total: float) -> bool:
    return p.diet is not None and _key(p.diet.ordered_meals_freq) in {
        "10_15_week", "16_20_week", "20plus_week",
    }


def _wastes_food(p: Profile, _total: float) -> bool:
    return p.diet is not None and _key(p.diet.food_waste) in {"sometimes", "often"}


def _high_electricity(p: Profile, _total: float) -> bool:
    e = p.electricity
    if e is None:
        return False
    appliances = {_key(a) for a in e.appliances or []}
    return (
        "air_conditioner" in appliances
        or (e.monthly_kwh or 0) > 400
        or (e.monthly_kwh is None and _key(e.monthly_kwh_estimate) in {"400_600", "600plus"})
    )


def _grid_only(p: Profile, _total: float) -> bool:
    return p.electricity is not None and _key(p.electricity.renewable_energy) in {
        "no_renewable", "not_sure",
    }


def _unsorted_waste(p: Profile, _total: float) -> bool:
    return p.lifestyle is not None and _key(p.lifestyle.waste_management) == "throw_everything"


def _shops_often(p: Profile, _total: float) -> bool:
    ls = p.lifestyle
    return ls is not None and (
        _key(ls.fashion_shopping) == "more_once_month"
        or _key(ls.non_essential_shopping) == "weekly"
    )


def _high_total(_p: Profile, total: float) -> bool:
    return categorize(total) == "Very High"


RULES: list[_Rule] = [
    _Rule("carpool", _uses_combustion_vehicle, Recommendation(
        "Transportation",
        "Consider using public transport or carpooling 2-3 days per week",
        "3-5 kg CO2e per day",
    )),
    _Rule("renewable_charging", _charges_ev_from_grid, Recommendation(
        "Transportation",
        "Charge your EV from a renewable tariff or solar when possible",
        "0.5-1 kg CO2e per day",
    )),
    _Rule("remote_work", _long_commute, Recommendation(
        "Transportation",
        "Ask about working from home one or two days a week to cut your long commute",
        "2-6 kg CO2e per day",
    )),
    _Rule("fewer_flights", _frequent_flyer, Recommendation(
        "Transportation",
        "Replace one short-haul flight a year with a train or a video call",
        "5-10 kg CO2e per day (annual average)",
    )),
    _Rule("reduce_meat", _meat_heavy, Recommendation(
        "Diet",
        "Try reducing meat consumption by 20-30% and increase plant-based meals",
        "1-3 kg CO2e per day",
    )),
    _Rule("cook_at_home", _orders_often, Recommendation(
        "Diet",
        "Cook at home more often and skip single-use delivery packaging",
        "1-2 kg CO2e per day",
    )),
    _Rule("plan_meals", _wastes_food, Recommendation(
        "Diet",
        "Plan meals and store leftovers to cut food waste",
        "0.3-0.8 kg CO2e per day",
    )),
    _Rule("cooling_efficiency", _high_electricity, Recommendation(
        "Energy",
        "Set AC temperature to 24°C and use fans to supplement cooling",
        "1-2 kg CO2e per day",
    )),
    _Rule("green_tariff", _grid_only, Recommendation(
        "Energy",
        "Switch to a green electricity plan or consider rooftop solar",
        "1-3 kg CO2e per day",
    )),
    _Rule("segregate_waste", _unsorted_waste, Recommendation(
        "Waste",
        "Start with basic waste segregation - separate dry and wet waste, and compost",
        "0.5-1 kg CO2e per day",
    )),
    _Rule("mindful_shopping", _shops_often, Recommendation(
        "Lifestyle",
        "Buy fewer, longer-lasting items and try second-hand first",
        "0.2-0.5 kg CO2e per day",
    )),
    _Rule("weekly_goal", _high_total, Recommendation(
        "General",
        "Set a weekly reduction goal and log your days to track progress",
        "2-4 kg CO2e per day",
    )),
]

DEFAULT_RECOMMENDATION = Recommendation(
    "General",
    "Great job! Keep up your sustainable habits and inspire others to join you",
    "Keep it up",
)


def generate_recommendations(
    profile: Profile | Mapping[str, Any],
    total: float,
    limit: int = RECOMMENDATION_LIMIT,
) -> list[Recommendation]:
    """
    Return up to *limit* recommendations matching *profile* and *total*.

    Never empty: falls back to ``DEFAULT_RECOMMENDATION``.
    """
    profile = parse_profile(profile)
    rules = [rule for rule in RULES if rule.applies(profile, total)]
    logger.debug(
        "Recommendations | total=%.2f matched=%s limit=%d",
        total, ",".join(r.name for r in rules) or "-", limit,
    )
    matched = [rule.recommendation for rule in rules]
    if not matched:
        return [DEFAULT_RECOMMENDATION]
    return matched[:max(limit, 1)]


def recommend(
    profile: Profile | Mapping[str, Any],
    total: float,
    limit: int = RECOMMENDATION_LIMIT,
) -> list[str]:
    """Suggestion strings only, in rule order."""
    return [r.suggestion for r in generate_recommendations(profile, total, limit)]
