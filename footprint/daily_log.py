"""
daily_log.py – Footprint of one day's recorded activity.

This pipeline scores what actually happened on a given day (meals eaten,
AC hours, orders received) rather than patching the baseline profile, so
its field set and rules differ from ``calculations.compute_footprint``.
It shares the registry's transport and diet tables so a day logged with
the same mode and distance band scores the same ground-travel base.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from footprint.calculations import Breakdown, CarbonResult, aggregate, round2
from footprint.constants import (
    DAYS_PER_MONTH,
    DOMAIN_DIET,
    DOMAIN_ELECTRICITY,
    DOMAIN_LIFESTYLE,
    DOMAIN_TRANSPORT,
)
from footprint.emission_factors import (
    DEFAULT_REGISTRY,
    EmissionFactorRegistry,
    lookup_addend,
    lookup_multiplier,
    normalise_key,
)
from footprint.schemas import (
    DailyDietLog,
    DailyElectricityLog,
    DailyLifestyleLog,
    DailyLog,
    DailyTransportLog,
    parse_daily_log,
)

logger = logging.getLogger(__name__)


def calc_daily_transport(
    log: DailyTransportLog,
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> float:
    """Mode base × distance band; nothing unless both are given and the mode is known."""
    factors = registry.transport
    if not (normalise_key(log.primary_mode) and normalise_key(log.total_distance)):
        return 0.0
    mode = factors.lookup_mode(log.primary_mode)
    if mode is None:
        return 0.0
    return round2(
        mode.base * lookup_multiplier(factors.daily_distance, log.total_distance),
        DOMAIN_TRANSPORT,
    )


def calc_daily_diet(
    log: DailyDietLog,
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> float:
    """Meat meals at the meat factor, the rest at the plant factor, plus delivery."""
    factors = registry.diet
    meals = log.meals_today or 0.0
    meat_meals = log.meat_meals or 0.0
    plant_meals = max(meals - meat_meals, 0.0)

    daily = meat_meals * factors.meat_factor + plant_meals * factors.plant_factor
    if log.ate_outside:
        daily += factors.ordered_meals_multiplier
    return round2(daily, DOMAIN_DIET)


def calc_daily_electricity(
    log: DailyElectricityLog,
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> float:
    factors = registry.daily_log
    hours = lookup_addend(factors.ac_hours, log.ac_hours)
    daily = hours * factors.ac_kwh_per_hour * factors.grid_factor

    for appliance in dict.fromkeys(normalise_key(a) for a in log.appliances or []):
        monthly_kwh = lookup_addend(registry.electricity.appliances, appliance)
        daily += monthly_kwh / DAYS_PER_MONTH * factors.grid_factor

    if log.worked_from_home:
        daily += factors.work_from_home
    return round2(daily, DOMAIN_ELECTRICITY)


def calc_daily_lifestyle(
    log: DailyLifestyleLog,
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> float:
    factors = registry.daily_log
    orders = max(int(log.online_orders or 0), 0)
    daily = orders * factors.online_order
    daily += lookup_addend(factors.screen_hours, log.screen_hours)
    if log.recycled_waste:
        daily *= factors.recycling_multiplier
    return round2(daily, DOMAIN_LIFESTYLE)


def compute_footprint_from_daily_log(
    daily_log: DailyLog | Mapping[str, Any],
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> CarbonResult:
    """
    Compute one day's footprint from a daily log.

    Raises
    ------
    InvalidProfileFieldError
        If a field has the wrong type.
    """
    log = parse_daily_log(daily_log)

    breakdown = Breakdown(
        transport=calc_daily_transport(log.transport, registry) if log.transport else 0.0,
        diet=calc_daily_diet(log.diet, registry) if log.diet else 0.0,
        electricity=calc_daily_electricity(log.electricity, registry) if log.electricity else 0.0,
        lifestyle=calc_daily_lifestyle(log.lifestyle, registry) if log.lifestyle else 0.0,
    )
    result = aggregate(breakdown)
    logger.debug("Daily log %s total=%.2f %s", log.date or "-", result.total, result.unit)
    return result
