"""
calculations.py – Personal carbon-footprint calculation engine.

Each domain calculator takes one slice of a lifestyle profile plus an
emission factor registry and returns a non-negative daily figure in
kg CO₂e, rounded to 2 decimals.  ``compute_footprint`` sums the four
domains into a ``CarbonResult``; ``compute_override`` re-runs it on a
baseline profile patched with a partial, same-shaped override.

Formula references
──────────────────
 Domain       Formula (per day)
 ─────────────────────────────────────────────────────────────────────────
 Transport    mode_base × fuel × ev_charging × mileage × distance × passengers
              + flights_daily_average          (fuel factors: car / two-wheeler only)
 Diet         Σ(share% / 100 × meal_factor) × meals_per_day
              + ordered_meals_per_day × delivery_multiplier,
              then × junk_food × food_waste
 Electricity  (kWh × grid_factor ÷ household × time_at_home
              + Σ appliance_kWh × grid_factor) ÷ 30
 Lifestyle    (screen_weekly × 4.33 + shopping + fashion + online_orders)
              × waste_management ÷ 30

Absent or unknown categorical answers resolve through the registry's
fallback helpers: multipliers to 1.0, additive bases to 0.0, and the
electricity source to the worst-case grid factor.

Usage
──────
    from footprint.calculations import compute_footprint

    result = compute_footprint({"transport": {"primaryMode": "bus"}})
    result.total, result.breakdown.transport
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from footprint.constants import (
    CAR_KG_CO2E_PER_KM,
    DAYS_PER_MONTH,
    DOMAIN_DIET,
    DOMAIN_ELECTRICITY,
    DOMAIN_LIFESTYLE,
    DOMAIN_TRANSPORT,
    KM_PER_STEP,
    RESULT_UNIT,
    STEP_LENGTH_M,
)
from footprint.emission_factors import (
    DEFAULT_REGISTRY,
    EmissionFactorRegistry,
    lookup_addend,
    lookup_multiplier,
    normalise_key,
)
from footprint.schemas import (
    DietProfile,
    ElectricityProfile,
    InvalidProfileFieldError,
    LifestyleProfile,
    Profile,
    TransportProfile,
    parse_profile,
)

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


# ─────────────────────────────────────────────────────────────────────────────
# Result dataclasses
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Breakdown:
    """Per-domain daily emissions, each rounded to 2 decimals."""
    transport: float = 0.0
    diet: float = 0.0
    electricity: float = 0.0
    lifestyle: float = 0.0

    def values(self) -> list[float]:
        return [self.transport, self.diet, self.electricity, self.lifestyle]


@dataclass(frozen=True)
class CarbonResult:
    """Daily footprint: ``total`` is the rounded sum of the rounded breakdown."""
    total: float
    breakdown: Breakdown = field(default_factory=Breakdown)
    unit: str = RESULT_UNIT

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "breakdown": asdict(self.breakdown),
            "unit": self.unit,
        }


def round2(value: float, label: str = "value") -> float:
    """
    Round half-up to 2 decimals on the exact binary value.

    Raises ``InvalidProfileFieldError`` rather than letting NaN or infinity
    through.
    """
    if not math.isfinite(value):
        raise InvalidProfileFieldError(f"Non-finite {label} result: {value!r}", [label])
    return float(Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


def aggregate(breakdown: Breakdown) -> CarbonResult:
    """Sum rounded domain values into a ``CarbonResult`` (total drifts by at most 0.02)."""
    total = round2(sum(breakdown.values()), "total")
    return CarbonResult(total=total, breakdown=breakdown)


# ─────────────────────────────────────────────────────────────────────────────
# 1. Transport
# ─────────────────────────────────────────────────────────────────────────────

def calc_transport_cf(
    transport: TransportProfile,
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> float:
    """
    Daily commute + flight emissions.

    An unknown or absent ``primary_mode`` contributes nothing from ground
    travel; flights are a separate source and are always added.  Fuel,
    charging-source and mileage factors apply only to fuel-sensitive modes.
    """
    factors = registry.transport
    daily = 0.0

    mode = factors.lookup_mode(transport.primary_mode)
    if mode is not None:
        daily = mode.base
        fuel = normalise_key(transport.fuel_type)
        if mode.fuel_sensitive and fuel:
            daily *= lookup_multiplier(factors.fuel_type, fuel)
            if fuel == "electric" and normalise_key(transport.ev_charging_source):
                daily *= lookup_multiplier(factors.ev_charging_source, transport.ev_charging_source)
            daily *= lookup_multiplier(factors.mileage, transport.mileage)

        daily *= lookup_multiplier(factors.daily_distance, transport.daily_distance)
        daily *= lookup_multiplier(factors.passengers, transport.passengers)

    flights = lookup_addend(factors.flights_per_year, transport.flights_per_year)
    daily += flights

    logger.debug(
        "Transport | mode=%s fuel=%s distance=%s passengers=%s flights=%.2f → %.4f kg CO₂e",
        transport.primary_mode, transport.fuel_type, transport.daily_distance,
        transport.passengers, flights, daily,
    )
    return round2(daily, DOMAIN_TRANSPORT)


# ─────────────────────────────────────────────────────────────────────────────
# 2. Diet
# ─────────────────────────────────────────────────────────────────────────────

def calc_diet_cf(
    diet: DietProfile,
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> float:
    """
    Daily food emissions.

    Meal-type percentages are used exactly as given; they are not
    renormalised when they do not sum to 100.
    """
    factors = registry.diet

    per_meal = (
        (diet.meat_percentage or 0.0) / 100 * factors.meat_factor
        + (diet.dairy_percentage or 0.0) / 100 * factors.dairy_factor
        + (diet.plant_percentage or 0.0) / 100 * factors.plant_factor
    )
    daily = per_meal * (diet.meals_per_day or 0.0)

    ordered_per_day = lookup_addend(factors.ordered_meals_per_day, diet.ordered_meals_freq)
    daily += ordered_per_day * factors.ordered_meals_multiplier

    daily *= lookup_multiplier(factors.junk_food, diet.junk_food_freq)
    daily *= lookup_multiplier(factors.food_waste, diet.food_waste)

    logger.debug(
        "Diet | %.4f kg/meal × %s meals, ordered=%.2f/day → %.4f kg CO₂e",
        per_meal, diet.meals_per_day, ordered_per_day, daily,
    )
    return round2(daily, DOMAIN_DIET)


# ─────────────────────────────────────────────────────────────────────────────
# 3. Electricity
# ─────────────────────────────────────────────────────────────────────────────

def _monthly_kwh(electricity: ElectricityProfile, registry: EmissionFactorRegistry) -> float:
    if electricity.monthly_kwh is not None:
        return electricity.monthly_kwh
    return lookup_addend(registry.electricity.usage_estimates, electricity.monthly_kwh_estimate)


def calc_electricity_cf(
    electricity: ElectricityProfile,
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> float:
    """
    Daily share of household electricity emissions.

    Whole-home usage is split across the household and scaled by time spent
    at home; each listed appliance adds its monthly kWh estimate in full.
    """
    factors = registry.electricity
    grid_factor = factors.emission_factor(electricity.renewable_energy)

    kwh = _monthly_kwh(electricity, registry)
    household = electricity.household_size if (electricity.household_size or 0) >= 1 else 1
    per_person = kwh * grid_factor / household
    per_person *= lookup_multiplier(factors.time_at_home, electricity.time_at_home)

    appliance_cf = 0.0
    for appliance in dict.fromkeys(normalise_key(a) for a in electricity.appliances or []):
        appliance_cf += lookup_addend(factors.appliances, appliance) * grid_factor

    daily = (per_person + appliance_cf) / DAYS_PER_MONTH

    logger.debug(
        "Electricity | %.2f kWh × %.4f ÷ %d, appliances=%.4f → %.4f kg CO₂e",
        kwh, grid_factor, household, appliance_cf, daily,
    )
    return round2(daily, DOMAIN_ELECTRICITY)


# ─────────────────────────────────────────────────────────────────────────────
# 4. Lifestyle
# ─────────────────────────────────────────────────────────────────────────────

def calc_lifestyle_cf(
    lifestyle: LifestyleProfile,
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> float:
    """Daily emissions from screens, shopping, and deliveries, scaled by waste habits."""
    factors = registry.lifestyle

    monthly = lookup_addend(factors.screen_time, lifestyle.screen_time) * factors.weeks_per_month
    monthly += lookup_addend(factors.non_essential_shopping, lifestyle.non_essential_shopping)
    monthly += lookup_addend(factors.fashion_shopping, lifestyle.fashion_shopping)
    monthly += lookup_addend(factors.online_orders, lifestyle.online_orders)
    monthly *= lookup_multiplier(factors.waste_management, lifestyle.waste_management)

    daily = monthly / DAYS_PER_MONTH
    logger.debug("Lifestyle | %.4f kg/month → %.4f kg CO₂e", monthly, daily)
    return round2(daily, DOMAIN_LIFESTYLE)


# ─────────────────────────────────────────────────────────────────────────────
# Aggregation
# ─────────────────────────────────────────────────────────────────────────────

def compute_footprint(
    profile: Profile | Mapping[str, Any],
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> CarbonResult:
    """
    Compute the daily footprint of a baseline profile.

    Absent domains contribute 0.  ``total`` is rounded from the sum of the
    already-rounded domain values.

    Raises
    ------
    InvalidProfileFieldError
        If a field has the wrong type or a result is not finite.
    """
    profile = parse_profile(profile)

    breakdown = Breakdown(
        transport=calc_transport_cf(profile.transport, registry) if profile.transport else 0.0,
        diet=calc_diet_cf(profile.diet, registry) if profile.diet else 0.0,
        electricity=(
            calc_electricity_cf(profile.electricity, registry) if profile.electricity else 0.0
        ),
        lifestyle=calc_lifestyle_cf(profile.lifestyle, registry) if profile.lifestyle else 0.0,
    )
    result = aggregate(breakdown)
    logger.debug("Footprint total=%.2f %s", result.total, result.unit)
    return result


def merge_profiles(
    baseline: Profile | Mapping[str, Any],
    override: Profile | Mapping[str, Any],
) -> Profile:
    """
    Shallow-merge *override* over *baseline*, one domain at a time.

    Only fields explicitly set in the override replace baseline fields;
    neither input is modified.
    """
    baseline = parse_profile(baseline)
    override = parse_profile(override)

    merged: dict[str, Any] = {}
    for domain in (DOMAIN_TRANSPORT, DOMAIN_DIET, DOMAIN_ELECTRICITY, DOMAIN_LIFESTYLE):
        base_part = getattr(baseline, domain)
        over_part = getattr(override, domain)
        if base_part is None and over_part is None:
            continue
        fields_ = base_part.model_dump(exclude_unset=True) if base_part is not None else {}
        if over_part is not None:
            fields_.update(over_part.model_dump(exclude_unset=True))
        merged[domain] = fields_
    return parse_profile(merged)


def compute_override(
    baseline: Profile | Mapping[str, Any],
    override: Profile | Mapping[str, Any],
    registry: EmissionFactorRegistry = DEFAULT_REGISTRY,
) -> CarbonResult:
    """Footprint of *baseline* with a day's partial *override* applied."""
    return compute_footprint(merge_profiles(baseline, override), registry)


# ─────────────────────────────────────────────────────────────────────────────
# Walking offset
# ─────────────────────────────────────────────────────────────────────────────

def _steps_to_float(steps: Any) -> float:
    if isinstance(steps, bool):
        raise InvalidProfileFieldError(f"Invalid steps value: {steps!r}", ["steps"])
    try:
        return float(steps or 0)
    except (TypeError, ValueError) as exc:
        raise InvalidProfileFieldError(f"Invalid steps value: {steps!r}", ["steps"]) from exc


def avoided_carbon_from_steps(steps: float) -> float:
    """kg CO₂e a car would have emitted over the distance walked."""
    distance_km = _steps_to_float(steps) * STEP_LENGTH_M / 1000
    return round2(distance_km * CAR_KG_CO2E_PER_KM, "steps")


def walking_distance_km(steps: float) -> float:
    """Distance recorded for a daily step count."""
    return round2(_steps_to_float(steps) * KM_PER_STEP, "steps")
