"""
emission_factors.py – Emission factor registry used in footprint calculations.

All factors are in kg CO₂e unless noted.  Tables map a categorical answer
value to either a multiplier (neutral value 1.0) or an additive base
(neutral value 0.0).

The registry is an immutable value: every table is a read-only mapping and
every section is a frozen dataclass.  ``DEFAULT_REGISTRY`` is built once at
import time; callers that need a different factor set build a new registry
with ``EmissionFactorRegistry.with_overrides`` or ``load_registry``.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any

from footprint.constants import WEEKS_PER_MONTH

logger = logging.getLogger(__name__)

NEUTRAL_MULTIPLIER: float = 1.0
NEUTRAL_ADDEND: float = 0.0


def _frozen(table: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(table))


def normalise_key(value: Any) -> str | None:
    """
    Normalise a categorical answer for table lookup.

    ``0`` and ``"0"`` resolve to the same key; ``None`` and blank strings
    resolve to ``None`` (absent).
    """
    if value is None:
        return None
    key = str(value).strip().lower()
    return key or None


# ─────────────────────────────────────────────────────────────
# Fallback resolution
# ─────────────────────────────────────────────────────────────

def lookup_multiplier(table: Mapping[str, float], value: Any) -> float:
    """Return the multiplier for *value*, or 1.0 when absent or unknown."""
    key = normalise_key(value)
    if key is None:
        return NEUTRAL_MULTIPLIER
    return table.get(key, NEUTRAL_MULTIPLIER)


def lookup_addend(table: Mapping[str, float], value: Any) -> float:
    """Return the additive contribution for *value*, or 0.0 when absent or unknown."""
    key = normalise_key(value)
    if key is None:
        return NEUTRAL_ADDEND
    return table.get(key, NEUTRAL_ADDEND)


# ─────────────────────────────────────────────────────────────
# Transport (kg CO₂e per day)
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TransportMode:
    """Base daily emission for a commute mode."""
    base: float
    fuel_sensitive: bool


@dataclass(frozen=True)
class TransportFactors:
    primary_mode: Mapping[str, TransportMode]
    fuel_type: Mapping[str, float]
    ev_charging_source: Mapping[str, float]
    daily_distance: Mapping[str, float]
    passengers: Mapping[str, float]
    flights_per_year: Mapping[str, float]   # additive, annual flights as a daily average
    mileage: Mapping[str, float]

    def lookup_mode(self, value: Any) -> TransportMode | None:
        """Return the mode entry, or None when absent or unknown."""
        key = normalise_key(value)
        if key is None:
            return None
        return self.primary_mode.get(key)


# ─────────────────────────────────────────────────────────────
# Diet (kg CO₂e per meal)
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DietFactors:
    meal_types: Mapping[str, float]
    ordered_meals_multiplier: float          # extra kg CO₂e per delivered meal
    ordered_meals_per_day: Mapping[str, float]
    junk_food: Mapping[str, float]
    food_waste: Mapping[str, float]

    @property
    def meat_factor(self) -> float:
        return self.meal_types.get("meat_based", NEUTRAL_ADDEND)

    @property
    def dairy_factor(self) -> float:
        return self.meal_types.get("dairy_egg_based", NEUTRAL_ADDEND)

    @property
    def plant_factor(self) -> float:
        return self.meal_types.get("plant_based", NEUTRAL_ADDEND)


# ─────────────────────────────────────────────────────────────
# Electricity (kg CO₂e per kWh, kWh per month)
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ElectricityFactors:
    emission_factors: Mapping[str, float]
    grid_factor: float                        # worst case, used for unknown sources
    usage_estimates: Mapping[str, float]      # banded kWh/month answers
    time_at_home: Mapping[str, float]
    appliances: Mapping[str, float]           # kWh per month

    def emission_factor(self, renewable_energy: Any) -> float:
        """
        Return kg CO₂e/kWh for a renewable-energy answer.

        Unknown and absent answers resolve to the grid factor, not to a
        neutral value: unmetered demand is never assumed clean.
        """
        key = normalise_key(renewable_energy)
        if key is None:
            return self.grid_factor
        return self.emission_factors.get(key, self.grid_factor)


# ─────────────────────────────────────────────────────────────
# Lifestyle (kg CO₂e per week / month)
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LifestyleFactors:
    screen_time: Mapping[str, float]          # per week
    non_essential_shopping: Mapping[str, float]   # per month
    fashion_shopping: Mapping[str, float]         # per month
    online_orders: Mapping[str, float]            # per month
    waste_management: Mapping[str, float]         # multiplier
    weeks_per_month: float


# ─────────────────────────────────────────────────────────────
# Daily log (kg CO₂e per day)
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DailyLogFactors:
    ac_hours: Mapping[str, float]             # band → hours of AC use
    ac_kwh_per_hour: float
    grid_factor: float
    work_from_home: float                     # additive surcharge
    online_order: float                       # per order
    screen_hours: Mapping[str, float]
    recycling_multiplier: float


@dataclass(frozen=True)
class EmissionFactorRegistry:
    """All factor tables, one section per domain plus the daily-log constants."""
    transport: TransportFactors
    diet: DietFactors
    electricity: ElectricityFactors
    lifestyle: LifestyleFactors
    daily_log: DailyLogFactors

    def with_overrides(self, overrides: Mapping[str, Any]) -> EmissionFactorRegistry:
        """
        Return a new registry with selected tables or scalars replaced.

        *overrides* mirrors the registry shape, e.g.
        ``{"transport": {"fuel_type": {"diesel": 1.2}}, "lifestyle": {"weeks_per_month": 4.345}}``.
        Table entries are merged over the existing table; scalars replace.

        Raises
        ------
        ValueError
            If a section or factor name does not exist.
        """
        sections: dict[str, Any] = {}
        for section_name, patch in overrides.items():
            if section_name not in {f.name for f in fields(self)}:
                raise ValueError(f"Unknown emission factor section: {section_name!r}")
            section = getattr(self, section_name)
            sections[section_name] = _patch_section(section_name, section, patch)
        return replace(self, **sections)


def _to_factor(value: Any, label: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Emission factor {label} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Emission factor {label} must be a number, got {value!r}") from exc


def _to_mode(value: Any, label: str) -> TransportMode:
    if not isinstance(value, Mapping) or "base" not in value:
        raise ValueError(f"Emission factor {label} must be an object with a 'base' factor")
    return TransportMode(
        base=_to_factor(value["base"], f"{label}.base"),
        fuel_sensitive=bool(value.get("fuel_sensitive", False)),
    )


def _patch_section(section_name: str, section: Any, patch: Mapping[str, Any]) -> Any:
    if not isinstance(patch, Mapping):
        raise ValueError(f"Emission factor section {section_name!r} must be an object")
    known = {f.name for f in fields(section)}
    changes: dict[str, Any] = {}
    for name, value in patch.items():
        if name not in known:
            raise ValueError(f"Unknown emission factor {section_name}.{name}")
        current = getattr(section, name)
        if isinstance(current, Mapping):
            if not isinstance(value, Mapping):
                raise ValueError(
                    f"Emission factor {section_name}.{name} must be a table of factors, "
                    f"got {type(value).__name__}"
                )
            merged = dict(current)
            for key, factor in value.items():
                label = f"{section_name}.{name}.{key}"
                if name == "primary_mode" and isinstance(section, TransportFactors):
                    merged[normalise_key(key)] = _to_mode(factor, label)
                else:
                    merged[normalise_key(key)] = _to_factor(factor, label)
            changes[name] = _frozen(merged)
        else:
            changes[name] = _to_factor(value, f"{section_name}.{name}")
    logger.debug("Overriding %s factors: %s", section_name, ", ".join(sorted(changes)))
    return replace(section, **changes)


def load_registry(
    path: str | Path | None,
    base: EmissionFactorRegistry | None = None,
) -> EmissionFactorRegistry:
    """
    Build a registry from a JSON override file.

    Returns *base* (or ``DEFAULT_REGISTRY``) unchanged when *path* is empty.
    """
    base = base or DEFAULT_REGISTRY
    if not path:
        return base
    p = Path(path)
    with p.open("r", encoding="utf-8") as fh:
        overrides = json.load(fh)
    if not isinstance(overrides, dict):
        raise ValueError(f"Emission factor file {p} must contain a JSON object")
    logger.info("Loaded emission factor overrides from %s", p)
    return base.with_overrides(overrides)


# ─────────────────────────────────────────────────────────────
# Default factor set
# ─────────────────────────────────────────────────────────────

DEFAULT_REGISTRY = EmissionFactorRegistry(
    transport=TransportFactors(
        primary_mode=_frozen({
            "personal_car":   TransportMode(base=4.5, fuel_sensitive=True),
            "two_wheeler":    TransportMode(base=2.0, fuel_sensitive=True),
            "bus":            TransportMode(base=1.5, fuel_sensitive=False),
            "metro_train":    TransportMode(base=0.8, fuel_sensitive=False),
            "bicycle":        TransportMode(base=0.0, fuel_sensitive=False),
            "walking":        TransportMode(base=0.0, fuel_sensitive=False),
            "work_from_home": TransportMode(base=0.0, fuel_sensitive=False),
        }),
        fuel_type=_frozen({
            "petrol":   1.0,
            "diesel":   1.15,
            "cng":      0.7,
            "electric": 0.4,
            "hybrid":   0.6,
            "not_sure": 1.0,
        }),
        ev_charging_source=_frozen({
            "home_grid":       1.0,
            "public_stations": 1.1,
            "renewable":       0.2,
            "not_sure":        1.0,
        }),
        daily_distance=_frozen({
            "0_5km":     1.0,
            "6_15km":    2.5,
            "16_30km":   4.0,
            "31_50km":   6.0,
            "51plus_km": 8.0,
        }),
        passengers=_frozen({
            "alone":               1.0,
            "one_passenger":       0.6,
            "two_plus_passengers": 0.4,
            "shared_public":       0.3,
        }),
        flights_per_year=_frozen({
            "0":     0.0,
            "1_2":   8.5,
            "3_5":  21.0,
            "6plus": 42.0,
        }),
        mileage=_frozen({
            "low":       1.3,   # <10 km/l
            "average":   1.0,   # 10–15 km/l
            "good":      0.7,   # 16–25 km/l
            "excellent": 0.5,   # 25+ km/l or EV
            "not_sure":  1.0,
        }),
    ),
    diet=DietFactors(
        meal_types=_frozen({
            "meat_based":      4.5,
            "dairy_egg_based": 1.2,
            "plant_based":     0.5,
        }),
        ordered_meals_multiplier=2.0,
        ordered_meals_per_day=_frozen({
            "never":       0.0,
            "1_2_week":    0.3,
            "3_5_week":    0.6,
            "6_9_week":    1.0,
            "10_15_week":  1.8,
            "16_20_week":  2.5,
            "20plus_week": 3.0,
        }),
        junk_food=_frozen({
            "daily":          1.2,
            "few_times_week": 1.1,
            "occasionally":   1.05,
            "rarely_never":   1.0,
        }),
        food_waste=_frozen({
            "never":     1.0,
            "rarely":    1.05,
            "sometimes": 1.15,
            "often":     1.25,
        }),
    ),
    electricity=ElectricityFactors(
        emission_factors=_frozen({
            "mostly_renewable":    0.1,
            "partially_renewable": 0.5,
            "no_renewable":        0.9,
            "not_sure":            0.9,
        }),
        grid_factor=0.9,
        usage_estimates=_frozen({
            "less_100": 75.0,
            "100_200": 150.0,
            "200_400": 300.0,
            "400_600": 500.0,
            "600plus": 700.0,
        }),
        time_at_home=_frozen({
            "4_hours_less": 0.5,
            "5_8_hours":    0.7,
            "9_12_hours":   0.9,
            "12plus_hours": 1.0,
        }),
        appliances=_frozen({
            "air_conditioner": 60.0,
            "geyser":          30.0,
            "refrigerator":    40.0,
            "washing_machine": 15.0,
            "microwave":       10.0,
            "laptop_desktop":  20.0,
            "tv_console":      15.0,
        }),
    ),
    lifestyle=LifestyleFactors(
        screen_time=_frozen({
            "less_2hrs": 1.0,
            "2_4hrs":    2.0,
            "4_6hrs":    3.0,
            "6plus_hrs": 4.0,
        }),
        non_essential_shopping=_frozen({
            "weekly":          10.0,
            "few_times_month":  6.0,
            "monthly":          3.0,
            "rarely_never":     0.0,
        }),
        fashion_shopping=_frozen({
            "more_once_month":    8.0,
            "every_1_2_months":   5.0,
            "every_3plus_months": 2.0,
            "rarely_never":       0.0,
        }),
        online_orders=_frozen({
            "0":      0.0,
            "1_5":    2.0,
            "6_10":   4.0,
            "11_15":  6.0,
            "15plus": 8.0,
        }),
        waste_management=_frozen({
            "recycle_compost":  0.8,
            "recycle_some":     0.9,
            "throw_everything": 1.1,
            "not_sure":         1.0,
        }),
        weeks_per_month=WEEKS_PER_MONTH,
    ),
    daily_log=DailyLogFactors(
        ac_hours=_frozen({
            "0":      0.0,
            "less_2": 1.0,
            "2_4":    3.0,
            "4plus":  6.0,
        }),
        ac_kwh_per_hour=2.0,
        grid_factor=0.9,
        work_from_home=2.0,
        online_order=2.0,
        screen_hours=_frozen({
            "less_2": 0.14,
            "2_4":    0.28,
            "4_6":    0.43,
            "6plus":  0.57,
        }),
        recycling_multiplier=0.8,
    ),
)
