"""
schemas.py – Pydantic models for lifestyle profiles and daily logs.

Every field is optional: the engine degrades to a neutral contribution when
an answer is absent.  Field names are snake_case; the camelCase names used
by the calling services (``primaryMode``, ``monthlyKwh`` …) are accepted as
aliases.  Categorical answers are kept as plain strings (or integers, for
bands such as ``flightsPerYear: 0``) so that values the factor tables do not
model yet pass through instead of failing validation.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class InvalidProfileFieldError(ValueError):
    """A profile or daily-log field has the wrong type or a non-finite value."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []


Category = Optional[Union[str, int]]


class _EngineModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        allow_inf_nan=False,
    )


# ─────────────────────────────────────────────────────────────
# Baseline profile
# ─────────────────────────────────────────────────────────────

class TransportProfile(_EngineModel):
    """Commute and travel answers."""

    primary_mode: Category = Field(None, alias="primaryMode")
    fuel_type: Category = Field(None, alias="fuelType", description="Only used for car / two-wheeler")
    ev_charging_source: Category = Field(None, alias="evChargingSource", description="Only used for electric fuel")
    daily_distance: Category = Field(None, alias="dailyDistance")
    passengers: Category = Field(None, description="Occupancy / sharing")
    flights_per_year: Category = Field(None, alias="flightsPerYear")
    mileage: Category = Field(None, description="Vehicle efficiency band")


class DietProfile(_EngineModel):
    """Meal composition and food habits."""

    meals_per_day: Optional[float] = Field(None, alias="mealsPerDay")
    meat_percentage: Optional[float] = Field(None, alias="meatPercentage")
    dairy_percentage: Optional[float] = Field(None, alias="dairyPercentage")
    plant_percentage: Optional[float] = Field(None, alias="plantPercentage")
    ordered_meals_freq: Category = Field(None, alias="orderedMealsFreq")
    junk_food_freq: Category = Field(None, alias="junkFoodFreq")
    food_waste: Category = Field(None, alias="foodWaste")


class ElectricityProfile(_EngineModel):
    """Household electricity use."""

    monthly_kwh: Optional[float] = Field(None, alias="monthlyKwh")
    monthly_kwh_estimate: Category = Field(
        None, alias="monthlyKwhEstimate", description="Banded kWh answer used when monthlyKwh is absent"
    )
    household_size: Optional[int] = Field(None, alias="householdSize")
    time_at_home: Category = Field(None, alias="timeAtHome")
    appliances: Optional[list[str]] = Field(default_factory=list)
    renewable_energy: Category = Field(None, alias="renewableEnergy")


class LifestyleProfile(_EngineModel):
    """Screen time, shopping, and waste habits."""

    screen_time: Category = Field(None, alias="screenTime")
    non_essential_shopping: Category = Field(None, alias="nonEssentialShopping")
    fashion_shopping: Category = Field(None, alias="fashionShopping")
    online_orders: Category = Field(None, alias="onlineOrders")
    waste_management: Category = Field(None, alias="wasteManagement")


class Profile(_EngineModel):
    """A four-domain lifestyle profile.  Any domain may be absent."""

    transport: Optional[TransportProfile] = None
    diet: Optional[DietProfile] = None
    electricity: Optional[ElectricityProfile] = None
    lifestyle: Optional[LifestyleProfile] = None


# ─────────────────────────────────────────────────────────────
# Daily log
# ─────────────────────────────────────────────────────────────

class DailyTransportLog(_EngineModel):
    primary_mode: Category = Field(None, alias="primaryMode")
    total_distance: Category = Field(None, alias="totalDistance", description="Distance band, same keys as dailyDistance")


class DailyDietLog(_EngineModel):
    meals_today: Optional[float] = Field(None, alias="mealsToday")
    meat_meals: Optional[float] = Field(None, alias="meatMeals")
    ate_outside: Optional[bool] = Field(False, alias="ateOutside")


class DailyElectricityLog(_EngineModel):
    ac_hours: Category = Field(None, alias="acHours")
    appliances: Optional[list[str]] = Field(default_factory=list)
    worked_from_home: Optional[bool] = Field(False, alias="workedFromHome")


class DailyLifestyleLog(_EngineModel):
    online_orders: Union[bool, int, None] = Field(None, alias="onlineOrders", description="Order count; true counts as one")
    screen_hours: Category = Field(None, alias="screenHours")
    recycled_waste: Optional[bool] = Field(False, alias="recycledWaste")


class DailyLog(_EngineModel):
    """One day's observed activity."""

    date: Optional[str] = None
    transport: Optional[DailyTransportLog] = None
    diet: Optional[DailyDietLog] = None
    electricity: Optional[DailyElectricityLog] = None
    lifestyle: Optional[DailyLifestyleLog] = None
    steps: Optional[int] = None


# ─────────────────────────────────────────────────────────────
# Parsing helpers
# ─────────────────────────────────────────────────────────────

def _parse(model: type[BaseModel], data: Any, label: str) -> Any:
    if isinstance(data, model):
        return data
    if not isinstance(data, Mapping):
        raise InvalidProfileFieldError(
            f"Invalid {label}: expected a mapping, got {type(data).__name__}"
        )
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        bad = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidProfileFieldError(f"Invalid {label} field(s): {details}", bad) from exc


def parse_profile(data: Profile | Mapping[str, Any]) -> Profile:
    """
    Return *data* as a ``Profile``.

    Raises
    ------
    InvalidProfileFieldError
        If any field has the wrong type (e.g. a non-numeric ``monthlyKwh``).
    """
    return _parse(Profile, data, "profile")


def parse_daily_log(data: DailyLog | Mapping[str, Any]) -> DailyLog:
    """Return *data* as a ``DailyLog``; raises ``InvalidProfileFieldError`` on type errors."""
    return _parse(DailyLog, data, "daily log")
