"""
validators.py – Onboarding answer validation, normalisation, and structuring.

The calculation engine trusts its input; completeness and range checks live
here and run before a profile is scored.

``validate_onboarding``:
* Accepts the flat answer dict submitted by the onboarding flow.
* Returns a (normalised_dict, warnings_list) tuple.  An empty warnings
  list means the answers are complete.

Normalisation steps
-------------------
* Strip commas / spaces from numeric answers and cast to float.
* Default missing diet percentages to 0 and a missing appliance list to [].

Validation checks add warnings but do NOT remove data – the caller decides
whether to reject the submission.
"""
from __future__ import annotations

import re
from typing import Any

from dateutil import parser as dateutil_parser

from footprint.constants import (
    DIET_PERCENTAGE_TOLERANCE,
    DOMAIN_DIET,
    DOMAIN_ELECTRICITY,
    DOMAIN_LIFESTYLE,
    DOMAIN_TRANSPORT,
    FUEL_SENSITIVE_MODES,
    ONBOARDING_REQUIRED_FIELDS,
)
from footprint.schemas import Profile, parse_profile

_NUMERIC_FIELDS = (
    "mealsPerDay",
    "meatPercentage",
    "dairyPercentage",
    "plantPercentage",
    "monthlyKwh",
)

_PERCENTAGE_FIELDS = ("meatPercentage", "dairyPercentage", "plantPercentage")

_DOMAIN_FIELDS = {
    DOMAIN_TRANSPORT: [
        "primaryMode", "fuelType", "evChargingSource", "dailyDistance",
        "passengers", "flightsPerYear", "mileage",
    ],
    DOMAIN_DIET: [
        "mealsPerDay", "meatPercentage", "dairyPercentage", "plantPercentage",
        "orderedMealsFreq", "junkFoodFreq", "foodWaste",
    ],
    DOMAIN_ELECTRICITY: [
        "monthlyKwh", "monthlyKwhEstimate", "householdSize", "timeAtHome",
        "appliances", "renewableEnergy",
    ],
    DOMAIN_LIFESTYLE: [
        "screenTime", "nonEssentialShopping", "fashionShopping",
        "onlineOrders", "wasteManagement",
    ],
}


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def _to_float(value: Any) -> float | None:
    """
    Try to convert *value* to float.

    Strips commas and spaces before conversion.  Returns None on failure.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = re.sub(r"[,\s]", "", value)
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None


def _is_answered(value: Any) -> bool:
    """0 is a valid answer; None, blank strings, and empty lists are not."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set)):
        return len(value) > 0
    return True


def normalise_log_date(value: Any) -> str | None:
    """
    Parse a daily-log date and return a YYYY-MM-DD string.

    Accepts date/datetime objects, ISO strings, and common formats such as
    ``MM/DD/YYYY``.  Returns None on failure.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
            return value
    try:
        dt = dateutil_parser.parse(str(value), dayfirst=False)
        return dt.strftime("%Y-%m-%d")
    except (ValueError, OverflowError):
        return None


# ─────────────────────────────────────────────────────────────
# Onboarding
# ─────────────────────────────────────────────────────────────

def _required_fields(answers: dict[str, Any]) -> dict[str, list[str]]:
    required = {domain: list(fields) for domain, fields in ONBOARDING_REQUIRED_FIELDS.items()}
    if not (_is_answered(answers.get("monthlyKwh")) or _is_answered(answers.get("monthlyKwhEstimate"))):
        required[DOMAIN_ELECTRICITY].append("monthlyKwhEstimate")
    if answers.get("primaryMode") in FUEL_SENSITIVE_MODES:
        required[DOMAIN_TRANSPORT].append("fuelType")
        if answers.get("fuelType") == "electric":
            required[DOMAIN_TRANSPORT].append("evChargingSource")
    return required


def validate_onboarding(
    raw: dict[str, Any],
) -> tuple[dict[str, Any], list[str]]:
    """
    Normalise and validate a flat onboarding answer dict.

    Returns
    -------
    (normalised_dict, warnings)
    """
    warnings: list[str] = []
    d = dict(raw)

    # -- Numeric fields --
    for field in _NUMERIC_FIELDS:
        original = d.get(field)
        if original is None:
            continue
        d[field] = _to_float(original)
        if d[field] is None:
            warnings.append(f"Could not parse {field}: '{original}'")

    # -- Completeness --
    missing = [
        f"{domain}.{field}"
        for domain, fields in _required_fields(d).items()
        for field in fields
        if not _is_answered(d.get(field))
    ]
    if missing:
        warnings.append(f"Missing required fields: {', '.join(missing)}")

    # -- Diet percentages ≈ 100 --
    for field in _PERCENTAGE_FIELDS:
        if d.get(field) is None:
            d[field] = 0.0
    diet_total = sum(d[field] for field in _PERCENTAGE_FIELDS)
    if abs(diet_total - 100) > DIET_PERCENTAGE_TOLERANCE:
        warnings.append(
            f"Diet percentages must add up to approximately 100% (got {diet_total:g}%)"
        )

    if d.get("appliances") is None:
        d["appliances"] = []

    return d, warnings


def build_profile(answers: dict[str, Any]) -> Profile:
    """
    Group flat onboarding answers into a four-domain ``Profile``.

    Unanswered fields are left unset so the engine applies its defaults.
    """
    grouped: dict[str, dict[str, Any]] = {}
    for domain, fields in _DOMAIN_FIELDS.items():
        part = {f: answers[f] for f in fields if answers.get(f) is not None}
        grouped[domain] = part
    for field in _PERCENTAGE_FIELDS:
        grouped[DOMAIN_DIET].setdefault(field, 0.0)
    grouped[DOMAIN_ELECTRICITY].setdefault("appliances", [])
    return parse_profile(grouped)
