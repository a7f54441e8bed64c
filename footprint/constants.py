"""
constants.py – Shared labels, units, thresholds, and limits.
"""

# ── Domains ───────────────────────────────────────────────────
DOMAIN_TRANSPORT = "transport"
DOMAIN_DIET = "diet"
DOMAIN_ELECTRICITY = "electricity"
DOMAIN_LIFESTYLE = "lifestyle"

DOMAINS = [
    DOMAIN_TRANSPORT,
    DOMAIN_DIET,
    DOMAIN_ELECTRICITY,
    DOMAIN_LIFESTYLE,
]

# ── Units and time conversions ────────────────────────────────
RESULT_UNIT = "kg CO2e per day"
DAYS_PER_MONTH = 30
WEEKS_PER_MONTH = 4.33

# ── Walking offset ────────────────────────────────────────────
STEP_LENGTH_M = 0.762
CAR_KG_CO2E_PER_KM = 0.21
# Distance recorded alongside a daily log's step count
KM_PER_STEP = 0.0008

# ── Categorizer thresholds (upper bounds, exclusive) ──────────
CATEGORY_SCHEME_FOOTPRINT = "footprint"
CATEGORY_SCHEME_IMPACT = "impact"

CATEGORY_SCHEMES = {
    CATEGORY_SCHEME_FOOTPRINT: [
        (5.0, "Low"),
        (15.0, "Moderate"),
        (25.0, "High"),
        (None, "Very High"),
    ],
    CATEGORY_SCHEME_IMPACT: [
        (10.0, "Low Impact"),
        (20.0, "Moderate Impact"),
        (30.0, "High Impact"),
        (None, "Very High Impact"),
    ],
}
DEFAULT_CATEGORY_SCHEME = CATEGORY_SCHEME_FOOTPRINT

# ── Recommendations ───────────────────────────────────────────
RECOMMENDATION_LIMIT = 5

# ── Onboarding validation ─────────────────────────────────────
# Allowed absolute difference between the diet percentage sum and 100
DIET_PERCENTAGE_TOLERANCE = 5.0

FUEL_SENSITIVE_MODES = {"personal_car", "two_wheeler"}

ONBOARDING_REQUIRED_FIELDS = {
    DOMAIN_TRANSPORT: ["primaryMode", "dailyDistance", "passengers", "flightsPerYear"],
    DOMAIN_DIET: [
        "mealsPerDay",
        "meatPercentage",
        "dairyPercentage",
        "plantPercentage",
        "orderedMealsFreq",
        "junkFoodFreq",
        "foodWaste",
    ],
    DOMAIN_ELECTRICITY: ["householdSize", "timeAtHome", "appliances", "renewableEnergy"],
    DOMAIN_LIFESTYLE: [
        "screenTime",
        "nonEssentialShopping",
        "fashionShopping",
        "onlineOrders",
        "wasteManagement",
    ],
}

# ── Config defaults ───────────────────────────────────────────
DEFAULT_LOG_LEVEL = "INFO"
