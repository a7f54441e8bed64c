"""
Unit tests for footprint/calculations.py

Expected values are recorded outputs of the default factor set; each test
comment shows the arithmetic so a factor change is easy to trace.
"""
import pytest

from footprint.calculations import (
    Breakdown,
    CarbonResult,
    aggregate,
    avoided_carbon_from_steps,
    calc_diet_cf,
    calc_electricity_cf,
    calc_lifestyle_cf,
    calc_transport_cf,
    compute_footprint,
    compute_override,
    merge_profiles,
    round2,
    walking_distance_km,
)
from footprint.emission_factors import DEFAULT_REGISTRY
from footprint.schemas import (
    DietProfile,
    ElectricityProfile,
    InvalidProfileFieldError,
    LifestyleProfile,
    TransportProfile,
)


BASELINE = {
    "transport": {
        "primaryMode": "personal_car",
        "fuelType": "diesel",
        "dailyDistance": "16_30km",
        "passengers": "alone",
        "flightsPerYear": "0",
    },
    "diet": {
        "mealsPerDay": 3,
        "meatPercentage": 50,
        "dairyPercentage": 30,
        "plantPercentage": 20,
        "orderedMealsFreq": "3_5_week",
        "junkFoodFreq": "few_times_week",
        "foodWaste": "sometimes",
    },
    "electricity": {
        "monthlyKwh": 300,
        "householdSize": 3,
        "timeAtHome": "9_12_hours",
        "appliances": ["air_conditioner", "refrigerator"],
        "renewableEnergy": "no_renewable",
    },
    "lifestyle": {
        "screenTime": "4_6hrs",
        "nonEssentialShopping": "monthly",
        "fashionShopping": "every_1_2_months",
        "onlineOrders": "6_10",
        "wasteManagement": "recycle_some",
    },
}


def transport(**kwargs):
    return TransportProfile(**kwargs)


# ─────────────────────────────────────────────────────────────────────────────
# 1. round2
# ─────────────────────────────────────────────────────────────────────────────

class TestRound2:

    def test_rounds_to_two_decimals(self):
        assert round2(11.80245) == 11.8
        assert round2(0.7497) == 0.75

    def test_rounds_exact_binary_value_half_up(self):
        # 1.005 is stored as 1.00499999…, so it rounds down
        assert round2(1.005) == 1.0
        assert round2(0.125) == 0.13

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_raises(self, bad):
        with pytest.raises(InvalidProfileFieldError):
            round2(bad, "diet")


# ─────────────────────────────────────────────────────────────────────────────
# 2. Transport
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcTransportCF:

    def test_diesel_car_reference_value(self):
        # 4.5 base × 1.15 diesel × 4.0 (16–30 km) × 1.0 alone
        t = transport(
            primary_mode="personal_car", fuel_type="diesel",
            daily_distance="16_30km", passengers="alone",
        )
        assert calc_transport_cf(t) == 20.7

    def test_bicycle_ignores_fuel_mileage_and_distance(self):
        t = transport(
            primary_mode="bicycle", fuel_type="diesel", mileage="low",
            ev_charging_source="home_grid", daily_distance="51plus_km", passengers="alone",
        )
        assert calc_transport_cf(t) == 0.0

    def test_bicycle_alone(self):
        assert calc_transport_cf(transport(primary_mode="bicycle")) == 0.0

    def test_bus_ignores_fuel_type(self):
        # 1.5 × 6.0 (31–50 km) × 0.3 shared
        with_fuel = transport(
            primary_mode="bus", fuel_type="diesel", mileage="low",
            daily_distance="31_50km", passengers="shared_public",
        )
        without_fuel = transport(
            primary_mode="bus", daily_distance="31_50km", passengers="shared_public",
        )
        assert calc_transport_cf(with_fuel) == 2.7
        assert calc_transport_cf(without_fuel) == 2.7

    def test_electric_car_applies_charging_and_mileage(self):
        # 4.5 × 0.4 electric × 0.2 renewable × 0.5 excellent × 2.5 × 0.6
        t = transport(
            primary_mode="personal_car", fuel_type="electric",
            ev_charging_source="renewable", mileage="excellent",
            daily_distance="6_15km", passengers="one_passenger",
        )
        assert calc_transport_cf(t) == 0.27

    def test_charging_source_ignored_for_petrol(self):
        t = transport(
            primary_mode="personal_car", fuel_type="petrol",
            ev_charging_source="renewable", daily_distance="0_5km",
        )
        assert calc_transport_cf(t) == 4.5

    def test_low_mileage_increases_emissions(self):
        # 4.5 × 1.0 petrol × 1.3 low mileage
        t = transport(primary_mode="personal_car", fuel_type="petrol", mileage="low")
        assert calc_transport_cf(t) == 5.85

    def test_not_sure_mileage_is_neutral(self):
        # 2.0 × 1.0 × 1.0 × 2.5
        t = transport(
            primary_mode="two_wheeler", fuel_type="petrol",
            mileage="not_sure", daily_distance="6_15km", passengers="alone",
        )
        assert calc_transport_cf(t) == 5.0

    def test_unknown_fuel_type_is_neutral(self):
        t = transport(primary_mode="personal_car", fuel_type="hydrogen", daily_distance="0_5km")
        assert calc_transport_cf(t) == 4.5

    def test_unknown_mode_contributes_no_ground_travel(self):
        t = transport(primary_mode="teleport", fuel_type="diesel", daily_distance="51plus_km")
        assert calc_transport_cf(t) == 0.0

    def test_flights_are_additive(self):
        t = transport(primary_mode="work_from_home", flights_per_year="1_2")
        assert calc_transport_cf(t) == 8.5

    def test_flights_counted_for_unknown_mode(self):
        assert calc_transport_cf(transport(primary_mode="teleport", flights_per_year="3_5")) == 21.0

    def test_integer_flight_band(self):
        t = transport(primary_mode="bus", flights_per_year=0)
        assert calc_transport_cf(t) == 1.5

    def test_keys_are_case_insensitive(self):
        t = transport(primary_mode="Personal_Car", fuel_type=" DIESEL ", daily_distance="16_30KM")
        assert calc_transport_cf(t) == 20.7

    def test_empty_profile_is_zero(self):
        assert calc_transport_cf(TransportProfile()) == 0.0


# ─────────────────────────────────────────────────────────────────────────────
# 3. Diet
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcDietCF:

    def test_full_profile(self):
        # per meal: 0.5×4.5 + 0.3×1.2 + 0.2×0.5 = 2.71; × 3 = 8.13
        # + 0.6 ordered/day × 2.0 = 9.33; × 1.1 junk × 1.15 waste = 11.80245
        diet = DietProfile.model_validate(BASELINE["diet"])
        assert calc_diet_cf(diet) == 11.8

    def test_percentages_are_not_renormalised(self):
        # 100% meat + 100% dairy: 4.5 + 1.2
        diet = DietProfile(meals_per_day=1, meat_percentage=100, dairy_percentage=100, plant_percentage=0)
        assert calc_diet_cf(diet) == 5.7

    def test_plant_based(self):
        diet = DietProfile(meals_per_day=2, plant_percentage=100)
        assert calc_diet_cf(diet) == 1.0

    def test_unknown_frequencies_are_neutral(self):
        diet = DietProfile(
            meals_per_day=2, plant_percentage=100,
            junk_food_freq="always", food_waste="constantly", ordered_meals_freq="hourly",
        )
        assert calc_diet_cf(diet) == 1.0

    def test_multipliers_never_reduce(self):
        base = DietProfile(meals_per_day=3, meat_percentage=100)
        for junk in ("daily", "few_times_week", "occasionally", "rarely_never"):
            for waste in ("never", "rarely", "sometimes", "often"):
                d = base.model_copy(update={"junk_food_freq": junk, "food_waste": waste})
                assert calc_diet_cf(d) >= calc_diet_cf(base)

    def test_ordered_meals_only(self):
        # 1.8 meals/day × 2.0
        assert calc_diet_cf(DietProfile(ordered_meals_freq="10_15_week")) == 3.6

    def test_empty_profile_is_zero(self):
        assert calc_diet_cf(DietProfile()) == 0.0


# ─────────────────────────────────────────────────────────────────────────────
# 4. Electricity
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcElectricityCF:

    def test_full_profile(self):
        # 300 × 0.9 ÷ 3 × 0.9 = 81; appliances (60 + 40) × 0.9 = 90; 171 ÷ 30
        e = ElectricityProfile.model_validate(BASELINE["electricity"])
        assert calc_electricity_cf(e) == 5.7

    @pytest.mark.parametrize("source", ["not_sure", None, "unknown_source"])
    def test_unknown_source_uses_grid_factor(self, source):
        data = dict(BASELINE["electricity"], renewableEnergy=source)
        assert calc_electricity_cf(ElectricityProfile.model_validate(data)) == 5.7

    def test_mostly_renewable(self):
        # 300 × 0.1 ÷ 3 × 0.9 = 9; appliances 100 × 0.1 = 10; 19 ÷ 30
        data = dict(BASELINE["electricity"], renewableEnergy="mostly_renewable")
        assert calc_electricity_cf(ElectricityProfile.model_validate(data)) == 0.63

    def test_banded_estimate_when_kwh_missing(self):
        # 300 kWh × 0.9 ÷ 30
        e = ElectricityProfile(monthly_kwh_estimate="200_400", renewable_energy="no_renewable")
        assert calc_electricity_cf(e) == 9.0

    def test_exact_kwh_wins_over_estimate(self):
        e = ElectricityProfile(monthly_kwh=0, monthly_kwh_estimate="600plus")
        assert calc_electricity_cf(e) == 0.0

    def test_appliances_counted_once(self):
        # 30 kWh × 0.9 ÷ 30
        e = ElectricityProfile(appliances=["geyser", "geyser"])
        assert calc_electricity_cf(e) == 0.9

    def test_unknown_appliance_adds_nothing(self):
        e = ElectricityProfile(appliances=["hot_tub"])
        assert calc_electricity_cf(e) == 0.0

    def test_missing_household_size_counts_as_one(self):
        # 150 × 0.5 ÷ 30
        e = ElectricityProfile(monthly_kwh=150, renewable_energy="partially_renewable")
        assert calc_electricity_cf(e) == 2.5

    def test_zero_household_size_does_not_divide_by_zero(self):
        e = ElectricityProfile(monthly_kwh=150, household_size=0, renewable_energy="partially_renewable")
        assert calc_electricity_cf(e) == 2.5

    def test_time_at_home_scales_household_share(self):
        low = ElectricityProfile(monthly_kwh=300, time_at_home="4_hours_less")
        high = ElectricityProfile(monthly_kwh=300, time_at_home="12plus_hours")
        assert calc_electricity_cf(low) == 4.5
        assert calc_electricity_cf(high) == 9.0

    def test_null_appliances_count_as_none(self):
        # 300 × 0.9 ÷ 1 ÷ 30
        result = compute_footprint(
            {"electricity": {"monthlyKwh": 300, "householdSize": 1, "appliances": None}}
        )
        assert result.breakdown.electricity == 9.0


# ─────────────────────────────────────────────────────────────────────────────
# 5. Lifestyle
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcLifestyleCF:

    def test_full_profile(self):
        # (3 × 4.33 + 3 + 5 + 4) × 0.9 ÷ 30 = 0.7497
        lifestyle = LifestyleProfile.model_validate(BASELINE["lifestyle"])
        assert calc_lifestyle_cf(lifestyle) == 0.75

    def test_heavy_consumer_without_recycling(self):
        # (4 × 4.33 + 10 + 8 + 8) × 1.1 ÷ 30 = 1.5884
        lifestyle = LifestyleProfile(
            screen_time="6plus_hrs", non_essential_shopping="weekly",
            fashion_shopping="more_once_month", online_orders="15plus",
            waste_management="throw_everything",
        )
        assert calc_lifestyle_cf(lifestyle) == 1.59

    def test_integer_zero_orders(self):
        assert calc_lifestyle_cf(LifestyleProfile(online_orders=0)) == 0.0

    def test_recycling_reduces(self):
        base = LifestyleProfile(screen_time="6plus_hrs", non_essential_shopping="weekly")
        recycled = base.model_copy(update={"waste_management": "recycle_compost"})
        assert calc_lifestyle_cf(recycled) < calc_lifestyle_cf(base)

    def test_empty_profile_is_zero(self):
        assert calc_lifestyle_cf(LifestyleProfile()) == 0.0


# ─────────────────────────────────────────────────────────────────────────────
# 6. Aggregation
# ─────────────────────────────────────────────────────────────────────────────

class TestComputeFootprint:

    def test_full_profile(self):
        result = compute_footprint(BASELINE)

        assert isinstance(result, CarbonResult)
        assert result.breakdown == Breakdown(
            transport=20.7, diet=11.8, electricity=5.7, lifestyle=0.75,
        )
        assert result.total == 38.95
        assert result.unit == "kg CO2e per day"

    def test_total_within_rounding_slack_of_breakdown(self):
        result = compute_footprint(BASELINE)
        assert abs(result.total - sum(result.breakdown.values())) <= 0.02

    def test_breakdown_non_negative(self):
        result = compute_footprint(BASELINE)
        assert all(v >= 0 for v in result.breakdown.values())
        assert result.total >= 0

    def test_partial_profile(self):
        result = compute_footprint({"transport": {"primaryMode": "bus"}})
        assert result.breakdown == Breakdown(transport=1.5)
        assert result.total == 1.5

    def test_empty_profile(self):
        result = compute_footprint({})
        assert result.total == 0.0
        assert result.breakdown == Breakdown()

    def test_idempotent(self):
        assert compute_footprint(BASELINE) == compute_footprint(BASELINE)

    def test_does_not_mutate_input(self):
        snapshot = {k: dict(v) for k, v in BASELINE.items()}
        compute_footprint(BASELINE)
        assert BASELINE == snapshot

    def test_to_dict(self):
        d = compute_footprint({"transport": {"primaryMode": "bus"}}).to_dict()
        assert d == {
            "total": 1.5,
            "breakdown": {"transport": 1.5, "diet": 0.0, "electricity": 0.0, "lifestyle": 0.0},
            "unit": "kg CO2e per day",
        }

    def test_non_numeric_kwh_raises(self):
        with pytest.raises(InvalidProfileFieldError) as exc_info:
            compute_footprint({"electricity": {"monthlyKwh": "lots"}})
        assert any("monthlyKwh" in f for f in exc_info.value.fields)

    def test_nan_kwh_raises(self):
        with pytest.raises(InvalidProfileFieldError):
            compute_footprint({"electricity": {"monthlyKwh": float("nan")}})

    def test_substituted_registry(self):
        registry = DEFAULT_REGISTRY.with_overrides({"transport": {"fuel_type": {"diesel": 2.0}}})
        result = compute_footprint(BASELINE, registry)
        # 4.5 × 2.0 × 4.0
        assert result.breakdown.transport == 36.0
        assert compute_footprint(BASELINE).breakdown.transport == 20.7

    def test_aggregate_sums_rounded_values(self):
        result = aggregate(Breakdown(transport=0.01, diet=0.02, electricity=0.03, lifestyle=0.04))
        assert result.total == 0.1


# ─────────────────────────────────────────────────────────────────────────────
# 7. Override composition
# ─────────────────────────────────────────────────────────────────────────────

class TestComputeOverride:

    def test_empty_override_equals_baseline(self):
        assert compute_override(BASELINE, {}) == compute_footprint(BASELINE)

    def test_empty_domain_override_equals_baseline(self):
        assert compute_override(BASELINE, {"diet": {}}) == compute_footprint(BASELINE)

    def test_override_is_field_local(self):
        # metro: 0.8 × 4.0 (baseline distance kept) × 1.0
        result = compute_override(BASELINE, {"transport": {"primaryMode": "metro_train"}})
        assert result.breakdown.transport == 3.2
        assert result.breakdown.diet == 11.8
        assert result.total == pytest.approx(21.45)

    def test_baseline_not_mutated(self):
        baseline = compute_footprint(BASELINE)
        compute_override(BASELINE, {"transport": {"primaryMode": "bicycle"}})
        assert compute_footprint(BASELINE) == baseline
        assert BASELINE["transport"]["primaryMode"] == "personal_car"

    def test_override_adds_missing_domain(self):
        result = compute_override({"transport": {"primaryMode": "bus"}}, {"diet": {"mealsPerDay": 2, "plantPercentage": 100}})
        assert result.breakdown.transport == 1.5
        assert result.breakdown.diet == 1.0

    def test_merge_profiles_keeps_baseline_fields(self):
        merged = merge_profiles(BASELINE, {"electricity": {"renewableEnergy": "mostly_renewable"}})
        assert merged.electricity.monthly_kwh == 300
        assert merged.electricity.renewable_energy == "mostly_renewable"
        assert merged.electricity.appliances == ["air_conditioner", "refrigerator"]

    def test_explicit_null_override_wins(self):
        # appliances cleared: 300 × 0.9 ÷ 3 × 0.9 ÷ 30
        result = compute_override(BASELINE, {"electricity": {"appliances": None}})
        assert result.breakdown.electricity == 2.7
        assert result.breakdown.transport == 20.7


# ─────────────────────────────────────────────────────────────────────────────
# 8. Walking offset
# ─────────────────────────────────────────────────────────────────────────────

class TestWalkingOffset:

    def test_ten_thousand_steps(self):
        assert avoided_carbon_from_steps(10000) == round(10000 * 0.762 / 1000 * 0.21, 2)
        assert avoided_carbon_from_steps(10000) == 1.6

    def test_zero_steps(self):
        assert avoided_carbon_from_steps(0) == 0.0
        assert avoided_carbon_from_steps(None) == 0.0

    def test_distance(self):
        assert walking_distance_km(10000) == 8.0

    def test_non_numeric_steps_raise(self):
        with pytest.raises(InvalidProfileFieldError):
            avoided_carbon_from_steps("many")
