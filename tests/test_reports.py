#!/usr/bin/env python3
"""Tests for trip reports."""

from datetime import date

import pytest

from fleet import (
    Freight,
    FuelPurchase,
    MiscExpense,
    ExpenseCategory,
    Trip,
    TripExpenses,
    TripStatus,
    active_trip_stats,
    filter_trips,
    route_segments,
    summarize_trip,
)
from fleet.reports import TRIP_START


def make_trip(fuel=None, weight_out=0, weight_in=0, plate="ABC1D23", status=TripStatus.COMPLETED, **kwargs):
    return Trip(
        driver_name="Joao",
        plate=plate,
        outbound=Freight(date="2024-05-02", company="ACME", weight_tons=weight_out, **kwargs),
        inbound=Freight(weight_tons=weight_in),
        fuel=fuel or [],
        status=status,
    )


@pytest.fixture
def settled_trip():
    """Two legs, 900 of fuel and 200 of expenses."""
    return Trip(
        driver_name="Joao",
        plate="ABC1D23",
        outbound=Freight(
            date="2024-05-02", company="ACME", value=3000, advance=500, advance_diesel=300,
            start_km=100000,
        ),
        inbound=Freight(company="Beta", value=2000, advance=500, advance_diesel=300),
        fuel=[
            FuelPurchase("Posto A", arrival_km=100400, liters_diesel=100, total_cost=500),
            FuelPurchase("Posto B", arrival_km=100900, liters_diesel=80, total_cost=400),
        ],
        expenses=TripExpenses(unloading=150, tip=50),
        status=TripStatus.COMPLETED,
        end_date="2024-05-06",
        end_km=101800,
    )


class TestSummarizeTrip:
    """Tests for summarize_trip."""

    def test_settlement(self, settled_trip):
        summary = summarize_trip(settled_trip)
        assert summary.total_advances == 1600
        assert summary.total_fuel_cost == 900
        assert summary.total_expenses == 200
        assert summary.settlement == 500
        assert not summary.driver_owes

    def test_net_profit(self, settled_trip):
        summary = summarize_trip(settled_trip, 0.13)
        assert summary.total_freight == 5000
        assert summary.commission == pytest.approx(650)
        assert summary.net_profit == pytest.approx(3250)

    def test_toll_tag_adds_to_commission_base(self, settled_trip):
        settled_trip.outbound.toll_tag = 1000
        assert summarize_trip(settled_trip, 0.13).commission == pytest.approx(780)

    def test_driver_owes_on_negative_settlement(self, settled_trip):
        settled_trip.expenses = TripExpenses(others_value=1000)
        summary = summarize_trip(settled_trip)
        assert summary.settlement == -300
        assert summary.driver_owes

    def test_absorbed_loose_expenses_count(self, settled_trip):
        settled_trip.misc_expenses = [
            MiscExpense("2024-05-03", ExpenseCategory.FOOD, "Lunch", 40),
        ]
        assert summarize_trip(settled_trip).total_expenses == 240

    def test_distance_and_average(self, settled_trip):
        summary = summarize_trip(settled_trip)
        assert summary.total_km == 1800
        assert summary.total_liters_diesel == 180
        assert summary.avg_km_per_liter == pytest.approx(10.0)

    def test_no_diesel_average_is_zero(self):
        assert summarize_trip(make_trip()).avg_km_per_liter == 0.0


class TestRouteSegments:
    """Tests for route_segments."""

    @pytest.fixture
    def history(self):
        past = make_trip(
            fuel=[
                FuelPurchase("A", liters_diesel=120),
                FuelPurchase("B", liters_diesel=50),
            ],
            weight_out=10,
        )
        return [past]

    def test_target_scaled_by_weight(self, history):
        current = make_trip(
            fuel=[FuelPurchase("A", liters_diesel=100), FuelPurchase("B", liters_diesel=45)],
            weight_out=8,
            status=TripStatus.ACTIVE,
        )
        segments = route_segments(current, history + [current], margin=1.0)
        assert [s.label for s in segments] == [f"{TRIP_START} -> A", "A -> B"]
        ab = segments[1]
        assert ab.target_liters == pytest.approx(40)
        assert ab.deviation == pytest.approx(5)
        assert ab.is_inefficient

    def test_under_target_not_flagged(self, history):
        current = make_trip(
            fuel=[FuelPurchase("A", liters_diesel=100), FuelPurchase("B", liters_diesel=38)],
            weight_out=8,
        )
        ab = route_segments(current, history, margin=1.0)[1]
        assert ab.deviation == pytest.approx(-2)
        assert not ab.is_inefficient

    def test_within_margin_not_flagged(self, history):
        current = make_trip(fuel=[FuelPurchase("A"), FuelPurchase("B", liters_diesel=40.5)], weight_out=8)
        assert not route_segments(current, history, margin=1.0)[1].is_inefficient

    def test_no_history_means_no_target(self):
        current = make_trip(fuel=[FuelPurchase("A", liters_diesel=100)], weight_out=8)
        segment = route_segments(current, [current])[0]
        assert segment.target_liters == 0
        assert segment.deviation == 0
        assert not segment.is_inefficient

    def test_other_plates_ignored(self, history):
        history[0].plate = "XYZ9Z99"
        current = make_trip(fuel=[FuelPurchase("A"), FuelPurchase("B", liters_diesel=45)], weight_out=8)
        assert route_segments(current, history)[1].target_liters == 0

    def test_active_history_trips_ignored(self, history):
        history[0].status = TripStatus.ACTIVE
        current = make_trip(fuel=[FuelPurchase("A"), FuelPurchase("B", liters_diesel=45)], weight_out=8)
        assert route_segments(current, history)[1].target_liters == 0

    def test_averages_several_samples(self, history):
        second = make_trip(fuel=[FuelPurchase("A"), FuelPurchase("B", liters_diesel=70)], weight_out=10)
        current = make_trip(fuel=[FuelPurchase("A"), FuelPurchase("B", liters_diesel=45)], weight_out=8)
        segment = route_segments(current, history + [second])[1]
        assert segment.target_liters == pytest.approx(48)


class TestFilterTrips:
    """Tests for filter_trips."""

    @pytest.fixture
    def trips(self):
        dates = ["2024-05-20", "2024-05-02", "2024-03-15", "2023-12-30"]
        trips = []
        for d in dates:
            trip = make_trip()
            trip.outbound.date = d
            trips.append(trip)
        return trips

    def test_weekly(self, trips):
        found = filter_trips(trips, "weekly", today=date(2024, 5, 22))
        assert [t.outbound.date for t in found] == ["2024-05-20"]

    def test_monthly(self, trips):
        found = filter_trips(trips, "monthly", today=date(2024, 5, 22))
        assert [t.outbound.date for t in found] == ["2024-05-20", "2024-05-02"]

    def test_yearly(self, trips):
        found = filter_trips(trips, "yearly", today=date(2024, 5, 22))
        assert len(found) == 3

    def test_all_newest_first(self, trips):
        found = filter_trips(list(reversed(trips)), "all")
        assert [t.outbound.date for t in found] == [
            "2024-05-20", "2024-05-02", "2024-03-15", "2023-12-30",
        ]

    def test_active_trips_excluded(self, trips):
        trips[0].status = TripStatus.ACTIVE
        assert len(filter_trips(trips, "all")) == 3

    def test_unknown_period(self, trips):
        with pytest.raises(ValueError):
            filter_trips(trips, "daily")


class TestActiveTripStats:
    """Tests for active_trip_stats."""

    def test_no_trip(self):
        stats = active_trip_stats(None, [])
        assert stats.freight == 0
        assert stats.percent_spent == 0

    def test_running_totals(self, settled_trip):
        loose = [
            MiscExpense("2024-05-03", ExpenseCategory.FOOD, "Lunch", 100),
            MiscExpense("2024-04-20", ExpenseCategory.WASH, "Before the trip", 999),
        ]
        stats = active_trip_stats(settled_trip, loose)
        assert stats.freight == 5000
        assert stats.fuel_cost == 900
        assert stats.expenses == 300
        assert stats.net == 3800
        assert stats.percent_spent == pytest.approx(24.0)

    def test_percent_capped(self):
        trip = make_trip(value=100)
        trip.fuel = [FuelPurchase("A", total_cost=500)]
        assert active_trip_stats(trip, []).percent_spent == 100.0
