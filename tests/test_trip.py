#!/usr/bin/env python3
"""Tests for trip records."""

from fleet import Freight, FuelPurchase, Trip, TripExpenses, TripStatus


class TestFreight:
    """Tests for Freight totals."""

    def test_total_advances(self):
        leg = Freight(advance=500, advance_diesel=300, advance_maintenance=50)
        assert leg.total_advances == 850

    def test_balance(self):
        leg = Freight(value=3000, advance=500)
        assert leg.balance == 2500

    def test_missing_values_count_as_zero(self):
        leg = Freight(advance=None, advance_diesel=None, advance_maintenance=None)
        assert leg.total_advances == 0


class TestTripExpenses:
    """Tests for TripExpenses.total."""

    def test_sums_every_itemised_field(self):
        expenses = TripExpenses(
            tire_shop=10, binding=20, unloading=30, tip=5, wash=15, cash_toll=40, others_value=80
        )
        assert expenses.total == 200

    def test_description_is_not_a_cost(self):
        assert TripExpenses(others_desc="Parking").total == 0


class TestTrip:
    """Tests for Trip."""

    def test_new_trip_is_active(self):
        trip = Trip(driver_name="Joao", plate="ABC1D23")
        assert trip.status == TripStatus.ACTIVE
        assert trip.is_active
        assert trip.id
        assert trip.created_at

    def test_cargo_weight_over_both_legs(self):
        trip = Trip(
            driver_name="Joao",
            plate="ABC1D23",
            outbound=Freight(weight_tons=10),
            inbound=Freight(weight_tons=6.5),
        )
        assert trip.cargo_weight == 16.5

    def test_highest_odometer(self):
        trip = Trip(
            driver_name="Joao",
            plate="ABC1D23",
            outbound=Freight(start_km=100000),
            fuel=[FuelPurchase("A", arrival_km=100400), FuelPurchase("B", arrival_km=100900)],
        )
        assert trip.highest_odometer == 100900
        trip.end_km = 101200
        assert trip.highest_odometer == 101200
