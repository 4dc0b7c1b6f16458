#!/usr/bin/env python3
"""Tests for AppState workflows."""

import pytest

from fleet import (
    AppState,
    ExpenseCategory,
    Freight,
    FuelPurchase,
    LocalStore,
    LocalStoreError,
    NotFoundError,
    RecordStoreError,
    ServiceItem,
    TripExpenses,
    TripStatus,
    ValidationError,
)
from fleet.loader import MISC_EXPENSES_KEY
from conftest import load_state


def load_state_from(state):
    """Reload everything from the same storage."""
    return AppState.load(state.store, state.records, state.profile.id)


def outbound(**kwargs):
    defaults = dict(date="2024-05-02", company="ACME", value=3000, weight_tons=10)
    defaults.update(kwargs)
    return Freight(**defaults)


class FailingStore:
    """Record store whose trip writes always fail."""

    def __init__(self, inner):
        self.inner = inner

    def get_profile(self, user_id):
        return self.inner.get_profile(user_id)

    def update_profile(self, profile):
        self.inner.update_profile(profile)

    def list_trips(self, user_id):
        return self.inner.list_trips(user_id)

    def upsert_trip(self, user_id, trip):
        raise RecordStoreError("network down")


class TestProfile:
    """Tests for profile registration."""

    def test_register(self, state):
        assert state.profile.plate == "ABC1D23"
        assert state.profile.truck_current_km == 100000
        assert load_state_from(state).profile.driver_name == "Joao Silva"

    def test_required_fields(self, tmp_path):
        state = load_state(tmp_path)
        with pytest.raises(ValidationError):
            state.register_profile("u1", "", "ABC1D23")

    def test_no_profile(self, tmp_path):
        with pytest.raises(NotFoundError):
            load_state(tmp_path).require_profile()


class TestTripWorkflow:
    """Tests for starting, updating and finishing trips."""

    def test_start_defaults_to_truck_odometer(self, state):
        trip = state.start_trip(outbound())
        assert trip.outbound.start_km == 100000
        assert trip.driver_name == "Joao Silva"
        assert trip.plate == "ABC1D23"
        assert state.active_trip.id == trip.id

    def test_only_one_active_trip(self, state):
        state.start_trip(outbound())
        with pytest.raises(ValidationError, match="already has an active trip"):
            state.start_trip(outbound())

    def test_start_requires_company_and_value(self, state):
        with pytest.raises(ValidationError):
            state.start_trip(outbound(company=" "))
        with pytest.raises(ValidationError):
            state.start_trip(outbound(value=0))

    def test_fuel_updates_odometer(self, state):
        state.start_trip(outbound())
        state.add_fuel(FuelPurchase("Posto A", arrival_km=100450, liters_diesel=200, total_cost=1200))
        assert state.current_km() == 100450
        assert load_state_from(state).profile.truck_current_km == 100450

    def test_fuel_validation(self, state):
        state.start_trip(outbound())
        with pytest.raises(ValidationError):
            state.add_fuel(FuelPurchase("", total_cost=100))
        with pytest.raises(ValidationError):
            state.add_fuel(FuelPurchase("Posto A", total_cost=0))

    def test_remove_fuel(self, state):
        state.start_trip(outbound())
        state.add_fuel(FuelPurchase("Posto A", total_cost=100))
        state.add_fuel(FuelPurchase("Posto B", total_cost=200))
        trip = state.remove_fuel(0)
        assert [f.station for f in trip.fuel] == ["Posto B"]
        with pytest.raises(NotFoundError):
            state.remove_fuel(5)

    def test_update_legs_and_expenses(self, state):
        state.start_trip(outbound())
        trip = state.update_trip(
            inbound=Freight(company="Beta", value=2000, weight_tons=5),
            expenses=TripExpenses(wash=50),
        )
        assert trip.inbound.company == "Beta"
        assert trip.cargo_weight == 15
        assert trip.expenses.total == 50

    def test_finish_absorbs_loose_expenses(self, state):
        state.start_trip(outbound())
        state.add_misc_expense(40, ExpenseCategory.FOOD, "Lunch", "2024-05-03")
        state.add_misc_expense(60, ExpenseCategory.WASH, "Wash", "2024-05-04")
        trip = state.finish_trip(101800, "2024-05-06")
        assert trip.status == TripStatus.COMPLETED
        assert len(trip.misc_expenses) == 2
        assert state.misc_expenses == []
        assert state.active_trip is None
        assert state.current_km() == 101800

    def test_finish_requires_progress(self, state):
        state.start_trip(outbound(start_km=100500))
        with pytest.raises(ValidationError, match="greater than"):
            state.finish_trip(100500)
        with pytest.raises(ValidationError):
            state.finish_trip(0)
        assert state.active_trip is not None

    def test_failed_write_keeps_state(self, state):
        trip = state.start_trip(outbound())
        state.add_misc_expense(40, ExpenseCategory.FOOD, "Lunch")
        state.records = FailingStore(state.records)

        with pytest.raises(RecordStoreError):
            state.add_fuel(FuelPurchase("Posto A", total_cost=100))
        with pytest.raises(RecordStoreError):
            state.finish_trip(101000)

        assert state.active_trip.id == trip.id
        assert state.active_trip.fuel == []
        assert state.active_trip.status == TripStatus.ACTIVE
        assert len(state.misc_expenses) == 1

    def test_failed_trip_write_restores_loose_expenses(self, state):
        state.start_trip(outbound())
        state.add_misc_expense(40, ExpenseCategory.FOOD, "Lunch")
        state.save()
        state.records = FailingStore(state.records)

        with pytest.raises(RecordStoreError):
            state.finish_trip(101000)
        assert len(state.store.get(MISC_EXPENSES_KEY)) == 1

    def test_unwritable_local_store_keeps_trip_active(self, state, tmp_path):
        trip = state.start_trip(outbound())
        state.add_misc_expense(40, ExpenseCategory.FOOD, "Lunch")
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        state.store = LocalStore(blocker / "local.yaml")

        with pytest.raises(LocalStoreError):
            state.finish_trip(101000)
        assert state.records.list_trips("u1")[0].status == TripStatus.ACTIVE
        assert state.active_trip.id == trip.id
        assert len(state.misc_expenses) == 1
        with pytest.raises(LocalStoreError):
            state.save()

    def test_finished_expenses_are_not_absorbed_again(self, state):
        state.start_trip(outbound())
        state.add_misc_expense(40, ExpenseCategory.FOOD, "Lunch")
        state.save()
        state.finish_trip(101000, "2024-05-06")

        reloaded = load_state_from(state)
        assert reloaded.misc_expenses == []
        reloaded.start_trip(outbound(date="2024-05-10"))
        assert reloaded.finish_trip(102000, "2024-05-12").misc_expenses == []

    def test_no_active_trip(self, state):
        with pytest.raises(NotFoundError):
            state.add_fuel(FuelPurchase("Posto A", total_cost=100))

    def test_get_trip_by_prefix(self, state):
        trip = state.start_trip(outbound())
        assert state.get_trip(trip.id[:8]) is state.trips[0]
        with pytest.raises(NotFoundError):
            state.get_trip("zzzz")

    def test_get_trip_rejects_empty_and_ambiguous_ids(self, state):
        state.start_trip(outbound())
        state.finish_trip(101000, "2024-05-06")
        state.start_trip(outbound(date="2024-05-10"))
        first, second = state.trips
        first.id = "abc1" + first.id[4:]
        second.id = "abc2" + second.id[4:]
        with pytest.raises(ValidationError):
            state.get_trip("")
        with pytest.raises(ValidationError, match="matches 2"):
            state.get_trip("abc")
        assert state.get_trip("abc2") is second


class TestLocalCollections:
    """Tests for loose expenses, names, tires and maintenance persistence."""

    def test_misc_expense_validation(self, state):
        with pytest.raises(ValidationError):
            state.add_misc_expense(0)

    def test_delete_misc_expense(self, state):
        expense = state.add_misc_expense(25, description="Coffee")
        assert state.delete_misc_expense(expense.id[:6]) is expense
        assert state.misc_expenses == []
        with pytest.raises(NotFoundError):
            state.delete_misc_expense("missing")

    def test_delete_misc_expense_ambiguous_prefix(self, state):
        first = state.add_misc_expense(25, description="Coffee")
        second = state.add_misc_expense(30, description="Lunch")
        first.id = "ff01" + first.id[4:]
        second.id = "ff02" + second.id[4:]
        with pytest.raises(ValidationError):
            state.delete_misc_expense("ff0")
        with pytest.raises(ValidationError):
            state.delete_misc_expense("  ")
        assert len(state.misc_expenses) == 2

    def test_names_deduplicated(self, state):
        state.add_station("Posto A")
        state.add_station(" posto a ")
        state.add_company("ACME")
        assert state.stations == ["Posto A"]
        with pytest.raises(ValidationError):
            state.add_company("")

    def test_save_and_reload(self, state):
        state.add_misc_expense(25, ExpenseCategory.TIPS, "Coffee")
        state.add_station("Posto A")
        state.rack.assign("steer-left", "Michelin", "A1", install_date="2024-01-01", install_km=100000)
        state.rack.rotate("steer-left", "spare-1", "2024-02-01", 105000)
        state.record_service(ServiceItem.ENGINE_OIL, 105000, "2024-02-01")
        state.save()

        reloaded = load_state_from(state)
        assert reloaded.misc_expenses[0].category == ExpenseCategory.TIPS
        assert reloaded.stations == ["Posto A"]
        tire = reloaded.rack.get("spare-1")
        assert [s.end for s in tire.position_history] == [105000, None]
        assert reloaded.filters.get(ServiceItem.ENGINE_OIL).install_km == 105000

    def test_unsaved_changes_are_not_persisted(self, state):
        state.add_station("Posto A")
        assert load_state_from(state).stations == []

    def test_record_service_defaults_to_current_km(self, state):
        state.record_service(ServiceItem.AIR_FILTER)
        assert state.filters.get(ServiceItem.AIR_FILTER).install_km == 100000
