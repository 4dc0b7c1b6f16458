#!/usr/bin/env python3
"""Tests for the Flask web app."""

import io
import json

import pytest

from fleet import ExpenseCategory, Freight, FuelPurchase, ServiceItem, Settings
from web.app import app, format_money
from conftest import load_state


@pytest.fixture
def client(tmp_path):
    app.config["TESTING"] = True
    app.config["SETTINGS"] = Settings(data_dir=tmp_path, user_id="u1")
    with app.test_client() as client:
        yield client


@pytest.fixture
def state(tmp_path, client):
    state = load_state(tmp_path)
    state.register_profile("u1", "Joao Silva", "ABC1D23", truck_initial_km=100000)
    return state


class TestFilters:
    """Tests for template filters."""

    def test_format_money(self):
        assert format_money(-300) == "-$300.00"
        assert format_money(None) == "-"


class TestPages:
    """Tests for the read-only pages."""

    def test_dashboard_without_profile(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert b"No driver profile yet" in response.data

    def test_dashboard_with_active_trip(self, client, state):
        state.start_trip(Freight(date="2024-05-02", company="ACME", value=3000))
        response = client.get("/")
        assert b"Active trip (ACME)" in response.data
        assert b"$3,000.00" in response.data

    def test_reports(self, client, state):
        state.start_trip(Freight(date="2024-05-02", company="ACME", value=3000, destinations="Santos"))
        state.add_fuel(FuelPurchase("Posto A", arrival_km=100400, liters_diesel=200, total_cost=900))
        state.finish_trip(101000, "2024-05-06")
        response = client.get("/reports?period=all")
        assert response.status_code == 200
        assert b"Santos" in response.data
        assert b"Trip start -&gt; Posto A" in response.data

    def test_reports_unknown_period(self, client, state):
        response = client.get("/reports?period=daily")
        assert response.status_code == 200
        assert b"Unknown period" in response.data

    def test_tires(self, client, state):
        state.rack.assign("steer-left", "Michelin", "A1", install_km=100000)
        state.save()
        response = client.get("/tires")
        assert b"Michelin A1" in response.data
        assert b"No retired tires" in response.data

    def test_maintenance(self, client, state):
        response = client.get("/maintenance")
        assert response.status_code == 200
        assert b"Engine oil and oil filter" in response.data


class TestForms:
    """Tests for the form handlers."""

    def test_add_expense(self, client, state, tmp_path):
        response = client.post(
            "/expenses",
            data={"value": "45.50", "category": "FOOD", "description": "Lunch", "date": "2024-05-03"},
            follow_redirects=True,
        )
        assert b"Saved expense" in response.data
        expense = load_state(tmp_path).misc_expenses[0]
        assert expense.category == ExpenseCategory.FOOD
        assert expense.value == 45.5

    def test_add_expense_invalid_value(self, client, state, tmp_path):
        response = client.post("/expenses", data={"value": "abc"}, follow_redirects=True)
        assert b"Invalid expense value" in response.data
        assert load_state(tmp_path).misc_expenses == []

    def test_add_expense_rejected_by_domain(self, client, state):
        response = client.post("/expenses", data={"value": "0"}, follow_redirects=True)
        assert b"must be positive" in response.data

    def test_unwritable_data_dir_is_flashed(self, client, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        app.config["SETTINGS"] = Settings(data_dir=blocker, user_id="u1")
        response = client.post("/expenses", data={"value": "10"}, follow_redirects=True)
        assert response.status_code == 200
        assert b"Could not save local data" in response.data

    def test_record_service(self, client, state, tmp_path):
        response = client.post(
            "/maintenance",
            data={"item": "engineOil", "km": "100500", "date": "2024-05-01"},
            follow_redirects=True,
        )
        assert b"Recorded service: Engine oil" in response.data
        assert load_state(tmp_path).filters.get(ServiceItem.ENGINE_OIL).install_km == 100500

    def test_record_service_requires_item(self, client, state):
        response = client.post("/maintenance", data={}, follow_redirects=True)
        assert b"Please select an item" in response.data


class TestBackup:
    """Tests for export and import endpoints."""

    def test_export(self, client, state):
        state.add_misc_expense(20, description="Coffee")
        state.save()
        response = client.get("/export")
        assert response.mimetype == "application/json"
        assert "attachment" in response.headers["Content-Disposition"]
        assert json.loads(response.data)["expenses"][0]["description"] == "Coffee"

    def test_import(self, client, state, tmp_path):
        backup = {"expenses": [{"id": "e1", "date": "2024-05-03", "category": "Wash", "value": 80}]}
        response = client.post(
            "/import",
            data={"backup": (io.BytesIO(json.dumps(backup).encode()), "backup.json")},
            content_type="multipart/form-data",
            follow_redirects=True,
        )
        assert b"Backup imported (0 trips)" in response.data
        assert load_state(tmp_path).misc_expenses[0].category == ExpenseCategory.WASH

    def test_import_invalid(self, client, state):
        response = client.post(
            "/import",
            data={"backup": (io.BytesIO(b"{oops"), "backup.json")},
            content_type="multipart/form-data",
            follow_redirects=True,
        )
        assert b"not valid JSON" in response.data

    def test_import_without_file(self, client, state):
        response = client.post("/import", data={}, follow_redirects=True)
        assert b"Please choose a backup file" in response.data
