"""Flask web application for the truck logbook."""

import json
import logging
from datetime import date
from pathlib import Path

from flask import Flask, Response, render_template, request, redirect, url_for, flash

# Add parent directory to path for fleet imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from fleet import (
    AXLE_LAYOUT,
    AppState,
    ExpenseCategory,
    FileRecordStore,
    FleetError,
    LocalStore,
    ServiceItem,
    Settings,
    Status,
    active_trip_stats,
    filter_trips,
    import_backup,
    route_segments,
    summarize_trip,
    total_run,
)
from fleet.backup import build_backup
from fleet.reports import PERIODS

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["SETTINGS"] = Settings()
app.secret_key = app.config["SETTINGS"].secret_key


def get_settings() -> Settings:
    return app.config["SETTINGS"]


def get_state() -> AppState:
    """Load a fresh application state for the request."""
    settings = get_settings()
    return AppState.load(
        LocalStore(settings.store_path),
        FileRecordStore(settings.records_path),
        settings.user_id,
    )


def format_km(km):
    """Format km with comma separator."""
    if km is None:
        return "-"
    return f"{km:,.0f}"


def format_money(value):
    """Format a monetary value, negative amounts with a leading minus."""
    if value is None:
        return "-"
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def format_liters(liters):
    if liters is None:
        return "-"
    return f"{liters:,.1f} L"


def status_color(status: Status) -> str:
    """Get Tailwind color classes for status."""
    colors = {
        Status.OVERDUE: "bg-red-100 text-red-800 border-red-200",
        Status.DUE_SOON: "bg-yellow-100 text-yellow-800 border-yellow-200",
        Status.OK: "bg-green-100 text-green-800 border-green-200",
        Status.UNKNOWN: "bg-purple-100 text-purple-800 border-purple-200",
    }
    return colors.get(status, "bg-gray-100 text-gray-800")


def status_badge_color(status: Status) -> str:
    """Get Tailwind color classes for status badge."""
    colors = {
        Status.OVERDUE: "bg-red-500 text-white",
        Status.DUE_SOON: "bg-yellow-500 text-white",
        Status.OK: "bg-green-500 text-white",
        Status.UNKNOWN: "bg-purple-500 text-white",
    }
    return colors.get(status, "bg-gray-500 text-white")


# Register template filters
app.jinja_env.filters["format_km"] = format_km
app.jinja_env.filters["format_money"] = format_money
app.jinja_env.filters["format_liters"] = format_liters
app.jinja_env.filters["status_color"] = status_color
app.jinja_env.filters["status_badge_color"] = status_badge_color


@app.errorhandler(FleetError)
def handle_fleet_error(error):
    """Show domain errors as a flash message on the dashboard."""
    logger.warning("Request %s failed: %s", request.path, error)
    flash(str(error), "error")
    if request.endpoint == "index":
        return render_template("error.html", message=str(error)), 500
    return redirect(url_for("index"))


@app.route("/")
def index():
    """Dashboard: odometer, active trip, maintenance and loose expenses."""
    state = get_state()
    settings = get_settings()
    current_km = state.current_km()
    trip = state.active_trip
    services = state.filters.all_status(current_km, settings.due_soon_km)

    return render_template(
        "index.html",
        profile=state.profile,
        current_km=current_km,
        trip=trip,
        stats=active_trip_stats(trip, state.misc_expenses),
        services=services,
        attention=[s for s in services if s.status in (Status.OVERDUE, Status.DUE_SOON)],
        misc_expenses=sorted(state.misc_expenses, key=lambda e: e.date, reverse=True),
        categories=list(ExpenseCategory),
        today=date.today().isoformat(),
    )


@app.route("/expenses", methods=["POST"])
def add_expense():
    """Handle the loose expense form."""
    value = request.form.get("value")
    try:
        value_num = float(value) if value else None
    except ValueError:
        flash("Invalid expense value", "error")
        return redirect(url_for("index"))

    category_name = request.form.get("category") or ExpenseCategory.OTHER.name
    try:
        category = ExpenseCategory[category_name]
    except KeyError:
        flash(f"Unknown category: {category_name}", "error")
        return redirect(url_for("index"))

    state = get_state()
    expense = state.add_misc_expense(
        value=value_num,
        category=category,
        description=request.form.get("description") or "",
        expense_date=request.form.get("date") or None,
    )
    state.save()
    flash(f"Saved expense: {category.value} {format_money(expense.value)}", "success")
    return redirect(url_for("index"))


@app.route("/reports")
def reports():
    """Printable report of completed trips for a period."""
    period = request.args.get("period", "monthly")
    if period not in PERIODS:
        flash(f"Unknown period: {period}", "error")
        period = "monthly"

    state = get_state()
    settings = get_settings()
    rows = []
    for trip in filter_trips(state.trips, period):
        rows.append({
            "trip": trip,
            "summary": summarize_trip(trip, settings.commission_rate),
            "segments": route_segments(trip, state.trips, settings.efficiency_margin),
            "tire_events": state.rack.events_between(trip.outbound.date, trip.end_date),
        })

    return render_template(
        "reports.html",
        profile=state.profile,
        period=period,
        periods=PERIODS,
        rows=rows,
        commission_rate=settings.commission_rate,
    )


@app.route("/tires")
def tires():
    """Rig layout with the tire mounted on each slot."""
    state = get_state()
    current_km = state.current_km()
    axles = []
    for axle, positions in AXLE_LAYOUT:
        slots = []
        for position in positions:
            tire = state.rack.tires.get(position)
            slots.append({
                "position": position,
                "tire": tire,
                "km_run": total_run(tire, current_km) if tire else None,
            })
        axles.append((axle, slots))

    return render_template(
        "tires.html",
        axles=axles,
        retired=state.rack.retired,
        current_km=current_km,
    )


@app.route("/maintenance", methods=["GET"])
def maintenance():
    """Maintenance status table with the record form."""
    state = get_state()
    current_km = state.current_km()
    services = state.filters.all_status(current_km, get_settings().due_soon_km)
    services.sort(key=lambda s: (s.status.value, s.item.interval_km))

    return render_template(
        "maintenance.html",
        services=services,
        filters=state.filters,
        current_km=current_km,
        items=list(ServiceItem),
        today=date.today().isoformat(),
    )


@app.route("/maintenance", methods=["POST"])
def record_service():
    """Handle the record service form."""
    item_key = request.form.get("item")
    if not item_key:
        flash("Please select an item", "error")
        return redirect(url_for("maintenance"))
    try:
        item = ServiceItem(item_key)
    except ValueError:
        flash(f"Unknown item: {item_key}", "error")
        return redirect(url_for("maintenance"))

    km = request.form.get("km")
    try:
        km_val = float(km) if km else None
    except ValueError:
        flash("Invalid odometer value", "error")
        return redirect(url_for("maintenance"))

    state = get_state()
    state.record_service(item, km_val, request.form.get("date") or None)
    state.save()
    flash(f"Recorded service: {item.label}", "success")
    return redirect(url_for("maintenance"))


@app.route("/export")
def export():
    """Download the full backup as JSON."""
    state = get_state()
    body = json.dumps(build_backup(state), indent=2, ensure_ascii=False)
    filename = f"truckbook-backup-{date.today().isoformat()}.json"
    return Response(
        body,
        mimetype="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@app.route("/import", methods=["POST"])
def import_data():
    """Replace local data with an uploaded backup."""
    upload = request.files.get("backup")
    if upload is None or not upload.filename:
        flash("Please choose a backup file", "error")
        return redirect(url_for("index"))

    try:
        text = upload.read().decode("utf-8")
    except UnicodeDecodeError:
        flash("Backup file is not UTF-8 text", "error")
        return redirect(url_for("index"))

    count = import_backup(get_state(), text)
    flash(f"Backup imported ({count} trips)", "success")
    return redirect(url_for("index"))


if __name__ == "__main__":
    logging.basicConfig(level=get_settings().log_level)
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
