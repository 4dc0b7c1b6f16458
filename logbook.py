#!/usr/bin/env python3
"""
Unified CLI for the truck logbook.

Commands:
  profile        - Register or update the driver and truck
  status         - Dashboard: odometer, active trip, maintenance
  trip-*         - Start, inspect, fill up and finish the active trip
  expense*       - Loose expenses absorbed by the next finished trip
  tire*          - Mount, rotate, log events on and retire tires
  service*       - Record filter/oil changes and show what is due
  report         - Settlement, profit and fuel efficiency per trip
  export/import  - Full JSON backup
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from fleet import (
    AXLE_LAYOUT,
    AppState,
    ExpenseCategory,
    FileRecordStore,
    FleetError,
    Freight,
    FuelPurchase,
    LocalStore,
    RouteSegment,
    ServiceDue,
    ServiceItem,
    Settings,
    Status,
    Tire,
    TireCondition,
    Trip,
    TripExpenses,
    active_trip_stats,
    export_backup,
    filter_trips,
    import_backup,
    parse_position,
    route_segments,
    summarize_trip,
    total_run,
)
from fleet.reports import PERIODS

logger = logging.getLogger("logbook")

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format an odometer reading or distance for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_money(value: Optional[float]) -> str:
    """Format a monetary value for display."""
    if value is None:
        return "-"
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def format_liters(liters: Optional[float]) -> str:
    return f"{liters:,.1f} L" if liters is not None else "-"


def format_deviation(segment: RouteSegment) -> str:
    """Signed deviation, or 0.0L when there was nothing to compare with."""
    if segment.target_liters <= 0:
        return "0.0L"
    sign = "+" if segment.deviation > 0 else ""
    return f"{sign}{segment.deviation:.1f}L"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


STATUS_LABELS = {
    Status.OVERDUE: "DUE",
    Status.DUE_SOON: "SOON",
    Status.OK: "ok",
    Status.UNKNOWN: "?",
}


# =============================================================================
# Table builders
# =============================================================================


def make_service_table(services: List[ServiceDue]) -> List[List[str]]:
    """Convert service status list to table rows."""
    rows = []
    for svc in services:
        last_done = "-"
        if svc.install_km:
            last_done = format_km(svc.install_km)
            if svc.install_date:
                last_done = f"{svc.install_date} @ {last_done}"
        rows.append(
            [
                svc.item.label,
                STATUS_LABELS[svc.status],
                last_done,
                format_km(svc.used_km),
                format_km(svc.item.interval_km),
                format_km(svc.km_remaining),
                f"{svc.percent_used:.0f}%",
            ]
        )
    return rows


def make_tire_table(tires: List[Tire], current_km: float) -> List[List[str]]:
    """One row per active tire with its attributed mileage."""
    rows = []
    for tire in tires:
        rows.append(
            [
                tire.position.label,
                tire.brand,
                tire.code,
                tire.condition.value,
                tire.install_date or "-",
                format_km(total_run(tire, current_km)),
                len(tire.events),
            ]
        )
    return rows


def make_segment_table(segments: List[RouteSegment]) -> List[List[str]]:
    rows = []
    for seg in segments:
        rows.append(
            [
                seg.label,
                format_liters(seg.actual_liters),
                format_liters(seg.target_liters) if seg.target_liters > 0 else "-",
                format_deviation(seg),
                "INEFFICIENT" if seg.is_inefficient else "",
            ]
        )
    return rows


def print_trip_report(trip: Trip, state: AppState, settings: Settings) -> None:
    """Full report for one trip: settlement, result, segments."""
    summary = summarize_trip(trip, settings.commission_rate)
    print(f"Trip {trip.id[:8]}  {trip.outbound.date} -> {trip.end_date or 'open'}")
    print(f"  Outbound: {trip.outbound.company} / {truncate(trip.outbound.destinations, 40)}")
    print(f"  Inbound:  {trip.inbound.company or '-'} / {truncate(trip.inbound.destinations, 40)}")
    print()

    rows = [
        ["Advances received", format_money(summary.total_advances)],
        ["Fuel", format_money(-summary.total_fuel_cost)],
        ["Expenses", format_money(-summary.total_expenses)],
        ["Settlement", format_money(summary.settlement)],
    ]
    print("SETTLEMENT:")
    print(tabulate(rows, tablefmt="simple"))
    if summary.driver_owes:
        print(f"  * Driver must return {format_money(abs(summary.settlement))}")
    print()

    rows = [
        ["Freight", format_money(summary.total_freight)],
        [
            f"Commission ({settings.commission_rate:.0%})",
            format_money(-summary.commission),
        ],
        ["Fuel", format_money(-summary.total_fuel_cost)],
        ["Expenses", format_money(-summary.total_expenses)],
        ["Net result", format_money(summary.net_profit)],
    ]
    print("RESULT:")
    print(tabulate(rows, tablefmt="simple"))
    print()

    print(
        f"Distance: {format_km(summary.total_km)} km  "
        f"Diesel: {format_liters(summary.total_liters_diesel)}  "
        f"ARLA: {format_liters(summary.total_liters_arla)}  "
        f"Avg: {summary.avg_km_per_liter:.2f} km/L"
    )
    segments = route_segments(trip, state.trips, settings.efficiency_margin)
    if segments:
        print()
        print("SEGMENTS:")
        headers = ["Segment", "Actual", "Target", "Deviation", ""]
        print(tabulate(make_segment_table(segments), headers=headers, tablefmt="simple"))

    events = state.rack.events_between(trip.outbound.date, trip.end_date)
    if events:
        print()
        print("TIRE EVENTS:")
        rows = [
            [e.date, t.position.label, t.brand, format_km(e.odometer), e.description]
            for t, e in events
        ]
        print(tabulate(rows, headers=["Date", "Position", "Brand", "Km", "Event"], tablefmt="simple"))


# =============================================================================
# Profile and status commands
# =============================================================================


def cmd_profile(args, state: AppState, settings: Settings):
    """Register or update the driver profile."""
    profile = state.register_profile(
        user_id=settings.user_id,
        driver_name=args.driver,
        plate=args.plate,
        company_name=args.company or "",
        truck_registration_date=args.registered,
        truck_initial_km=args.initial_km,
    )
    print(f"Profile saved: {profile.name}")
    return 0


def cmd_status(args, state: AppState, settings: Settings):
    """Dashboard: odometer, active trip and maintenance at a glance."""
    profile = state.require_profile()
    current_km = state.current_km()
    print(f"Driver: {profile.name}")
    print(f"Current odometer: {format_km(current_km)} km")
    print()

    trip = state.active_trip
    if trip:
        stats = active_trip_stats(trip, state.misc_expenses)
        print(f"ACTIVE TRIP {trip.id[:8]} ({trip.outbound.company}):")
        rows = [
            ["Freight", format_money(stats.freight)],
            ["Fuel", format_money(stats.fuel_cost)],
            ["Expenses", format_money(stats.expenses)],
            ["Net so far", format_money(stats.net)],
            ["Spent", f"{stats.percent_spent:.0f}%"],
        ]
        print(tabulate(rows, tablefmt="simple"))
    else:
        print("No active trip.")
    print()

    services = state.filters.all_status(current_km, settings.due_soon_km)
    due = [s for s in services if s.status in (Status.OVERDUE, Status.DUE_SOON)]
    if due:
        print("MAINTENANCE ATTENTION:")
        for svc in due:
            print(f"  {STATUS_LABELS[svc.status]:4} {svc.item.label} ({svc.percent_used:.0f}%)")
    else:
        print("Maintenance: nothing due.")
    print(f"Loose expenses pending: {len(state.misc_expenses)}")
    return 0


# =============================================================================
# Trip commands
# =============================================================================


def _freight_from_args(args) -> Freight:
    return Freight(
        date=args.date or date.today().isoformat(),
        company=args.company,
        destinations=args.destinations or "",
        value=args.value,
        advance=args.advance,
        advance_maintenance=args.advance_maintenance,
        advance_diesel=args.advance_diesel,
        toll_tag=args.toll_tag,
        weight_tons=args.weight,
        start_km=args.start_km or 0,
    )


def cmd_trip_start(args, state: AppState, settings: Settings):
    """Start a trip with its outbound leg."""
    trip = state.start_trip(_freight_from_args(args))
    print(f"Trip {trip.id[:8]} started at {format_km(trip.outbound.start_km)} km.")
    return 0


def cmd_trip_inbound(args, state: AppState, settings: Settings):
    """Set the inbound leg of the active trip."""
    state.update_trip(inbound=_freight_from_args(args))
    print("Inbound leg saved.")
    return 0


def cmd_trip_expenses(args, state: AppState, settings: Settings):
    """Set the trip-form expenses of the active trip."""
    expenses = TripExpenses(
        tire_shop=args.tire_shop,
        binding=args.binding,
        unloading=args.unloading,
        tip=args.tip,
        wash=args.wash,
        cash_toll=args.cash_toll,
        others_desc=args.others_desc or "",
        others_value=args.others_value,
    )
    state.update_trip(expenses=expenses)
    print(f"Trip expenses saved: {format_money(expenses.total)}")
    return 0


def cmd_trip_show(args, state: AppState, settings: Settings):
    """Show the active trip (or any trip by id)."""
    trip = state.get_trip(args.trip) if args.trip else state.require_active_trip()
    print_trip_report(trip, state, settings)
    if trip.fuel:
        print()
        print("FUEL:")
        rows = [
            [
                i,
                f.station,
                format_km(f.arrival_km),
                format_liters(f.liters_diesel),
                format_liters(f.liters_arla),
                format_money(f.total_cost),
            ]
            for i, f in enumerate(trip.fuel)
        ]
        headers = ["#", "Station", "Km", "Diesel", "ARLA", "Cost"]
        print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_fuel_add(args, state: AppState, settings: Settings):
    """Add a fuel purchase to the active trip."""
    if args.station:
        state.add_station(args.station)
    purchase = FuelPurchase(
        station=args.station,
        arrival_km=args.km,
        liters_diesel=args.diesel,
        liters_arla=args.arla,
        total_cost=args.cost,
    )
    trip = state.add_fuel(purchase)
    state.save()
    print(f"Fuel purchase #{len(trip.fuel) - 1} saved at {purchase.station}.")
    return 0


def cmd_fuel_remove(args, state: AppState, settings: Settings):
    """Remove a fuel purchase from the active trip by its index."""
    state.remove_fuel(args.index)
    print(f"Fuel purchase #{args.index} removed.")
    return 0


def cmd_trip_finish(args, state: AppState, settings: Settings):
    """Finish the active trip; loose expenses are absorbed into it."""
    trip = state.finish_trip(args.end_km, args.date)
    state.save()
    print(f"Trip {trip.id[:8]} completed with {len(trip.misc_expenses)} loose expenses.")
    print()
    print_trip_report(trip, state, settings)
    return 0


# =============================================================================
# Expense commands
# =============================================================================


def cmd_expense_add(args, state: AppState, settings: Settings):
    """Add a loose expense."""
    category = next(c for c in ExpenseCategory if c.name.lower() == args.category)
    expense = state.add_misc_expense(
        value=args.value,
        category=category,
        description=args.description or "",
        expense_date=args.date,
        attachment=args.attachment,
    )
    state.save()
    print(f"Expense {expense.id[:8]} saved: {category.value} {format_money(expense.value)}")
    return 0


def cmd_expenses(args, state: AppState, settings: Settings):
    """List loose expenses waiting for the next finished trip."""
    if not state.misc_expenses:
        print("No loose expenses.")
        return 0
    rows = [
        [e.id[:8], e.date, e.category.value, truncate(e.description), format_money(e.value)]
        for e in sorted(state.misc_expenses, key=lambda e: e.date, reverse=True)
    ]
    print(tabulate(rows, headers=["Id", "Date", "Category", "Description", "Value"], tablefmt="simple"))
    total = sum(e.value for e in state.misc_expenses)
    print()
    print(f"Total: {format_money(total)}")
    return 0


def cmd_expense_delete(args, state: AppState, settings: Settings):
    expense = state.delete_misc_expense(args.expense_id)
    state.save()
    print(f"Expense {expense.id[:8]} deleted.")
    return 0


# =============================================================================
# Tire commands
# =============================================================================


def cmd_tires(args, state: AppState, settings: Settings):
    """Show every slot of the rig and the tire mounted there."""
    current_km = state.current_km()
    print(f"Current odometer: {format_km(current_km)} km")
    print()
    for axle, positions in AXLE_LAYOUT:
        mounted = [state.rack.tires[p] for p in positions if p in state.rack.tires]
        empty = [p.label for p in positions if p not in state.rack.tires]
        print(f"{axle.upper()}:")
        if mounted:
            headers = ["Position", "Brand", "Code", "Condition", "Installed", "Km run", "Events"]
            print(tabulate(make_tire_table(mounted, current_km), headers=headers, tablefmt="simple"))
        if empty:
            print(f"  empty: {', '.join(empty)}")
        print()
    return 0


def cmd_tire_assign(args, state: AppState, settings: Settings):
    """Mount a tire on an empty slot or edit the tire already there."""
    install_km = args.install_km if args.install_km is not None else state.current_km()
    tire = state.rack.assign(
        args.position,
        brand=args.brand,
        code=args.code,
        condition=TireCondition(args.condition),
        install_date=args.date,
        install_km=install_km,
    )
    state.save()
    print(f"{tire.name} saved at {tire.position.label}.")
    return 0


def cmd_tire_event(args, state: AppState, settings: Settings):
    """Log a puncture, repair or other event on a tire."""
    odometer = args.km if args.km is not None else state.current_km()
    event = state.rack.add_event(
        args.position,
        args.date or date.today().isoformat(),
        odometer,
        args.description,
    )
    state.save()
    print(f"Event {event.id[:8]} saved.")
    return 0


def cmd_tire_event_remove(args, state: AppState, settings: Settings):
    """Delete a tire event by id (or an unambiguous id prefix)."""
    tire = state.rack.require(args.position)
    matches = [e.id for e in tire.events if e.id.startswith(args.event_id)]
    event_id = matches[0] if len(matches) == 1 else args.event_id
    state.rack.remove_event(args.position, event_id)
    state.save()
    print("Event removed.")
    return 0


def cmd_tire_rotate(args, state: AppState, settings: Settings):
    """Move a tire to another slot, swapping with the tire there if any."""
    odometer = args.km if args.km is not None else state.current_km()
    source = parse_position(args.source)
    target = parse_position(args.target)
    if source == target:
        print("Source and target are the same slot; nothing to do.")
        return 0
    occupant = state.rack.get(target)

    print(f"Rotating {state.rack.require(source).name}: {source.label} -> {target.label}")
    if occupant is not None:
        print(f"  Swap with {occupant.name}: {target.label} -> {source.label}")
    print(f"  Odometer: {format_km(odometer)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    state.rack.rotate(source, target, args.date or date.today().isoformat(), odometer)
    state.save()
    print("Rotation saved.")
    return 0


def cmd_tire_retire(args, state: AppState, settings: Settings):
    """Take a tire off the rig and file it with its total mileage."""
    odometer = args.km if args.km is not None else state.current_km()
    tire = state.rack.require(args.position)
    print(f"Retiring {tire.name} from {tire.position.label}")
    print(f"  Km run: {format_km(total_run(tire, odometer))}")
    print(f"  Sent to retread: {'yes' if args.retread else 'no'}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    state.rack.retire(
        args.position,
        args.date or date.today().isoformat(),
        odometer,
        sent_to_retread=args.retread,
    )
    state.save()
    print("Tire retired.")
    return 0


def cmd_retired(args, state: AppState, settings: Settings):
    """List retired tires, newest first."""
    if not state.rack.retired:
        print("No retired tires.")
        return 0
    rows = [
        [
            t.retired_at,
            t.brand,
            t.code,
            t.condition.value,
            t.position.label,
            format_km(t.total_km_ran),
            f"{t.duration_months}mo {t.duration_days}d",
            "yes" if t.sent_to_retread else "",
        ]
        for t in state.rack.retired
    ]
    headers = ["Retired", "Brand", "Code", "Condition", "Last position", "Km run", "Service", "Retread"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Maintenance commands
# =============================================================================


def cmd_service(args, state: AppState, settings: Settings):
    """Record a filter or oil change."""
    item = ServiceItem(args.item)
    odometer = args.km if args.km is not None else state.current_km()
    service_date = args.date or date.today().isoformat()

    print(f"Recording {item.label} at {format_km(odometer)} km on {service_date}")
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    state.record_service(item, odometer, service_date)
    state.save()
    print("Service saved.")
    return 0


def cmd_service_status(args, state: AppState, settings: Settings):
    """Show how much of each maintenance interval has been used."""
    current_km = state.current_km()
    print(f"Current odometer: {format_km(current_km)} km")
    print()
    headers = ["Item", "Status", "Last done", "Used", "Interval", "Remaining", "Used %"]
    services = state.filters.all_status(current_km, settings.due_soon_km)
    print(tabulate(make_service_table(services), headers=headers, tablefmt="simple"))
    if state.filters.others:
        print()
        print(f"Notes: {state.filters.others}")
    return 0


# =============================================================================
# Report commands
# =============================================================================


def cmd_report(args, state: AppState, settings: Settings):
    """Report completed trips for a period (or one trip by id)."""
    if args.trip:
        print_trip_report(state.get_trip(args.trip), state, settings)
        return 0

    trips = filter_trips(state.trips, args.period)
    if not trips:
        print(f"No completed trips ({args.period}).")
        return 0

    rows = []
    for trip in trips:
        summary = summarize_trip(trip, settings.commission_rate)
        inefficient = sum(
            1 for s in route_segments(trip, state.trips, settings.efficiency_margin) if s.is_inefficient
        )
        rows.append(
            [
                trip.id[:8],
                trip.outbound.date,
                truncate(trip.outbound.destinations, 20),
                format_km(summary.total_km),
                format_money(summary.total_freight),
                format_money(summary.net_profit),
                format_money(summary.settlement),
                inefficient or "",
            ]
        )
    headers = ["Trip", "Date", "Destinations", "Km", "Freight", "Net", "Settlement", "Bad segments"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))

    if args.detail:
        for trip in trips:
            print()
            print("=" * 60)
            print_trip_report(trip, state, settings)
    return 0


# =============================================================================
# Stations, companies and backup
# =============================================================================


def cmd_station_add(args, state: AppState, settings: Settings):
    name = state.add_station(args.name)
    state.save()
    print(f"Station saved: {name}")
    return 0


def cmd_company_add(args, state: AppState, settings: Settings):
    name = state.add_company(args.name)
    state.save()
    print(f"Company saved: {name}")
    return 0


def cmd_stations(args, state: AppState, settings: Settings):
    for name in state.stations:
        print(name)
    return 0


def cmd_companies(args, state: AppState, settings: Settings):
    for name in state.companies:
        print(name)
    return 0


def cmd_export(args, state: AppState, settings: Settings):
    """Write every record to one JSON backup file."""
    path = args.output or Path(f"truckbook-backup-{date.today().isoformat()}.json")
    export_backup(state, path)
    print(f"Backup written to {path}")
    return 0


def cmd_import(args, state: AppState, settings: Settings):
    """Replace local data with a JSON backup."""
    text = args.backup_file.read_text(encoding="utf-8")
    count = import_backup(state, text)
    print(f"Backup imported ({count} trips). Local data replaced.")
    return 0


# =============================================================================
# Main
# =============================================================================


def _add_freight_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("company", type=str, help="Shipper / customer")
    parser.add_argument("value", type=float, help="Freight value")
    parser.add_argument("--destinations", type=str, help="Destination cities")
    parser.add_argument("--date", type=str, help="Leg date YYYY-MM-DD (default: today)")
    parser.add_argument("--advance", type=float, default=0, help="Personal advance")
    parser.add_argument("--advance-diesel", type=float, default=0, help="Fuel advance")
    parser.add_argument(
        "--advance-maintenance", type=float, default=0, help="Maintenance advance"
    )
    parser.add_argument("--toll-tag", type=float, default=0, help="Electronic toll tag cost")
    parser.add_argument("--weight", type=float, default=0, help="Cargo weight in tons")
    parser.add_argument("--start-km", type=float, help="Odometer at departure")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Truck logbook: trips, fuel, expenses, tires and maintenance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s profile "Joao Silva" ABC1D23 --initial-km 350000
  %(prog)s trip-start "ACME Grain" 3000 --weight 10 --destinations "Santos"
  %(prog)s fuel-add "Posto Alfa" --km 350600 --diesel 210 --cost 1250
  %(prog)s trip-finish 351900
  %(prog)s tire-rotate steer-left spare-1 --km 351900
  %(prog)s service engineOil --km 351900
  %(prog)s report --period all
""",
    )
    parser.add_argument("--data-dir", type=Path, help="Data directory (default: ~/.truckbook)")
    parser.add_argument("--user", type=str, help="User id in the record store")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("profile", help="Register or update the driver and truck")
    p.add_argument("driver", type=str, help="Driver name")
    p.add_argument("plate", type=str, help="Truck plate")
    p.add_argument("--company", type=str, help="Company name")
    p.add_argument("--registered", type=str, help="Truck registration date YYYY-MM-DD")
    p.add_argument("--initial-km", type=float, default=0, help="Odometer at registration")
    p.set_defaults(handler=cmd_profile)

    p = subparsers.add_parser("status", help="Dashboard")
    p.set_defaults(handler=cmd_status)

    p = subparsers.add_parser("trip-start", help="Start a trip with its outbound leg")
    _add_freight_args(p)
    p.set_defaults(handler=cmd_trip_start)

    p = subparsers.add_parser("trip-inbound", help="Set the inbound leg of the active trip")
    _add_freight_args(p)
    p.set_defaults(handler=cmd_trip_inbound)

    p = subparsers.add_parser("trip-expenses", help="Set the trip-form expenses")
    for flag in ("--tire-shop", "--binding", "--unloading", "--tip", "--wash", "--cash-toll"):
        p.add_argument(flag, type=float, default=0)
    p.add_argument("--others-desc", type=str, help="Description of other costs")
    p.add_argument("--others-value", type=float, default=0, help="Other costs")
    p.set_defaults(handler=cmd_trip_expenses)

    p = subparsers.add_parser("trip-show", help="Show the active trip")
    p.add_argument("--trip", type=str, help="Trip id (prefix) instead of the active trip")
    p.set_defaults(handler=cmd_trip_show)

    p = subparsers.add_parser("fuel-add", help="Add a fuel purchase to the active trip")
    p.add_argument("station", type=str, help="Fuel station")
    p.add_argument("--km", type=float, default=0, help="Odometer on arrival")
    p.add_argument("--diesel", type=float, default=0, help="Diesel liters")
    p.add_argument("--arla", type=float, default=0, help="ARLA (urea) liters")
    p.add_argument("--cost", type=float, required=True, help="Total cost")
    p.set_defaults(handler=cmd_fuel_add)

    p = subparsers.add_parser("fuel-remove", help="Remove a fuel purchase by index")
    p.add_argument("index", type=int, help="Index shown by trip-show")
    p.set_defaults(handler=cmd_fuel_remove)

    p = subparsers.add_parser("trip-finish", help="Finish the active trip")
    p.add_argument("end_km", type=float, help="Odometer at arrival")
    p.add_argument("--date", type=str, help="End date YYYY-MM-DD (default: today)")
    p.set_defaults(handler=cmd_trip_finish)

    p = subparsers.add_parser("expense-add", help="Add a loose expense")
    p.add_argument("value", type=float, help="Amount paid")
    p.add_argument(
        "--category",
        choices=[c.name.lower() for c in ExpenseCategory],
        default="other",
        help="Expense category (default: other)",
    )
    p.add_argument("--description", type=str, help="What was paid for")
    p.add_argument("--date", type=str, help="Expense date YYYY-MM-DD (default: today)")
    p.add_argument("--attachment", type=str, help="Path or reference to a receipt photo")
    p.set_defaults(handler=cmd_expense_add)

    p = subparsers.add_parser("expenses", help="List loose expenses")
    p.set_defaults(handler=cmd_expenses)

    p = subparsers.add_parser("expense-delete", help="Delete a loose expense")
    p.add_argument("expense_id", type=str, help="Expense id (prefix)")
    p.set_defaults(handler=cmd_expense_delete)

    p = subparsers.add_parser("tires", help="Show the tires on the rig")
    p.set_defaults(handler=cmd_tires)

    p = subparsers.add_parser("tire-assign", help="Mount or edit the tire at a slot")
    p.add_argument("position", type=str, help="Slot (e.g. 'steer-left', 'spare-1')")
    p.add_argument("brand", type=str, help="Tire brand")
    p.add_argument("code", type=str, help="Tire identification code")
    p.add_argument(
        "--condition",
        choices=[c.value for c in TireCondition],
        default=TireCondition.NEW.value,
    )
    p.add_argument("--date", type=str, help="Install date YYYY-MM-DD (default: today)")
    p.add_argument("--install-km", type=float, help="Odometer at install (default: current)")
    p.set_defaults(handler=cmd_tire_assign)

    p = subparsers.add_parser("tire-event", help="Log an event on a tire")
    p.add_argument("position", type=str)
    p.add_argument("description", type=str, help="What happened (puncture, repair...)")
    p.add_argument("--date", type=str)
    p.add_argument("--km", type=float)
    p.set_defaults(handler=cmd_tire_event)

    p = subparsers.add_parser("tire-event-remove", help="Delete an event from a tire")
    p.add_argument("position", type=str)
    p.add_argument("event_id", type=str, help="Event id")
    p.set_defaults(handler=cmd_tire_event_remove)

    p = subparsers.add_parser("tire-rotate", help="Move a tire, swapping if the slot is taken")
    p.add_argument("source", type=str)
    p.add_argument("target", type=str)
    p.add_argument("--date", type=str)
    p.add_argument("--km", type=float, help="Odometer (default: current)")
    p.add_argument("--dry-run", action="store_true", help="Show the rotation without saving")
    p.set_defaults(handler=cmd_tire_rotate)

    p = subparsers.add_parser("tire-retire", help="Retire the tire at a slot")
    p.add_argument("position", type=str)
    p.add_argument("--date", type=str)
    p.add_argument("--km", type=float, help="Odometer (default: current)")
    p.add_argument("--retread", action="store_true", help="Tire was sent for retreading")
    p.add_argument("--dry-run", action="store_true", help="Show the retirement without saving")
    p.set_defaults(handler=cmd_tire_retire)

    p = subparsers.add_parser("retired", help="List retired tires")
    p.set_defaults(handler=cmd_retired)

    p = subparsers.add_parser("service", help="Record a filter or oil change")
    p.add_argument("item", choices=[i.value for i in ServiceItem])
    p.add_argument("--km", type=float, help="Odometer (default: current)")
    p.add_argument("--date", type=str)
    p.add_argument("--dry-run", action="store_true")
    p.set_defaults(handler=cmd_service)

    p = subparsers.add_parser("service-status", help="Show maintenance intervals")
    p.set_defaults(handler=cmd_service_status)

    p = subparsers.add_parser("report", help="Report completed trips")
    p.add_argument("--period", choices=PERIODS, default="monthly")
    p.add_argument("--trip", type=str, help="Report a single trip by id (prefix)")
    p.add_argument("--detail", action="store_true", help="Print the full report of each trip")
    p.set_defaults(handler=cmd_report)

    p = subparsers.add_parser("station-add", help="Register a fuel station")
    p.add_argument("name", type=str)
    p.set_defaults(handler=cmd_station_add)

    p = subparsers.add_parser("stations", help="List fuel stations")
    p.set_defaults(handler=cmd_stations)

    p = subparsers.add_parser("company-add", help="Register a shipper")
    p.add_argument("name", type=str)
    p.set_defaults(handler=cmd_company_add)

    p = subparsers.add_parser("companies", help="List shippers")
    p.set_defaults(handler=cmd_companies)

    p = subparsers.add_parser("export", help="Write a JSON backup")
    p.add_argument("--output", type=Path, help="Output file")
    p.set_defaults(handler=cmd_export)

    p = subparsers.add_parser("import", help="Replace local data with a JSON backup")
    p.add_argument("backup_file", type=Path)
    p.set_defaults(handler=cmd_import)

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings(data_dir=args.data_dir, user_id=args.user)
    logging.basicConfig(
        level=logging.INFO if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "import" and not args.backup_file.exists():
        print(f"Error: File not found: {args.backup_file}")
        return 1

    try:
        state = AppState.load(
            LocalStore(settings.store_path),
            FileRecordStore(settings.records_path),
            settings.user_id,
        )
        return args.handler(args, state, settings)
    except FleetError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
