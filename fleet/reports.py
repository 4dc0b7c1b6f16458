"""Trip settlement, profit and fuel-efficiency reports."""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from .trip import MiscExpense, Trip, TripStatus

DEFAULT_COMMISSION_RATE = 0.13
DEFAULT_EFFICIENCY_MARGIN = 1.0
TRIP_START = "Trip start"
PERIODS = ("weekly", "monthly", "yearly", "all")


@dataclass
class TripSummary:
    """Money and distance totals for one trip."""

    total_freight: float
    total_toll_tag: float
    total_advances: float
    commission: float
    total_fuel_cost: float
    total_liters_diesel: float
    total_liters_arla: float
    total_expenses: float
    total_km: float
    avg_km_per_liter: float
    net_profit: float
    settlement: float

    @property
    def driver_owes(self) -> bool:
        """Negative settlement: the driver must return the difference."""
        return self.settlement < 0


@dataclass
class RouteSegment:
    """Fuel used between two consecutive fill-ups, against history."""

    start: str
    end: str
    actual_liters: float
    target_liters: float = 0.0
    deviation: float = 0.0
    is_inefficient: bool = False

    @property
    def label(self) -> str:
        return f"{self.start} -> {self.end}"


@dataclass
class ActiveTripStats:
    """Running figures for the trip in progress."""

    freight: float
    fuel_cost: float
    expenses: float
    net: float
    percent_spent: float


def summarize_trip(
    trip: Trip, commission_rate: float = DEFAULT_COMMISSION_RATE
) -> TripSummary:
    """
    Net profit and settlement for a trip.

    - commission = (freight + toll tag) * rate
    - net profit = freight - commission - fuel - expenses
    - settlement = advances - fuel - expenses
    Expenses include the trip-form costs and any absorbed loose expenses.
    """
    total_freight = (trip.outbound.value or 0) + (trip.inbound.value or 0)
    total_toll_tag = (trip.outbound.toll_tag or 0) + (trip.inbound.toll_tag or 0)
    total_advances = trip.outbound.total_advances + trip.inbound.total_advances
    commission = (total_freight + total_toll_tag) * commission_rate

    total_fuel_cost = sum(f.total_cost or 0 for f in trip.fuel)
    total_liters_diesel = sum(f.liters_diesel or 0 for f in trip.fuel)
    total_liters_arla = sum(f.liters_arla or 0 for f in trip.fuel)

    total_expenses = trip.expenses.total + sum(e.value or 0 for e in trip.misc_expenses)

    total_km = max((trip.end_km or 0) - (trip.outbound.start_km or 0), 0)
    avg_km_per_liter = total_km / total_liters_diesel if total_liters_diesel > 0 else 0.0

    return TripSummary(
        total_freight=total_freight,
        total_toll_tag=total_toll_tag,
        total_advances=total_advances,
        commission=commission,
        total_fuel_cost=total_fuel_cost,
        total_liters_diesel=total_liters_diesel,
        total_liters_arla=total_liters_arla,
        total_expenses=total_expenses,
        total_km=total_km,
        avg_km_per_liter=avg_km_per_liter,
        net_profit=total_freight - commission - total_fuel_cost - total_expenses,
        settlement=total_advances - total_fuel_cost - total_expenses,
    )


def _historical_liters_per_ton(
    start: str, end: str, history: List[Trip]
) -> List[float]:
    samples = []
    for past in history:
        weight = past.cargo_weight
        previous = TRIP_START
        for purchase in past.fuel:
            if previous == start and purchase.station == end and weight > 0:
                samples.append((purchase.liters_diesel or 0) / weight)
            previous = purchase.station
    return samples


def route_segments(
    trip: Trip,
    all_trips: List[Trip],
    margin: float = DEFAULT_EFFICIENCY_MARGIN,
) -> List[RouteSegment]:
    """
    Compare each leg between fill-ups against the same leg on past trips.

    The first leg starts at TRIP_START. Past legs are looked up on completed
    trips of the same plate; their liters per ton are averaged and scaled
    by this trip's cargo weight to get a target. A leg burning more than
    target + margin is flagged. Without a matching past leg there is no
    target and nothing is flagged.
    """
    history = [
        t
        for t in all_trips
        if t.status == TripStatus.COMPLETED and t.plate == trip.plate and t.id != trip.id
    ]
    weight = trip.cargo_weight

    segments = []
    previous = TRIP_START
    for purchase in trip.fuel:
        segment = RouteSegment(
            start=previous,
            end=purchase.station,
            actual_liters=purchase.liters_diesel or 0,
        )
        samples = _historical_liters_per_ton(previous, purchase.station, history)
        if samples:
            segment.target_liters = sum(samples) / len(samples) * weight
            segment.deviation = segment.actual_liters - segment.target_liters
            segment.is_inefficient = segment.deviation > margin
        segments.append(segment)
        previous = purchase.station
    return segments


def filter_trips(
    trips: List[Trip], period: str = "monthly", today: Optional[date] = None
) -> List[Trip]:
    """Completed trips whose outbound date falls in the period, newest first."""
    if period not in PERIODS:
        raise ValueError(f"Unknown period {period!r}, expected one of {PERIODS}")
    today = today or date.today()

    def in_period(trip: Trip) -> bool:
        if period == "all":
            return True
        try:
            day = date.fromisoformat(trip.outbound.date)
        except (TypeError, ValueError):
            return False
        if period == "weekly":
            return day >= today - relativedelta(weeks=1)
        if period == "monthly":
            return (day.year, day.month) == (today.year, today.month)
        return day.year == today.year

    completed = [t for t in trips if t.status == TripStatus.COMPLETED and in_period(t)]
    return sorted(completed, key=lambda t: t.outbound.date or "", reverse=True)


def active_trip_stats(
    trip: Optional[Trip], misc_expenses: List[MiscExpense]
) -> ActiveTripStats:
    """
    Running totals for the trip in progress.

    Loose expenses count when dated on or after the outbound date, since
    they will be absorbed when the trip completes.
    """
    if trip is None:
        return ActiveTripStats(freight=0, fuel_cost=0, expenses=0, net=0, percent_spent=0)

    freight = (trip.outbound.value or 0) + (trip.inbound.value or 0)
    fuel_cost = sum(f.total_cost or 0 for f in trip.fuel)
    start = trip.outbound.date or ""
    loose = sum(e.value or 0 for e in misc_expenses if (e.date or "") >= start)
    expenses = trip.expenses.total + loose
    costs = fuel_cost + expenses
    percent = min(costs / freight * 100, 100.0) if freight > 0 else 0.0
    return ActiveTripStats(
        freight=freight,
        fuel_cost=fuel_cost,
        expenses=expenses,
        net=freight - costs,
        percent_spent=percent,
    )
