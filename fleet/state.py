"""Application state: every collection the logbook works on, in one place."""

import copy
import logging
from datetime import date
from typing import List, Optional

from .errors import NotFoundError, RecordStoreError, ValidationError
from .loader import (
    COMPANIES_KEY,
    FILTERS_KEY,
    MISC_EXPENSES_KEY,
    RETIRED_TIRES_KEY,
    STATIONS_KEY,
    TIRES_KEY,
    LocalStore,
    filters_to_dict,
    misc_expense_to_dict,
    names_to_list,
    parse_filters,
    parse_misc_expense,
    parse_names,
    parse_retired_tire,
    parse_tire,
    tire_to_dict,
)
from .maintenance import MaintenanceFilters, ServiceItem
from .profile import Profile
from .rack import TireRack
from .records import RecordStore
from .trip import (
    ExpenseCategory,
    Freight,
    FuelPurchase,
    MiscExpense,
    Trip,
    TripExpenses,
    TripStatus,
)

logger = logging.getLogger(__name__)


def _match_id(items, prefix: str, kind: str):
    """Find the one item whose id is, or starts with, the given prefix."""
    prefix = (prefix or "").strip()
    if not prefix:
        raise ValidationError(f"{kind.capitalize()} id is required")
    for item in items:
        if item.id == prefix:
            return item
    matches = [item for item in items if item.id.startswith(prefix)]
    if not matches:
        raise NotFoundError(f"No {kind} with id {prefix}")
    if len(matches) > 1:
        raise ValidationError(f"Id {prefix} matches {len(matches)} {kind}s; give more characters")
    return matches[0]


class AppState:
    """
    Explicit application state.

    Local collections (expenses, tires, maintenance, stations, companies)
    are written back only when save() is called; finish_trip also writes
    the emptied loose-expense list itself. Profile and trips go to
    the record store as part of each workflow step; a failed write leaves
    the in-memory state as it was.
    """

    def __init__(
        self,
        store: LocalStore,
        records: RecordStore,
        profile: Optional[Profile] = None,
        trips: Optional[List[Trip]] = None,
        misc_expenses: Optional[List[MiscExpense]] = None,
        rack: Optional[TireRack] = None,
        filters: Optional[MaintenanceFilters] = None,
        stations: Optional[List[str]] = None,
        companies: Optional[List[str]] = None,
    ):
        self.store = store
        self.records = records
        self.profile = profile
        self.trips = trips or []
        self.misc_expenses = misc_expenses or []
        self.rack = rack or TireRack()
        self.filters = filters or MaintenanceFilters()
        self.stations = stations or []
        self.companies = companies or []

    @classmethod
    def load(cls, store: LocalStore, records: RecordStore, user_id: str) -> "AppState":
        """Read the profile and trips from the record store, the rest locally."""
        profile = records.get_profile(user_id)
        trips = records.list_trips(user_id) if profile else []
        data = store.load()

        rack = TireRack(
            tires=[parse_tire(t) for t in data.get(TIRES_KEY) or []],
            retired=[parse_retired_tire(t) for t in data.get(RETIRED_TIRES_KEY) or []],
        )
        return cls(
            store=store,
            records=records,
            profile=profile,
            trips=trips,
            misc_expenses=[parse_misc_expense(e) for e in data.get(MISC_EXPENSES_KEY) or []],
            rack=rack,
            filters=parse_filters(data.get(FILTERS_KEY)),
            stations=parse_names(data.get(STATIONS_KEY)),
            companies=parse_names(data.get(COMPANIES_KEY)),
        )

    def save(self) -> None:
        """Persist every local collection."""
        self.store.update(
            {
                MISC_EXPENSES_KEY: [misc_expense_to_dict(e) for e in self.misc_expenses],
                TIRES_KEY: [tire_to_dict(t) for t in self.rack.list_tires()],
                RETIRED_TIRES_KEY: [tire_to_dict(t) for t in self.rack.retired],
                FILTERS_KEY: filters_to_dict(self.filters),
                STATIONS_KEY: names_to_list(self.stations),
                COMPANIES_KEY: names_to_list(self.companies),
            }
        )

    # =========================================================================
    # Profile
    # =========================================================================

    def require_profile(self) -> Profile:
        if self.profile is None:
            raise NotFoundError("No driver profile registered yet")
        return self.profile

    def register_profile(
        self,
        user_id: str,
        driver_name: str,
        plate: str,
        company_name: str = "",
        truck_registration_date: Optional[str] = None,
        truck_initial_km: float = 0,
    ) -> Profile:
        """Create or update the driver profile in the record store."""
        driver_name = (driver_name or "").strip()
        plate = (plate or "").strip().upper()
        if not driver_name or not plate:
            raise ValidationError("Driver name and plate are required")
        if truck_initial_km is None or truck_initial_km < 0:
            raise ValidationError("Initial odometer must be zero or positive")

        current_km = self.profile.truck_current_km if self.profile else 0
        profile = Profile(
            id=user_id,
            driver_name=driver_name,
            plate=plate,
            company_name=(company_name or "").strip(),
            truck_registration_date=truck_registration_date,
            truck_initial_km=truck_initial_km,
            truck_current_km=max(current_km or 0, truck_initial_km),
        )
        self.records.update_profile(profile)
        self.profile = profile
        return profile

    def current_km(self) -> float:
        """Best known odometer: trips of this plate and the truck registration."""
        if self.profile is None:
            return max((t.highest_odometer for t in self.trips), default=0)
        from_trips = max(
            (t.highest_odometer for t in self.trips if t.plate == self.profile.plate),
            default=0,
        )
        return max(
            from_trips,
            self.profile.truck_current_km or 0,
            self.profile.truck_initial_km or 0,
        )

    # =========================================================================
    # Trips
    # =========================================================================

    @property
    def active_trip(self) -> Optional[Trip]:
        driver = self.profile.driver_name if self.profile else None
        for trip in self.trips:
            if trip.is_active and (driver is None or trip.driver_name == driver):
                return trip
        return None

    def require_active_trip(self) -> Trip:
        trip = self.active_trip
        if trip is None:
            raise NotFoundError("There is no active trip")
        return trip

    def get_trip(self, trip_id: str) -> Trip:
        return _match_id(self.trips, trip_id, "trip")

    def _save_trip(self, trip: Trip) -> Trip:
        """Upsert a staged trip, then commit it (and the odometer) in memory."""
        profile = self.require_profile()
        try:
            stored = self.records.upsert_trip(profile.id, trip)
        except RecordStoreError:
            logger.error("Trip %s was not saved; keeping the previous state", trip.id)
            raise

        for i, existing in enumerate(self.trips):
            if existing.id == stored.id:
                self.trips[i] = stored
                break
        else:
            self.trips.insert(0, stored)

        highest = stored.highest_odometer
        if highest > (profile.truck_current_km or 0):
            updated = copy.copy(profile)
            updated.truck_current_km = highest
            try:
                self.records.update_profile(updated)
            except RecordStoreError:
                logger.warning("Truck odometer not updated to %s", highest)
            else:
                self.profile = updated
        return stored

    def start_trip(self, outbound: Freight, inbound: Optional[Freight] = None) -> Trip:
        """Open a new trip. A driver can only have one active trip."""
        profile = self.require_profile()
        if self.active_trip is not None:
            raise ValidationError(
                f"{profile.driver_name} already has an active trip "
                f"({self.active_trip.id[:8]})"
            )
        if not (outbound.company or "").strip():
            raise ValidationError("Outbound company is required")
        if outbound.value is None or outbound.value <= 0:
            raise ValidationError("Outbound freight value must be positive")
        if not outbound.start_km:
            outbound.start_km = profile.truck_current_km or profile.truck_initial_km or 0
        outbound.date = outbound.date or date.today().isoformat()

        trip = Trip(
            driver_name=profile.driver_name,
            plate=profile.plate,
            outbound=outbound,
            inbound=inbound,
        )
        stored = self._save_trip(trip)
        logger.info("Started trip %s for %s", stored.id, profile.driver_name)
        return stored

    def update_trip(
        self,
        outbound: Optional[Freight] = None,
        inbound: Optional[Freight] = None,
        expenses: Optional[TripExpenses] = None,
    ) -> Trip:
        """Replace the legs or the trip-form expenses of the active trip."""
        staged = copy.deepcopy(self.require_active_trip())
        if outbound is not None:
            staged.outbound = outbound
        if inbound is not None:
            if inbound.value is not None and inbound.value < 0:
                raise ValidationError("Inbound freight value can't be negative")
            staged.inbound = inbound
        if expenses is not None:
            staged.expenses = expenses
        return self._save_trip(staged)

    def add_fuel(self, purchase: FuelPurchase) -> Trip:
        if not (purchase.station or "").strip():
            raise ValidationError("Pick a fuel station")
        if purchase.total_cost is None or purchase.total_cost <= 0:
            raise ValidationError("Fuel cost must be positive")
        staged = copy.deepcopy(self.require_active_trip())
        staged.fuel.append(purchase)
        return self._save_trip(staged)

    def remove_fuel(self, index: int) -> Trip:
        staged = copy.deepcopy(self.require_active_trip())
        if index < 0 or index >= len(staged.fuel):
            raise NotFoundError(f"No fuel purchase #{index}")
        del staged.fuel[index]
        return self._save_trip(staged)

    def finish_trip(self, end_km: float, end_date: Optional[str] = None) -> Trip:
        """
        Close the active trip.

        The end odometer must be past the start. All loose expenses are
        absorbed into the trip. The emptied expense list is written to the
        local store before the trip goes to the record store, and put back
        if that write fails, so the expenses are never absorbed twice.
        """
        staged = copy.deepcopy(self.require_active_trip())
        start_km = staged.outbound.start_km or 0
        if not end_km or end_km <= 0:
            raise ValidationError("End odometer is required to finish the trip")
        if end_km <= start_km:
            raise ValidationError(
                f"End odometer ({end_km:,.0f}) must be greater than "
                f"start odometer ({start_km:,.0f})"
            )
        staged.end_km = end_km
        staged.end_date = end_date or date.today().isoformat()
        staged.status = TripStatus.COMPLETED
        staged.misc_expenses = list(self.misc_expenses)

        previous = [misc_expense_to_dict(e) for e in self.misc_expenses]
        self.store.update({MISC_EXPENSES_KEY: []})
        try:
            stored = self._save_trip(staged)
        except RecordStoreError:
            self.store.update({MISC_EXPENSES_KEY: previous})
            raise
        self.misc_expenses = []
        logger.info(
            "Completed trip %s at %s km with %d loose expenses",
            stored.id,
            end_km,
            len(stored.misc_expenses),
        )
        return stored

    # =========================================================================
    # Loose expenses, stations and companies
    # =========================================================================

    def add_misc_expense(
        self,
        value: float,
        category: ExpenseCategory = ExpenseCategory.OTHER,
        description: str = "",
        expense_date: Optional[str] = None,
        attachment: Optional[str] = None,
    ) -> MiscExpense:
        if value is None or value <= 0:
            raise ValidationError("Expense value must be positive")
        expense = MiscExpense(
            date=expense_date or date.today().isoformat(),
            category=category,
            description=(description or "").strip(),
            value=value,
            attachment=attachment,
        )
        self.misc_expenses.append(expense)
        return expense

    def delete_misc_expense(self, expense_id: str) -> MiscExpense:
        expense = _match_id(self.misc_expenses, expense_id, "expense")
        self.misc_expenses = [e for e in self.misc_expenses if e is not expense]
        return expense

    def add_station(self, name: str) -> str:
        return self._add_name(self.stations, name, "Station")

    def add_company(self, name: str) -> str:
        return self._add_name(self.companies, name, "Company")

    @staticmethod
    def _add_name(names: List[str], name: str, kind: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError(f"{kind} name is required")
        if name.lower() not in (n.lower() for n in names):
            names.append(name)
        return name

    # =========================================================================
    # Maintenance
    # =========================================================================

    def record_service(
        self, item: ServiceItem, odometer: Optional[float] = None, service_date: Optional[str] = None
    ) -> None:
        self.filters.record_service(
            item,
            odometer if odometer is not None else self.current_km(),
            service_date or date.today().isoformat(),
        )
