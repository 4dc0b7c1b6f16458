"""Scheduled-maintenance records for filters and oils."""

from enum import Enum
from typing import Dict, List, Optional

from .calculations import calc_due_km, calc_percent_used, check_status
from .errors import ValidationError
from .service_due import ServiceDue
from .status import Status


class ServiceItem(Enum):
    """Serviceable item, with its replacement interval in km."""

    RACOR_FILTER = ("racorFilter", "Fuel-water separator filter", 10000)
    ENGINE_OIL = ("engineOil", "Engine oil and oil filter", 20000)
    AIR_FILTER = ("airFilter", "Air filter", 40000)
    GEARBOX_OIL = ("gearboxOil", "Gearbox oil", 80000)
    DIFF_OIL = ("diffOil", "Differential oil", 80000)

    def __new__(cls, key: str, label: str, interval_km: int):
        obj = object.__new__(cls)
        obj._value_ = key
        obj.label = label
        obj.interval_km = interval_km
        return obj


class MaintenanceHistoryItem:
    """A previous install of a serviceable item."""

    def __init__(self, date: str, km: float):
        self.date = date
        self.km = km


class MaintenanceRecord:
    """Current install of an item plus earlier installs, newest first."""

    def __init__(
        self,
        install_km: float = 0,
        install_date: str = "",
        history: Optional[List[MaintenanceHistoryItem]] = None,
    ):
        self.install_km = install_km
        self.install_date = install_date
        self.history = history or []


def record_service(record: MaintenanceRecord, odometer: float, service_date: str) -> None:
    """
    Log a fresh install of the item.

    The current install moves to the front of the history (skipped when
    nothing was ever installed, i.e. install_km is 0), then the new
    reading becomes the current install.
    """
    if odometer is None or odometer <= 0:
        raise ValidationError("Service odometer must be positive")
    if not service_date:
        raise ValidationError("Service date is required")
    if record.install_km:
        record.history.insert(
            0, MaintenanceHistoryItem(date=record.install_date, km=record.install_km)
        )
    record.install_km = odometer
    record.install_date = service_date


def service_status(
    item: ServiceItem,
    record: MaintenanceRecord,
    current_km: float,
    due_soon_km: float = 1000,
) -> ServiceDue:
    """
    Read-only check of how much of the interval has been used.

    Due once current_km - install_km reaches the item's interval. An item
    never installed counts from km 0. Unknown only without an odometer.
    """
    if not current_km or current_km <= 0:
        return ServiceDue(item=item, status=Status.UNKNOWN)

    install_km = record.install_km or 0
    due_km = calc_due_km(install_km, item.interval_km)
    used = max(0, current_km - install_km)
    return ServiceDue(
        item=item,
        status=check_status(used, item.interval_km, due_soon_km),
        install_km=install_km,
        install_date=record.install_date or None,
        used_km=used,
        due_km=due_km,
        km_remaining=due_km - current_km,
        percent_used=calc_percent_used(used, item.interval_km),
    )


class MaintenanceFilters:
    """One maintenance record per serviceable item, plus free-text notes."""

    def __init__(
        self,
        records: Optional[Dict[ServiceItem, MaintenanceRecord]] = None,
        others: str = "",
    ):
        self.records = {item: MaintenanceRecord() for item in ServiceItem}
        self.records.update(records or {})
        self.others = others

    def get(self, item: ServiceItem) -> MaintenanceRecord:
        return self.records[item]

    def record_service(self, item: ServiceItem, odometer: float, service_date: str) -> None:
        record_service(self.records[item], odometer, service_date)

    def all_status(self, current_km: float, due_soon_km: float = 1000) -> List[ServiceDue]:
        """Service status for every item, in interval order."""
        return [
            service_status(item, self.records[item], current_km, due_soon_km)
            for item in ServiceItem
        ]
