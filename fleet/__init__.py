"""
Truck logbook models.

This package provides the records and workflows of a one-truck operation:
- MountPosition: Tire slots on the rig, spare slots tagged
- Tire / RetiredTire: Tires with their position history and events
- TireRack: Active tires, rotation and retirement
- MaintenanceFilters: Filter and oil installs with due status
- Trip: Freight legs, fuel purchases and expenses
- summarize_trip / route_segments: Settlement, profit and fuel efficiency
- AppState: Everything above, loaded from and saved to storage
"""

from .errors import (
    FleetError,
    ValidationError,
    OdometerError,
    NotFoundError,
    LedgerError,
    RecordStoreError,
    LocalStoreError,
    BackupError,
)
from .status import Status
from .positions import MountPosition, AXLE_LAYOUT, parse_position
from .tire import Tire, TireCondition, TireEvent, PositionSegment, RetiredTire
from .ledger import open_segment, close_segment, total_run
from .rack import TireRack
from .service_due import ServiceDue
from .maintenance import (
    ServiceItem,
    MaintenanceRecord,
    MaintenanceHistoryItem,
    MaintenanceFilters,
    record_service,
    service_status,
)
from .calculations import calc_due_km, calc_percent_used, check_status
from .trip import (
    Trip,
    TripStatus,
    Freight,
    FuelPurchase,
    TripExpenses,
    MiscExpense,
    ExpenseCategory,
)
from .profile import Profile
from .reports import (
    TripSummary,
    RouteSegment,
    ActiveTripStats,
    summarize_trip,
    route_segments,
    filter_trips,
    active_trip_stats,
)
from .loader import LocalStore
from .records import RecordStore, FileRecordStore
from .state import AppState
from .backup import export_backup, import_backup, parse_backup, load_schema
from .config import Settings

__all__ = [
    "FleetError",
    "ValidationError",
    "OdometerError",
    "NotFoundError",
    "LedgerError",
    "RecordStoreError",
    "LocalStoreError",
    "BackupError",
    "Status",
    "MountPosition",
    "AXLE_LAYOUT",
    "parse_position",
    "Tire",
    "TireCondition",
    "TireEvent",
    "PositionSegment",
    "RetiredTire",
    "open_segment",
    "close_segment",
    "total_run",
    "TireRack",
    "ServiceDue",
    "ServiceItem",
    "MaintenanceRecord",
    "MaintenanceHistoryItem",
    "MaintenanceFilters",
    "record_service",
    "service_status",
    "calc_due_km",
    "calc_percent_used",
    "check_status",
    "Trip",
    "TripStatus",
    "Freight",
    "FuelPurchase",
    "TripExpenses",
    "MiscExpense",
    "ExpenseCategory",
    "Profile",
    "TripSummary",
    "RouteSegment",
    "ActiveTripStats",
    "summarize_trip",
    "route_segments",
    "filter_trips",
    "active_trip_stats",
    "LocalStore",
    "RecordStore",
    "FileRecordStore",
    "AppState",
    "export_backup",
    "import_backup",
    "parse_backup",
    "load_schema",
    "Settings",
]
