"""YAML-backed local store and the dict converters for every record type."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import LocalStoreError, ValidationError
from .maintenance import (
    MaintenanceFilters,
    MaintenanceHistoryItem,
    MaintenanceRecord,
    ServiceItem,
)
from .positions import parse_position
from .profile import Profile
from .tire import PositionSegment, RetiredTire, Tire, TireCondition, TireEvent
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

MISC_EXPENSES_KEY = "truck_misc_expenses"
TIRES_KEY = "truck_tires"
RETIRED_TIRES_KEY = "truck_retired_tires"
FILTERS_KEY = "truck_filters"
STATIONS_KEY = "truck_stations"
COMPANIES_KEY = "truck_companies"

STORE_KEYS = (
    MISC_EXPENSES_KEY,
    TIRES_KEY,
    RETIRED_TIRES_KEY,
    FILTERS_KEY,
    STATIONS_KEY,
    COMPANIES_KEY,
)

_LEGACY_CONDITIONS = {
    "novo": TireCondition.NEW,
    "recapado": TireCondition.RETREADED,
    "usado": TireCondition.USED,
}

_LEGACY_CATEGORIES = {
    "borracharia": ExpenseCategory.TIRE_SHOP,
    "lavagem": ExpenseCategory.WASH,
    "alimentação": ExpenseCategory.FOOD,
    "pedágio": ExpenseCategory.TOLL,
    "descarga": ExpenseCategory.UNLOADING,
    "serviços de chapa": ExpenseCategory.LOADING_CREW,
    "eletricista": ExpenseCategory.ELECTRICIAN,
    "mecânica": ExpenseCategory.MECHANIC,
    "enlonamento": ExpenseCategory.TARPING,
    "amarração de carga": ExpenseCategory.LOAD_SECURING,
    "gorjetas": ExpenseCategory.TIPS,
    "outros": ExpenseCategory.OTHER,
}


def dump_yaml(data: Any, fp) -> None:
    """Write YAML the same way everywhere."""
    yaml.dump(
        data,
        fp,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=120,
    )


def write_yaml_file(filename: Union[str, Path], data: Any) -> None:
    """Write YAML to a temp file and swap it in, so readers never see half a file."""
    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w") as fp:
        dump_yaml(data, fp)
    os.replace(tmp, path)


def read_yaml_file(filename: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML mapping, or an empty dict when the file doesn't exist."""
    path = Path(filename)
    if not path.exists():
        return {}
    with open(path, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader)
    return data or {}


def parse_condition(value: Optional[str]) -> TireCondition:
    """Accept the enum value or the labels of older exports."""
    if not value:
        return TireCondition.NEW
    key = str(value).strip().lower()
    if key in _LEGACY_CONDITIONS:
        return _LEGACY_CONDITIONS[key]
    try:
        return TireCondition(key)
    except ValueError:
        raise ValidationError(f"Unknown tire condition: {value!r}") from None


def parse_category(value: Optional[str]) -> ExpenseCategory:
    """Accept the enum value, enum name or the labels of older exports."""
    if not value:
        return ExpenseCategory.OTHER
    key = str(value).strip()
    for category in ExpenseCategory:
        if key.lower() in (category.value.lower(), category.name.lower()):
            return category
    if key.lower() in _LEGACY_CATEGORIES:
        return _LEGACY_CATEGORIES[key.lower()]
    raise ValidationError(f"Unknown expense category: {value!r}")


# =============================================================================
# Tires
# =============================================================================


def _event_to_dict(event: TireEvent) -> Dict[str, Any]:
    return {
        "id": event.id,
        "date": event.date,
        "km": event.odometer,
        "description": event.description,
    }


def _parse_event(dct: Dict[str, Any]) -> TireEvent:
    return TireEvent(
        date=dct.get("date", ""),
        odometer=dct.get("km", 0),
        description=dct.get("description", ""),
        id=dct.get("id"),
    )


def _segment_to_dict(segment: PositionSegment) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "position": segment.position.value,
        "startKm": segment.start,
        "date": segment.date,
    }
    if segment.end is not None:
        d["endKm"] = segment.end
    return d


def _parse_segment(dct: Dict[str, Any]) -> PositionSegment:
    return PositionSegment(
        position=parse_position(dct["position"]),
        start=dct.get("startKm", 0),
        date=dct.get("date", ""),
        end=dct.get("endKm"),
    )


def tire_to_dict(tire: Tire) -> Dict[str, Any]:
    """Serialize a Tire to the stored dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": tire.id,
        "position": tire.position.value,
        "brand": tire.brand,
        "tireCode": tire.code,
        "condition": tire.condition.value,
        "date": tire.install_date,
        "installationKm": tire.install_km,
        "events": [_event_to_dict(e) for e in tire.events],
        "positionHistory": [_segment_to_dict(s) for s in tire.position_history],
    }
    if isinstance(tire, RetiredTire):
        d["totalKmRan"] = tire.total_km_ran
        d["retiredAt"] = tire.retired_at
        d["removalKm"] = tire.removal_km
        d["sentToRetread"] = tire.sent_to_retread
        d["durationMonths"] = tire.duration_months
        d["durationDays"] = tire.duration_days
    return d


def parse_tire(dct: Dict[str, Any]) -> Tire:
    return Tire(
        position=parse_position(dct["position"]),
        brand=dct.get("brand", ""),
        code=dct.get("tireCode", ""),
        condition=parse_condition(dct.get("condition")),
        install_date=dct.get("date", ""),
        install_km=dct.get("installationKm", 0),
        events=[_parse_event(e) for e in dct.get("events") or []],
        position_history=[_parse_segment(s) for s in dct.get("positionHistory") or []],
        id=dct.get("id"),
    )


def parse_retired_tire(dct: Dict[str, Any]) -> RetiredTire:
    return RetiredTire(
        position=parse_position(dct["position"]),
        brand=dct.get("brand", ""),
        code=dct.get("tireCode", ""),
        total_km_ran=dct.get("totalKmRan", 0),
        retired_at=dct.get("retiredAt", ""),
        removal_km=dct.get("removalKm", 0),
        sent_to_retread=bool(dct.get("sentToRetread", False)),
        duration_months=dct.get("durationMonths", 0),
        duration_days=dct.get("durationDays", 0),
        condition=parse_condition(dct.get("condition")),
        install_date=dct.get("date", ""),
        install_km=dct.get("installationKm", 0),
        events=[_parse_event(e) for e in dct.get("events") or []],
        position_history=[_parse_segment(s) for s in dct.get("positionHistory") or []],
        id=dct.get("id"),
    )


# =============================================================================
# Maintenance
# =============================================================================


def filters_to_dict(filters: MaintenanceFilters) -> Dict[str, Any]:
    d: Dict[str, Any] = {}
    for item in ServiceItem:
        record = filters.get(item)
        d[item.value] = {
            "installKm": record.install_km,
            "installDate": record.install_date,
            "history": [{"date": h.date, "km": h.km} for h in record.history],
        }
    d["others"] = filters.others
    return d


def parse_filters(dct: Optional[Dict[str, Any]]) -> MaintenanceFilters:
    dct = dct or {}
    records = {}
    for item in ServiceItem:
        raw = dct.get(item.value)
        if not raw:
            continue
        records[item] = MaintenanceRecord(
            install_km=raw.get("installKm", 0),
            install_date=raw.get("installDate", ""),
            history=[
                MaintenanceHistoryItem(date=h.get("date", ""), km=h.get("km", 0))
                for h in raw.get("history") or []
            ],
        )
    return MaintenanceFilters(records=records, others=dct.get("others") or "")


# =============================================================================
# Trips and expenses
# =============================================================================


def _freight_to_dict(freight: Freight) -> Dict[str, Any]:
    return {
        "date": freight.date,
        "company": freight.company,
        "destinations": freight.destinations,
        "value": freight.value,
        "advance": freight.advance,
        "advanceMaintenance": freight.advance_maintenance,
        "advanceDiesel": freight.advance_diesel,
        "balance": freight.balance,
        "tollTag": freight.toll_tag,
        "weightTons": freight.weight_tons,
        "startKm": freight.start_km,
    }


def _parse_freight(dct: Optional[Dict[str, Any]]) -> Freight:
    dct = dct or {}
    return Freight(
        date=dct.get("date", ""),
        company=dct.get("company", ""),
        destinations=dct.get("destinations", ""),
        value=dct.get("value", 0),
        advance=dct.get("advance", 0),
        advance_maintenance=dct.get("advanceMaintenance", 0),
        advance_diesel=dct.get("advanceDiesel", 0),
        toll_tag=dct.get("tollTag", 0),
        weight_tons=dct.get("weightTons", 0),
        start_km=dct.get("startKm", 0),
    )


def _fuel_to_dict(purchase: FuelPurchase) -> Dict[str, Any]:
    return {
        "station": purchase.station,
        "arrivalKm": purchase.arrival_km,
        "litersDiesel": purchase.liters_diesel,
        "litersArla": purchase.liters_arla,
        "totalCost": purchase.total_cost,
    }


def _parse_fuel(dct: Dict[str, Any]) -> FuelPurchase:
    return FuelPurchase(
        station=dct.get("station", ""),
        arrival_km=dct.get("arrivalKm", 0),
        liters_diesel=dct.get("litersDiesel", 0),
        liters_arla=dct.get("litersArla", 0),
        total_cost=dct.get("totalCost", 0),
    )


def _expenses_to_dict(expenses: TripExpenses) -> Dict[str, Any]:
    return {
        "tireShop": expenses.tire_shop,
        "binding": expenses.binding,
        "unloading": expenses.unloading,
        "tip": expenses.tip,
        "wash": expenses.wash,
        "cashToll": expenses.cash_toll,
        "othersDesc": expenses.others_desc,
        "othersValue": expenses.others_value,
    }


def _parse_expenses(dct: Optional[Dict[str, Any]]) -> TripExpenses:
    dct = dct or {}
    return TripExpenses(
        tire_shop=dct.get("tireShop", 0),
        binding=dct.get("binding", 0),
        unloading=dct.get("unloading", 0),
        tip=dct.get("tip", 0),
        wash=dct.get("wash", 0),
        cash_toll=dct.get("cashToll", 0),
        others_desc=dct.get("othersDesc", ""),
        others_value=dct.get("othersValue", 0),
    )


def misc_expense_to_dict(expense: MiscExpense) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": expense.id,
        "date": expense.date,
        "category": expense.category.value,
        "description": expense.description,
        "value": expense.value,
    }
    if expense.attachment:
        d["attachment"] = expense.attachment
    return d


def parse_misc_expense(dct: Dict[str, Any]) -> MiscExpense:
    return MiscExpense(
        date=dct.get("date", ""),
        category=parse_category(dct.get("category")),
        description=dct.get("description", ""),
        value=dct.get("value", 0),
        attachment=dct.get("attachment") or None,
        id=dct.get("id"),
    )


def trip_to_dict(trip: Trip) -> Dict[str, Any]:
    """Serialize a Trip to the stored dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": trip.id,
        "driverName": trip.driver_name,
        "plate": trip.plate,
        "outbound": _freight_to_dict(trip.outbound),
        "inbound": _freight_to_dict(trip.inbound),
        "diesel": [_fuel_to_dict(f) for f in trip.fuel],
        "expenses": _expenses_to_dict(trip.expenses),
        "status": trip.status.value,
        "createdAt": trip.created_at,
    }
    if trip.end_date is not None:
        d["endDate"] = trip.end_date
    if trip.end_km is not None:
        d["endKm"] = trip.end_km
    d["miscExpenses"] = [misc_expense_to_dict(e) for e in trip.misc_expenses]
    return d


def parse_trip(dct: Dict[str, Any]) -> Trip:
    return Trip(
        driver_name=dct.get("driverName", ""),
        plate=dct.get("plate", ""),
        outbound=_parse_freight(dct.get("outbound")),
        inbound=_parse_freight(dct.get("inbound")),
        fuel=[_parse_fuel(f) for f in dct.get("diesel") or []],
        expenses=_parse_expenses(dct.get("expenses")),
        status=TripStatus(dct.get("status", "active")),
        created_at=dct.get("createdAt"),
        end_date=dct.get("endDate"),
        end_km=dct.get("endKm"),
        misc_expenses=[parse_misc_expense(e) for e in dct.get("miscExpenses") or []],
        id=dct.get("id"),
    )


def profile_to_dict(profile: Profile) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": profile.id,
        "driverName": profile.driver_name,
        "plate": profile.plate,
        "companyName": profile.company_name,
        "truckInitialKm": profile.truck_initial_km,
        "truckCurrentKm": profile.truck_current_km,
    }
    if profile.truck_registration_date is not None:
        d["truckRegistrationDate"] = profile.truck_registration_date
    return d


def parse_profile(dct: Dict[str, Any]) -> Profile:
    return Profile(
        id=dct["id"],
        driver_name=dct.get("driverName", ""),
        plate=dct.get("plate", ""),
        company_name=dct.get("companyName", ""),
        truck_registration_date=dct.get("truckRegistrationDate"),
        truck_initial_km=dct.get("truckInitialKm", 0),
        truck_current_km=dct.get("truckCurrentKm", 0),
    )


def names_to_list(names: List[str]) -> List[Dict[str, str]]:
    return [{"id": str(i + 1), "name": n} for i, n in enumerate(names)]


def parse_names(items: Optional[List[Dict[str, Any]]]) -> List[str]:
    return [i["name"] for i in items or [] if i.get("name")]


# =============================================================================
# Local store
# =============================================================================


class LocalStore:
    """
    Namespaced key-value store persisted as a single YAML file.

    Values are the plain dict/list shapes produced by the *_to_dict
    converters. Writes replace the whole file in one step.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        try:
            return read_yaml_file(self.path)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Could not read local data from %s: %s", self.path, e)
            raise LocalStoreError(f"Local data at {self.path} is unreadable: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def update(self, values: Dict[str, Any]) -> None:
        """Overwrite the given keys, leaving the others untouched."""
        data = self.load()
        data.update(values)
        self.replace(data)
        logger.debug("Saved %s to %s", ", ".join(values), self.path)

    def replace(self, data: Dict[str, Any]) -> None:
        """Write data as the whole content of the store."""
        try:
            write_yaml_file(self.path, data)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Could not write local data to %s: %s", self.path, e)
            raise LocalStoreError(f"Could not save local data: {e}") from e
