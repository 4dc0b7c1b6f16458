"""Trip records: freight legs, fuel purchases and expenses."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


class TripStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class ExpenseCategory(Enum):
    """Categories offered for loose expenses."""

    TIRE_SHOP = "Tire shop"
    WASH = "Wash"
    FOOD = "Food"
    TOLL = "Toll"
    UNLOADING = "Unloading"
    LOADING_CREW = "Loading crew"
    ELECTRICIAN = "Electrician"
    MECHANIC = "Mechanic"
    TARPING = "Tarping"
    LOAD_SECURING = "Load securing"
    TIPS = "Tips"
    OTHER = "Other"


class Freight:
    """One freight leg of a trip (outbound or inbound)."""

    def __init__(
        self,
        date: str = "",
        company: str = "",
        destinations: str = "",
        value: float = 0,
        advance: float = 0,
        advance_maintenance: float = 0,
        advance_diesel: float = 0,
        toll_tag: float = 0,
        weight_tons: float = 0,
        start_km: float = 0,
    ):
        self.date = date
        self.company = company
        self.destinations = destinations
        self.value = value
        self.advance = advance
        self.advance_maintenance = advance_maintenance
        self.advance_diesel = advance_diesel
        self.toll_tag = toll_tag
        self.weight_tons = weight_tons
        self.start_km = start_km

    @property
    def total_advances(self) -> float:
        return (self.advance or 0) + (self.advance_maintenance or 0) + (self.advance_diesel or 0)

    @property
    def balance(self) -> float:
        """Freight still to be paid after the personal advance."""
        return (self.value or 0) - (self.advance or 0)


class FuelPurchase:
    """A fill-up; consecutive fill-ups delimit the route segments."""

    def __init__(
        self,
        station: str,
        arrival_km: float = 0,
        liters_diesel: float = 0,
        liters_arla: float = 0,
        total_cost: float = 0,
    ):
        self.station = station
        self.arrival_km = arrival_km
        self.liters_diesel = liters_diesel
        self.liters_arla = liters_arla
        self.total_cost = total_cost


class TripExpenses:
    """Itemised costs entered on the trip form."""

    def __init__(
        self,
        tire_shop: float = 0,
        binding: float = 0,
        unloading: float = 0,
        tip: float = 0,
        wash: float = 0,
        cash_toll: float = 0,
        others_desc: str = "",
        others_value: float = 0,
    ):
        self.tire_shop = tire_shop
        self.binding = binding
        self.unloading = unloading
        self.tip = tip
        self.wash = wash
        self.cash_toll = cash_toll
        self.others_desc = others_desc
        self.others_value = others_value

    @property
    def total(self) -> float:
        return sum(
            v or 0
            for v in (
                self.tire_shop,
                self.binding,
                self.unloading,
                self.tip,
                self.wash,
                self.cash_toll,
                self.others_value,
            )
        )


class MiscExpense:
    """A loose expense, held until the next trip completion absorbs it."""

    def __init__(
        self,
        date: str,
        category: ExpenseCategory,
        description: str,
        value: float,
        attachment: Optional[str] = None,
        id: Optional[str] = None,
    ):
        self.id = id or uuid.uuid4().hex
        self.date = date
        self.category = category
        self.description = description
        self.value = value
        self.attachment = attachment


class Trip:
    """A round trip: outbound leg, inbound leg, fuel and expenses."""

    def __init__(
        self,
        driver_name: str,
        plate: str,
        outbound: Optional[Freight] = None,
        inbound: Optional[Freight] = None,
        fuel: Optional[List[FuelPurchase]] = None,
        expenses: Optional[TripExpenses] = None,
        status: TripStatus = TripStatus.ACTIVE,
        created_at: Optional[str] = None,
        end_date: Optional[str] = None,
        end_km: Optional[float] = None,
        misc_expenses: Optional[List[MiscExpense]] = None,
        id: Optional[str] = None,
    ):
        self.id = id or uuid.uuid4().hex
        self.driver_name = driver_name
        self.plate = plate
        self.outbound = outbound or Freight()
        self.inbound = inbound or Freight()
        self.fuel = fuel or []
        self.expenses = expenses or TripExpenses()
        self.status = status
        self.created_at = created_at or datetime.now(timezone.utc).isoformat()
        self.end_date = end_date
        self.end_km = end_km
        self.misc_expenses = misc_expenses or []

    @property
    def is_active(self) -> bool:
        return self.status == TripStatus.ACTIVE

    @property
    def cargo_weight(self) -> float:
        """Tons carried over both legs."""
        return (self.outbound.weight_tons or 0) + (self.inbound.weight_tons or 0)

    @property
    def highest_odometer(self) -> float:
        """Largest odometer reading recorded anywhere on the trip."""
        readings = [
            self.outbound.start_km or 0,
            self.inbound.start_km or 0,
            self.end_km or 0,
        ]
        readings.extend(f.arrival_km or 0 for f in self.fuel)
        return max(readings)
