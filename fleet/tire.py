"""Tire records: active tires, their events and position history."""

import copy
import uuid
from enum import Enum
from typing import List, Optional

from .errors import LedgerError
from .positions import MountPosition


class TireCondition(Enum):
    NEW = "new"
    RETREADED = "retreaded"
    USED = "used"


class TireEvent:
    """Something that happened to a tire on the road (puncture, repair...)."""

    def __init__(
        self,
        date: str,
        odometer: float,
        description: str,
        id: Optional[str] = None,
    ):
        self.id = id or uuid.uuid4().hex
        self.date = date
        self.odometer = odometer
        self.description = description


class PositionSegment:
    """Odometer interval during which a tire occupied one position."""

    def __init__(
        self,
        position: MountPosition,
        start: float,
        date: str,
        end: Optional[float] = None,
    ):
        self.position = position
        self.start = start
        self.end = end
        self.date = date

    @property
    def is_open(self) -> bool:
        return self.end is None


class Tire:
    """A physical tire currently mounted on the rig."""

    def __init__(
        self,
        position: MountPosition,
        brand: str,
        code: str,
        condition: TireCondition = TireCondition.NEW,
        install_date: str = "",
        install_km: float = 0,
        events: Optional[List[TireEvent]] = None,
        position_history: Optional[List[PositionSegment]] = None,
        id: Optional[str] = None,
    ):
        self.id = id or uuid.uuid4().hex
        self.position = position
        self.brand = brand
        self.code = code
        self.condition = condition
        self.install_date = install_date
        self.install_km = install_km
        self.events = events or []
        self.position_history = position_history or []

    @property
    def name(self) -> str:
        """Human-readable tire name."""
        return f"{self.brand} {self.code}"

    @property
    def current_segment(self) -> Optional[PositionSegment]:
        """The open segment at the end of the history, if any."""
        if self.position_history and self.position_history[-1].is_open:
            return self.position_history[-1]
        return None

    def add_event(self, event: TireEvent) -> None:
        self.events.append(event)

    def remove_event(self, event_id: str) -> bool:
        """Drop an event by id. Returns False when no event matched."""
        kept = [e for e in self.events if e.id != event_id]
        removed = len(kept) != len(self.events)
        self.events = kept
        return removed

    def copy(self) -> "Tire":
        """Deep copy, so a workflow can stage changes before committing."""
        return copy.deepcopy(self)


class RetiredTire(Tire):
    """Snapshot of a tire taken off the rig. Never modified afterwards."""

    def __init__(
        self,
        position: MountPosition,
        brand: str,
        code: str,
        total_km_ran: float,
        retired_at: str,
        removal_km: float,
        sent_to_retread: bool = False,
        duration_months: int = 0,
        duration_days: int = 0,
        condition: TireCondition = TireCondition.NEW,
        install_date: str = "",
        install_km: float = 0,
        events: Optional[List[TireEvent]] = None,
        position_history: Optional[List[PositionSegment]] = None,
        id: Optional[str] = None,
    ):
        super().__init__(
            position,
            brand,
            code,
            condition,
            install_date,
            install_km,
            events,
            position_history,
            id,
        )
        self.total_km_ran = total_km_ran
        self.retired_at = retired_at
        self.removal_km = removal_km
        self.sent_to_retread = sent_to_retread
        self.duration_months = duration_months
        self.duration_days = duration_days

    def add_event(self, event: TireEvent) -> None:
        raise LedgerError(f"Retired tire {self.name} can't be changed")

    def remove_event(self, event_id: str) -> bool:
        raise LedgerError(f"Retired tire {self.name} can't be changed")
