"""Active tire storage with the rotation and retirement workflows."""

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .errors import NotFoundError, OdometerError, ValidationError
from .ledger import close_segment, open_segment, total_run
from .positions import MountPosition, parse_position
from .tire import RetiredTire, Tire, TireCondition, TireEvent

logger = logging.getLogger(__name__)


def _check_odometer(tire: Tire, odometer: float) -> None:
    """Reject a reading that would close the open segment before it started."""
    if odometer is None or odometer < 0:
        raise ValidationError("Odometer reading must be zero or positive")
    segment = tire.current_segment
    if segment is not None and odometer < segment.start:
        raise OdometerError(
            f"Odometer {odometer:,.0f} is below the {segment.position.label} "
            f"segment start {segment.start:,.0f} for tire {tire.name}"
        )


def _service_duration(install_date: str, retired_at: str) -> Tuple[int, int]:
    """(months, days) between install and retirement, (0, 0) when unknown."""
    try:
        start = date.fromisoformat(install_date)
        end = date.fromisoformat(retired_at)
    except (TypeError, ValueError):
        return 0, 0
    if end < start:
        return 0, 0
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months, delta.days


class TireRack:
    """Tires mounted on the rig, keyed by position, plus the retired pile."""

    def __init__(
        self,
        tires: Optional[List[Tire]] = None,
        retired: Optional[List[RetiredTire]] = None,
    ):
        self.tires: Dict[MountPosition, Tire] = {}
        for tire in tires or []:
            if tire.position in self.tires:
                raise ValidationError(
                    f"Two tires claim position {tire.position.label}"
                )
            self.tires[tire.position] = tire
        self.retired = retired or []

    def get(self, position) -> Optional[Tire]:
        return self.tires.get(parse_position(position))

    def require(self, position) -> Tire:
        """Get the tire at a position or raise NotFoundError."""
        pos = parse_position(position)
        tire = self.tires.get(pos)
        if tire is None:
            raise NotFoundError(f"No tire mounted at {pos.label}")
        return tire

    def list_tires(self) -> List[Tire]:
        """Active tires in rig layout order."""
        return [self.tires[p] for p in MountPosition if p in self.tires]

    def assign(
        self,
        position,
        brand: str,
        code: str,
        condition: TireCondition = TireCondition.NEW,
        install_date: Optional[str] = None,
        install_km: float = 0,
    ) -> Tire:
        """
        Mount a new tire on an empty position, or edit the one already there.

        A new tire gets its first open segment at install_km. Editing only
        touches the descriptive fields; the position history is left alone.
        """
        pos = parse_position(position)
        brand = (brand or "").strip()
        code = (code or "").strip()
        if not brand or not code:
            raise ValidationError("Tire brand and code are required")
        if install_km is None or install_km < 0:
            raise ValidationError("Install odometer must be zero or positive")
        install_date = install_date or date.today().isoformat()

        existing = self.tires.get(pos)
        if existing is not None:
            existing.brand = brand
            existing.code = code
            existing.condition = condition
            existing.install_date = install_date
            existing.install_km = install_km
            return existing

        tire = Tire(
            position=pos,
            brand=brand,
            code=code,
            condition=condition,
            install_date=install_date,
            install_km=install_km,
        )
        open_segment(tire, pos, install_km, install_date)
        self.tires[pos] = tire
        logger.info("Mounted %s at %s", tire.name, pos.label)
        return tire

    def rotate(
        self, source, target, rotation_date: str, odometer: float
    ) -> Optional[List[Tire]]:
        """
        Move the tire at source to target, swapping with any tire there.

        Both ledgers are staged on copies and committed together, so a
        failure leaves the rack exactly as it was. Returns the moved tires,
        or None when source and target are the same slot.
        """
        source_pos = parse_position(source)
        target_pos = parse_position(target)
        if source_pos == target_pos:
            return None

        moving = self.require(source_pos)
        occupant = self.tires.get(target_pos)

        _check_odometer(moving, odometer)
        if occupant is not None:
            _check_odometer(occupant, odometer)

        moved = moving.copy()
        close_segment(moved, odometer)
        open_segment(moved, target_pos, odometer, rotation_date)
        moved.position = target_pos

        staged = dict(self.tires)
        del staged[source_pos]
        staged[target_pos] = moved
        result = [moved]

        if occupant is not None:
            displaced = occupant.copy()
            close_segment(displaced, odometer)
            open_segment(displaced, source_pos, odometer, rotation_date)
            displaced.position = source_pos
            staged[source_pos] = displaced
            result.append(displaced)

        self.tires = staged
        if occupant is not None:
            logger.info(
                "Swapped %s (%s) with %s (%s) at %s km",
                moved.name,
                source_pos.label,
                result[1].name,
                target_pos.label,
                odometer,
            )
        else:
            logger.info(
                "Rotated %s from %s to %s at %s km",
                moved.name,
                source_pos.label,
                target_pos.label,
                odometer,
            )
        return result

    def retire(
        self,
        position,
        retired_at: str,
        odometer: float,
        sent_to_retread: bool = False,
    ) -> RetiredTire:
        """Take a tire off the rig and file a snapshot with its mileage."""
        pos = parse_position(position)
        tire = self.require(pos)
        _check_odometer(tire, odometer)

        staged = tire.copy()
        km_ran = total_run(staged, odometer)
        close_segment(staged, odometer)
        months, days = _service_duration(staged.install_date, retired_at)

        record = RetiredTire(
            position=pos,
            brand=staged.brand,
            code=staged.code,
            total_km_ran=km_ran,
            retired_at=retired_at,
            removal_km=odometer,
            sent_to_retread=sent_to_retread,
            duration_months=months,
            duration_days=days,
            condition=staged.condition,
            install_date=staged.install_date,
            install_km=staged.install_km,
            events=staged.events,
            position_history=staged.position_history,
            id=staged.id,
        )

        remaining = dict(self.tires)
        del remaining[pos]
        self.retired = [record] + self.retired
        self.tires = remaining
        logger.info(
            "Retired %s from %s after %s km (retread=%s)",
            record.name,
            pos.label,
            km_ran,
            sent_to_retread,
        )
        return record

    def add_event(
        self, position, event_date: str, odometer: float, description: str
    ) -> TireEvent:
        description = (description or "").strip()
        if not description:
            raise ValidationError("Event description is required")
        tire = self.require(position)
        event = TireEvent(date=event_date, odometer=odometer, description=description)
        tire.add_event(event)
        return event

    def remove_event(self, position, event_id: str) -> None:
        tire = self.require(position)
        if not tire.remove_event(event_id):
            raise NotFoundError(f"No event {event_id} on tire {tire.name}")

    def events_between(
        self, start: str, end: Optional[str] = None
    ) -> List[Tuple[Tire, TireEvent]]:
        """Events of active tires dated within [start, end] (ISO dates)."""
        end = end or date.today().isoformat()
        found = []
        for tire in self.list_tires():
            for event in tire.events:
                if start <= event.date <= end:
                    found.append((tire, event))
        return found
