"""Position-history ledger and mileage attribution for a single tire."""

from typing import Optional

from .errors import LedgerError
from .positions import MountPosition
from .tire import PositionSegment, Tire


def open_segment(
    tire: Tire, position: MountPosition, odometer: float, date: str
) -> PositionSegment:
    """
    Append an open segment for a tire at a new position.

    The previous segment, if any, must already be closed; two open
    segments would attribute the same kilometers twice.
    """
    if tire.current_segment is not None:
        raise LedgerError(
            f"Tire {tire.name} still has an open segment at "
            f"{tire.current_segment.position.label}"
        )
    segment = PositionSegment(position=position, start=odometer, date=date)
    tire.position_history.append(segment)
    return segment


def close_segment(tire: Tire, odometer: Optional[float]) -> None:
    """
    Close the tire's open segment at the given odometer.

    No-op when there is no open segment or the reading is unusable.
    Monotonicity is checked by the rotation/retirement workflows, not here.
    """
    if odometer is None or odometer < 0:
        return
    segment = tire.current_segment
    if segment is None:
        return
    segment.end = odometer


def total_run(tire: Tire, current_odometer: float) -> float:
    """
    Kilometers a tire has run across its whole position history.

    - Open segments run up to current_odometer
    - Spare-rack segments don't count (the tire was parked)
    - Negative deltas are floored to zero
    """
    total = 0
    for segment in tire.position_history:
        if segment.position.is_spare:
            continue
        end = segment.end if segment.end is not None else current_odometer
        try:
            delta = end - segment.start
        except TypeError:
            continue
        total += max(0, delta)
    return total
