"""Helper functions for service due calculations."""

from typing import Optional

from .status import Status


def calc_due_km(install_km: Optional[float], interval: float) -> Optional[float]:
    """Odometer reading at which the item needs replacing again."""
    if install_km is None:
        return None
    return install_km + interval


def calc_percent_used(used: float, interval: float) -> float:
    """Share of the interval already consumed, capped to 0..100."""
    if interval <= 0:
        return 100.0
    return min(max(used / interval * 100, 0.0), 100.0)


def check_status(current: float, due: float, soon_threshold: float) -> Status:
    """Determine status by comparing current value to due threshold."""
    if current >= due:
        return Status.OVERDUE
    if current >= due - soon_threshold:
        return Status.DUE_SOON
    return Status.OK
