"""ServiceDue dataclass for calculated maintenance status."""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .status import Status

if TYPE_CHECKING:
    from .maintenance import ServiceItem


@dataclass
class ServiceDue:
    """Calculated service due information for one serviceable item."""

    item: "ServiceItem"
    status: Status
    install_km: Optional[float] = None
    install_date: Optional[str] = None
    used_km: Optional[float] = None
    due_km: Optional[float] = None
    km_remaining: Optional[float] = None
    percent_used: float = 0.0

    @property
    def is_due(self) -> bool:
        return self.status == Status.OVERDUE
