"""Driver profile: who drives and which truck."""

from typing import Optional


class Profile:
    """Driver identity and truck registration, kept in the record store."""

    def __init__(
        self,
        id: str,
        driver_name: str,
        plate: str,
        company_name: str = "",
        truck_registration_date: Optional[str] = None,
        truck_initial_km: float = 0,
        truck_current_km: float = 0,
    ):
        self.id = id
        self.driver_name = driver_name
        self.plate = plate
        self.company_name = company_name
        self.truck_registration_date = truck_registration_date
        self.truck_initial_km = truck_initial_km
        self.truck_current_km = truck_current_km

    @property
    def name(self) -> str:
        """Human-readable profile name."""
        base = f"{self.driver_name} ({self.plate})"
        return f"{base} - {self.company_name}" if self.company_name else base
