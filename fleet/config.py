"""Runtime settings read from the environment."""

import os
from pathlib import Path
from typing import Optional, Union


DEFAULT_DATA_DIR = Path.home() / ".truckbook"


class Settings:
    """Settings shared by the CLI and the web app."""

    def __init__(
        self,
        data_dir: Union[str, Path, None] = None,
        user_id: Optional[str] = None,
        commission_rate: Optional[float] = None,
        efficiency_margin: Optional[float] = None,
        due_soon_km: Optional[float] = None,
        log_level: Optional[str] = None,
    ):
        env = os.environ
        self.data_dir = Path(
            data_dir or env.get("TRUCKBOOK_DATA_DIR") or DEFAULT_DATA_DIR
        )
        self.user_id = user_id or env.get("TRUCKBOOK_USER_ID", "local")
        self.commission_rate = (
            commission_rate
            if commission_rate is not None
            else float(env.get("TRUCKBOOK_COMMISSION_RATE", "0.13"))
        )
        self.efficiency_margin = (
            efficiency_margin
            if efficiency_margin is not None
            else float(env.get("TRUCKBOOK_EFFICIENCY_MARGIN", "1.0"))
        )
        self.due_soon_km = (
            due_soon_km
            if due_soon_km is not None
            else float(env.get("TRUCKBOOK_DUE_SOON_KM", "1000"))
        )
        self.log_level = (log_level or env.get("TRUCKBOOK_LOG_LEVEL", "WARNING")).upper()
        self.secret_key = env.get("SECRET_KEY", "dev-secret-key-change-in-prod")

    @property
    def store_path(self) -> Path:
        """YAML file backing the local key-value store."""
        return self.data_dir / "local.yaml"

    @property
    def records_path(self) -> Path:
        """YAML file backing the profile and trip records."""
        return self.data_dir / "records.yaml"
