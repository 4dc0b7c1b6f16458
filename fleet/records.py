"""Record store for the driver profile and trip history."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

import yaml

from .errors import RecordStoreError
from .loader import (
    parse_profile,
    parse_trip,
    profile_to_dict,
    read_yaml_file,
    trip_to_dict,
    write_yaml_file,
)
from .profile import Profile
from .trip import Trip

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """
    Profile and trip records keyed by user id / trip id.

    Trip upserts are last-write-wins; there is no concurrency token.
    Implementations raise RecordStoreError on any read or write failure.
    """

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[Profile]:
        ...

    @abstractmethod
    def update_profile(self, profile: Profile) -> None:
        ...

    @abstractmethod
    def list_trips(self, user_id: str) -> List[Trip]:
        """Trips of a user, newest first."""

    @abstractmethod
    def upsert_trip(self, user_id: str, trip: Trip) -> Trip:
        """Insert or replace a trip by id and return the stored copy."""

    @abstractmethod
    def upsert_trips(self, user_id: str, trips: List[Trip]) -> None:
        """Insert or replace several trips in a single write."""


class FileRecordStore(RecordStore):
    """RecordStore kept in a YAML file, one section per table."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> dict:
        try:
            data = read_yaml_file(self.path)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Could not read records from %s: %s", self.path, e)
            raise RecordStoreError(f"Could not read records: {e}") from e
        data.setdefault("profiles", {})
        data.setdefault("trips", {})
        return data

    def _write(self, data: dict) -> None:
        try:
            write_yaml_file(self.path, data)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Could not write records to %s: %s", self.path, e)
            raise RecordStoreError(f"Could not write records: {e}") from e

    def get_profile(self, user_id: str) -> Optional[Profile]:
        raw = self._read()["profiles"].get(user_id)
        return parse_profile(raw) if raw else None

    def update_profile(self, profile: Profile) -> None:
        data = self._read()
        data["profiles"][profile.id] = profile_to_dict(profile)
        self._write(data)

    def list_trips(self, user_id: str) -> List[Trip]:
        rows = self._read()["trips"].get(user_id) or []
        trips = [parse_trip(r) for r in rows]
        return sorted(trips, key=lambda t: t.created_at or "", reverse=True)

    @staticmethod
    def _put(rows: list, trip: Trip) -> dict:
        row = trip_to_dict(trip)
        for i, existing in enumerate(rows):
            if existing.get("id") == trip.id:
                rows[i] = row
                break
        else:
            rows.append(row)
        return row

    def upsert_trip(self, user_id: str, trip: Trip) -> Trip:
        data = self._read()
        row = self._put(data["trips"].setdefault(user_id, []), trip)
        self._write(data)
        return parse_trip(row)

    def upsert_trips(self, user_id: str, trips: List[Trip]) -> None:
        data = self._read()
        rows = data["trips"].setdefault(user_id, [])
        for trip in trips:
            self._put(rows, trip)
        self._write(data)
