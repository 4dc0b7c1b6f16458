"""Full-state JSON backup: export and wholesale import."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from jsonschema import ValidationError as SchemaError
from jsonschema import validate

from .errors import BackupError, FleetError, RecordStoreError
from .loader import (
    FILTERS_KEY,
    MISC_EXPENSES_KEY,
    RETIRED_TIRES_KEY,
    TIRES_KEY,
    filters_to_dict,
    misc_expense_to_dict,
    parse_filters,
    parse_misc_expense,
    parse_retired_tire,
    parse_tire,
    parse_trip,
    tire_to_dict,
    trip_to_dict,
)
from .rack import TireRack
from .state import AppState

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"


def load_schema() -> dict:
    """Load the backup JSON schema from schema.yaml."""
    with open(SCHEMA_PATH) as f:
        return yaml.safe_load(f)


def build_backup(state: AppState) -> Dict[str, Any]:
    """Everything worth keeping, in one JSON-ready document."""
    return {
        "trips": [trip_to_dict(t) for t in state.trips],
        "expenses": [misc_expense_to_dict(e) for e in state.misc_expenses],
        "tires": [tire_to_dict(t) for t in state.rack.list_tires()],
        "retired_tires": [tire_to_dict(t) for t in state.rack.retired],
        "filters": filters_to_dict(state.filters),
        "exportDate": datetime.now(timezone.utc).isoformat(),
    }


def export_backup(state: AppState, filename: Union[str, Path]) -> Path:
    """Write the backup document to a JSON file."""
    path = Path(filename)
    with open(path, "w", encoding="utf-8") as fp:
        json.dump(build_backup(state), fp, indent=2, ensure_ascii=False)
    logger.info("Exported backup to %s", path)
    return path


def parse_backup(text: str, schema: Optional[dict] = None) -> Dict[str, Any]:
    """
    Parse and check a backup document without touching any storage.

    Raises BackupError when the JSON is malformed, fails the schema, or
    holds records that can't be turned back into objects.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise BackupError(f"Backup is not valid JSON: {e}") from e
    try:
        validate(instance=data, schema=schema or load_schema())
    except SchemaError as e:
        where = ".".join(str(p) for p in e.path)
        raise BackupError(
            f"Backup does not match the schema: {e.message}"
            + (f" (at {where})" if where else "")
        ) from e

    try:
        for trip in data.get("trips") or []:
            parse_trip(trip)
        for expense in data.get("expenses") or []:
            parse_misc_expense(expense)
        if "tires" in data or "retired_tires" in data:
            # Builds the rack so duplicate positions are rejected up front
            TireRack(
                tires=[parse_tire(t) for t in data.get("tires") or []],
                retired=[parse_retired_tire(t) for t in data.get("retired_tires") or []],
            )
        if "filters" in data:
            parse_filters(data["filters"])
    except (FleetError, KeyError, TypeError, ValueError) as e:
        raise BackupError(f"Backup holds an invalid record: {e}") from e
    return data


def import_backup(state: AppState, text: str) -> int:
    """
    Replace local data with the sections present in a backup.

    The whole document is checked first; nothing is written unless it
    passes. The local sections are written next, then the trips are
    upserted by id into the record store in one write. When that write
    fails the local store is put back as it was. Returns the number of
    trips imported. Callers should reload AppState afterwards.
    """
    try:
        data = parse_backup(text)
    except BackupError as e:
        logger.error("Backup import rejected: %s", e)
        raise

    profile = state.require_profile()
    trips = [parse_trip(t) for t in data.get("trips") or []]

    values: Dict[str, Any] = {}
    if "expenses" in data:
        values[MISC_EXPENSES_KEY] = data["expenses"]
    if "tires" in data:
        values[TIRES_KEY] = data["tires"]
    if "retired_tires" in data:
        values[RETIRED_TIRES_KEY] = data["retired_tires"]
    if "filters" in data:
        values[FILTERS_KEY] = data["filters"]
    snapshot = state.store.load()
    if values:
        state.store.update(values)
    if trips:
        try:
            state.records.upsert_trips(profile.id, trips)
        except RecordStoreError:
            logger.error("Backup import stopped while saving trips; restoring local data")
            state.store.replace(snapshot)
            raise
    logger.info("Imported backup: %d trips, sections %s", len(trips), ", ".join(values))
    return len(trips)
