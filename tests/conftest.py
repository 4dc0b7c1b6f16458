"""Shared fixtures."""

import pytest

from fleet import AppState, FileRecordStore, LocalStore


def load_state(tmp_path, user_id="u1"):
    return AppState.load(
        LocalStore(tmp_path / "local.yaml"),
        FileRecordStore(tmp_path / "records.yaml"),
        user_id,
    )


@pytest.fixture
def state(tmp_path):
    """State with a registered driver and nothing else."""
    state = load_state(tmp_path)
    state.register_profile("u1", "Joao Silva", "abc1d23", truck_initial_km=100000)
    return state
