#!/usr/bin/env python3
"""Tests for mount positions."""

import pytest

from fleet import AXLE_LAYOUT, MountPosition, ValidationError, parse_position


class TestMountPosition:
    """Tests for the MountPosition enum."""

    def test_codes_are_unique(self):
        codes = [p.value for p in MountPosition]
        assert len(codes) == len(set(codes))

    def test_slot_count(self):
        """2 steer, 4 drive, 4 tag, 12 trailer and 2 spare slots."""
        assert len(MountPosition) == 24

    def test_only_spare_rack_is_spare(self):
        spares = [p for p in MountPosition if p.is_spare]
        assert spares == [MountPosition.SPARE_1, MountPosition.SPARE_2]

    def test_label_and_axle(self):
        assert MountPosition.STEER_LEFT.label == "Steer left"
        assert MountPosition.TRAILER2_RIGHT_INNER.axle == "Trailer axle 2"


class TestAxleLayout:
    """Tests for AXLE_LAYOUT grouping."""

    def test_covers_every_position_once(self):
        flattened = [p for _, positions in AXLE_LAYOUT for p in positions]
        assert flattened == list(MountPosition)

    def test_axle_order(self):
        axles = [axle for axle, _ in AXLE_LAYOUT]
        assert axles[0] == "Steer axle"
        assert axles[-1] == "Spare rack"
        assert len(axles) == 7


class TestParsePosition:
    """Tests for parse_position."""

    def test_code(self):
        assert parse_position("steer-left") == MountPosition.STEER_LEFT

    def test_enum_name_case_insensitive(self):
        assert parse_position("DRIVE_RIGHT_OUTER") == MountPosition.DRIVE_RIGHT_OUTER

    def test_label(self):
        assert parse_position("Spare 2") == MountPosition.SPARE_2

    def test_passes_enum_through(self):
        assert parse_position(MountPosition.TAG_LEFT_INNER) is MountPosition.TAG_LEFT_INNER

    def test_legacy_labels(self):
        """Slot names from older mobile exports still resolve."""
        assert parse_position("LE Diant") == MountPosition.STEER_LEFT
        assert parse_position("Tração LE Fora") == MountPosition.DRIVE_LEFT_OUTER
        assert parse_position("C1 LE F") == MountPosition.TRAILER1_LEFT_OUTER
        assert parse_position("Estepe 1") == MountPosition.SPARE_1

    def test_whitespace_is_ignored(self):
        assert parse_position("  spare-1 ") == MountPosition.SPARE_1

    def test_unknown_raises(self):
        with pytest.raises(ValidationError, match="Unknown mount position"):
            parse_position("roof")

    def test_empty_raises(self):
        with pytest.raises(ValidationError):
            parse_position(None)
