#!/usr/bin/env python3
"""Tests for ServiceDue dataclass."""
from fleet import ServiceDue, ServiceItem, Status


class TestServiceDue:
    """Tests for ServiceDue dataclass."""

    def test_is_due_overdue(self):
        """is_due returns True when OVERDUE."""
        svc = ServiceDue(item=ServiceItem.ENGINE_OIL, status=Status.OVERDUE)
        assert svc.is_due is True

    def test_is_due_due_soon(self):
        """DUE_SOON is a warning, not yet due."""
        svc = ServiceDue(item=ServiceItem.ENGINE_OIL, status=Status.DUE_SOON)
        assert svc.is_due is False

    def test_is_due_ok(self):
        svc = ServiceDue(item=ServiceItem.ENGINE_OIL, status=Status.OK)
        assert svc.is_due is False

    def test_is_due_unknown(self):
        """is_due returns False when nothing was ever installed."""
        svc = ServiceDue(item=ServiceItem.ENGINE_OIL, status=Status.UNKNOWN)
        assert svc.is_due is False

    def test_defaults(self):
        svc = ServiceDue(item=ServiceItem.AIR_FILTER, status=Status.UNKNOWN)
        assert svc.install_km is None
        assert svc.used_km is None
        assert svc.km_remaining is None
        assert svc.percent_used == 0.0
