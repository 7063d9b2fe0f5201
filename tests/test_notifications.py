"""
Tests for notification rendering.
"""

import logging
from pathlib import Path

import pytest

from elankit.notifications import Notification, NotificationKind, log_notification


@pytest.mark.unit
class TestNotification:
    def test_every_kind_renders(self):
        for kind in NotificationKind:
            text = str(Notification(kind, toolchain="stable", path=Path("/x")))
            assert text

    def test_levels(self):
        assert Notification(NotificationKind.INSTALLED_TOOLCHAIN).level == logging.INFO
        assert Notification(NotificationKind.LOOKING_FOR_TOOLCHAIN).level == logging.DEBUG
        assert (
            Notification(NotificationKind.TELEMETRY_CLEANUP_ERROR).level
            == logging.WARNING
        )

    def test_log_notification(self, caplog):
        with caplog.at_level(logging.INFO, logger="elankit.notifications"):
            log_notification(
                Notification(NotificationKind.INSTALLED_TOOLCHAIN, toolchain="stable")
            )

        assert "toolchain 'stable' installed" in caplog.text
