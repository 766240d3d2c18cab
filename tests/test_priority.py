"""
Tests for best-effort priority lowering. Nothing here may raise.
"""
from unittest import mock

import psutil

from finddup.utils import priority


class TestLowerPriority:
    def test_applies_nice_and_ionice(self, monkeypatch):
        process = mock.Mock()
        monkeypatch.setattr(priority.os, "nice", mock.Mock(), raising=False)
        monkeypatch.setattr(priority.psutil, "Process", mock.Mock(return_value=process))
        monkeypatch.setattr(priority.sys, "platform", "linux")

        assert priority.lower_priority() is True
        priority.os.nice.assert_called_once_with(priority.NICE_INCREMENT)
        process.ionice.assert_called_once()

    def test_failures_are_ignored(self, monkeypatch):
        process = mock.Mock()
        process.ionice.side_effect = psutil.AccessDenied()
        monkeypatch.setattr(priority.os, "nice", mock.Mock(side_effect=OSError("denied")), raising=False)
        monkeypatch.setattr(priority.psutil, "Process", mock.Mock(return_value=process))
        monkeypatch.setattr(priority.sys, "platform", "linux")

        assert priority.lower_priority() is False

    def test_unsupported_platform_skips_ionice(self, monkeypatch):
        process = mock.Mock()
        monkeypatch.setattr(priority.os, "nice", mock.Mock(side_effect=OSError("denied")), raising=False)
        monkeypatch.setattr(priority.psutil, "Process", mock.Mock(return_value=process))
        monkeypatch.setattr(priority.sys, "platform", "sunos5")

        assert priority.lower_priority() is False
        process.ionice.assert_not_called()
