"""Test the report notifiers."""

import pytest

from aiomacbattery.exceptions import NotificationError
from aiomacbattery.notify import Attachment, LogNotifier


async def test_log_notifier_report(caplog: pytest.LogCaptureFixture) -> None:
    """Test that the report is logged."""
    notifier = LogNotifier()
    with caplog.at_level("INFO"):
        await notifier.async_send_report(
            ["it@contoso.com"],
            "Battery report",
            "<html></html>",
            [Attachment("report.csv", b"Device\n", "text/csv")],
        )
    assert notifier.reports == [(("it@contoso.com",), "Battery report")]
    assert "report.csv" in caplog.text


async def test_log_notifier_requires_recipients() -> None:
    """Test that a report without recipients fails."""
    notifier = LogNotifier()
    with pytest.raises(NotificationError):
        await notifier.async_send_report([], "Battery report", "")
    with pytest.raises(NotificationError):
        await notifier.async_send_failure([], "boom")


async def test_log_notifier_failure() -> None:
    """Test the failure notice."""
    notifier = LogNotifier()
    await notifier.async_send_failure(["it@contoso.com"], "Graph is down")
    assert notifier.failures == [(("it@contoso.com",), "Graph is down")]
