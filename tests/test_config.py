"""Test the report configuration."""

import pytest

from aiomacbattery.config import DEFAULT_MIN_HEALTH, ReportConfig, parse_recipients
from aiomacbattery.exceptions import ConfigurationError

from .const import ATTRIBUTE_ID, ATTRIBUTE_NAME

ENVIRON = {
    "BATTERY_ATTRIBUTE": f" {ATTRIBUTE_NAME} ",
    "BATTERY_REPORT_RECIPIENTS": "it@contoso.com; helpdesk@contoso.com,",
    "BATTERY_MIN_HEALTH": "75",
    "AZURE_TENANT_ID": "tenant",
    "AZURE_CLIENT_ID": "client",
    "AZURE_CLIENT_SECRET": "secret",
}


@pytest.fixture(name="environ")
def environ_fixture(monkeypatch: pytest.MonkeyPatch) -> None:
    """Put the report settings into the environment."""
    for variable, value in ENVIRON.items():
        monkeypatch.setenv(variable, value)


def test_parse_recipients() -> None:
    """Test splitting recipient lists."""
    assert parse_recipients("a@x.com, b@x.com;c@x.com") == [
        "a@x.com",
        "b@x.com",
        "c@x.com",
    ]
    assert parse_recipients("") == []
    assert parse_recipients(None) == []


@pytest.mark.usefixtures("environ")
def test_from_environment() -> None:
    """Test a config read from the environment only."""
    config = ReportConfig.from_options({})
    assert config.attribute == ATTRIBUTE_NAME
    assert config.recipients == ["it@contoso.com", "helpdesk@contoso.com"]
    assert config.min_health == 75
    assert config.has_client_credentials
    assert config.access_token is None
    assert config.output_dir == "."
    assert config.enrich_users is True


@pytest.mark.usefixtures("environ")
def test_options_override_environment() -> None:
    """Test that command line options win."""
    config = ReportConfig.from_options(
        {
            "attribute": ATTRIBUTE_ID,
            "recipients": ["cto@contoso.com"],
            "min_health": 60,
            "access_token": "token",
            "output_dir": "reports",
            "no_enrich": True,
        }
    )
    assert config.attribute == ATTRIBUTE_ID
    assert config.recipients == ["cto@contoso.com"]
    assert config.min_health == 60
    assert config.access_token == "token"
    assert config.tenant_id == "tenant"
    assert config.output_dir == "reports"
    assert config.enrich_users is False


@pytest.mark.usefixtures("environ")
def test_unset_options_fall_back() -> None:
    """Test that options left at None do not hide the environment."""
    config = ReportConfig.from_options(
        {"attribute": None, "min_health": None, "recipients": None}
    )
    assert config.attribute == ATTRIBUTE_NAME
    assert config.min_health == 75
    assert len(config.recipients) == 2


def test_default_min_health(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test the alert threshold when nothing sets it."""
    monkeypatch.setenv("BATTERY_MIN_HEALTH", "")
    config = ReportConfig.from_options(
        {"attribute": ATTRIBUTE_ID, "access_token": "token"}
    )
    assert config.min_health == DEFAULT_MIN_HEALTH
    assert config.recipients == []


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ("high", "valid integer"),
        ("120", "less than or equal to 100"),
        ("-1", "greater than or equal to 0"),
    ],
)
def test_invalid_min_health(
    monkeypatch: pytest.MonkeyPatch, value: str, message: str
) -> None:
    """Test that the threshold must be a percentage."""
    monkeypatch.setenv("BATTERY_MIN_HEALTH", value)
    with pytest.raises(ConfigurationError, match=message):
        ReportConfig.from_options({"attribute": ATTRIBUTE_ID, "access_token": "token"})


def test_missing_attribute(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that the attribute is required."""
    monkeypatch.setenv("GRAPH_ACCESS_TOKEN", "token")
    with pytest.raises(ConfigurationError, match="BATTERY_ATTRIBUTE"):
        ReportConfig.from_options({"attribute": "   "})


def test_missing_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that some way to get a token is required."""
    monkeypatch.setenv("AZURE_TENANT_ID", "tenant")
    with pytest.raises(ConfigurationError, match="GRAPH_ACCESS_TOKEN"):
        ReportConfig.from_options({"attribute": ATTRIBUTE_ID})
