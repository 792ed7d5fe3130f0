"""Test helpers for aiomacbattery."""

import zoneinfo
from collections.abc import AsyncGenerator, Generator
from datetime import UTC, datetime
from types import TracebackType
from typing import Self

import aiohttp
import jwt
import pytest
from aioresponses import aioresponses
from syrupy import SnapshotAssertion

from aiomacbattery.auth import AbstractAuth
from aiomacbattery.const import GRAPH_API_BASE_URL
from aiomacbattery.model import DeviceBatteryRow
from aiomacbattery.session import BatteryFleetSession

from .syrupy import BatteryFleetSnapshotExtension

TEST_TZ = zoneinfo.ZoneInfo("Europe/Berlin")

REPORT_VARIABLES = (
    "BATTERY_ATTRIBUTE",
    "BATTERY_REPORT_RECIPIENTS",
    "BATTERY_MIN_HEALTH",
    "BATTERY_REPORT_DIR",
    "BATTERY_ENRICH_USERS",
    "GRAPH_ACCESS_TOKEN",
    "AZURE_TENANT_ID",
    "AZURE_CLIENT_ID",
    "AZURE_CLIENT_SECRET",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove report settings of the host from the environment."""
    for variable in REPORT_VARIABLES:
        monkeypatch.delenv(variable, raising=False)


@pytest.fixture(name="snapshot")
def snapshot_assertion(snapshot: SnapshotAssertion) -> SnapshotAssertion:
    """Return snapshot assertion fixture with the battery fleet extension."""
    return snapshot.use_extension(BatteryFleetSnapshotExtension)


@pytest.fixture(name="jwt_token")
def mock_jwt_token() -> str:
    """Return an application token with the device management role."""
    return jwt.encode(
        {
            "aud": "https://graph.microsoft.com",
            "iss": "https://sts.windows.net/00000000-0000-4000-8000-000000000000/",
            "iat": 1727769600,
            "exp": 4102444800,
            "tid": "00000000-0000-4000-8000-000000000000",
            "appid": "c0ffee00-0000-4000-8000-000000000000",
            "roles": [
                "DeviceManagementConfiguration.Read.All",
                "User.Read.All",
            ],
        },
        "a-test-signing-key-that-is-long-enough-for-hs256",
        algorithm="HS256",
    )


class MockAuth(AbstractAuth):
    """Auth returning a fixed token."""

    def __init__(self, websession: aiohttp.ClientSession, token: str) -> None:
        """Initialize the auth."""
        super().__init__(websession, GRAPH_API_BASE_URL)
        self.token = token

    async def async_get_access_token(self) -> str:
        return self.token

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: None | type[BaseException],
        exc_value: None | BaseException,
        traceback: None | TracebackType,
    ) -> bool:
        await self._websession.close()
        return False


@pytest.fixture(name="auth")
async def mock_auth(jwt_token: str) -> AsyncGenerator[AbstractAuth, None]:
    """Return an auth on a real client session."""
    async with (
        aiohttp.ClientSession() as session,
        MockAuth(session, jwt_token) as auth,
    ):
        yield auth


@pytest.fixture(name="aio_client")
async def mock_aio_client(
    auth: AbstractAuth,
) -> AsyncGenerator[BatteryFleetSession, None]:
    """Return a fleet session without user enrichment."""
    fleet_client = BatteryFleetSession(auth, enrich_users=False)
    yield fleet_client
    await fleet_client.close()


@pytest.fixture(name="responses")
def aioresponses_fixture() -> Generator[aioresponses, None, None]:
    """Return aioresponses fixture."""
    with aioresponses() as mocked_responses:
        yield mocked_responses


@pytest.fixture(name="rows")
def mock_rows() -> list[DeviceBatteryRow]:
    """Return rows covering healthy, worn and unknown batteries."""
    return [
        DeviceBatteryRow(
            id="rs-1",
            device_id="dev-1",
            device_name="MBP-ALICE",
            last_update=datetime(2025, 10, 1, 8, 15, 30, tzinfo=UTC),
            run_state="success",
            user_principal_name="alice@contoso.com",
            health_percent=85,
            cycle_count=423,
            full_charge_capacity=4200,
            design_capacity=4941,
            current_capacity=3890,
            is_charging=True,
            external_power_connected=False,
            time_remaining=182,
            voltage=12100,
            condition="Normal",
            over_threshold=False,
        ),
        DeviceBatteryRow(
            id="rs-3",
            device_id="dev-3",
            device_name="MBP, Lab",
            last_update=datetime(2025, 1, 15, 23, 30, tzinfo=UTC),
            run_state="success",
        ),
        DeviceBatteryRow(
            id="rs-4",
            device_id="dev-4",
            device_name="MBA-BOB",
            last_update=datetime(2025, 10, 1, 6, 45, tzinfo=UTC),
            run_state="success",
            user_principal_name="bob@contoso.com",
            health_percent=72,
            cycle_count=1043,
            full_charge_capacity=3600,
            design_capacity=5000,
            current_capacity=1200,
            is_charging=False,
            external_power_connected=True,
            voltage=11800,
            condition="Service Battery",
            over_threshold=True,
        ),
        DeviceBatteryRow(
            id="rs-6",
            device_id="dev-6",
            device_name="MBP-ERIN",
            last_update=datetime(2025, 10, 2, 12, 0, tzinfo=UTC),
            run_state="success",
            user_principal_name="erin@contoso.com",
            health_percent=100,
            cycle_count=12,
            is_charging=True,
            external_power_connected=True,
            condition="Normal",
            over_threshold=False,
        ),
    ]
