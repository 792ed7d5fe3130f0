"""Utils for the battery fleet."""

import logging
import re
import time
from collections.abc import Iterable
from typing import cast
from urllib.parse import quote_plus, urlencode

import aiohttp
import jwt

from .const import AUTH_API_TOKEN_URL, AUTH_HEADERS, GRAPH_DEFAULT_SCOPE
from .exceptions import ApiError
from .model import JWT, DeviceBatteryRow, DeviceRunState
from .telemetry import decode_record

_LOGGER = logging.getLogger(__name__)

_GUID = re.compile(r"^[0-9a-fA-F]{8}-(?:[0-9a-fA-F]{4}-){3}[0-9a-fA-F]{12}$")


def looks_like_guid(value: str) -> bool:
    """Return True if the value is shaped like a GUID."""
    return _GUID.match(value.strip()) is not None


def structure_token(access_token: str) -> JWT:
    """Decode JWT and convert to dataclass."""
    token_decoded = jwt.decode(access_token, options={"verify_signature": False})
    return JWT.from_dict(token_decoded)


def token_has_scope(access_token: str, scope: str) -> bool:
    """Return True if the token grants the scope as delegated scope or role.

    Tokens that are not JWTs are assumed to carry the scope.
    """
    try:
        token = structure_token(access_token)
    except jwt.PyJWTError:
        _LOGGER.debug("Access token is not a JWT, skipping scope check")
        return True
    return scope.lower() in {s.lower() for s in token.scopes}


async def async_get_access_token(
    tenant_id: str, client_id: str, client_secret: str
) -> dict[str, str]:
    """Get an access token for Graph with client credentials.

    This grant type is intended for unattended jobs. The app registration
    needs the Graph application permissions for device management and users.
    """
    auth_data = urlencode(
        {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
            "scope": GRAPH_DEFAULT_SCOPE,
        },
        quote_via=quote_plus,
    )
    async with (
        aiohttp.ClientSession(headers=AUTH_HEADERS) as session,
        session.post(
            AUTH_API_TOKEN_URL.format(tenant_id=tenant_id), data=auth_data
        ) as resp,
    ):
        result = await resp.json(encoding="UTF-8")
        _LOGGER.debug("Resp.status get access token: %s", resp.status)
        if resp.status >= 400:
            msg = f"""The token request was rejected, response from
                    the identity platform: {result}"""
            raise ApiError(msg, resp.status)
        result["expires_at"] = result["expires_in"] + time.time()
    result["status"] = resp.status
    return cast("dict[str, str]", result)


def run_states_to_rows(states: Iterable[DeviceRunState]) -> list[DeviceBatteryRow]:
    """Decode run states into rows, keeping the order of the states.

    Run states without an id, device, timestamp or run state are dropped.
    """
    rows: list[DeviceBatteryRow] = []
    for state in states:
        device = state.managed_device
        if (
            state.id is None
            or device is None
            or device.id is None
            or device.device_name is None
            or state.last_state_update is None
            or state.run_state is None
        ):
            _LOGGER.debug("Skipping incomplete run state %s", state.id)
            continue
        raw = (state.result_message or "").strip()
        rows.append(
            DeviceBatteryRow.from_run_state(state, device, decode_record(raw), raw)
        )
    return rows
