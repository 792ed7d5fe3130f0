"""Tests for asynchronous Python client for aiomacbattery.

Run tests with `pytest`
and to update snapshots `pytest --snapshot-update`
"""

from pathlib import Path
from typing import Any

import orjson
from aioresponses import aioresponses

from aiomacbattery.const import GRAPH_API_BASE_URL
from aiomacbattery.session import attribute_list_url, run_states_url, user_url

from .const import ATTRIBUTE_ID, NEXT_PAGE_URL


def load_fixture(filename: str) -> str:
    """Load a fixture."""
    path = Path(__package__) / "fixtures" / filename
    return path.read_text(encoding="utf-8")


def load_fixture_bytes(filename: str) -> bytes:
    """Load a binary fixture."""
    path = Path(__package__) / "fixtures" / filename
    return path.read_bytes()


def load_fixture_json(filename: str) -> Any:
    """Load a fixture and parse it as JSON."""
    return orjson.loads(load_fixture(filename))


def graph_url(path: str) -> str:
    """Return the absolute Graph URL of a relative endpoint."""
    return f"{GRAPH_API_BASE_URL}/{path}"


def mock_attribute_list(responses: aioresponses) -> None:
    """Answer the attribute list request once."""
    responses.get(
        graph_url(attribute_list_url()),
        status=200,
        payload=load_fixture_json("attribute_list.json"),
    )


def mock_run_states(responses: aioresponses, attribute_id: str = ATTRIBUTE_ID) -> None:
    """Answer both run state pages once."""
    responses.get(
        graph_url(run_states_url(attribute_id)),
        status=200,
        payload=load_fixture_json("run_states_page1.json"),
    )
    responses.get(
        NEXT_PAGE_URL,
        status=200,
        payload=load_fixture_json("run_states_page2.json"),
    )


def mock_user(
    responses: aioresponses, user_id: str, status: int = 200, payload: Any = None
) -> None:
    """Answer one user lookup."""
    responses.get(graph_url(user_url(user_id)), status=status, payload=payload)
