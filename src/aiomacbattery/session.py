"""Module to aggregate the battery run states of a fleet."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, cast

from mashumaro.exceptions import InvalidFieldValue, MissingField

from .auth import AbstractAuth
from .const import (
    ATTRIBUTE_LIST_PAGE_SIZE,
    ATTRIBUTE_SELECT,
    ENRICHMENT_CONCURRENCY,
    MANAGED_DEVICE_SELECT,
    RUN_STATE_PAGE_SIZE,
    RUN_STATE_SELECT,
    USER_EXPAND,
    USER_SELECT,
)
from .exceptions import (
    ApiError,
    AttributeNotFoundError,
    BatteryFleetError,
    NoDataAvailableError,
)
from .model import (
    AttributeDefinition,
    AttributeDefinitionList,
    DeviceBatteryRow,
    DeviceRunState,
    DeviceRunStatePage,
    DirectoryUser,
)
from .model_input import (
    AttributeDefinitionListResponse,
    DeviceRunStatePageResponse,
    DirectoryUserResponse,
)
from .utils import looks_like_guid, run_states_to_rows

_LOGGER = logging.getLogger(__name__)

NEXT_LINK = "@odata.nextLink"
_OLDEST = datetime.min.replace(tzinfo=UTC)


@dataclass
class GraphEndpoint:
    """Endpoint URLs for the Graph beta API."""

    attributes = "deviceManagement/deviceCustomAttributeShellScripts"
    "List all custom attribute shell scripts."

    run_states = (
        "deviceManagement/deviceCustomAttributeShellScripts/{attribute_id}"
        "/deviceRunStates"
    )
    "List the run states of one custom attribute, one per device."

    user = "users/{user_id}"
    "Get one directory user."


def attribute_list_url() -> str:
    """Return the URL listing attribute definitions for name resolution."""
    return (
        f"{GraphEndpoint.attributes}?$select={ATTRIBUTE_SELECT}"
        f"&$top={ATTRIBUTE_LIST_PAGE_SIZE}"
    )


def run_states_url(attribute_id: str) -> str:
    """Return the URL of the first run state page of an attribute."""
    path = GraphEndpoint.run_states.format(attribute_id=attribute_id)
    return (
        f"{path}?$select={RUN_STATE_SELECT}"
        f"&$expand=managedDevice($select={MANAGED_DEVICE_SELECT})"
        f"&$top={RUN_STATE_PAGE_SIZE}"
    )


def user_url(user_id: str) -> str:
    """Return the URL of a directory user with the enrichment attributes."""
    path = GraphEndpoint.user.format(user_id=user_id)
    return f"{path}?$select={USER_SELECT}&$expand={USER_EXPAND}"


def pick_attribute(
    definitions: Iterable[AttributeDefinition], name: str
) -> AttributeDefinition | None:
    """Return the definition matching a display name.

    An exact match wins; otherwise the newest definition whose name contains
    the input, ignoring case. Definitions without a name never match.
    """
    candidates = list(definitions)
    for definition in candidates:
        if definition.display_name == name:
            return definition
    needle = name.lower()
    matches = [
        d for d in candidates if d.display_name and needle in d.display_name.lower()
    ]
    if not matches:
        return None
    return max(matches, key=lambda d: d.created or _OLDEST)


class BatteryFleetSession:
    """Graph API client that builds battery rows for a fleet.

    Rows are built from the run states of the battery custom attribute. After
    every fetch the users behind the devices are looked up in the background
    and their directory attributes merged into the rows.
    """

    __slots__ = (
        "_committed_generation",
        "_semaphore",
        "attribute_id",
        "auth",
        "data_update_cbs",
        "enrich_users",
        "enrichment_task",
        "generation",
        "loop",
        "rows",
        "users",
    )

    def __init__(
        self,
        auth: AbstractAuth,
        *,
        enrich_users: bool = True,
        enrichment_limit: int = ENRICHMENT_CONCURRENCY,
    ) -> None:
        """Create a session.

        :param class auth: The AbstractAuth class from aiomacbattery.auth.
        :param bool enrich_users: Look up the directory users after a fetch.
        :param int enrichment_limit: Concurrent user lookups.
        """
        self.auth = auth
        self.enrich_users = enrich_users
        self.attribute_id: str | None = None
        self.rows: list[DeviceBatteryRow] = []
        self.users: dict[str, DirectoryUser] = {}
        self.generation = 0
        self._committed_generation = 0
        self._semaphore = asyncio.Semaphore(enrichment_limit)
        self.data_update_cbs: list[Callable[[list[DeviceBatteryRow]], None]] = []
        self.enrichment_task: asyncio.Task[None] | None = None
        self.loop: asyncio.AbstractEventLoop = asyncio.get_running_loop()

    def register_data_callback(
        self, callback: Callable[[list[DeviceBatteryRow]], None]
    ) -> None:
        """Register a data update callback."""
        if callback not in self.data_update_cbs:
            self.data_update_cbs.append(callback)

    def unregister_data_callback(
        self, callback: Callable[[list[DeviceBatteryRow]], None]
    ) -> None:
        """Unregister a data update callback.

        :param func callback: Takes one function, which should be unregistered.
        """
        if callback in self.data_update_cbs:
            self.data_update_cbs.remove(callback)

    def _schedule_data_callbacks(self) -> None:
        """Schedule a data callbacks."""
        for cb in self.data_update_cbs:
            self.loop.call_soon_threadsafe(cb, self.rows)

    async def resolve_attribute_id(self, identifier: str) -> str:
        """Return the id of the custom attribute given by id or display name."""
        identifier = identifier.strip()
        if not identifier:
            msg = "No custom attribute given"
            raise AttributeNotFoundError(msg)
        if looks_like_guid(identifier):
            return identifier
        definitions: list[AttributeDefinition] = []
        async for page in self._async_get_pages(attribute_list_url()):
            response = cast("AttributeDefinitionListResponse", page)
            try:
                definitions.extend(AttributeDefinitionList.from_dict(response).value)
            except (InvalidFieldValue, MissingField) as err:
                msg = f"Server returned malformed attribute list: {err}"
                raise ApiError(msg) from err
        definition = pick_attribute(definitions, identifier)
        if definition is None:
            msg = f"Custom Attribute not found: {identifier}"
            raise AttributeNotFoundError(msg)
        _LOGGER.debug("Resolved '%s' to %s", identifier, definition.id)
        return definition.id

    async def _async_get_pages(self, url: str) -> AsyncIterator[dict[str, Any]]:
        """Yield the pages of a listing, one request at a time."""
        next_url: str | None = url
        while next_url:
            page = await self.auth.get_json(next_url)
            yield page
            next_url = page.get(NEXT_LINK)

    async def async_get_run_states(self, attribute_id: str) -> list[DeviceRunState]:
        """Fetch every run state of the attribute in arrival order."""
        states: list[DeviceRunState] = []
        pages = 0
        async for raw_page in self._async_get_pages(run_states_url(attribute_id)):
            response = cast("DeviceRunStatePageResponse", raw_page)
            try:
                page = DeviceRunStatePage.from_dict(response)
            except (InvalidFieldValue, MissingField) as err:
                msg = f"Server returned malformed run states: {err}"
                raise ApiError(msg) from err
            states.extend(page.value)
            pages += 1
        _LOGGER.debug("Fetched %s run states in %s pages", len(states), pages)
        return states

    async def get_rows(self, identifier: str) -> list[DeviceBatteryRow]:
        """Fetch and decode the battery rows of the fleet.

        The rows replace the rows of earlier fetches unless a fetch started
        later has already completed.
        """
        self.generation += 1
        generation = self.generation
        attribute_id = await self.resolve_attribute_id(identifier)
        states = await self.async_get_run_states(attribute_id)
        rows = run_states_to_rows(states)
        _LOGGER.debug("Built %s rows from %s run states", len(rows), len(states))
        if generation < self._committed_generation:
            _LOGGER.debug("Discarding rows of superseded fetch %s", generation)
            return rows
        self._committed_generation = generation
        self.attribute_id = attribute_id
        self.rows = rows
        self._apply_users(rows, self.users)
        self._schedule_data_callbacks()
        if self.enrich_users:
            self._start_enrichment(rows, generation)
        return rows

    async def refresh(self) -> list[DeviceBatteryRow]:
        """Fetch the rows of the attribute fetched before."""
        if self.attribute_id is None:
            raise NoDataAvailableError
        return await self.get_rows(self.attribute_id)

    async def async_get_user(self, user_id: str) -> DirectoryUser | None:
        """Return the directory user, None if the lookup failed."""
        try:
            raw: DirectoryUserResponse = cast(
                "DirectoryUserResponse", await self.auth.get_json(user_url(user_id))
            )
            return DirectoryUser.from_dict(raw)
        except (BatteryFleetError, InvalidFieldValue, MissingField) as err:
            _LOGGER.debug("Enrichment for user %s failed: %s", user_id, err)
            return None

    def _start_enrichment(self, rows: list[DeviceBatteryRow], generation: int) -> None:
        """Look up the users of the rows in the background."""
        if self.enrichment_task is not None and not self.enrichment_task.done():
            self.enrichment_task.cancel()
        self.enrichment_task = asyncio.create_task(
            self._async_enrich_rows(rows, generation)
        )

    async def _async_enrich_rows(
        self, rows: list[DeviceBatteryRow], generation: int
    ) -> None:
        """Fetch the users of the rows that are not cached yet."""
        user_ids = {
            row.user_id.strip()
            for row in rows
            if row.user_id and row.user_id.strip()
        }
        missing = sorted(user_ids - self.users.keys())
        if not missing:
            return
        _LOGGER.debug("Enriching %s users", len(missing))
        await asyncio.gather(
            *(self._async_enrich_user(user_id, generation) for user_id in missing)
        )
        if generation == self._committed_generation:
            self._schedule_data_callbacks()

    async def _async_enrich_user(self, user_id: str, generation: int) -> None:
        """Fetch one user and merge it into the current rows."""
        async with self._semaphore:
            user = await self.async_get_user(user_id)
        if user is None:
            return
        self.users[user_id] = user
        if generation == self._committed_generation:
            self._apply_users(self.rows, {user_id: user})

    @staticmethod
    def _apply_users(
        rows: Iterable[DeviceBatteryRow], users: Mapping[str, DirectoryUser]
    ) -> None:
        """Merge directory users, keyed by user id, into their rows."""
        if not users:
            return
        for row in rows:
            user = users.get((row.user_id or "").strip())
            if user is not None:
                row.apply_user(user)

    async def wait_for_enrichment(self) -> None:
        """Wait until the background user lookups finished."""
        if self.enrichment_task is not None:
            await asyncio.wait({self.enrichment_task})

    async def close(self) -> None:
        """Close the session."""
        if self.enrichment_task:
            if not self.enrichment_task.done():
                self.enrichment_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await asyncio.gather(self.enrichment_task)
        for cb in self.data_update_cbs[:]:
            self.unregister_data_callback(cb)
