"""Models for Graph API - custom attribute run states."""

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003

from mashumaro import DataClassDictMixin, field_options

from .utils import convert_graph_timestamp


@dataclass
class ManagedDevice(DataClassDictMixin):
    """Device identity joined to a run state by `$expand`."""

    id: str | None = None
    device_name: str | None = field(
        default=None, metadata=field_options(alias="deviceName")
    )
    user_principal_name: str | None = field(
        default=None, metadata=field_options(alias="userPrincipalName")
    )
    os_version: str | None = field(
        default=None, metadata=field_options(alias="osVersion")
    )
    user_id: str | None = field(default=None, metadata=field_options(alias="userId"))


@dataclass
class DeviceRunState(DataClassDictMixin):
    """Result of one device running the custom attribute script."""

    id: str | None = None
    last_state_update: datetime | None = field(
        default=None,
        metadata=field_options(
            alias="lastStateUpdateDateTime",
            deserialize=convert_graph_timestamp,
        ),
    )
    result_message: str | None = field(
        default=None, metadata=field_options(alias="resultMessage")
    )
    """The script output, i.e. the telemetry record."""

    run_state: str | None = field(
        default=None, metadata=field_options(alias="runState")
    )
    error_code: int | None = field(
        default=None, metadata=field_options(alias="errorCode")
    )
    error_description: str | None = field(
        default=None, metadata=field_options(alias="errorDescription")
    )
    managed_device: ManagedDevice | None = field(
        default=None, metadata=field_options(alias="managedDevice")
    )


@dataclass
class DeviceRunStatePage(DataClassDictMixin):
    """One page of run states."""

    value: list[DeviceRunState] = field(default_factory=list)
    next_link: str | None = field(
        default=None, metadata=field_options(alias="@odata.nextLink")
    )
    """Opaque continuation link, None on the last page."""
