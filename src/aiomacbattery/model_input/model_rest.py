"""Raw response shapes of the Graph endpoints."""

from typing import NotRequired, TypedDict


class ManagedDeviceItem(TypedDict):
    """Represents the device identity expanded into a run state."""

    id: str
    deviceName: str
    userPrincipalName: NotRequired[str | None]
    osVersion: NotRequired[str | None]
    userId: NotRequired[str | None]


class DeviceRunStateItem(TypedDict):
    """Represents a single run state of the custom attribute script."""

    id: str
    lastStateUpdateDateTime: str
    resultMessage: str | None
    runState: str
    errorCode: NotRequired[int | None]
    errorDescription: NotRequired[str | None]
    managedDevice: NotRequired[ManagedDeviceItem | None]


DeviceRunStatePageResponse = TypedDict(
    "DeviceRunStatePageResponse",
    {
        "value": list[DeviceRunStateItem],
        "@odata.nextLink": NotRequired[str],
    },
)


class AttributeDefinitionItem(TypedDict):
    """Represents a custom attribute shell script definition."""

    id: str
    displayName: str | None
    createdDateTime: str


class AttributeDefinitionListResponse(TypedDict):
    """Represents the response of the attribute definition listing."""

    value: list[AttributeDefinitionItem]


class ManagerItem(TypedDict):
    """Represents the expanded manager of a user."""

    id: str
    displayName: str | None


class DirectoryUserResponse(TypedDict):
    """Represents a directory user with the selected attributes."""

    id: str
    displayName: NotRequired[str | None]
    userPrincipalName: NotRequired[str | None]
    department: NotRequired[str | None]
    jobTitle: NotRequired[str | None]
    officeLocation: NotRequired[str | None]
    companyName: NotRequired[str | None]
    country: NotRequired[str | None]
    city: NotRequired[str | None]
    mail: NotRequired[str | None]
    mobilePhone: NotRequired[str | None]
    manager: NotRequired[ManagerItem | None]
