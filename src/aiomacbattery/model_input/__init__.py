"""Models for inputs from the Graph API."""

from .model_rest import (
    AttributeDefinitionItem,
    AttributeDefinitionListResponse,
    DeviceRunStateItem,
    DeviceRunStatePageResponse,
    DirectoryUserResponse,
    ManagedDeviceItem,
    ManagerItem,
)

__all__ = [
    "AttributeDefinitionItem",
    "AttributeDefinitionListResponse",
    "DeviceRunStateItem",
    "DeviceRunStatePageResponse",
    "DirectoryUserResponse",
    "ManagedDeviceItem",
    "ManagerItem",
]
