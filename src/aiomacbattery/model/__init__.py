"""Provide a model for the battery fleet data."""

from .model_attribute import AttributeDefinition, AttributeDefinitionList
from .model_battery import BatteryCondition, NormalizedBattery
from .model_row import DeviceBatteryRow
from .model_run_state import DeviceRunState, DeviceRunStatePage, ManagedDevice
from .model_token import JWT
from .model_user import DirectoryUser, Manager
from .utils import convert_graph_timestamp

__all__ = [
    "JWT",
    "AttributeDefinition",
    "AttributeDefinitionList",
    "BatteryCondition",
    "DeviceBatteryRow",
    "DeviceRunState",
    "DeviceRunStatePage",
    "DirectoryUser",
    "ManagedDevice",
    "Manager",
    "NormalizedBattery",
    "convert_graph_timestamp",
]
