"""Models for the battery telemetry record."""

from dataclasses import dataclass, field, fields
from enum import StrEnum

from mashumaro import DataClassDictMixin, field_options


class BatteryCondition(StrEnum):
    """Battery condition labels written to the telemetry record."""

    NORMAL = "Normal"
    """Battery is functioning normally."""

    REPLACE_SOON = "Replace Soon"
    """Battery holds less charge than when new."""

    REPLACE_NOW = "Replace Now"
    """Battery holds significantly less charge than when new."""

    SERVICE_BATTERY = "Service Battery"
    """Battery is not functioning normally."""


@dataclass(frozen=True)
class NormalizedBattery(DataClassDictMixin):
    """One battery reading, as published in and decoded from the record.

    Numeric fields are None when the value is absent; a measured zero is
    also stored as None because the record cannot tell them apart.
    """

    health_percent: int | None = field(
        default=None, metadata=field_options(alias="healthPercent")
    )
    """Full charge capacity relative to design capacity."""

    cycle_count: int | None = field(
        default=None, metadata=field_options(alias="cycleCount")
    )
    full_charge_capacity: int | None = field(
        default=None, metadata=field_options(alias="fullChargeCapacity")
    )
    """Full charge capacity in mAh."""

    design_capacity: int | None = field(
        default=None, metadata=field_options(alias="designCapacity")
    )
    """Design capacity in mAh."""

    current_capacity: int | None = field(
        default=None, metadata=field_options(alias="currentCapacity")
    )
    """Current charge in mAh."""

    is_charging: bool | None = field(
        default=None, metadata=field_options(alias="isCharging")
    )
    external_power_connected: bool | None = field(
        default=None, metadata=field_options(alias="externalPowerConnected")
    )
    time_remaining: int | None = field(
        default=None, metadata=field_options(alias="timeRemainingMin")
    )
    """Minutes until empty or full, None while macOS is still calculating."""

    voltage: int | None = field(default=None, metadata=field_options(alias="voltage"))
    """Voltage in mV."""

    condition: BatteryCondition | str | None = field(
        default=None, metadata=field_options(alias="condition")
    )
    over_threshold: bool | None = field(
        default=None, metadata=field_options(alias="overThreshold")
    )
    """True when the cycle count reached the fleet policy limit."""

    def is_empty(self) -> bool:
        """Return True if no field carries a value."""
        return all(getattr(self, f.name) is None for f in fields(self))
