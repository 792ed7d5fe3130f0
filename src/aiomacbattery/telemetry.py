"""Encode and decode the battery telemetry record.

The record is one unquoted, comma separated line with a fixed field order::

    HealthPercent,CycleCount,FullChargeCapacity,DesignCapacity,CurrentCapacity,
    IsCharging,ExternalPowerConnected,TimeRemainingMin,Voltage,Condition,
    OverThreshold

Absent values are written as the literal ``None``. A machine without a battery
publishes ``None`` as the whole record. New fields may only be appended, so
the decoder accepts shorter records (missing fields are absent) and ignores
extra trailing fields.
"""

import re

from .const import NO_BATTERY_RECORD, TELEMETRY_FIELD_COUNT, TIME_REMAINING_CALCULATING
from .model import BatteryCondition, NormalizedBattery

FIELD_NAMES = (
    "HealthPercent",
    "CycleCount",
    "FullChargeCapacity",
    "DesignCapacity",
    "CurrentCapacity",
    "IsCharging",
    "ExternalPowerConnected",
    "TimeRemainingMin",
    "Voltage",
    "Condition",
    "OverThreshold",
)

_INTEGER = re.compile(r"-?[0-9]+")
_PLACEHOLDER = NO_BATTERY_RECORD.lower()


def _encode_int(value: int | None) -> str:
    if not value:
        return NO_BATTERY_RECORD
    return str(value)


def _encode_bool(value: bool | None) -> str:
    if value is None:
        return NO_BATTERY_RECORD
    return "True" if value else "False"


def _encode_text(value: str | None) -> str:
    if not value:
        return NO_BATTERY_RECORD
    return str(value)


def encode_record(battery: NormalizedBattery | None) -> str:
    """Serialize a reading, or the no-battery sentinel for None."""
    if battery is None:
        return NO_BATTERY_RECORD
    fields = (
        _encode_int(battery.health_percent),
        _encode_int(battery.cycle_count),
        _encode_int(battery.full_charge_capacity),
        _encode_int(battery.design_capacity),
        _encode_int(battery.current_capacity),
        _encode_bool(battery.is_charging),
        _encode_bool(battery.external_power_connected),
        _encode_int(battery.time_remaining),
        _encode_int(battery.voltage),
        _encode_text(battery.condition),
        _encode_bool(battery.over_threshold),
    )
    return ",".join(fields)


def parse_int(text: str | None) -> int | None:
    """Return the integer in the field, None for anything else."""
    if text is None or not _INTEGER.fullmatch(text):
        return None
    return int(text)


def parse_bool(text: str | None) -> bool | None:
    """Return True/False for the literal words, None for anything else."""
    if text is None:
        return None
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def parse_condition(text: str | None) -> BatteryCondition | str | None:
    """Return the condition label of the field."""
    if not text or text.lower() == _PLACEHOLDER:
        return None
    try:
        return BatteryCondition(text)
    except ValueError:
        return text


def split_record(text: str | None) -> list[str | None]:
    """Split a record into exactly as many trimmed fields as are known."""
    parts: list[str | None] = []
    if text is not None:
        parts.extend(part.strip() for part in text.split(","))
    if len(parts) < TELEMETRY_FIELD_COUNT:
        parts.extend([None] * (TELEMETRY_FIELD_COUNT - len(parts)))
    return parts[:TELEMETRY_FIELD_COUNT]


def decode_record(text: str | None) -> NormalizedBattery:
    """Parse a record; unparseable fields decode as absent."""
    stripped = text.strip() if text else ""
    if not stripped or stripped.lower() == _PLACEHOLDER:
        return NormalizedBattery()
    (
        health,
        cycles,
        full,
        design,
        current,
        charging,
        external,
        remaining,
        voltage,
        condition,
        over,
    ) = split_record(stripped)
    minutes = parse_int(remaining)
    if minutes == TIME_REMAINING_CALCULATING:
        minutes = None
    return NormalizedBattery(
        health_percent=parse_int(health),
        cycle_count=parse_int(cycles),
        full_charge_capacity=parse_int(full),
        design_capacity=parse_int(design),
        current_capacity=parse_int(current),
        is_charging=parse_bool(charging),
        external_power_connected=parse_bool(external),
        time_remaining=minutes,
        voltage=parse_int(voltage),
        condition=parse_condition(condition),
        over_threshold=parse_bool(over),
    )
