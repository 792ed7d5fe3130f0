"""Turn raw battery counters into one normalized reading.

Macs report capacities inconsistently: depending on the model and macOS
release `MaxCapacity` and `CurrentCapacity` are either percentages or mAh,
and the `AppleRaw*` keys may be missing. The rules below pick the most
trustworthy source for each value and never raise, so a partial hardware
read still yields a record.
"""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .const import (
    CYCLE_COUNT_THRESHOLD,
    HEALTH_CLAMPED_VALUE,
    HEALTH_SANITY_LIMIT,
    MAH_CAPACITY_FLOOR,
    PERCENT_CAPACITY_LIMIT,
    PERCENT_CHARGE_LIMIT,
    TIME_REMAINING_CALCULATING,
)
from .model import BatteryCondition, NormalizedBattery

_LOGGER = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9-]")
_INTEGER = re.compile(r"-?[0-9]+")

CONDITION_MAP: dict[str, BatteryCondition] = {
    "0": BatteryCondition.NORMAL,
    "good": BatteryCondition.NORMAL,
    "normal": BatteryCondition.NORMAL,
    "1": BatteryCondition.REPLACE_SOON,
    "fair": BatteryCondition.REPLACE_SOON,
    "2": BatteryCondition.REPLACE_NOW,
    "poor": BatteryCondition.REPLACE_NOW,
    "3": BatteryCondition.SERVICE_BATTERY,
    "check battery": BatteryCondition.SERVICE_BATTERY,
}

_TRUE_VALUES = {"yes", "true", "1"}
_FALSE_VALUES = {"no", "false", "0"}


@dataclass
class RawCounters:
    """Battery values as read from the hardware, unvalidated."""

    design_capacity: Any = None
    raw_max_capacity: Any = None
    nominal_charge_capacity: Any = None
    max_capacity: Any = None
    current_capacity: Any = None
    raw_current_capacity: Any = None
    cycle_count: Any = None
    is_charging: Any = None
    external_connected: Any = None
    time_remaining: Any = None
    voltage: Any = None
    condition: Any = None


def to_int(value: Any) -> int:
    """Coerce a hardware value to an int, 0 when it is not a number."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    text = _NON_NUMERIC.sub("", str(value))
    if _INTEGER.fullmatch(text):
        return int(text)
    return 0


def to_bool(value: Any) -> bool | None:
    """Coerce a hardware flag, None when it is neither yes nor no."""
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


def _present(value: Any) -> bool:
    """Return True for a usable condition value."""
    if value is None or isinstance(value, bool):
        return False
    text = str(value).strip()
    return text not in {"", "0"}


def first_condition(extractors: Iterable[Callable[[], Any]]) -> Any:
    """Return the first non-empty, non-zero value of the extractors.

    Extractors are called lazily in order, so an expensive fallback such as a
    system_profiler scrape only runs when every cheaper source came up empty.
    """
    for extractor in extractors:
        value = extractor()
        if _present(value):
            return value
    return None


def map_condition(value: Any) -> BatteryCondition | str:
    """Map a raw condition value to its label.

    Unknown conditions are reported as Normal.
    """
    text = ""
    if value is not None and not isinstance(value, bool):
        # the record is unquoted, a comma would shift every later field
        text = " ".join(str(value).replace(",", " ").split())
    if not text or text.lower() == "none":
        _LOGGER.debug("No battery condition reported, assuming Normal")
        return BatteryCondition.NORMAL
    mapped = CONDITION_MAP.get(text.lower())
    if mapped is not None:
        return mapped
    for condition in BatteryCondition:
        if text.lower() == condition.value.lower():
            return condition
    return text


def full_charge_capacity(raw_max: int, nominal: int, maximum: int) -> int:
    """Return the full charge capacity in mAh, 0 when unknown."""
    if raw_max > 0:
        return raw_max
    if nominal > 0 and 0 < maximum <= PERCENT_CAPACITY_LIMIT:
        return nominal * maximum // 100
    if maximum > MAH_CAPACITY_FLOOR:
        return maximum
    return 0


def current_capacity(raw_current: int, nominal: int, current: int) -> int:
    """Return the current charge in mAh, 0 when unknown."""
    if raw_current > 0:
        return raw_current
    if current > MAH_CAPACITY_FLOOR:
        return current
    if nominal > 0 and 0 < current <= PERCENT_CHARGE_LIMIT:
        return nominal * current // 100
    return 0


def health_percent(design: int, full_charge: int, maximum: int) -> int | None:
    """Return the battery health in percent, None when it cannot be derived."""
    if design > 0 and full_charge > 0:
        health = (200 * full_charge + design) // (2 * design)
        if health > HEALTH_SANITY_LIMIT:
            _LOGGER.debug(
                "Health %s%% exceeds %s%%, design capacity %s looks miscalibrated",
                health,
                HEALTH_SANITY_LIMIT,
                design,
            )
            return HEALTH_CLAMPED_VALUE
        return health
    if 0 < maximum <= PERCENT_CAPACITY_LIMIT:
        return maximum
    return None


def time_remaining(minutes: int) -> int | None:
    """Return the remaining minutes, None while macOS is still calculating."""
    if 0 < minutes < TIME_REMAINING_CALCULATING:
        return minutes
    return None


def _non_zero(value: int | None) -> int | None:
    return value if value else None


def normalize(raw: RawCounters) -> NormalizedBattery:
    """Normalize the raw counters of one battery."""
    design = to_int(raw.design_capacity)
    nominal = to_int(raw.nominal_charge_capacity)
    maximum = to_int(raw.max_capacity)
    cycles = to_int(raw.cycle_count)

    full = full_charge_capacity(to_int(raw.raw_max_capacity), nominal, maximum)
    current = current_capacity(
        to_int(raw.raw_current_capacity), nominal, to_int(raw.current_capacity)
    )

    return NormalizedBattery(
        health_percent=_non_zero(health_percent(design, full, maximum)),
        cycle_count=_non_zero(cycles),
        full_charge_capacity=_non_zero(full),
        design_capacity=_non_zero(design),
        current_capacity=_non_zero(current),
        is_charging=to_bool(raw.is_charging),
        external_power_connected=to_bool(raw.external_connected),
        time_remaining=time_remaining(to_int(raw.time_remaining)),
        voltage=_non_zero(to_int(raw.voltage)),
        condition=map_condition(raw.condition),
        over_threshold=cycles >= CYCLE_COUNT_THRESHOLD,
    )
