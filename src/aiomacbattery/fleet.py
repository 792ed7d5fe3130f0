"""Filter, sort and summarize the battery rows of a fleet."""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from mashumaro import DataClassDictMixin

from .const import CYCLE_COUNT_THRESHOLD, HEALTH_BANDS
from .model import DeviceBatteryRow


class SortKey(StrEnum):
    """Columns the fleet table can be sorted by."""

    DEVICE = "device"
    USER = "user"
    HEALTH = "health"
    CYCLES = "cycles"
    FULL = "full"
    DESIGN = "design"
    CURRENT = "current"
    CHARGING = "charging"
    EXT_POWER = "ext_power"
    MIN_LEFT = "min_left"
    VOLTAGE = "voltage"
    CONDITION = "condition"
    UPDATED = "updated"


SORT_VALUES: dict[SortKey, Callable[[DeviceBatteryRow], Any]] = {
    SortKey.DEVICE: lambda r: r.device_name,
    SortKey.USER: lambda r: r.user_principal_name or "",
    SortKey.HEALTH: lambda r: r.health_percent,
    SortKey.CYCLES: lambda r: r.cycle_count,
    SortKey.FULL: lambda r: r.full_charge_capacity,
    SortKey.DESIGN: lambda r: r.design_capacity,
    SortKey.CURRENT: lambda r: r.current_capacity,
    SortKey.CHARGING: lambda r: 1 if r.is_charging is True else 0,
    SortKey.EXT_POWER: lambda r: 1 if r.external_power_connected is True else 0,
    SortKey.MIN_LEFT: lambda r: r.time_remaining,
    SortKey.VOLTAGE: lambda r: r.voltage,
    SortKey.CONDITION: lambda r: r.condition or "",
    SortKey.UPDATED: lambda r: r.last_update,
}


@dataclass
class FleetFilter:
    """Row filter of the fleet table."""

    search_text: str = ""
    """Matched against device name and user principal name, ignoring case."""

    min_health: int = 0
    """Rows with a known health below this are hidden."""

    only_over_threshold: bool = False
    only_charging: bool = False

    def matches(self, row: DeviceBatteryRow) -> bool:
        """Return True if the row passes the filter."""
        query = self.search_text.strip().lower()
        if query:
            name_hit = query in row.device_name.lower()
            upn_hit = query in (row.user_principal_name or "").lower()
            if not name_hit and not upn_hit:
                return False
        if row.health_percent is not None and row.health_percent < self.min_health:
            return False
        if self.only_over_threshold and row.over_threshold is not True:
            return False
        return not (self.only_charging and row.is_charging is not True)


def filter_rows(
    rows: Iterable[DeviceBatteryRow], fleet_filter: FleetFilter
) -> list[DeviceBatteryRow]:
    """Return the rows passing the filter, in their original order."""
    return [row for row in rows if fleet_filter.matches(row)]


def sort_rows(
    rows: Iterable[DeviceBatteryRow], key: SortKey, *, ascending: bool = True
) -> list[DeviceBatteryRow]:
    """Sort rows by a column, rows without a value always go last."""
    value_of = SORT_VALUES[key]
    rows = list(rows)
    present = [row for row in rows if value_of(row) is not None]
    absent = [row for row in rows if value_of(row) is None]
    present.sort(key=value_of, reverse=not ascending)
    return present + absent


@dataclass
class FleetSummary(DataClassDictMixin):
    """Key figures of the fleet."""

    device_count: int
    average_health: float | None
    over_cycle_threshold: int
    on_external_power: int


def summarize(rows: Sequence[DeviceBatteryRow]) -> FleetSummary:
    """Return the key figures of the rows."""
    healths = [row.health_percent for row in rows if row.health_percent is not None]
    return FleetSummary(
        device_count=len(rows),
        average_health=sum(healths) / len(healths) if healths else None,
        over_cycle_threshold=sum(
            1 for row in rows if (row.cycle_count or 0) >= CYCLE_COUNT_THRESHOLD
        ),
        on_external_power=sum(
            1 for row in rows if row.external_power_connected is True
        ),
    )


def band_label(bands: Sequence[int], index: int) -> str:
    """Return the label of a health band."""
    if index == 0:
        return f"<{bands[1]}"
    if index == len(bands) - 2:
        return f"{bands[index]}+"
    return f"{bands[index]}-{bands[index + 1] - 1}"


def health_histogram(
    rows: Iterable[DeviceBatteryRow], bands: Sequence[int] = HEALTH_BANDS
) -> dict[str, int]:
    """Count rows per health band, rows without health are not counted."""
    counts = dict.fromkeys((band_label(bands, i) for i in range(len(bands) - 1)), 0)
    for row in rows:
        health = row.health_percent
        if health is None:
            continue
        for i in range(len(bands) - 1):
            if bands[i] <= health < bands[i + 1]:
                counts[band_label(bands, i)] += 1
                break
    return counts


def low_health_rows(
    rows: Iterable[DeviceBatteryRow], threshold: int
) -> list[DeviceBatteryRow]:
    """Return the rows with a known health below the threshold."""
    return [
        row
        for row in rows
        if row.health_percent is not None and row.health_percent < threshold
    ]


@dataclass
class FleetView:
    """The rows of one fetch cycle with the table state applied."""

    rows: list[DeviceBatteryRow] = field(default_factory=list)
    fleet_filter: FleetFilter = field(default_factory=FleetFilter)
    sort_key: SortKey = SortKey.DEVICE
    ascending: bool = True

    def replace_rows(self, rows: list[DeviceBatteryRow]) -> None:
        """Replace the rows with the result of a new fetch."""
        self.rows = rows

    def toggle_sort(self, key: SortKey) -> None:
        """Sort by the column, flipping the direction if it is already used."""
        if self.sort_key == key:
            self.ascending = not self.ascending
        else:
            self.sort_key = key
            self.ascending = True

    @property
    def visible_rows(self) -> list[DeviceBatteryRow]:
        """Return the filtered and sorted rows."""
        return sort_rows(
            filter_rows(self.rows, self.fleet_filter),
            self.sort_key,
            ascending=self.ascending,
        )

    @property
    def summary(self) -> FleetSummary:
        """Return the key figures of the visible rows."""
        return summarize(self.visible_rows)
