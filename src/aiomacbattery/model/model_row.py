"""Models for the consumer facing battery rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING

from mashumaro import DataClassDictMixin

from ..const import RunState
from .model_battery import BatteryCondition, NormalizedBattery

if TYPE_CHECKING:
    from .model_run_state import DeviceRunState, ManagedDevice
    from .model_user import DirectoryUser


@dataclass
class DeviceBatteryRow(DataClassDictMixin):
    """One device of the fleet with its decoded battery telemetry."""

    id: str
    """The run state id."""

    device_id: str
    device_name: str
    last_update: datetime
    run_state: str
    user_principal_name: str | None = None
    os_version: str | None = None
    user_id: str | None = None
    error_code: int | None = None
    error_description: str | None = None

    health_percent: int | None = None
    cycle_count: int | None = None
    full_charge_capacity: int | None = None
    design_capacity: int | None = None
    current_capacity: int | None = None
    is_charging: bool | None = None
    external_power_connected: bool | None = None
    time_remaining: int | None = None
    voltage: int | None = None
    condition: BatteryCondition | str | None = None
    over_threshold: bool | None = None

    raw_record: str = ""
    """The telemetry record as received."""

    user_department: str | None = None
    user_job_title: str | None = None
    user_manager: str | None = None
    user_office_location: str | None = None
    user_company_name: str | None = None
    user_country: str | None = None
    user_city: str | None = None
    enriched: bool = field(default=False)

    @classmethod
    def from_run_state(
        cls,
        state: DeviceRunState,
        device: ManagedDevice,
        battery: NormalizedBattery,
        raw_record: str,
    ) -> DeviceBatteryRow:
        """Flatten a run state, its device and the decoded record."""
        if (
            state.id is None
            or device.id is None
            or device.device_name is None
            or state.last_state_update is None
            or state.run_state is None
        ):
            msg = "Run state is missing its identity fields"
            raise ValueError(msg)
        return cls(
            id=state.id,
            device_id=device.id,
            device_name=device.device_name,
            last_update=state.last_state_update,
            run_state=state.run_state,
            user_principal_name=device.user_principal_name,
            os_version=device.os_version,
            user_id=device.user_id,
            error_code=state.error_code,
            error_description=state.error_description,
            health_percent=battery.health_percent,
            cycle_count=battery.cycle_count,
            full_charge_capacity=battery.full_charge_capacity,
            design_capacity=battery.design_capacity,
            current_capacity=battery.current_capacity,
            is_charging=battery.is_charging,
            external_power_connected=battery.external_power_connected,
            time_remaining=battery.time_remaining,
            voltage=battery.voltage,
            condition=battery.condition,
            over_threshold=battery.over_threshold,
            raw_record=raw_record,
        )

    @property
    def script_failed(self) -> bool:
        """Return True if the attribute script did not run cleanly."""
        return self.run_state in (RunState.FAIL, RunState.SCRIPT_ERROR)

    @property
    def battery(self) -> NormalizedBattery:
        """Return the telemetry fields of this row."""
        return NormalizedBattery(
            health_percent=self.health_percent,
            cycle_count=self.cycle_count,
            full_charge_capacity=self.full_charge_capacity,
            design_capacity=self.design_capacity,
            current_capacity=self.current_capacity,
            is_charging=self.is_charging,
            external_power_connected=self.external_power_connected,
            time_remaining=self.time_remaining,
            voltage=self.voltage,
            condition=self.condition,
            over_threshold=self.over_threshold,
        )

    def apply_user(self, user: DirectoryUser) -> None:
        """Copy the directory attributes of the user onto the row.

        Writing the same user twice leaves the row unchanged.
        """
        self.user_department = user.department
        self.user_job_title = user.job_title
        self.user_manager = user.manager.display_name if user.manager else None
        self.user_office_location = user.office_location
        self.user_company_name = user.company_name
        self.user_country = user.country
        self.user_city = user.city
        self.enriched = True
