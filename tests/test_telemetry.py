"""Test the telemetry record encoder and decoder."""

import pytest

from aiomacbattery.model import BatteryCondition, NormalizedBattery
from aiomacbattery.normalizer import RawCounters, normalize
from aiomacbattery.telemetry import (
    FIELD_NAMES,
    decode_record,
    encode_record,
    split_record,
)

RECORD = "85,423,4200,4941,3890,True,False,182,12100,Normal,False"


def test_field_order() -> None:
    """Test the published field order."""
    assert ",".join(FIELD_NAMES) == (
        "HealthPercent,CycleCount,FullChargeCapacity,DesignCapacity,"
        "CurrentCapacity,IsCharging,ExternalPowerConnected,TimeRemainingMin,"
        "Voltage,Condition,OverThreshold"
    )


def test_encode_no_battery() -> None:
    """Test the whole record sentinel."""
    assert encode_record(None) == "None"


def test_encode_reading() -> None:
    """Test a full reading."""
    battery = NormalizedBattery(
        health_percent=85,
        cycle_count=423,
        full_charge_capacity=4200,
        design_capacity=4941,
        current_capacity=3890,
        is_charging=True,
        external_power_connected=False,
        time_remaining=182,
        voltage=12100,
        condition=BatteryCondition.NORMAL,
        over_threshold=False,
    )
    assert encode_record(battery) == RECORD


def test_encode_absent_fields() -> None:
    """Test that absent and zero values are written as None."""
    battery = NormalizedBattery(
        health_percent=0,
        condition=BatteryCondition.REPLACE_SOON,
        over_threshold=True,
    )
    assert encode_record(battery) == (
        "None,None,None,None,None,None,None,None,None,Replace Soon,True"
    )


def test_decode_reading() -> None:
    """Test a full record."""
    assert decode_record(RECORD) == NormalizedBattery(
        health_percent=85,
        cycle_count=423,
        full_charge_capacity=4200,
        design_capacity=4941,
        current_capacity=3890,
        is_charging=True,
        external_power_connected=False,
        time_remaining=182,
        voltage=12100,
        condition=BatteryCondition.NORMAL,
        over_threshold=False,
    )


@pytest.mark.parametrize("record", ["None", "none", " NONE \n", "", "   ", None])
def test_decode_no_battery(record: str | None) -> None:
    """Test that the sentinel and empty output decode as all absent."""
    battery = decode_record(record)
    assert battery == NormalizedBattery()
    assert battery.is_empty()


def test_decode_older_record() -> None:
    """Test a record written before the threshold flag existed."""
    battery = decode_record("85,423,4200,4941,3890,True,False,182,12100,Normal")
    assert battery.condition == BatteryCondition.NORMAL
    assert battery.over_threshold is None


def test_decode_newer_record() -> None:
    """Test that fields appended later are ignored."""
    battery = decode_record(f"{RECORD},97,extra")
    assert battery == decode_record(RECORD)


def test_decode_calculating_time_remaining() -> None:
    """Test that 65535 minutes decodes as absent."""
    battery = decode_record("85,423,4200,4941,3890,True,True,65535,12100,Normal,False")
    assert battery.time_remaining is None


def test_decode_trims_fields() -> None:
    """Test whitespace around fields and the record."""
    battery = decode_record(
        " 85 , 423 ,None,None,None, true ,FALSE,None,None, Replace Now ,False\n"
    )
    assert battery.health_percent == 85
    assert battery.cycle_count == 423
    assert battery.is_charging is True
    assert battery.external_power_connected is False
    assert battery.condition == BatteryCondition.REPLACE_NOW


def test_decode_garbage_never_raises() -> None:
    """Test that malformed fields decode as absent."""
    battery = decode_record("abc,12.5,,yes,-,maybe,1,x,,None,0")
    assert battery == NormalizedBattery()
    assert decode_record("garbage") == NormalizedBattery()


def test_decode_negative_and_unknown_condition() -> None:
    """Test signed integers and condition labels outside the known set."""
    battery = decode_record("None,None,None,None,None,None,None,None,-5,Degraded,None")
    assert battery.voltage == -5
    assert battery.condition == "Degraded"
    assert not isinstance(battery.condition, BatteryCondition)


def test_split_record_pads_and_truncates() -> None:
    """Test that a record always splits into the known fields."""
    assert split_record("1,2") == ["1", "2"] + [None] * 9
    assert len(split_record(f"{RECORD},x,y")) == 11


@pytest.mark.parametrize(
    "raw",
    [
        RawCounters(
            design_capacity=4941,
            raw_max_capacity=4200,
            raw_current_capacity=3890,
            cycle_count=423,
            is_charging=True,
            external_connected=False,
            time_remaining=182,
            voltage=12100,
            condition=0,
        ),
        RawCounters(design_capacity=4000, raw_max_capacity=5000, cycle_count=1000),
        RawCounters(nominal_charge_capacity=5000, max_capacity=88, current_capacity=40),
        RawCounters(max_capacity=4100, current_capacity=2000, condition="Fair"),
        RawCounters(time_remaining=65535, condition="Check Battery"),
        RawCounters(voltage="-5", condition="Worn, but usable"),
        RawCounters(condition="none", is_charging="maybe"),
        RawCounters(),
    ],
)
def test_round_trip(raw: RawCounters) -> None:
    """Test that every normalized reading survives the record."""
    battery = normalize(raw)
    assert decode_record(encode_record(battery)) == battery
