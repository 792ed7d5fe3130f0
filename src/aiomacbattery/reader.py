"""Read battery counters from the local Mac.

Runs on the managed device itself, usually as the custom attribute script.
Nothing in here raises for a missing battery or a missing tool: the caller
publishes the no-battery record instead.
"""

import logging
import plistlib
import re
import shutil
import subprocess
from collections.abc import Callable, Mapping
from functools import partial
from typing import Any

from .const import CONDITION_FIELDS
from .normalizer import RawCounters, first_condition, normalize
from .telemetry import encode_record

_LOGGER = logging.getLogger(__name__)

IOREG = "/usr/sbin/ioreg"
SYSTEM_PROFILER = "/usr/sbin/system_profiler"
COMMAND_TIMEOUT = 30

_PROFILER_CONDITION = re.compile(r"^\s*(?:Condition|Health Information):\s*(.*)$")


def run_cmd(cmd: list[str]) -> bytes | None:
    """Run a command and return its output, None on any failure."""
    try:
        result = subprocess.run(  # noqa: S603
            cmd,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            timeout=COMMAND_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as err:
        _LOGGER.debug("Command %s failed: %s", cmd[0], err)
        return None
    return result.stdout


def parse_ioreg_plist(output: bytes | None) -> dict[str, Any] | None:
    """Return the first AppleSmartBattery dictionary of `ioreg -a` output."""
    if not output or b"<dict>" not in output:
        return None
    try:
        data = plistlib.loads(output)
    except (plistlib.InvalidFileException, ValueError) as err:
        _LOGGER.debug("ioreg returned an unreadable plist: %s", err)
        return None
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        return None
    return data


def read_ioreg_properties() -> dict[str, Any] | None:
    """Return the AppleSmartBattery properties, None without a battery."""
    ioreg = shutil.which("ioreg") or IOREG
    return parse_ioreg_plist(run_cmd([ioreg, "-a", "-r", "-c", "AppleSmartBattery"]))


def parse_profiler_condition(output: str | None) -> str | None:
    """Return the condition text of `system_profiler SPPowerDataType`."""
    if not output:
        return None
    for line in output.splitlines():
        match = _PROFILER_CONDITION.match(line)
        # "Health Information:" is usually a section header without a value
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None


def read_profiler_condition() -> str | None:
    """Scrape the battery condition from system_profiler."""
    profiler = shutil.which("system_profiler") or SYSTEM_PROFILER
    output = run_cmd([profiler, "SPPowerDataType"])
    if output is None:
        return None
    return parse_profiler_condition(output.decode("utf-8", errors="replace"))


def lookup(properties: Mapping[str, Any], path: str) -> Any:
    """Return the value at a colon separated key path, None when missing."""
    value: Any = properties
    for key in path.split(":"):
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def condition_extractors(
    properties: Mapping[str, Any],
    fallback: Callable[[], Any] | None = None,
) -> list[Callable[[], Any]]:
    """Return the condition sources in priority order."""
    extractors: list[Callable[[], Any]] = [
        partial(lookup, properties, path) for path in CONDITION_FIELDS
    ]
    if fallback is not None:
        extractors.append(fallback)
    return extractors


def raw_counters_from_properties(
    properties: Mapping[str, Any],
    fallback: Callable[[], Any] | None = None,
) -> RawCounters:
    """Build the raw counters from AppleSmartBattery properties.

    The fallback is only asked for the condition when no property has one.
    """
    return RawCounters(
        design_capacity=properties.get("DesignCapacity"),
        raw_max_capacity=properties.get("AppleRawMaxCapacity"),
        nominal_charge_capacity=properties.get("NominalChargeCapacity"),
        max_capacity=properties.get("MaxCapacity"),
        current_capacity=properties.get("CurrentCapacity"),
        raw_current_capacity=properties.get("AppleRawCurrentCapacity"),
        cycle_count=properties.get("CycleCount"),
        is_charging=properties.get("IsCharging"),
        external_connected=properties.get("ExternalConnected"),
        time_remaining=properties.get("TimeRemaining"),
        voltage=properties.get("Voltage"),
        condition=first_condition(condition_extractors(properties, fallback)),
    )


def read_raw_counters() -> RawCounters | None:
    """Read the local battery, None when the machine has none."""
    properties = read_ioreg_properties()
    if properties is None:
        _LOGGER.debug("No AppleSmartBattery found")
        return None
    return raw_counters_from_properties(properties, read_profiler_condition)


def collect_record() -> str:
    """Return the telemetry record of the local battery."""
    raw = read_raw_counters()
    if raw is None:
        return encode_record(None)
    return encode_record(normalize(raw))
