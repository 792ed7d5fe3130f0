"""The constants for aiomacbattery."""

from enum import StrEnum

GRAPH_API_BASE_URL = "https://graph.microsoft.com/beta"
AUTH_API_BASE_URL = "https://login.microsoftonline.com"
AUTH_API_TOKEN_URL = f"{AUTH_API_BASE_URL}/{{tenant_id}}/oauth2/v2.0/token"
AUTH_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "Accept": "application/json",
}
AUTH_HEADER_FMT = "Bearer {}"
GRAPH_DEFAULT_SCOPE = "https://graph.microsoft.com/.default"
DEVICE_CONFIGURATION_SCOPE = "DeviceManagementConfiguration.Read.All"

NO_BATTERY_RECORD = "None"
"""Whole-record sentinel written when no battery hardware is present."""

TELEMETRY_FIELD_COUNT = 11
CYCLE_COUNT_THRESHOLD = 1000
HEALTH_SANITY_LIMIT = 110
HEALTH_CLAMPED_VALUE = 100
PERCENT_CAPACITY_LIMIT = 110
PERCENT_CHARGE_LIMIT = 100
MAH_CAPACITY_FLOOR = 200
TIME_REMAINING_CALCULATING = 65535

RUN_STATE_PAGE_SIZE = 200
ATTRIBUTE_LIST_PAGE_SIZE = 999

RATE_LIMIT_MAX_ATTEMPTS = 3
RATE_LIMIT_DEFAULT_DELAY = 10
RATE_LIMIT_MAX_DELAY = 60
SERVICE_UNAVAILABLE_DELAYS = (5, 10, 15)
ENRICHMENT_CONCURRENCY = 3

HEALTH_BANDS = (0, 60, 70, 80, 90, 100, 999)
HEALTH_GOOD = 90
HEALTH_WARNING = 70

RUN_STATE_SELECT = (
    "id,lastStateUpdateDateTime,resultMessage,runState,errorCode,errorDescription"
)
MANAGED_DEVICE_SELECT = "id,deviceName,userPrincipalName,osVersion,userId"
ATTRIBUTE_SELECT = "id,displayName,createdDateTime"
USER_SELECT = (
    "id,displayName,userPrincipalName,department,jobTitle,officeLocation,"
    "companyName,country,city,mail,mobilePhone"
)
USER_EXPAND = "manager($select=displayName,id)"

CONDITION_FIELDS = (
    "PermanentFailureStatus",
    "BatteryHealth",
    "HealthInfo:Condition",
    "BatteryHealthCondition",
)
"""IORegistry keys holding the battery condition, in priority order."""


class RunState(StrEnum):
    """Run state of a custom attribute script on a device."""

    UNKNOWN = "unknown"
    SUCCESS = "success"
    FAIL = "fail"
    SCRIPT_ERROR = "scriptError"
    PENDING = "pending"
    NOT_APPLICABLE = "notApplicable"
