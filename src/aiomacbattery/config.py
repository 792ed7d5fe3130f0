"""Configuration of the scheduled battery report."""

import re
from collections.abc import Mapping
from typing import Annotated, Any, Self

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .exceptions import ConfigurationError

ENV_RECIPIENTS = "BATTERY_REPORT_RECIPIENTS"
ENV_ATTRIBUTE = "BATTERY_ATTRIBUTE"
ENV_MIN_HEALTH = "BATTERY_MIN_HEALTH"
ENV_OUTPUT_DIR = "BATTERY_REPORT_DIR"
ENV_ENRICH_USERS = "BATTERY_ENRICH_USERS"
ENV_ACCESS_TOKEN = "GRAPH_ACCESS_TOKEN"
ENV_TENANT_ID = "AZURE_TENANT_ID"
ENV_CLIENT_ID = "AZURE_CLIENT_ID"
ENV_CLIENT_SECRET = "AZURE_CLIENT_SECRET"

DEFAULT_MIN_HEALTH = 80

_RECIPIENT_SEPARATORS = re.compile(r"[,;\s]+")

# command line option -> environment variable of the same setting
OPTION_VARIABLES = {
    "attribute": ENV_ATTRIBUTE,
    "recipients": ENV_RECIPIENTS,
    "min_health": ENV_MIN_HEALTH,
    "output_dir": ENV_OUTPUT_DIR,
    "access_token": ENV_ACCESS_TOKEN,
    "tenant_id": ENV_TENANT_ID,
    "client_id": ENV_CLIENT_ID,
    "client_secret": ENV_CLIENT_SECRET,
}


def parse_recipients(value: str | None) -> list[str]:
    """Split a comma or semicolon separated list of addresses."""
    if not value:
        return []
    return [item for item in _RECIPIENT_SEPARATORS.split(value) if item]


class ReportConfig(BaseSettings):
    """Settings of one report run.

    Every setting can come from the environment; keyword arguments win over
    the environment.
    """

    model_config = SettingsConfigDict(
        populate_by_name=True, env_ignore_empty=True, extra="ignore"
    )

    attribute: str = Field(default="", validation_alias=ENV_ATTRIBUTE)
    """Custom attribute id or display name."""

    recipients: Annotated[list[str], NoDecode] = Field(
        default_factory=list, validation_alias=ENV_RECIPIENTS
    )
    min_health: int = Field(
        default=DEFAULT_MIN_HEALTH, ge=0, le=100, validation_alias=ENV_MIN_HEALTH
    )
    """Devices below this health are listed as alerts."""

    access_token: str | None = Field(default=None, validation_alias=ENV_ACCESS_TOKEN)
    tenant_id: str | None = Field(default=None, validation_alias=ENV_TENANT_ID)
    client_id: str | None = Field(default=None, validation_alias=ENV_CLIENT_ID)
    client_secret: str | None = Field(
        default=None, validation_alias=ENV_CLIENT_SECRET
    )
    output_dir: str = Field(default=".", validation_alias=ENV_OUTPUT_DIR)
    enrich_users: bool = Field(default=True, validation_alias=ENV_ENRICH_USERS)

    @field_validator("attribute", mode="before")
    @classmethod
    def strip_attribute(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("recipients", mode="before")
    @classmethod
    def split_recipients(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_recipients(value)
        return value

    @model_validator(mode="after")
    def check_required(self) -> Self:
        if not self.attribute:
            msg = f"No custom attribute given, use --attribute or {ENV_ATTRIBUTE}"
            raise ValueError(msg)
        if not self.access_token and not self.has_client_credentials:
            msg = (
                f"No credentials, set {ENV_ACCESS_TOKEN} or "
                f"{ENV_TENANT_ID}, {ENV_CLIENT_ID} and {ENV_CLIENT_SECRET}"
            )
            raise ValueError(msg)
        return self

    @property
    def has_client_credentials(self) -> bool:
        """Return True if a token can be requested with client credentials."""
        return bool(self.tenant_id and self.client_id and self.client_secret)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> Self:
        """Build the config from command line options over the environment.

        Options that are None or empty fall back to the environment.
        """
        settings: dict[str, Any] = {
            variable: options[option]
            for option, variable in OPTION_VARIABLES.items()
            if options.get(option) not in (None, "", [])
        }
        if options.get("no_enrich"):
            settings[ENV_ENRICH_USERS] = False
        try:
            return cls(**settings)
        except ValidationError as err:
            raise ConfigurationError(_describe(err)) from err


def _describe(err: ValidationError) -> str:
    """Return the validation errors as one line."""
    parts = []
    for error in err.errors():
        msg = error["msg"].removeprefix("Value error, ")
        if error["loc"]:
            msg = f"{'.'.join(str(loc) for loc in error['loc'])}: {msg}"
        parts.append(msg)
    return "; ".join(parts)
