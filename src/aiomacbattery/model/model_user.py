"""Models for Graph API - directory users."""

from dataclasses import dataclass, field

from mashumaro import DataClassDictMixin, field_options


@dataclass
class Manager(DataClassDictMixin):
    """The manager of a directory user."""

    id: str | None = None
    display_name: str | None = field(
        default=None, metadata=field_options(alias="displayName")
    )


@dataclass
class DirectoryUser(DataClassDictMixin):
    """Directory attributes used to enrich battery rows."""

    id: str
    display_name: str | None = field(
        default=None, metadata=field_options(alias="displayName")
    )
    user_principal_name: str | None = field(
        default=None, metadata=field_options(alias="userPrincipalName")
    )
    department: str | None = None
    job_title: str | None = field(
        default=None, metadata=field_options(alias="jobTitle")
    )
    manager: Manager | None = None
    office_location: str | None = field(
        default=None, metadata=field_options(alias="officeLocation")
    )
    company_name: str | None = field(
        default=None, metadata=field_options(alias="companyName")
    )
    country: str | None = None
    city: str | None = None
    mail: str | None = None
    mobile_phone: str | None = field(
        default=None, metadata=field_options(alias="mobilePhone")
    )
