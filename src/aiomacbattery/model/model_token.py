"""Models for Microsoft identity platform access tokens."""

from dataclasses import dataclass, field

from mashumaro import DataClassDictMixin, field_options


@dataclass
class JWT(DataClassDictMixin):
    """The content of the JWT."""

    aud: str
    iss: str
    iat: int
    exp: int
    tid: str | None = None
    oid: str | None = None
    upn: str | None = None
    name: str | None = None
    app_id: str | None = field(default=None, metadata=field_options(alias="appid"))
    scp: str | None = None
    """Space separated delegated scopes."""

    roles: list[str] = field(default_factory=list)
    """Application permissions."""

    @property
    def scopes(self) -> list[str]:
        """Return delegated scopes and application roles together."""
        delegated = self.scp.split() if self.scp else []
        return delegated + list(self.roles)
