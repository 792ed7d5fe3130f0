"""Models for Graph API - custom attribute definitions."""

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003

from mashumaro import DataClassDictMixin, field_options

from .utils import convert_graph_timestamp


@dataclass
class AttributeDefinition(DataClassDictMixin):
    """A custom attribute shell script definition."""

    id: str
    display_name: str | None = field(
        default=None, metadata=field_options(alias="displayName")
    )
    created: datetime | None = field(
        default=None,
        metadata=field_options(
            alias="createdDateTime",
            deserialize=convert_graph_timestamp,
        ),
    )


@dataclass
class AttributeDefinitionList(DataClassDictMixin):
    """DataClass for a list of all custom attribute definitions."""

    value: list[AttributeDefinition] = field(default_factory=list)
