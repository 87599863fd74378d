"""Source configuration models and registries.

A source names the log files backing it, the fields that carry the
timestamp and message, and the column schema used to render entries.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Literal, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .errors import SourceConfigurationMissing

logger = logging.getLogger(__name__)

SOURCES_FILE_ENV = "LOG_ENTRIES_SOURCES_FILE"
LOG_PATHS_ENV = "LOG_ENTRIES_LOG_PATHS"
DEFAULT_SOURCE_ID = "default"


class TimestampColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["timestamp"] = "timestamp"
    id: str = Field(description="Stable column id.")


class MessageColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["message"] = "message"
    id: str = Field(description="Stable column id.")


class FieldColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["field"] = "field"
    id: str = Field(description="Stable column id.")
    field: str = Field(description="Document field rendered in this column.")


LogColumnConfig = Annotated[
    Union[TimestampColumn, MessageColumn, FieldColumn],
    Field(discriminator="kind"),
]


def default_log_columns() -> list[LogColumnConfig]:
    return [
        TimestampColumn(id="timestamp"),
        FieldColumn(id="event.dataset", field="event.dataset"),
        MessageColumn(id="message"),
    ]


class SourceFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str = "@timestamp"
    tiebreaker: str = "_doc"
    message: list[str] = Field(default_factory=lambda: ["message", "@message"])


class SourceConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "Default"
    description: str = ""
    log_paths: list[str] = Field(default_factory=list, description="Log files of this source.")
    fields: SourceFields = Field(default_factory=SourceFields)
    log_columns: list[LogColumnConfig] = Field(default_factory=default_log_columns)


_SOURCES_ADAPTER = TypeAdapter(dict[str, SourceConfiguration])


class SourceRegistry(Protocol):
    """Resolves source ids to configurations."""

    async def get_source_configuration(self, source_id: str) -> SourceConfiguration:
        """Return the configuration or raise SourceConfigurationMissing."""
        ...

    async def list_source_configurations(self) -> Mapping[str, SourceConfiguration]:
        ...


@dataclass(frozen=True, slots=True)
class StaticSources:
    """Registry over a fixed mapping of source configurations."""

    configurations: Mapping[str, SourceConfiguration]

    async def get_source_configuration(self, source_id: str) -> SourceConfiguration:
        try:
            return self.configurations[source_id]
        except KeyError:
            raise SourceConfigurationMissing(source_id) from None

    async def list_source_configurations(self) -> Mapping[str, SourceConfiguration]:
        return dict(self.configurations)


def load_sources(path: str | Path) -> StaticSources:
    """Load a JSON file mapping source ids to configurations."""
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Sources file not found: {p}")
    configurations = _SOURCES_ADAPTER.validate_json(p.read_text(encoding="utf-8"))
    logger.debug("Loaded %d source configuration(s) from %s", len(configurations), p)
    return StaticSources(configurations=configurations)


def sources_from_env() -> StaticSources:
    """Build the registry from LOG_ENTRIES_SOURCES_FILE or LOG_ENTRIES_LOG_PATHS."""
    sources_file = os.getenv(SOURCES_FILE_ENV)
    if sources_file:
        return load_sources(sources_file)

    raw = os.getenv(LOG_PATHS_ENV, "")
    paths = [p for p in raw.split(os.pathsep) if p.strip()]
    return StaticSources(
        configurations={DEFAULT_SOURCE_ID: SourceConfiguration(log_paths=paths)}
    )


def source_configuration_schema() -> dict:
    return SourceConfiguration.model_json_schema()
