from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from mcp_log_entries_server.core.errors import SourceConfigurationMissing
from mcp_log_entries_server.core.sources import (
    LOG_PATHS_ENV,
    SOURCES_FILE_ENV,
    FieldColumn,
    MessageColumn,
    SourceConfiguration,
    StaticSources,
    TimestampColumn,
    load_sources,
    source_configuration_schema,
    sources_from_env,
)


def test_defaults() -> None:
    cfg = SourceConfiguration()
    assert cfg.fields.timestamp == "@timestamp"
    assert cfg.fields.message == ["message", "@message"]
    assert [type(c) for c in cfg.log_columns] == [TimestampColumn, FieldColumn, MessageColumn]


def test_columns_are_discriminated_by_kind() -> None:
    cfg = SourceConfiguration.model_validate(
        {
            "log_columns": [
                {"kind": "message", "id": "m"},
                {"kind": "field", "id": "lvl", "field": "log.level"},
            ]
        }
    )
    assert cfg.log_columns == [MessageColumn(id="m"), FieldColumn(id="lvl", field="log.level")]

    with pytest.raises(ValidationError):
        SourceConfiguration.model_validate({"log_columns": [{"kind": "chart", "id": "x"}]})
    with pytest.raises(ValidationError):
        SourceConfiguration.model_validate({"log_columns": [{"kind": "field", "id": "x"}]})


@pytest.mark.asyncio
async def test_static_sources_lookup() -> None:
    cfg = SourceConfiguration(name="App")
    sources = StaticSources({"app": cfg})
    assert await sources.get_source_configuration("app") is cfg
    assert dict(await sources.list_source_configurations()) == {"app": cfg}
    with pytest.raises(SourceConfigurationMissing):
        await sources.get_source_configuration("other")


def test_load_sources(tmp_path: Path) -> None:
    path = tmp_path / "sources.json"
    path.write_text(
        json.dumps(
            {
                "api": {
                    "name": "API",
                    "log_paths": ["/var/log/api.log"],
                    "fields": {"timestamp": "ts", "message": ["msg"]},
                }
            }
        ),
        encoding="utf-8",
    )
    sources = load_sources(path)
    api = sources.configurations["api"]
    assert api.name == "API"
    assert api.fields.timestamp == "ts"
    assert api.fields.message == ["msg"]
    assert len(api.log_columns) == 3


def test_load_sources_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_sources(tmp_path / "nope.json")


def test_sources_from_env_paths(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(SOURCES_FILE_ENV, raising=False)
    monkeypatch.setenv(LOG_PATHS_ENV, os.pathsep.join(["/a.log", "", "/b.log"]))
    sources = sources_from_env()
    assert sources.configurations["default"].log_paths == ["/a.log", "/b.log"]


def test_sources_from_env_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "sources.json"
    path.write_text('{"x": {}}', encoding="utf-8")
    monkeypatch.setenv(SOURCES_FILE_ENV, str(path))
    assert list(sources_from_env().configurations) == ["x"]


def test_schema_lists_column_kinds() -> None:
    schema = json.dumps(source_configuration_schema())
    for kind in ("timestamp", "message", "field"):
        assert f'"{kind}"' in schema
