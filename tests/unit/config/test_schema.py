"""
tagchart - unit tests for config schema validation

File: tests/unit/config/test_schema.py

Purpose
- Validate strict config schema behavior and structured errors.

What this test file should cover
- Defaults validate cleanly and project into EngineSettings.
- Unknown keys, wrong types and schema version mismatches are reported with paths.
"""

from __future__ import annotations

import pytest

from tagchart.config.schema import (
    MAX_FILTER_DEPTH_CEILING,
    ConfigSchemaVersion,
    ConfigValidationError,
    EngineSettings,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)


def _paths(config: object) -> list[str]:
    return [issue.path for issue in validate_config(config).issues]


def test_defaults_are_valid_and_match_engine_defaults() -> None:
    result = validate_config(default_config())

    assert result.is_valid
    assert EngineSettings.from_config(default_config()) == EngineSettings()
    assert EngineSettings().max_filter_depth == 64
    assert EngineSettings().max_dependency_depth == 10_000


def test_unknown_keys_and_types_are_rejected_with_paths() -> None:
    config = merge_config(
        default_config(),
        {
            "schedule": {"colour": "red", "title": 3},
            "limits": {"max_filter_depth": 0},
            "observability": {"log_level": "chatty", "json_logs": "yes"},
            "extras": {},
        },
    )

    paths = _paths(config)

    assert "extras" in paths
    assert "schedule.colour" in paths
    assert "schedule.title" in paths
    assert "limits.max_filter_depth" in paths
    assert "observability.log_level" in paths
    assert "observability.json_logs" in paths


def test_missing_section_is_reported() -> None:
    config = default_config()
    del config["charts"]  # type: ignore[misc]

    assert "charts" in _paths(config)


def test_schema_version_mismatch_gives_migration_guidance() -> None:
    config = merge_config(default_config(), {"meta": {"schema_version": ConfigSchemaVersion + 1}})

    with pytest.raises(ConfigValidationError) as error:
        assert_valid_config(config)

    assert error.value.issues[0].path == "meta.schema_version"
    assert "upgrade the tagchart package" in str(error.value)
    assert "older" in migration_guidance(0)


def test_optional_fields_accept_empty_and_levels_normalize() -> None:
    config = merge_config(
        default_config(),
        {"schedule": {"section_field": "", "depends_on_field": ""}, "observability": {"log_level": "debug"}},
    )

    validated = assert_valid_config(config)
    settings = EngineSettings.from_config(validated)

    assert validated["observability"]["log_level"] == "DEBUG"
    assert settings.section_field == ""
    assert settings.depends_on_field == ""


def test_merge_config_does_not_mutate_inputs() -> None:
    base = default_config()
    merged = merge_config(base, {"charts": {"default_y_axis_label": "Tasks"}})

    assert merged["charts"]["default_y_axis_label"] == "Tasks"
    assert base["charts"]["default_y_axis_label"] == "Count"


def test_filter_depth_is_capped() -> None:
    at_ceiling = merge_config(
        default_config(), {"limits": {"max_filter_depth": MAX_FILTER_DEPTH_CEILING}}
    )
    too_deep = merge_config(
        default_config(), {"limits": {"max_filter_depth": MAX_FILTER_DEPTH_CEILING + 1}}
    )

    assert validate_config(at_ceiling).is_valid
    issues = validate_config(too_deep).issues
    assert [issue.path for issue in issues] == ["limits.max_filter_depth"]
    assert issues[0].message == f"must be <= {MAX_FILTER_DEPTH_CEILING}"
