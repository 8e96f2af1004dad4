"""
tagchart - config schema.

File: src/tagchart/config/schema.py

Every section of ``tagchart.toml`` is described by a table mapping field name
to a checker. A checker returns the normalized value (stripped strings,
upper-cased log level) or rejects it with a message; validation collects one
``ConfigValidationIssue`` per failure, keyed by dotted path, and never stops at
the first. Unknown keys and missing sections are issues too.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

ConfigSchemaVersion: Final[int] = 1

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")

# Filter expressions are parsed recursively; deeper nesting is always rejected.
MAX_FILTER_DEPTH_CEILING: Final[int] = 256

# Resolved against the directory holding the config file.
PATH_FIELDS: Final[tuple[tuple[str, ...], ...]] = (("observability", "log_dir"),)


class MetaConfig(TypedDict):
    schema_version: int


class ScheduleConfig(TypedDict):
    title: str
    date_format: str
    start_field: str
    end_field: str
    depends_on_field: str
    section_field: str
    unclassified_section: str


class ChartsConfig(TypedDict):
    default_y_axis_label: str


class LimitsConfig(TypedDict):
    max_filter_depth: int
    max_dependency_depth: int


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_dir: str
    log_to_file: bool
    log_to_stderr: bool
    json_logs: bool


class TagchartConfig(TypedDict):
    meta: MetaConfig
    schedule: ScheduleConfig
    charts: ChartsConfig
    limits: LimitsConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[TagchartConfig] = {
    "meta": {
        "schema_version": ConfigSchemaVersion,
    },
    "schedule": {
        "title": "Task Schedule",
        "date_format": "YYYY-MM-DD",
        "start_field": "start_date",
        "end_field": "end_date",
        "depends_on_field": "depends_on",
        "section_field": "status",
        "unclassified_section": "unclassified",
    },
    "charts": {
        "default_y_axis_label": "Count",
    },
    "limits": {
        "max_filter_depth": 64,
        "max_dependency_depth": 10_000,
    },
    "observability": {
        "log_level": "WARNING",
        "log_dir": "logs/",
        "log_to_file": False,
        "log_to_stderr": True,
        "json_logs": True,
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """One rejected field: dotted ``path`` plus a human-readable ``message``."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation outcome; ``config`` is the normalized payload when valid."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised by ``assert_valid_config``; ``issues`` keeps every failure."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        lines = [f"- {issue.path}: {issue.message}" for issue in self.issues]
        super().__init__("invalid config:\n" + ("\n".join(lines) or "unknown validation failure"))


# A checker returns the normalized value, or raises _Reject with a message.
class _Reject(Exception):
    pass


_Checker = Callable[[object], object]


def _text(value: object) -> str:
    if not isinstance(value, str):
        raise _Reject(f"expected string, got {type(value).__name__}")
    stripped = value.strip()
    if not stripped:
        raise _Reject("must not be empty")
    return stripped


def _text_or_empty(value: object) -> str:
    if not isinstance(value, str):
        raise _Reject(f"expected string, got {type(value).__name__}")
    return value.strip()


def _path_text(value: object) -> str:
    text = _text(value)
    if "\x00" in text:
        raise _Reject("must not contain NUL bytes")
    return text


def _positive_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _Reject(f"expected integer, got {type(value).__name__}")
    if value < 1:
        raise _Reject("must be >= 1")
    return value


def _filter_depth(value: object) -> int:
    depth = _positive_int(value)
    if depth > MAX_FILTER_DEPTH_CEILING:
        raise _Reject(f"must be <= {MAX_FILTER_DEPTH_CEILING}")
    return depth


def _flag(value: object) -> bool:
    if not isinstance(value, bool):
        raise _Reject(f"expected boolean, got {type(value).__name__}")
    return value


def _log_level(value: object) -> str:
    level = _text(value).upper()
    if level not in LOG_LEVELS:
        raise _Reject(f"invalid value {level!r}; expected one of: {', '.join(sorted(LOG_LEVELS))}")
    return level


_SECTIONS: Final[dict[str, dict[str, _Checker]]] = {
    "meta": {"schema_version": _positive_int},
    "schedule": {
        "title": _text,
        "date_format": _text,
        "start_field": _text,
        "end_field": _text,
        # empty disables dependencies / sectioning
        "depends_on_field": _text_or_empty,
        "section_field": _text_or_empty,
        "unclassified_section": _text,
    },
    "charts": {"default_y_axis_label": _text},
    "limits": {"max_filter_depth": _filter_depth, "max_dependency_depth": _positive_int},
    "observability": {
        "log_level": _log_level,
        "log_dir": _path_text,
        "log_to_file": _flag,
        "log_to_stderr": _flag,
        "json_logs": _flag,
    },
}


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Engine-facing projection of the ``schedule``/``charts``/``limits`` sections."""

    schedule_title: str = DEFAULT_CONFIG["schedule"]["title"]
    date_format: str = DEFAULT_CONFIG["schedule"]["date_format"]
    start_field: str = DEFAULT_CONFIG["schedule"]["start_field"]
    end_field: str = DEFAULT_CONFIG["schedule"]["end_field"]
    depends_on_field: str = DEFAULT_CONFIG["schedule"]["depends_on_field"]
    section_field: str = DEFAULT_CONFIG["schedule"]["section_field"]
    unclassified_section: str = DEFAULT_CONFIG["schedule"]["unclassified_section"]
    default_y_axis_label: str = DEFAULT_CONFIG["charts"]["default_y_axis_label"]
    max_filter_depth: int = DEFAULT_CONFIG["limits"]["max_filter_depth"]
    max_dependency_depth: int = DEFAULT_CONFIG["limits"]["max_dependency_depth"]

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> EngineSettings:
        """Build settings from a validated config; missing sections use defaults."""
        effective = merge_config(default_config(), config)
        schedule = effective["schedule"]
        limits = effective["limits"]
        return cls(
            schedule_title=schedule["title"],
            date_format=schedule["date_format"],
            start_field=schedule["start_field"],
            end_field=schedule["end_field"],
            depends_on_field=schedule["depends_on_field"],
            section_field=schedule["section_field"],
            unclassified_section=schedule["unclassified_section"],
            default_y_axis_label=effective["charts"]["default_y_axis_label"],
            max_filter_depth=limits["max_filter_depth"],
            max_dependency_depth=limits["max_dependency_depth"],
        )


def default_config() -> TagchartConfig:
    """Fresh, mutable copy of ``DEFAULT_CONFIG``."""

    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    """Explain what to upgrade when ``meta.schema_version`` differs from ours."""

    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade tagchart.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade the tagchart package"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``; neither input is mutated."""

    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key in sorted(overlay):
        incoming = overlay[key]
        current = merged.get(key)
        if isinstance(incoming, Mapping):
            merged[key] = merge_config(current if isinstance(current, Mapping) else {}, incoming)
        else:
            merged[key] = copy.deepcopy(incoming)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate every section against its field table, collecting all issues."""

    issues: list[ConfigValidationIssue] = []
    if not isinstance(config, Mapping):
        issues.append(ConfigValidationIssue("<root>", f"expected object, got {type(config).__name__}"))
        return ConfigValidationResult(config=None, issues=tuple(issues))

    normalized: dict[str, Any] = {}
    _check_keys(config, _SECTIONS, "", issues)
    for section_name, fields in _SECTIONS.items():
        raw = config.get(section_name)
        if raw is None:
            continue
        if not isinstance(raw, Mapping):
            issues.append(
                ConfigValidationIssue(section_name, f"expected object, got {type(raw).__name__}")
            )
            continue
        normalized[section_name] = _validate_section(section_name, raw, fields, issues)

    version = normalized.get("meta", {}).get("schema_version")
    if version is not None and version != ConfigSchemaVersion:
        issues.insert(0, ConfigValidationIssue("meta.schema_version", migration_guidance(version)))

    if issues:
        return ConfigValidationResult(config=None, issues=tuple(issues))
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Return the normalized config, raising ``ConfigValidationError`` with every issue."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_section(
    section_name: str,
    payload: Mapping[object, object],
    fields: Mapping[str, _Checker],
    issues: list[ConfigValidationIssue],
) -> dict[str, Any]:
    _check_keys(payload, fields, section_name, issues)
    out: dict[str, Any] = {}
    for key in sorted(fields):
        if key not in payload:
            continue
        try:
            out[key] = fields[key](payload[key])
        except _Reject as exc:
            issues.append(ConfigValidationIssue(f"{section_name}.{key}", str(exc)))
    return out


def _check_keys(
    payload: Mapping[object, object],
    expected: Mapping[str, object],
    prefix: str,
    issues: list[ConfigValidationIssue],
) -> None:
    def path(key: object) -> str:
        return f"{prefix}.{key}" if prefix else str(key)

    for key in sorted(payload, key=str):
        if not isinstance(key, str):
            issues.append(ConfigValidationIssue(prefix or "<root>", "object keys must be strings"))
        elif key not in expected:
            issues.append(ConfigValidationIssue(path(key), "unknown field"))
    for key in sorted(expected):
        if key not in payload:
            issues.append(ConfigValidationIssue(path(key), "missing required field"))


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "MAX_FILTER_DEPTH_CEILING",
    "PATH_FIELDS",
    "ChartsConfig",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "EngineSettings",
    "LimitsConfig",
    "MetaConfig",
    "ObservabilityConfig",
    "ScheduleConfig",
    "TagchartConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
