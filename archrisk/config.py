"""Global configuration constants and run settings for archrisk."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Input / output defaults
DEFAULT_MODEL_FILE = "threat-model.yaml"
DEFAULT_OUTPUT_DIR = Path(".")
RISKS_JSON_FILENAME = "risks.json"
STATS_JSON_FILENAME = "stats.json"
TECHNICAL_ASSETS_JSON_FILENAME = "technical-assets.json"

# Model syntax
ID_PATTERN = r"^[a-zA-Z0-9\-]+$"
DATE_FORMAT = "%Y-%m-%d"

# Plugin execution
DEFAULT_PLUGIN_TIMEOUT_SECONDS = 60
PLUGIN_GET_INFO_ARG = "-get-info"
PLUGIN_GENERATE_RISKS_ARG = "-generate-risks"

# Wildcard risk tracking: one "*" spans exactly one "@"-delimited segment
WILDCARD_SEGMENT_PATTERN = "[^@]+"


@dataclass
class AnalysisSettings:
    """Operator-facing knobs for one analysis run.

    Values come from CLI options, optionally seeded from a YAML or JSON
    settings file whose keys match the field names.
    """

    model_file: str = DEFAULT_MODEL_FILE
    output_dir: str = str(DEFAULT_OUTPUT_DIR)
    skip_risk_rules: str = ""
    ignore_orphaned_risk_tracking: bool = False
    custom_risk_rules_plugins: list[str] = field(default_factory=list)
    raa_plugin: str = ""
    plugin_timeout_seconds: float = DEFAULT_PLUGIN_TIMEOUT_SECONDS
    verbose: bool = False

    @property
    def skipped_rule_ids(self) -> list[str]:
        """The comma-separated skip list split into trimmed, non-empty ids."""
        return [part.strip() for part in self.skip_risk_rules.split(",") if part.strip()]

    @classmethod
    def from_file(cls, path: str | Path) -> AnalysisSettings:
        """Load settings from a YAML (``.yaml``/``.yml``) or JSON file.

        Unknown keys are logged and ignored.  A list of skipped rule ids is
        accepted as well as the comma-separated form, and a single plugin
        path as well as a list.  Raises ``ValueError`` when the document is
        not a mapping or a value has the wrong shape.
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                raw = yaml.safe_load(f) or {}
            else:
                raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"settings file {path} must contain a mapping, got {type(raw).__name__}")
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in raw.items():
            normalized = str(key).replace("-", "_")
            if normalized in known:
                values[normalized] = _coerce_setting(normalized, value, path)
            else:
                logger.warning("Ignoring unknown setting %r in %s", key, path)
        return cls(**values)


def _coerce_setting(name: str, value: Any, path: Path) -> Any:
    if name == "skip_risk_rules":
        if isinstance(value, list):
            return ",".join(str(item) for item in value)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError(f"setting {name!r} in {path} must be a string or a list, got {value!r}")
        return value
    if name == "custom_risk_rules_plugins":
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list):
            raise ValueError(f"setting {name!r} in {path} must be a path or a list of paths, got {value!r}")
        return [str(item) for item in value]
    if name in ("ignore_orphaned_risk_tracking", "verbose"):
        if not isinstance(value, bool):
            raise ValueError(f"setting {name!r} in {path} must be true or false, got {value!r}")
        return value
    if name == "plugin_timeout_seconds":
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ValueError(f"setting {name!r} in {path} must be a positive number, got {value!r}")
        return value
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"setting {name!r} in {path} must be a string, got {value!r}")
    return value
