"""Out-of-process plugins: custom risk rules and the RAA calculator.

A plugin is any executable.  It receives JSON on stdin and answers with
JSON on stdout; stderr is captured for diagnostics.

Custom risk rule plugins understand two arguments:

- ``-get-info``: ignore stdin, print ``{"id": ..., "risk_category": {...},
  "tags": [...]}``.
- ``-generate-risks``: read the serialized model from stdin, print a JSON
  list of risk objects (the same shape as ``Risk.to_dict``).

An RAA plugin is called without arguments, reads the serialized model and
prints it back with a numeric ``raa`` set on every technical asset.  Its
stderr is taken as the human-readable summary of the calculation.

Every call is bounded by a timeout.  A launch failure, timeout, non-zero
exit or malformed output raises ``PluginError``.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from archrisk.config import (
    DEFAULT_PLUGIN_TIMEOUT_SECONDS,
    PLUGIN_GENERATE_RISKS_ARG,
    PLUGIN_GET_INFO_ARG,
)
from archrisk.context import AnalysisContext
from archrisk.errors import PluginError
from archrisk.models import ParsedModel, Risk, RiskCategory
from archrisk.rules.registry import RiskRule

logger = logging.getLogger(__name__)


class PluginRunner:
    """Invoke one plugin executable with JSON in and JSON out."""

    def __init__(self, path: str | Path, timeout: float = DEFAULT_PLUGIN_TIMEOUT_SECONDS):
        self.path = Path(path)
        self.timeout = timeout
        self.last_stderr = ""
        if not self.path.is_file():
            raise PluginError(f"plugin {str(self.path)!r} is not a regular file", plugin=str(self.path))

    def run(self, payload: Any = None, *args: str) -> Any:
        """Run the plugin with *args*, feeding *payload* as JSON on stdin."""
        command = [str(self.path), *args]
        stdin_data = json.dumps(payload, indent=2, default=str)
        logger.debug("Running plugin %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                input=stdin_data,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise PluginError(
                f"plugin {str(self.path)!r} timed out after {self.timeout}s",
                plugin=str(self.path), args=list(args),
            ) from exc
        except OSError as exc:
            raise PluginError(
                f"failed to launch plugin {str(self.path)!r}: {exc}",
                plugin=str(self.path), args=list(args),
            ) from exc

        self.last_stderr = result.stderr or ""
        if result.returncode != 0:
            raise PluginError(
                f"plugin {str(self.path)!r} exited with code {result.returncode}: {self.last_stderr.strip()}",
                plugin=str(self.path), args=list(args), returncode=result.returncode,
            )
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise PluginError(
                f"plugin {str(self.path)!r} returned malformed JSON: {exc}",
                plugin=str(self.path), args=list(args),
            ) from exc


# ---------------------------------------------------------------------------
# Custom risk rules
# ---------------------------------------------------------------------------

def load_custom_risk_rule(path: str | Path, timeout: float = DEFAULT_PLUGIN_TIMEOUT_SECONDS) -> RiskRule:
    """Query a rule plugin for its category and tags and wrap it as a ``RiskRule``."""
    runner = PluginRunner(path, timeout)
    info = runner.run(None, PLUGIN_GET_INFO_ARG)
    try:
        category = RiskCategory.from_dict(info["risk_category"])
        tags = tuple(str(tag) for tag in info.get("tags") or [])
    except (KeyError, TypeError, ValueError) as exc:
        raise PluginError(
            f"plugin {str(runner.path)!r} returned an invalid rule description: {exc}",
            plugin=str(runner.path),
        ) from exc
    declared_id = info.get("id")
    if declared_id and declared_id != category.id:
        logger.warning(
            "Custom risk rule %s declares id %r but category id %r; using the category id",
            runner.path, declared_id, category.id,
        )

    def generate_risks(ctx: AnalysisContext) -> list[Risk]:
        raw_risks = runner.run(ctx.model.to_dict(), PLUGIN_GENERATE_RISKS_ARG)
        if not isinstance(raw_risks, list):
            raise PluginError(
                f"plugin {str(runner.path)!r} must return a list of risks",
                plugin=str(runner.path), rule=category.id,
            )
        try:
            return [Risk.from_dict(item, category) for item in raw_risks]
        except (KeyError, TypeError, ValueError) as exc:
            raise PluginError(
                f"plugin {str(runner.path)!r} returned an invalid risk: {exc}",
                plugin=str(runner.path), rule=category.id,
            ) from exc

    return RiskRule(category, tags, generate_risks)


def load_custom_risk_rules(
    paths: list[str],
    timeout: float = DEFAULT_PLUGIN_TIMEOUT_SECONDS,
) -> list[RiskRule]:
    """Load every rule plugin in *paths*; empty entries are ignored."""
    rules: list[RiskRule] = []
    paths = [p for p in paths if p]
    if not paths:
        return rules
    logger.info("Loading custom risk rules: %s", ", ".join(paths))
    for path in paths:
        rule = load_custom_risk_rule(path, timeout)
        logger.info("Custom risk rule loaded: %s", rule.id)
        rules.append(rule)
    logger.info("Loaded custom risk rules: %s", ", ".join(r.id for r in rules))
    return rules


# ---------------------------------------------------------------------------
# Relative attacker attractiveness
# ---------------------------------------------------------------------------

def apply_raa(
    model: ParsedModel,
    path: str | Path,
    timeout: float = DEFAULT_PLUGIN_TIMEOUT_SECONDS,
) -> str:
    """Run the RAA plugin and copy its scores onto *model*'s technical assets.

    Returns the plugin's summary text.  Assets the plugin leaves out keep
    their current score.
    """
    runner = PluginRunner(path, timeout)
    logger.info("Calculating RAA via %s", runner.path)
    output = runner.run(model.to_dict())
    assets = output.get("technical_assets") if isinstance(output, dict) else None
    if not isinstance(assets, dict):
        raise PluginError(
            f"RAA plugin {str(runner.path)!r} must return the model with a 'technical_assets' map",
            plugin=str(runner.path),
        )
    for asset_id, asset_data in sorted(assets.items()):
        asset = model.technical_assets.get(asset_id)
        if asset is None:
            logger.warning("RAA plugin returned a score for unknown technical asset %r", asset_id)
            continue
        try:
            raa = float(asset_data["raa"])
        except (KeyError, TypeError, ValueError) as exc:
            raise PluginError(
                f"RAA plugin {str(runner.path)!r} returned no valid 'raa' for technical asset {asset_id!r}",
                plugin=str(runner.path), id=asset_id,
            ) from exc
        if not 0.0 <= raa <= 100.0:
            raise PluginError(
                f"RAA plugin {str(runner.path)!r} returned out-of-range 'raa' for technical asset "
                f"{asset_id!r}: {raa}",
                plugin=str(runner.path), id=asset_id, value=raa,
            )
        asset.raa = raa
    return runner.last_stderr.strip()
