"""Configuration loading for benchdiff.

Handles:
- Loading a ``benchdiff.yaml`` file.
- Merging CLI options and the environment with file values.
- Validating metric direction overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from benchdiff.compare import HIGHER_IS_BETTER, LOWER_IS_BETTER
from benchdiff.logging import get_logger

log = get_logger("config")

CONFIG_FILENAME = "benchdiff.yaml"
SECRET_ENV_VAR = "BENCHDIFF_SECRET"


@dataclass
class Config:
    """Resolved benchdiff configuration."""

    store_dir: Path = field(default_factory=lambda: Path(".benchdiff"))
    secret: str = ""
    remote_url: str = ""
    timeout: float = 10.0
    threshold: float = 5.0  # percent; smaller changes are "unchanged"
    allow_disjoint: bool = False
    directions: dict[str, str] = field(default_factory=dict)
    log_file: Path | None = None


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a configuration file.

    File format::

        store_dir: .benchdiff
        secret: ""
        remote_url: "https://bench.example.com"
        timeout: 10
        threshold: 5.0
        allow_disjoint: false
        directions:
          ops/s: higher
        log_file: .benchdiff/benchdiff.log

    Returns:
        The parsed YAML as a dict.  An empty file yields an empty dict.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__}")
    return data


def find_config(start: Path) -> Path | None:
    """Return ``start/benchdiff.yaml`` if it exists."""
    candidate = start / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_directions(raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("'directions' must be a mapping of metric -> lower|higher")
    directions: dict[str, str] = {}
    for metric, value in raw.items():
        value = str(value).strip().lower()
        if value not in (LOWER_IS_BETTER, HIGHER_IS_BETTER):
            raise ValueError(
                f"Invalid direction for metric '{metric}': '{value}' (expected lower or higher)"
            )
        directions[str(metric)] = value
    return directions


def config_from_dict(
    data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> Config:
    """Build a Config from parsed YAML.

    Precedence, highest first: CLI overrides that are not None, the
    ``BENCHDIFF_SECRET`` environment variable (secret only), file values,
    defaults.
    """
    merged = dict(data)
    env = os.environ if environ is None else environ
    if env.get(SECRET_ENV_VAR):
        merged["secret"] = env[SECRET_ENV_VAR]
    for key, value in (cli_overrides or {}).items():
        if value is not None:
            merged[key] = value

    unknown = set(merged) - {
        "store_dir",
        "secret",
        "remote_url",
        "timeout",
        "threshold",
        "allow_disjoint",
        "directions",
        "log_file",
    }
    for key in sorted(unknown):
        log.warning("Ignoring unknown config key '%s'", key)

    config = Config(
        secret=str(merged.get("secret") or ""),
        remote_url=str(merged.get("remote_url") or ""),
        allow_disjoint=bool(merged.get("allow_disjoint", False)),
        directions=_parse_directions(merged.get("directions")),
    )
    if merged.get("store_dir"):
        config.store_dir = Path(merged["store_dir"])
    if merged.get("log_file"):
        config.log_file = Path(merged["log_file"])
    try:
        if merged.get("timeout") is not None:
            config.timeout = float(merged["timeout"])
        if merged.get("threshold") is not None:
            config.threshold = float(merged["threshold"])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid numeric config value: {exc}") from exc
    if config.threshold < 0:
        raise ValueError("'threshold' must not be negative")
    return config


def resolve_config(
    config_path: Path | None,
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> Config:
    """Load *config_path* (or ``./benchdiff.yaml`` if present) and apply overrides."""
    path = config_path or find_config(Path.cwd())
    data = load_config(path) if path is not None else {}
    if path is not None:
        log.debug("Loaded config from %s", path)
    return config_from_dict(data, cli_overrides=cli_overrides)
