"""Blesstest config model and loading helpers."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from blesstest.engine.results import MissingBaselinePolicy
from blesstest.kernel.canonical import MAX_INDENT
from blesstest.kernel.errors import BlesstestError, BlesstestErrorCode
from blesstest.manifest.loader import DEFAULT_MANIFEST_GLOBS

DEFAULT_CONFIG_FILENAME = "blesstest.yaml"


class BlesstestConfig(BaseModel):
    """Root configuration model. Relative paths resolve against the config dir."""

    model_config = ConfigDict(extra="forbid")

    snapshot_dir: str = "blessed"
    manifest_globs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MANIFEST_GLOBS), min_length=1
    )
    registry: str | None = None
    workers: int = Field(default=1, ge=1)
    timeout_s: float | None = Field(default=None, gt=0)
    indent: int | None = Field(default=None, ge=0, le=MAX_INDENT)
    missing_baseline: MissingBaselinePolicy = MissingBaselinePolicy.FAIL


class ConfigError(BlesstestError):
    """Raised when config cannot be decoded or validated."""

    def __init__(self, message: str) -> None:
        """Create config failure.

        Args:
            message: Human-readable error message.
        """
        super().__init__(BlesstestErrorCode.CONFIG_INVALID, message)


def _decode_config_payload(path: Path) -> dict[str, object]:
    """Decode config payload from JSON or YAML.

    Args:
        path: Config file path.

    Returns:
        Parsed mapping payload.

    Raises:
        ConfigError: If decode fails or payload is not an object.
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid config JSON: {exc}") from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid config YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError("Invalid config payload: root must be an object")
    return payload


def load_config(path: Path) -> BlesstestConfig:
    """Load config from disk, defaulting when missing.

    Args:
        path: Config file path.

    Returns:
        Parsed config, or defaults when file does not exist.

    Raises:
        ConfigError: If payload decode or validation fails.
    """
    if not path.exists():
        return BlesstestConfig()
    payload = _decode_config_payload(path)
    try:
        return BlesstestConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config payload: {exc}") from exc
