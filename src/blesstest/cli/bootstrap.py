"""CLI bootstrap helpers: logging, config resolution, registry import."""

from __future__ import annotations

import importlib
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from blesstest.config import (
    DEFAULT_CONFIG_FILENAME,
    BlesstestConfig,
    ConfigError,
    load_config,
)
from blesstest.harness.registry import HarnessRegistry

DEFAULT_REGISTRY_ATTR = "REGISTRY"

_LOGGING_CONFIGURED = False


def configure_logging(*, verbose: bool = False) -> None:
    """Configure Rich-backed logging once for CLI commands.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if _LOGGING_CONFIGURED:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True), show_path=False, rich_tracebacks=True
            )
        ],
    )
    _LOGGING_CONFIGURED = True


@dataclass(frozen=True)
class ResolvedSettings:
    """Config file values merged with CLI overrides, paths made absolute."""

    base_dir: Path
    config: BlesstestConfig

    @property
    def snapshot_dir(self) -> Path:
        """Absolute snapshot directory."""
        return self.base_dir / self.config.snapshot_dir


def resolve_settings(
    config_file: Path | None, overrides: dict[str, object]
) -> ResolvedSettings:
    """Load config (or defaults) and apply CLI overrides that were given.

    Args:
        config_file: Explicit config path, or None for ./blesstest.yaml.
        overrides: CLI values; None entries are ignored.

    Returns:
        Resolved settings rooted at the config file's directory.

    Raises:
        ConfigError: If the config or an override is invalid.
    """
    path = config_file or Path.cwd() / DEFAULT_CONFIG_FILENAME
    if config_file is not None and not config_file.exists():
        raise ConfigError(f"Config file not found: {config_file}")
    config = load_config(path)
    updates = {k: v for k, v in overrides.items() if v is not None}
    if updates:
        try:
            config = BlesstestConfig.model_validate(
                {**config.model_dump(), **updates}
            )
        except ValidationError as exc:
            raise ConfigError(f"Invalid option: {exc}") from exc
    return ResolvedSettings(base_dir=path.resolve().parent, config=config)


def load_registry(target: str, *, search_dir: Path) -> HarnessRegistry:
    """Import a HarnessRegistry from "package.module" or "package.module:attr".

    search_dir is put on sys.path first so project-local modules import.

    Args:
        target: Import path; attribute defaults to REGISTRY.
        search_dir: Directory to make importable (usually the config dir).

    Returns:
        Harness registry populated by the host module.

    Raises:
        ConfigError: If the module cannot be imported or the attribute is wrong.
    """
    module_path, _, attr = target.partition(":")
    attr = attr or DEFAULT_REGISTRY_ATTR
    search = str(search_dir)
    if search not in sys.path:
        sys.path.insert(0, search)
    try:
        module = importlib.import_module(module_path)
    except Exception as exc:
        raise ConfigError(
            f"Failed to import registry module {module_path!r}: {exc}"
        ) from exc
    registry = getattr(module, attr, None)
    if registry is None:
        raise ConfigError(f"Registry module {module_path!r} has no {attr} export")
    if not isinstance(registry, HarnessRegistry):
        raise ConfigError(
            f"{attr} in {module_path!r} must be HarnessRegistry, "
            f"got {type(registry).__name__}"
        )
    return registry
