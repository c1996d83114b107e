"""Load manifest files (JSON or YAML) and pool their cases."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from blesstest.kernel.errors import ManifestError
from blesstest.manifest.models import (
    CaseDefinition,
    Manifest,
    TestCase,
    validate_cases_unique,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_MANIFEST_GLOBS = ("src/**/*.blessed.json",)
_YAML_SUFFIXES = {".yaml", ".yml"}


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses duplicate mapping keys."""


def _construct_unique_mapping(
    loader: _UniqueKeyLoader, node: yaml.MappingNode, deep: bool = False
) -> dict[Any, Any]:
    loader.flatten_mapping(node)
    mapping: dict[Any, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise yaml.constructor.ConstructorError(
                "while constructing a mapping",
                node.start_mark,
                f"found duplicate key {key!r}",
                key_node.start_mark,
            )
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


_UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_unique_mapping
)


def _reject_duplicate_pairs(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in pairs:
        if key in out:
            raise ValueError(f"found duplicate key {key!r}")
        out[key] = value
    return out


def _decode_manifest_payload(path: Path) -> dict[str, object]:
    """Decode one manifest file from JSON or YAML.

    Args:
        path: Manifest file path.

    Returns:
        Parsed mapping payload.

    Raises:
        ManifestError: If read/decode fails, keys repeat, or root is not an object.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(
            f"Failed to read manifest file {path}: {exc}", data={"path": str(path)}
        ) from exc
    if path.suffix.lower() in _YAML_SUFFIXES:
        try:
            payload = yaml.load(raw, Loader=_UniqueKeyLoader)  # nosec B506 - SafeLoader subclass
        except yaml.YAMLError as exc:
            raise ManifestError(
                f"Failed to parse manifest file {path}: {exc}",
                data={"path": str(path)},
            ) from exc
    else:
        try:
            payload = json.loads(raw, object_pairs_hook=_reject_duplicate_pairs)
        except ValueError as exc:
            raise ManifestError(
                f"Failed to parse manifest file {path}: {exc}",
                data={"path": str(path)},
            ) from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ManifestError(
            f"Manifest file {path} root must be an object",
            data={"path": str(path)},
        )
    return payload


def parse_manifest_payload(
    payload: dict[str, object], *, source: str | None = None
) -> list[TestCase]:
    """Turn a decoded manifest mapping into test cases, in file order.

    Args:
        payload: Mapping name -> {harness, params}.
        source: Origin recorded on each case.

    Returns:
        Parsed test cases.

    Raises:
        ManifestError: If a key is not a string or an entry is malformed.
    """
    cases: list[TestCase] = []
    where = source or "<inline>"
    for name, entry in payload.items():
        if not isinstance(name, str) or not name.strip():
            raise ManifestError(
                f"Invalid test case name {name!r} in {where}",
                data={"source": source},
            )
        try:
            definition = CaseDefinition.model_validate(entry)
        except ValidationError as exc:
            raise ManifestError(
                f"Invalid definition for test case {name!r} in {where}: {exc}",
                data={
                    "source": source,
                    "name": name,
                    "validation_errors": exc.errors(include_url=False),
                },
            ) from exc
        cases.append(
            TestCase(
                name=name,
                harness=definition.harness,
                params=definition.params,
                source=source,
            )
        )
    return cases


def load_manifest_file(path: Path) -> list[TestCase]:
    """Load cases from one manifest file.

    Args:
        path: JSON or YAML manifest path.

    Returns:
        Cases in file order.
    """
    _LOGGER.debug("Processing manifest file %s", path)
    return parse_manifest_payload(_decode_manifest_payload(path), source=str(path))


def load_manifest(paths: Sequence[Path]) -> Manifest:
    """Load several manifest files and pool their cases.

    Args:
        paths: Manifest files, in the order their cases should be reported.

    Returns:
        Pooled manifest.

    Raises:
        ManifestError: If any file is unreadable or malformed.
        DuplicateCaseError: If a name repeats across files.
    """
    cases: list[TestCase] = []
    for path in paths:
        cases.extend(load_manifest_file(path))
    validate_cases_unique(cases)
    _LOGGER.info("Loaded %d test case(s) from %d manifest file(s)", len(cases), len(paths))
    return Manifest(cases=tuple(cases))


def discover_manifest_files(root: Path, patterns: Iterable[str]) -> list[Path]:
    """Expand glob patterns under root into a sorted list of manifest files.

    Args:
        root: Directory the patterns are relative to.
        patterns: Glob patterns such as "src/**/*.blessed.json".

    Returns:
        Unique matching files, sorted.

    Raises:
        ManifestError: If no file matches.
    """
    patterns = tuple(patterns)
    found = {p for pattern in patterns for p in root.glob(pattern) if p.is_file()}
    if not found:
        raise ManifestError(
            "No test definition files found matching glob pattern(s) "
            f"{', '.join(repr(p) for p in patterns)} under {root}",
            data={"root": str(root), "patterns": list(patterns)},
        )
    return sorted(found)
