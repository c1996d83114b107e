"""Test case manifests."""

from blesstest.manifest.loader import (
    DEFAULT_MANIFEST_GLOBS,
    discover_manifest_files,
    load_manifest,
    load_manifest_file,
    parse_manifest_payload,
)
from blesstest.manifest.models import (
    CaseDefinition,
    Manifest,
    TestCase,
    validate_cases_unique,
)

__all__ = [
    "DEFAULT_MANIFEST_GLOBS",
    "CaseDefinition",
    "Manifest",
    "TestCase",
    "discover_manifest_files",
    "load_manifest",
    "load_manifest_file",
    "parse_manifest_payload",
    "validate_cases_unique",
]
