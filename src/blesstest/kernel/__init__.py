"""Kernel: canonical serialization, atomic writes, subprocess and error contracts."""

from blesstest.kernel.atomic_write import atomic_write_bytes
from blesstest.kernel.canonical import (
    JSONReadOnly,
    canonical_json_bytes,
    parse_canonical,
    serialize_snapshot,
    to_json_value,
)
from blesstest.kernel.errors import (
    BlesstestError,
    BlesstestErrorCode,
    DuplicateCaseError,
    InfrastructureError,
    ManifestError,
    SnapshotStoreError,
    StructuralError,
    UnknownHarnessError,
    VcsError,
)

__all__ = [
    "BlesstestError",
    "BlesstestErrorCode",
    "DuplicateCaseError",
    "InfrastructureError",
    "JSONReadOnly",
    "ManifestError",
    "SnapshotStoreError",
    "StructuralError",
    "UnknownHarnessError",
    "VcsError",
    "atomic_write_bytes",
    "canonical_json_bytes",
    "parse_canonical",
    "serialize_snapshot",
    "to_json_value",
]
