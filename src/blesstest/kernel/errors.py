"""Deterministic error contracts for structural and infrastructure failures."""

from __future__ import annotations

from enum import StrEnum


class BlesstestErrorCode(StrEnum):
    """Stable error codes surfaced in reports and CLI output."""

    MANIFEST_INVALID = "manifest_invalid"
    DUPLICATE_CASE = "duplicate_case"
    UNKNOWN_HARNESS = "unknown_harness"
    SNAPSHOT_IO_FAILED = "snapshot_io_failed"
    VCS_QUERY_FAILED = "vcs_query_failed"
    CONFIG_INVALID = "config_invalid"


class BlesstestError(RuntimeError):
    """Failure with stable deterministic code."""

    def __init__(
        self,
        code: BlesstestErrorCode,
        message: str,
        *,
        data: dict[str, object] | None = None,
    ) -> None:
        """Create failure.

        Args:
            code: Stable error code.
            message: Human-readable error message.
            data: Optional structured payload for diagnostics.
        """
        super().__init__(message)
        self.code = code
        self.data = data or {}


class StructuralError(BlesstestError):
    """Whole-run failure detected before any case executes."""


class ManifestError(StructuralError):
    """Manifest could not be decoded or has an invalid shape."""

    def __init__(self, message: str, *, data: dict[str, object] | None = None) -> None:
        """Create manifest failure.

        Args:
            message: Human-readable error message.
            data: Optional structured payload for diagnostics.
        """
        super().__init__(BlesstestErrorCode.MANIFEST_INVALID, message, data=data)


class DuplicateCaseError(StructuralError):
    """Same case name defined more than once across manifest inputs."""

    def __init__(self, message: str, *, data: dict[str, object] | None = None) -> None:
        """Create duplicate-case failure.

        Args:
            message: Human-readable error message.
            data: Optional structured payload for diagnostics.
        """
        super().__init__(BlesstestErrorCode.DUPLICATE_CASE, message, data=data)


class UnknownHarnessError(StructuralError):
    """Case references a harness the registry does not know."""

    def __init__(self, message: str, *, data: dict[str, object] | None = None) -> None:
        """Create unknown-harness failure.

        Args:
            message: Human-readable error message.
            data: Optional structured payload for diagnostics.
        """
        super().__init__(BlesstestErrorCode.UNKNOWN_HARNESS, message, data=data)


class InfrastructureError(BlesstestError):
    """Filesystem or version-control access failure for one case."""


class SnapshotStoreError(InfrastructureError):
    """Snapshot file could not be read or written."""

    def __init__(self, message: str, *, data: dict[str, object] | None = None) -> None:
        """Create snapshot IO failure.

        Args:
            message: Human-readable error message.
            data: Optional structured payload for diagnostics.
        """
        super().__init__(BlesstestErrorCode.SNAPSHOT_IO_FAILED, message, data=data)


class VcsError(InfrastructureError):
    """Version-control query failed or returned an unusable answer."""

    def __init__(self, message: str, *, data: dict[str, object] | None = None) -> None:
        """Create VCS query failure.

        Args:
            message: Human-readable error message.
            data: Optional structured payload for diagnostics.
        """
        super().__init__(BlesstestErrorCode.VCS_QUERY_FAILED, message, data=data)
