"""Single place for secure subprocess invocation.

Uses shell=False, list args, and controlled env. All bandit suppressions live here.
"""

from __future__ import annotations

import os
import subprocess  # nosec B404 - used with shell=False, list args, controlled env
from collections.abc import Sequence
from pathlib import Path

# Re-export so callers can catch/annotate without importing subprocess elsewhere.
TimeoutExpired = subprocess.TimeoutExpired

# Variables git needs to behave the same as in the caller's shell.
_PASSTHROUGH_VARS = ("HOME", "SYSTEMROOT", "XDG_CONFIG_HOME")


def minimal_env() -> dict[str, str]:
    """Minimal env for subprocess (PATH plus git-relevant variables).

    Overlay with caller-provided vars as needed.

    Returns:
        Dict with PATH and any passthrough vars present in the current env.
    """
    env = {"PATH": os.environ.get("PATH", "")}
    for name in _PASSTHROUGH_VARS:
        value = os.environ.get(name)
        if value is not None:
            env[name] = value
    return env


def run_subprocess_bytes(
    argv: Sequence[str],
    *,
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[bytes]:
    """Run a subprocess with shell=False and capture raw stdout/stderr bytes.

    Returncode is not checked; caller inspects result.returncode. Output is not
    decoded so file content read through the subprocess stays byte-exact.

    Args:
        argv: Command and arguments as a list (no shell parsing).
        cwd: Working directory for the subprocess.
        env: Environment dict; defaults to minimal_env() if None.
        timeout: Optional timeout in seconds.

    Returns:
        CompletedProcess with bytes stdout, stderr, returncode.
    """
    return subprocess.run(  # noqa: PLW1510  # nosec B603 - shell=False, list args, controlled env
        list(argv),
        cwd=str(cwd) if cwd is not None else None,
        env=env or minimal_env(),
        capture_output=True,
        timeout=timeout,
        shell=False,
    )
