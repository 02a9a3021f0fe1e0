"""Locate native package-manager executables."""

from __future__ import annotations

import shutil
import subprocess

import structlog

log = structlog.get_logger("bomforge.executables")

_PROBE_TIMEOUT = 10


def find_executable(name: str, version_arg: str, override: str | None = None) -> str | None:
    """Return a runnable path for *name*, or None if it cannot be used.

    *override* (usually taken from the environment) wins over the PATH
    lookup. The candidate is probed with *version_arg* so that a broken
    install is reported at lookup time rather than on first use.
    """
    candidate = override or shutil.which(name)
    if candidate is None:
        log.warning("executable.not_found", name=name)
        return None

    try:
        result = subprocess.run(
            [candidate, version_arg],
            capture_output=True,
            text=True,
            timeout=_PROBE_TIMEOUT,
        )
    except (subprocess.SubprocessError, OSError):
        log.warning("executable.probe_failed", name=name, path=candidate, exc_info=True)
        return None

    if result.returncode != 0:
        log.warning(
            "executable.probe_failed",
            name=name,
            path=candidate,
            exit_code=result.returncode,
            stderr=result.stderr.strip()[-500:],
        )
        return None

    log.debug("executable.found", name=name, path=candidate, version=result.stdout.strip())
    return candidate
