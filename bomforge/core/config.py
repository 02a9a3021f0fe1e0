"""Runtime settings read from the environment at import time."""

from __future__ import annotations

import os

import structlog

log = structlog.get_logger("bomforge.config")

_DEFAULT_CARGO_TIMEOUT_SECONDS = 5.0


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        log.warning("config.invalid_value", key=key, value=raw, default=default)
        return default
    if value <= 0:
        log.warning("config.non_positive_value", key=key, value=raw, default=default)
        return default
    return value


# Wall-clock limit for one `cargo metadata` run.
CARGO_TIMEOUT_SECONDS: float = _env_float(
    "BOMFORGE_CARGO_TIMEOUT_SECONDS", _DEFAULT_CARGO_TIMEOUT_SECONDS
)

# Explicit cargo binary; skips the PATH lookup when set.
CARGO_PATH: str | None = os.environ.get("BOMFORGE_CARGO_PATH") or None

# How long to wait for the stdout reader thread after the child exits or is killed.
READER_JOIN_GRACE_SECONDS = 2.0
