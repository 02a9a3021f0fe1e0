"""Run ``cargo metadata`` and parse its JSON into :class:`ResolvedMetadata`."""

from __future__ import annotations

import subprocess
import tempfile
import threading
from pathlib import Path
from typing import IO

import structlog
from pydantic import ValidationError

from bomforge.core import config
from bomforge.core.executables import find_executable
from bomforge.exceptions import ResolverTimeoutError
from bomforge.metadata import ResolvedMetadata

log = structlog.get_logger("bomforge.resolver.cargo")


def _drain(stream: IO[bytes], chunks: list[bytes]) -> None:
    for chunk in iter(lambda: stream.read(65536), b""):
        chunks.append(chunk)


def _finish_reader(reader: threading.Thread, stream: IO[bytes]) -> bool:
    """Join *reader*; True if it finished and *stream* was closed."""
    reader.join(timeout=config.READER_JOIN_GRACE_SECONDS)
    # a reader still blocked in read() holds the stream lock; leave it to die
    # with the daemon thread rather than block on close()
    if reader.is_alive():
        log.warning("resolver.reader_still_running", thread=reader.name)
        return False
    stream.close()
    return True


class CargoMetadataResolver:
    """Resolve the full dependency graph through the native cargo tool.

    Expected failures (tool missing, non-zero exit, empty or unparseable
    output) are logged and reported as ``None`` so the caller can still
    emit a root-only SBOM. A timeout raises :class:`ResolverTimeoutError`.
    """

    def __init__(self, executable: str | None = None, timeout: float | None = None) -> None:
        if executable is None:
            executable = find_executable("cargo", "--version", override=config.CARGO_PATH)
        self._executable = executable
        self._timeout = timeout if timeout is not None else config.CARGO_TIMEOUT_SECONDS
        if self._executable is None:
            log.warning("resolver.cargo_unavailable")

    @property
    def executable(self) -> str | None:
        return self._executable

    def command(self) -> list[str]:
        return [str(self._executable), "metadata", "--format-version", "1"]

    def resolve(self, project_dir: Path) -> ResolvedMetadata | None:
        if self._executable is None:
            log.warning("resolver.skipped", reason="cargo executable not found")
            return None

        cmd = self.command()
        log.debug("resolver.run", cmd=" ".join(cmd), cwd=str(project_dir), timeout=self._timeout)

        # stderr goes to a file so a chatty child can never block on it
        with tempfile.TemporaryFile() as stderr_file:
            try:
                proc = subprocess.Popen(
                    cmd,
                    cwd=project_dir,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                )
            except OSError:
                log.warning("resolver.spawn_failed", cmd=cmd[0], exc_info=True)
                return None

            chunks: list[bytes] = []
            reader = threading.Thread(
                target=_drain,
                args=(proc.stdout, chunks),
                name="cargo-metadata-stdout",
                daemon=True,
            )
            reader.start()
            try:
                exit_code = proc.wait(timeout=self._timeout)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.wait()
                _finish_reader(reader, proc.stdout)
                log.error("resolver.timeout", timeout=self._timeout, cwd=str(project_dir))
                raise ResolverTimeoutError(
                    f"cargo metadata timed out after {self._timeout:g} seconds"
                ) from None

            drained = _finish_reader(reader, proc.stdout)

            if exit_code != 0:
                stderr_file.seek(0)
                stderr = stderr_file.read().decode("utf-8", errors="replace").strip()
                log.warning(
                    "resolver.failed",
                    exit_code=exit_code,
                    stderr=stderr[-2000:],
                )
                return None

            # stdout still held open (e.g. by a grandchild): output may be partial
            if not drained:
                log.warning("resolver.incomplete_output", exit_code=exit_code)
                return None

        output = b"".join(chunks)
        if not output.strip():
            log.warning("resolver.empty_output")
            return None

        try:
            metadata = ResolvedMetadata.from_json(output)
        except ValidationError as exc:
            log.error("resolver.unparseable_output", error=str(exc)[:500])
            return None

        log.debug(
            "resolver.parsed",
            packages=len(metadata.packages),
            nodes=len(metadata.resolve.nodes) if metadata.resolve else 0,
            workspace_members=len(metadata.workspace_members),
            root=metadata.root_id,
        )
        return metadata
