"""Local manifest list operations backed by the docker CLI.

The orchestrator only depends on the `ManifestStore` interface; the docker
implementation shells out to `docker manifest ...` and `docker pull`.
"""

from __future__ import annotations

import subprocess
import sys
from typing import Optional, Protocol, Sequence

import structlog

logger = structlog.get_logger(__name__)

COMMAND_NOT_FOUND = 127


class ManifestCommandError(Exception):
    """Raised when a container CLI command exits non-zero."""

    def __init__(self, command: Sequence[str], returncode: int, stdout: str = "", stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        message = f"Command failed with exit code {returncode}: {' '.join(self.command)}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)


class ManifestStore(Protocol):
    """Manifest list and image operations against the local store and registry."""

    def is_available(self) -> bool: ...

    def remove(self, target: str) -> None: ...

    def pull(self, image: str) -> None: ...

    def create(self, target: str, images: Sequence[str]) -> str: ...

    def annotate(self, target: str, image: str, os_name: str, arch: str) -> None: ...

    def push(self, target: str) -> str: ...

    def inspect(self, target: str, verbose: bool = True) -> str: ...


class DockerManifestStore:
    """Manages docker manifest operations for multi-arch publishing."""

    def __init__(self, docker_binary: str = "docker", dry_run: bool = False):
        self.docker_binary = docker_binary
        self.dry_run = dry_run

    def _run_command(self, cmd: list[str]) -> subprocess.CompletedProcess:
        """Execute a command with optional dry-run mode."""
        if self.dry_run:
            print(f"DRY RUN: Would execute: {' '.join(cmd)}", file=sys.stderr)
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        logger.debug("Executing command", command=" ".join(cmd))
        try:
            return subprocess.run(cmd, check=False, capture_output=True, text=True)
        except FileNotFoundError as exc:
            return subprocess.CompletedProcess(cmd, COMMAND_NOT_FOUND, stdout="", stderr=str(exc))

    def _docker(self, *args: str) -> str:
        """Run a docker subcommand, returning stdout or raising ManifestCommandError."""
        cmd = [self.docker_binary, *args]
        result = self._run_command(cmd)
        if result.returncode != 0:
            logger.debug(
                "Command failed",
                command=" ".join(cmd),
                returncode=result.returncode,
                stderr=(result.stderr or "").strip(),
            )
            raise ManifestCommandError(cmd, result.returncode, result.stdout or "", result.stderr or "")
        return result.stdout or ""

    def is_available(self) -> bool:
        """Check whether the docker client supports the manifest subcommand."""
        try:
            self._docker("manifest", "--help")
        except ManifestCommandError:
            return False
        return True

    def remove(self, target: str) -> None:
        self._docker("manifest", "rm", target)

    def pull(self, image: str) -> None:
        self._docker("pull", image)

    def create(self, target: str, images: Sequence[str]) -> str:
        return self._docker("manifest", "create", target, *images)

    def annotate(self, target: str, image: str, os_name: str, arch: str) -> None:
        self._docker("manifest", "annotate", target, image, "--os", os_name, "--arch", arch)

    def push(self, target: str) -> str:
        return self._docker("manifest", "push", target)

    def inspect(self, target: str, verbose: bool = True) -> str:
        args = ["manifest", "inspect", target]
        if verbose:
            args.append("--verbose")
        return self._docker(*args)


def describe_failure(error: Optional[BaseException]) -> str:
    """One-line description of a failed command for progress output."""
    if isinstance(error, ManifestCommandError):
        detail = error.stderr.strip().splitlines()
        suffix = f": {detail[-1]}" if detail else ""
        return f"exit code {error.returncode}{suffix}"
    return str(error) if error else "unknown error"
