"""Pytest configuration and fixtures for test isolation."""

from typing import Optional, Sequence

import pytest

from multiarch_manifests.manifest_store import ManifestCommandError


@pytest.fixture(scope="function", autouse=True)
def isolate_environment(monkeypatch):
    """Automatically isolate each test from the host environment.

    Registry credentials and flags exported in a developer shell must not
    change how the tests behave.
    """
    env_vars_to_clear = [
        "DELETE_REMOTE",
        "REG_USER",
        "REG_PASS",
        "INSECURE_REGISTRY",
        "LOG_LEVEL",
        "APP_ENV",
        "ENVIRONMENT",
        "BUILD_VERSION",
    ]

    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)

    yield


class FakeManifestStore:
    """In-memory ManifestStore that records every call.

    `failures` maps an operation name (e.g. "create", "pull:img:v1-amd64")
    to the exit code it should fail with.
    """

    def __init__(self, available: bool = True, failures: Optional[dict] = None):
        self.available = available
        self.failures = failures or {}
        self.calls: list[tuple] = []

    def _maybe_fail(self, key: str, *cmd: str) -> None:
        for candidate in (key, f"{key}:{cmd[0]}" if cmd else key):
            if candidate in self.failures:
                raise ManifestCommandError(["docker", key, *cmd], self.failures[candidate], stderr=f"{key} failed")

    def is_available(self) -> bool:
        self.calls.append(("is_available",))
        return self.available

    def remove(self, target: str) -> None:
        self.calls.append(("remove", target))
        self._maybe_fail("remove", target)

    def pull(self, image: str) -> None:
        self.calls.append(("pull", image))
        self._maybe_fail("pull", image)

    def create(self, target: str, images: Sequence[str]) -> str:
        self.calls.append(("create", target, tuple(images)))
        self._maybe_fail("create", target)
        return f"Created manifest list {target}"

    def annotate(self, target: str, image: str, os_name: str, arch: str) -> None:
        self.calls.append(("annotate", target, image, os_name, arch))
        self._maybe_fail("annotate", image)

    def push(self, target: str) -> str:
        self.calls.append(("push", target))
        self._maybe_fail("push", target)
        return "sha256:pushed"

    def inspect(self, target: str, verbose: bool = True) -> str:
        self.calls.append(("inspect", target, verbose))
        self._maybe_fail("inspect", target)
        return '[{"Ref": "%s"}]' % target

    @property
    def operations(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeRegistryClient:
    """RegistryClient fake with scripted digest/delete behavior."""

    def __init__(self, digest: Optional[str] = "sha256:abc123", fetch_error=None, delete_error=None):
        self.digest = digest
        self.fetch_error = fetch_error
        self.delete_error = delete_error
        self.calls: list[tuple] = []

    def fetch_digest(self, coordinates, tag):
        self.calls.append(("fetch_digest", coordinates, tag))
        if self.fetch_error:
            raise self.fetch_error
        return self.digest

    def delete_manifest(self, coordinates, digest):
        self.calls.append(("delete_manifest", coordinates, digest))
        if self.delete_error:
            raise self.delete_error


class EchoRecorder:
    """Captures publisher output the way click.echo would print it."""

    def __init__(self):
        self.stdout: list[str] = []
        self.stderr: list[str] = []

    def __call__(self, message=None, err: bool = False, **kwargs) -> None:
        (self.stderr if err else self.stdout).append("" if message is None else str(message))

    @property
    def text(self) -> str:
        return "\n".join(self.stdout)


@pytest.fixture
def fake_store():
    return FakeManifestStore()


@pytest.fixture
def fake_registry():
    return FakeRegistryClient()


@pytest.fixture
def echo():
    return EchoRecorder()
