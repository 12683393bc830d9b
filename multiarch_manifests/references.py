"""Image references and registry coordinates built from plain strings.

Nothing here parses or validates image names; references are formatted
exactly as `{prefix}{component}:{tag}`.
"""

from __future__ import annotations

from dataclasses import dataclass

ARCHITECTURES = ("amd64", "arm64")
MANIFEST_OS = "linux"


@dataclass(frozen=True)
class ImageReference:
    """Represents an image reference (optionally registry-prefixed)."""

    prefix: str
    name: str
    tag: str

    @property
    def uri(self) -> str:
        return f"{self.prefix}{self.name}:{self.tag}"

    def __str__(self) -> str:
        return self.uri


@dataclass(frozen=True)
class PlatformImage:
    """A per-architecture source image and the platform it is annotated with."""

    reference: ImageReference
    architecture: str
    os: str = MANIFEST_OS


@dataclass(frozen=True)
class ComponentImages:
    """The manifest list target and its two per-architecture source images."""

    target: ImageReference
    amd64: ImageReference
    arm64: ImageReference

    @classmethod
    def for_component(cls, prefix: str, component: str, version: str) -> ComponentImages:
        return cls(
            target=ImageReference(prefix, component, version),
            amd64=ImageReference(prefix, component, f"{version}-amd64"),
            arm64=ImageReference(prefix, component, f"{version}-arm64"),
        )

    def platform_images(self) -> list[PlatformImage]:
        return [
            PlatformImage(self.amd64, "amd64"),
            PlatformImage(self.arm64, "arm64"),
        ]


@dataclass(frozen=True)
class RegistryCoordinates:
    """Registry host and repository path used for the v2 manifest API."""

    host: str
    repository: str

    @classmethod
    def for_deletion(cls, prefix: str, component: str, version: str) -> RegistryCoordinates:
        """Derive coordinates of the deletable manifest from an image prefix.

        The prefix is split on its first separator into host and path. The
        repository is `{path}/{component}-{version}`, which differs from the
        `{path}/{component}` repository that images are pulled from.
        """
        host, separator, path = prefix.partition("/")
        if not separator:
            # No separator: host and path are both the whole prefix.
            path = prefix
        path = path[:-1] if path.endswith("/") else path
        return cls(host=host, repository=f"{path}/{component}-{version}")

    def manifest_url(self, reference: str) -> str:
        return f"https://{self.host}/v2/{self.repository}/manifests/{reference}"

    def __str__(self) -> str:
        return f"{self.host}/v2/{self.repository}"
