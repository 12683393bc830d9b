"""Multi-arch manifest publishing pipeline.

For every component, in order:
    1. remove any existing local manifest list (best-effort)
    2. optionally delete the current manifest from the registry (best-effort)
    3. pull the amd64 and arm64 source images (best-effort)
    4. create the manifest list (fatal on failure)
    5. annotate both entries with os/arch (best-effort)
    6. push the manifest list (fatal on failure)
    7. print a verbose inspection (best-effort)

A fatal failure stops the run; components after it are never processed.
"""

from typing import Callable, Optional

import click
import structlog

from .config import RunSettings
from .manifest_store import ManifestStore, describe_failure
from .references import ComponentImages, RegistryCoordinates
from .registry import HttpRegistryClient, RegistryClient
from .steps import StepPolicy, run_step

logger = structlog.get_logger(__name__)

CAPABILITY_GUIDANCE = """
ERROR: `docker manifest` not found in your docker client.
Either install a Docker CLI with manifest support or use buildx imagetools
(`docker buildx imagetools create`) to assemble multi-arch manifests.
"""


class ManifestCapabilityError(Exception):
    """Raised when the container CLI lacks manifest list support."""


class ManifestPublisher:
    """Recreates and pushes multi-arch manifest lists for a set of components."""

    def __init__(
        self,
        settings: RunSettings,
        store: ManifestStore,
        registry: Optional[RegistryClient] = None,
        echo: Callable[..., None] = click.echo,
    ):
        self.settings = settings
        self.store = store
        self._registry = registry
        self.echo = echo

    @property
    def registry(self) -> RegistryClient:
        """Registry client, built from settings on first use."""
        if self._registry is None:
            self._registry = HttpRegistryClient(
                self.settings.registry_user,
                self.settings.registry_password,
                verify=not self.settings.insecure_registry,
                dry_run=self.settings.dry_run,
            )
        return self._registry

    def check_capability(self) -> None:
        """Abort before any component is touched if manifests are unsupported.

        Raises:
            ManifestCapabilityError: If the store cannot manage manifest lists
        """
        if not self.store.is_available():
            self.echo(CAPABILITY_GUIDANCE, err=True)
            raise ManifestCapabilityError("docker manifest subcommand is not available")

    def run(self) -> list[ComponentImages]:
        """Publish every configured component.

        Raises:
            ManifestCapabilityError: If the capability check fails
            FatalStepError: If a manifest create or push fails
        """
        self.check_capability()

        settings = self.settings
        self.echo("Creating multi-arch manifests (will first remove existing local manifest if present)")
        self.echo(f"Version: {settings.version}")
        if settings.image_prefix:
            self.echo(f"Image prefix: {settings.image_prefix}")
        else:
            self.echo("Image prefix: (none), using local/repo names")

        published = [self.publish_component(component) for component in settings.components]

        self.echo()
        self.echo(f"All done. Multi-arch manifests recreated for version {settings.version}.")
        return published

    def publish_component(self, component: str) -> ComponentImages:
        """Run the full step sequence for one component."""
        images = ComponentImages.for_component(self.settings.image_prefix, component, self.settings.version)
        target = images.target.uri
        log = logger.bind(component=component, target=target)

        self.echo()
        self.echo("-------------------------------------------")
        self.echo(f"Component: {component}")
        self.echo(f"  target manifest: {target}")
        self.echo(f"  amd64 image:     {images.amd64.uri}")
        self.echo(f"  arm64 image:     {images.arm64.uri}")

        self._remove_local(target)
        if self.settings.remote_delete_enabled:
            self._remove_remote(component)
        self._prefetch(images)

        self.echo("  creating manifest list...")
        created = run_step(
            "manifest create",
            StepPolicy.FATAL,
            lambda: self.store.create(target, [images.amd64.uri, images.arm64.uri]),
        )
        self._echo_output(created.value)

        self.echo("  annotating manifest entries...")
        for platform_image in images.platform_images():
            outcome = run_step(
                f"manifest annotate {platform_image.architecture}",
                StepPolicy.BEST_EFFORT,
                lambda p=platform_image: self.store.annotate(target, p.reference.uri, p.os, p.architecture),
            )
            if not outcome.ok:
                self.echo(
                    f"    WARNING: failed to annotate {platform_image.reference.uri} "
                    f"({describe_failure(outcome.error)}). Continuing..."
                )

        self.echo(f"  pushing manifest {target}...")
        pushed = run_step("manifest push", StepPolicy.FATAL, lambda: self.store.push(target))
        self._echo_output(pushed.value)

        self.echo("  manifest inspect (summary):")
        inspected = run_step("manifest inspect", StepPolicy.BEST_EFFORT, lambda: self.store.inspect(target))
        if inspected.ok:
            self._echo_output(inspected.value)
        else:
            self.echo(f"    inspect failed ({describe_failure(inspected.error)})", err=True)

        self.echo(f"  DONE: {target}")
        log.info("Published manifest list")
        return images

    def _remove_local(self, target: str) -> None:
        self.echo("  removing existing local manifest (if any)...")
        outcome = run_step("manifest rm", StepPolicy.BEST_EFFORT, lambda: self.store.remove(target))
        if outcome.ok:
            self.echo(f"    removed local manifest: {target}")
        else:
            self.echo("    no local manifest to remove or removal failed (continuing)...")

    def _remove_remote(self, component: str) -> None:
        settings = self.settings
        if not settings.has_registry_credentials:
            self.echo("  DELETE_REMOTE enabled but REG_USER/REG_PASS unset, skipping remote deletion.")
            return

        coordinates = RegistryCoordinates.for_deletion(settings.image_prefix, component, settings.version)
        if settings.dry_run:
            self.echo(
                f"  DRY RUN: would look up and delete remote manifest "
                f"{coordinates}/manifests/{settings.version}, skipping registry calls."
            )
            return

        self.echo("  attempting remote manifest deletion (best-effort)...")

        fetched = run_step(
            "registry fetch digest",
            StepPolicy.BEST_EFFORT,
            lambda: self.registry.fetch_digest(coordinates, settings.version),
        )
        if not fetched.ok:
            self.echo(
                f"    failed to fetch manifest headers for remote repo "
                f"{coordinates}/manifests/{settings.version}, skipping remote delete."
            )
            return

        digest = fetched.value
        if not digest:
            self.echo("    Docker-Content-Digest header not found, cannot delete by digest. Skipping remote delete.")
            return

        self.echo(f"    found digest: {digest}")
        deleted = run_step(
            "registry delete manifest",
            StepPolicy.BEST_EFFORT,
            lambda: self.registry.delete_manifest(coordinates, digest),
        )
        if deleted.ok:
            self.echo("    remote manifest deleted (requested).")
        else:
            self.echo("    remote delete request failed (registry may not allow deletion via v2 API).")

    def _prefetch(self, images: ComponentImages) -> None:
        self.echo("  pulling source images (best-effort)...")
        outcomes = [
            (image, run_step(f"pull {image.tag}", StepPolicy.BEST_EFFORT, lambda i=image: self.store.pull(i.uri)))
            for image in (images.amd64, images.arm64)
        ]
        for image, outcome in outcomes:
            if not outcome.ok:
                self.echo(
                    f"    WARNING: failed to pull {image.uri} (it may not exist or auth required). Continuing..."
                )

    def _echo_output(self, output: Optional[str]) -> None:
        if output and output.strip():
            self.echo(output.rstrip())
