#!/usr/bin/env python3
"""
Multi-arch manifest CLI

Recreates multi-architecture (amd64 + arm64) manifest lists from pre-built
per-architecture images and pushes them to the registry.

Usage:
    multiarch-manifests [VERSION] [IMAGE_PREFIX]
    python -m multiarch_manifests v2.13.2 myregistry.example.com/myproject

Module: cli
"""

import sys
from typing import Optional

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from .config import DEFAULT_IMAGE_PREFIX, DEFAULT_VERSION, RunSettings
from .logging_config import configure_logging
from .manifest_store import DockerManifestStore
from .publisher import ManifestCapabilityError, ManifestPublisher
from .steps import FatalStepError
from .version import __version__

EPILOG = f"""
\b
EXAMPLES:
    multiarch-manifests v2.13.2 myregistry.example.com/myproject
    multiarch-manifests v1.0.0 ""            # local images, no registry prefix
    DELETE_REMOTE=true REG_USER=me REG_PASS=secret multiarch-manifests v1.0.0 reg.example.com/proj

\b
DEFAULTS:
    VERSION                {DEFAULT_VERSION}
    IMAGE_PREFIX           {DEFAULT_IMAGE_PREFIX}

\b
ENVIRONMENT VARIABLES:
    DELETE_REMOTE          Delete the current manifest from the registry first (default: false)
    REG_USER               Registry username (required for DELETE_REMOTE)
    REG_PASS               Registry password (required for DELETE_REMOTE)
    INSECURE_REGISTRY      Skip TLS verification for registry API calls (default: false)
    LOG_LEVEL              Diagnostic log level (default: INFO)
"""


@click.command(epilog=EPILOG)
@click.argument("version_tag", metavar="VERSION", required=False)
@click.argument("image_prefix", required=False)
@click.option(
    "--component",
    "-c",
    "components",
    multiple=True,
    help="Component image name to publish (repeatable, default: node-feature-discovery)",
)
@click.option("--dry-run", is_flag=True, help="Print the docker commands and registry calls instead of running them")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__, prog_name="multiarch-manifests")
def main(
    version_tag: Optional[str],
    image_prefix: Optional[str],
    components: tuple[str, ...],
    dry_run: bool,
    verbose: bool,
):
    """
    Create and push multi-arch manifest lists for VERSION under IMAGE_PREFIX.

    Existing local manifests are removed first; remote deletion is opt-in
    via DELETE_REMOTE.
    """
    load_dotenv()
    configure_logging("DEBUG" if verbose else None)

    try:
        settings = RunSettings.from_env(version_tag, image_prefix, components, dry_run=dry_run)
    except ValidationError as e:
        click.echo(f"Error: invalid settings:\n{e}", err=True)
        sys.exit(2)

    publisher = ManifestPublisher(settings, DockerManifestStore(dry_run=settings.dry_run))

    try:
        publisher.run()
    except ManifestCapabilityError:
        sys.exit(1)
    except FatalStepError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(e.returncode)


if __name__ == "__main__":
    main()
