"""Tool version from the environment, installed metadata or pyproject.toml"""

import os
import tomllib
from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "multiarch-manifests"


def get_version() -> str:
    """
    Resolve the version reported by `multiarch-manifests --version`.

    Priority:
    1. BUILD_VERSION environment variable (set by CI from the git tag)
    2. Installed distribution metadata
    3. pyproject.toml project.version (source checkout)
    4. "unknown"
    """
    if build_version := os.getenv("BUILD_VERSION"):
        return build_version

    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        pass

    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    try:
        with open(pyproject_path, "rb") as f:
            return tomllib.load(f).get("project", {}).get("version", "unknown")
    except (OSError, tomllib.TOMLDecodeError):
        return "unknown"


__version__ = get_version()
