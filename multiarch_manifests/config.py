"""Run settings resolved from positional arguments and environment variables.

There is no configuration file. Everything comes from:
    - VERSION / IMAGE_PREFIX positional arguments (with defaults)
    - DELETE_REMOTE: attempt remote manifest deletion (default: false)
    - REG_USER / REG_PASS: registry credentials (both required for DELETE_REMOTE)
    - INSECURE_REGISTRY: skip TLS verification for registry API calls (default: false)

Usage:
    from multiarch_manifests.config import RunSettings

    settings = RunSettings.from_env("v1.0.0", "registry.example.com/proj")
    print(settings.image_prefix)  # registry.example.com/proj/
"""

import os
from typing import Any, Iterable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

logger = structlog.get_logger(__name__)

DEFAULT_VERSION = "v0.17.4"
DEFAULT_IMAGE_PREFIX = "quay.io/edgestack"
DEFAULT_COMPONENTS = ("node-feature-discovery",)

PREFIX_SEPARATOR = "/"


def parse_bool(value: Any) -> bool:
    """Parse boolean from an environment value (native bool or string representation).

    Raises:
        ValueError: If value cannot be parsed as boolean

    Accepts:
        - Native booleans: True, False
        - String representations: "true", "false", "True", "False", "1", "0"
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value.strip().lower() in ["true", "1"]:
            return True
        if value.strip().lower() in ["false", "0"]:
            return False
    raise ValueError(f"Invalid boolean value: {value!r}. Expected: true, false, 'true', 'false', '1', or '0'")


def normalize_prefix(prefix: str) -> str:
    """Ensure a non-empty image prefix ends with exactly one separator."""
    if prefix and not prefix.endswith(PREFIX_SEPARATOR):
        return prefix + PREFIX_SEPARATOR
    return prefix


class RunSettings(BaseModel):
    """Settings for one publishing run."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(DEFAULT_VERSION, description="Version tag shared by all components")
    image_prefix: str = Field(
        DEFAULT_IMAGE_PREFIX, validate_default=True, description="Registry/project prefix, empty for local images"
    )
    components: tuple[str, ...] = Field(DEFAULT_COMPONENTS, description="Component image names to publish")
    delete_remote: bool = Field(False, description="Delete the existing manifest from the registry first")
    registry_user: str = Field("", description="Registry username")
    registry_password: str = Field("", description="Registry password", repr=False)
    insecure_registry: bool = Field(False, description="Skip TLS verification for registry API calls")
    dry_run: bool = Field(False, description="Log commands instead of executing them")

    @field_validator("image_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        return normalize_prefix(value)

    @field_validator("delete_remote", "insecure_registry", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any, info: ValidationInfo) -> bool:
        if value is None or value == "":
            return False
        try:
            return parse_bool(value)
        except ValueError:
            # Unrecognized values disable the flag instead of aborting the run.
            logger.warning("Unrecognized boolean flag value, treating as false", field=info.field_name, value=value)
            return False

    @field_validator("components")
    @classmethod
    def _require_components(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(name.strip() for name in value if name and name.strip())
        if not cleaned:
            raise ValueError("At least one component name is required")
        return cleaned

    @property
    def has_registry_credentials(self) -> bool:
        return bool(self.registry_user) and bool(self.registry_password)

    @property
    def remote_delete_enabled(self) -> bool:
        """Remote deletion is only attempted against a registry prefix."""
        return self.delete_remote and bool(self.image_prefix)

    @classmethod
    def from_env(
        cls,
        version: Optional[str] = None,
        image_prefix: Optional[str] = None,
        components: Optional[Iterable[str]] = None,
        dry_run: bool = False,
    ) -> "RunSettings":
        """Build settings from positional values and the process environment.

        An empty or missing version falls back to the default. A missing prefix
        falls back to the default; an explicitly empty prefix selects local images.

        Raises:
            pydantic.ValidationError: If no usable component name is given
        """
        return cls(
            version=version or DEFAULT_VERSION,
            image_prefix=DEFAULT_IMAGE_PREFIX if image_prefix is None else image_prefix,
            components=tuple(components) if components else DEFAULT_COMPONENTS,
            delete_remote=os.getenv("DELETE_REMOTE", "false"),
            registry_user=os.getenv("REG_USER", ""),
            registry_password=os.getenv("REG_PASS", ""),
            insecure_registry=os.getenv("INSECURE_REGISTRY", "false"),
            dry_run=dry_run,
        )
