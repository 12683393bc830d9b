"""Test environment variable naming consistency between config.py and the CLI help.

The environment variables read by config.py are part of the tool's public
interface and must all be documented in the CLI epilog.
"""

import re
from pathlib import Path

from multiarch_manifests.cli import EPILOG

PACKAGE_DIR = Path(__file__).parent.parent / "multiarch_manifests"


def test_environment_variable_names_are_documented():
    """config.py reads exactly the registry-related environment variables."""
    config_content = (PACKAGE_DIR / "config.py").read_text()

    env_var_pattern = r'os\.getenv\("([^"]+)"'
    actual_env_vars = set(re.findall(env_var_pattern, config_content))

    expected_env_vars = {
        "DELETE_REMOTE",
        "REG_USER",
        "REG_PASS",
        "INSECURE_REGISTRY",
    }

    assert expected_env_vars == actual_env_vars, (
        f"Environment variable mismatch!\n"
        f"Expected: {sorted(expected_env_vars)}\n"
        f"Actual: {sorted(actual_env_vars)}\n"
        f"Missing: {sorted(expected_env_vars - actual_env_vars)}\n"
        f"Extra: {sorted(actual_env_vars - expected_env_vars)}"
    )

    undocumented = sorted(var for var in actual_env_vars if var not in EPILOG)
    assert not undocumented, f"Environment variables missing from CLI help: {undocumented}"
