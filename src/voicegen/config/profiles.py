"""Configuration profile management.

Profiles are selected through the VOICEGEN_PROFILE environment variable and
read from VOICEGEN_CONFIG_DIR when it is set.
"""

import os
from enum import Enum
from pathlib import Path


class Profile(Enum):
    """Available configuration profiles."""

    DEV = "dev"
    PROD = "prod"
    TEST = "test"


def detect_profile() -> Profile:
    """Detect appropriate configuration profile.

    Returns:
        Profile from VOICEGEN_PROFILE, or DEV when unset or unknown.
    """
    env_profile = os.environ.get("VOICEGEN_PROFILE", "").lower()
    profile_map = {
        "prod": Profile.PROD,
        "dev": Profile.DEV,
        "test": Profile.TEST,
    }
    return profile_map.get(env_profile, Profile.DEV)


def default_config_dir() -> Path:
    """Directory holding the profile YAML files.

    VOICEGEN_CONFIG_DIR overrides the project-root config/ directory, which
    only exists in a source checkout.
    """
    override = os.environ.get("VOICEGEN_CONFIG_DIR")
    if override:
        return Path(override)
    return Path(__file__).parent.parent.parent.parent / "config"


def get_profile_path(profile: Profile | None = None, config_dir: Path | None = None) -> Path:
    """Get path to profile configuration file.

    Args:
        profile: Profile to use, or None to auto-detect
        config_dir: Configuration directory, or None for default

    Returns:
        Path to profile YAML file
    """
    if profile is None:
        profile = detect_profile()

    if config_dir is None:
        config_dir = default_config_dir()

    return config_dir / f"{profile.value}.yaml"


__all__ = [
    "Profile",
    "default_config_dir",
    "detect_profile",
    "get_profile_path",
]
