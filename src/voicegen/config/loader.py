"""YAML configuration loader with inheritance support.

Supports:
- Loading YAML config files
- Config inheritance via 'extends' key
- Deep merging of nested config
"""

from pathlib import Path
from typing import Any

import yaml

from . import (
    ChunkingConfig,
    CloudTTSConfig,
    ContentConfig,
    DatabaseConfig,
    LoggingConfig,
    OrchestratorConfig,
    PreRecordedConfig,
    SilenceConfig,
    StorageConfig,
    SystemTTSConfig,
    TextConfig,
    ToneConfig,
    VoicegenConfig,
    WebTTSConfig,
)
from .profiles import default_config_dir, detect_profile


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Values from override take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_with_inheritance(path: Path) -> dict[str, Any]:
    """Load YAML file with inheritance support.

    If the file contains an 'extends' key, the base config is loaded first
    and merged with the current config.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        config = yaml.safe_load(f) or {}

    if "extends" in config:
        base_name = config.pop("extends")
        base_path = path.parent / base_name
        base_config = load_yaml_with_inheritance(base_path)
        config = deep_merge(base_config, config)

    return config


def dict_to_config(data: dict[str, Any]) -> VoicegenConfig:
    """Convert raw dict to typed VoicegenConfig dataclass."""
    root = data.get("voicegen", {}) or {}

    # YAML sections may be present but empty
    def safe_get(key: str) -> dict[str, Any]:
        value = root.get(key, {})
        return value if value is not None else {}

    return VoicegenConfig(
        text=TextConfig(**safe_get("text")),
        chunking=ChunkingConfig(**safe_get("chunking")),
        orchestrator=OrchestratorConfig(**safe_get("orchestrator")),
        cloud=CloudTTSConfig(**safe_get("cloud")),
        system=SystemTTSConfig(**safe_get("system")),
        web=WebTTSConfig(**safe_get("web")),
        prerecorded=PreRecordedConfig(**safe_get("prerecorded")),
        tone=ToneConfig(**safe_get("tone")),
        silence=SilenceConfig(**safe_get("silence")),
        storage=StorageConfig(**safe_get("storage")),
        database=DatabaseConfig(**safe_get("database")),
        content=ContentConfig(**safe_get("content")),
        logging=LoggingConfig(**safe_get("logging")),
    )


class YAMLConfigLoader:
    """YAML configuration loader implementation."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize loader with optional config directory.

        Args:
            config_dir: Directory containing config files.
                        Defaults to VOICEGEN_CONFIG_DIR, else 'config' relative to project root.
        """
        if config_dir is None:
            config_dir = default_config_dir()
        self._config_dir = config_dir

    def load(self, path: Path) -> VoicegenConfig:
        """Load configuration from file path."""
        raw_config = load_yaml_with_inheritance(path)
        return dict_to_config(raw_config)

    def load_profile(self, profile: str) -> VoicegenConfig:
        """Load configuration by profile name.

        Args:
            profile: Profile name (e.g., 'dev', 'prod')

        Returns:
            Parsed VoicegenConfig for the profile
        """
        config_path = self._config_dir / f"{profile}.yaml"
        return self.load(config_path)

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        return self._config_dir


def load_config(path: str | Path | None = None, profile: str | None = None) -> VoicegenConfig:
    """Load voicegen configuration.

    Args:
        path: Direct path to config file (takes precedence)
        profile: Profile name ('dev', 'prod', 'test') if path not given

    Returns:
        Parsed VoicegenConfig

    Examples:
        >>> config = load_config(profile="dev")
        >>> config = load_config(path="/path/to/config.yaml")
    """
    loader = YAMLConfigLoader()

    if path is not None:
        return loader.load(Path(path))
    elif profile is not None:
        return loader.load_profile(profile)
    else:
        return loader.load_profile(detect_profile().value)


__all__ = [
    "YAMLConfigLoader",
    "deep_merge",
    "dict_to_config",
    "load_config",
    "load_yaml_with_inheritance",
]
