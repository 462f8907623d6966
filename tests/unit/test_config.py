"""Unit tests for configuration loading and profile management."""

import os
from pathlib import Path
from unittest import mock

import pytest
import yaml

from voicegen.config import TextConfig, VoicegenConfig
from voicegen.config.loader import (
    YAMLConfigLoader,
    deep_merge,
    dict_to_config,
    load_config,
    load_yaml_with_inheritance,
)
from voicegen.config.profiles import Profile, default_config_dir, detect_profile, get_profile_path


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_simple_merge(self) -> None:
        """Test merging flat dictionaries."""
        assert deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4}) == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self) -> None:
        """Test merging nested dictionaries."""
        base = {"outer": {"a": 1, "b": 2}}
        override = {"outer": {"b": 3, "c": 4}}
        assert deep_merge(base, override) == {"outer": {"a": 1, "b": 3, "c": 4}}

    def test_override_replaces_non_dict(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": [1, 2]}) == {"a": [1, 2]}

    def test_base_not_modified(self) -> None:
        base = {"outer": {"a": 1}}
        deep_merge(base, {"outer": {"a": 2}})
        assert base == {"outer": {"a": 1}}


class TestYamlInheritance:
    """Tests for 'extends' handling."""

    def test_extends_merges_base(self, tmp_path: Path) -> None:
        (tmp_path / "base.yaml").write_text(
            yaml.safe_dump({"voicegen": {"web": {"attempts": 3, "backoff": 1.0}}})
        )
        (tmp_path / "child.yaml").write_text(
            yaml.safe_dump({"extends": "base.yaml", "voicegen": {"web": {"backoff": 0.0}}})
        )

        data = load_yaml_with_inheritance(tmp_path / "child.yaml")

        assert data == {"voicegen": {"web": {"attempts": 3, "backoff": 0.0}}}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_yaml_with_inheritance(tmp_path / "nope.yaml")

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "empty.yaml").write_text("")
        assert YAMLConfigLoader(tmp_path).load(tmp_path / "empty.yaml") == VoicegenConfig()

    def test_loader_profile_from_custom_dir(self, tmp_path: Path) -> None:
        (tmp_path / "staging.yaml").write_text("voicegen:\n  storage:\n    backend: local\n")
        loader = YAMLConfigLoader(tmp_path)

        assert loader.load_profile("staging").storage.backend == "local"
        assert loader.get_config_dir() == tmp_path


class TestDictToConfig:
    """Tests for dict_to_config."""

    def test_empty_sections_allowed(self) -> None:
        config = dict_to_config({"voicegen": {"web": None, "silence": {"min_seconds": 5.0}}})
        assert config.web.attempts == 3
        assert config.silence.min_seconds == 5.0

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(TypeError):
            dict_to_config({"voicegen": {"web": {"retries": 9}}})


class TestShippedProfiles:
    """The YAML files in config/ load and differ where expected."""

    def test_test_profile(self) -> None:
        config = load_config(profile="test")

        assert config.orchestrator.retry_delay == 0.0
        assert config.orchestrator.inter_chunk_delay == 0.0
        assert config.web.backoff == 0.0
        assert config.storage.backend == "local"
        assert config.chunking.max_chunk_length == 280

    def test_prod_profile(self) -> None:
        config = load_config(profile="prod")
        assert config.database.enabled
        assert config.storage.backend == "cloudinary"

    def test_dev_profile(self) -> None:
        assert load_config(profile="dev").logging.level == "DEBUG"

    def test_env_selects_profile(self) -> None:
        with mock.patch.dict(os.environ, {"VOICEGEN_PROFILE": "test"}):
            assert load_config().logging.level == "WARNING"

    def test_explicit_path(self) -> None:
        path = get_profile_path(Profile.PROD)
        assert load_config(path=path).database.enabled


class TestTextConfig:
    """Tests for per-language limits."""

    def test_max_chars_for(self) -> None:
        text = TextConfig()
        assert text.max_chars_for("en") == 2000
        assert text.max_chars_for("ne") == 1500
        assert text.max_chars_for("fr") == 2000


class TestProfiles:
    """Tests for profile detection."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("prod", Profile.PROD), ("TEST", Profile.TEST), ("dev", Profile.DEV), ("staging", Profile.DEV), ("", Profile.DEV)],
    )
    def test_detect_profile(self, value: str, expected: Profile) -> None:
        with mock.patch.dict(os.environ, {"VOICEGEN_PROFILE": value}):
            assert detect_profile() == expected

    def test_get_profile_path(self, tmp_path: Path) -> None:
        assert get_profile_path(Profile.TEST, tmp_path) == tmp_path / "test.yaml"
        assert get_profile_path(Profile.DEV).name == "dev.yaml"
        assert get_profile_path(Profile.DEV).exists()

    def test_config_dir_from_env(self, tmp_path: Path) -> None:
        (tmp_path / "prod.yaml").write_text("voicegen:\n  storage:\n    backend: local\n")

        with mock.patch.dict(os.environ, {"VOICEGEN_CONFIG_DIR": str(tmp_path)}):
            assert default_config_dir() == tmp_path
            assert get_profile_path(Profile.PROD) == tmp_path / "prod.yaml"
            assert load_config(profile="prod").storage.backend == "local"
