"""Tests for configuration loading."""

from pathlib import Path

import pytest

from phpscope.config import load_config
from phpscope.core.errors import ConfigError, ErrorCode


def _write_yaml(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestConfigLoading:
    """Configuration loading and precedence tests."""

    def test_given_no_config_files_when_load_then_uses_defaults(self, tmp_path: Path) -> None:
        """Defaults are used when no config files exist."""
        config = load_config(tmp_path)

        assert config.logging.level == "WARNING"
        assert config.reflection.safe is False

    def test_given_project_config_when_load_then_overrides_defaults(self, tmp_path: Path) -> None:
        """Project config file overrides defaults."""
        # Given
        _write_yaml(tmp_path / ".phpscope" / "config.yaml", "reflection:\n  safe: true\n")

        # When
        config = load_config(tmp_path)

        # Then
        assert config.reflection.safe is True

    def test_given_env_var_when_load_then_overrides_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Environment variable overrides file config."""
        # Given
        _write_yaml(tmp_path / ".phpscope" / "config.yaml", "logging:\n  level: DEBUG\n")
        monkeypatch.setenv("PHPSCOPE__LOGGING__LEVEL", "ERROR")

        # When
        config = load_config(tmp_path)

        # Then
        assert config.logging.level == "ERROR"

    def test_given_kwargs_when_load_then_override_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Direct kwargs have the highest precedence."""
        monkeypatch.setenv("PHPSCOPE__REFLECTION__SAFE", "true")

        config = load_config(tmp_path, reflection={"safe": False})

        assert config.reflection.safe is False

    def test_given_global_config_when_load_then_project_wins(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Global config is merged under the project config."""
        # Given
        global_file = _write_yaml(
            tmp_path / "home" / "config.yaml",
            "reflection:\n  safe: true\n  max_file_size_mb: 1\n",
        )
        monkeypatch.setattr("phpscope.config.loader.GLOBAL_CONFIG_PATH", global_file)
        project = tmp_path / "project"
        _write_yaml(project / ".phpscope" / "config.yaml", "reflection:\n  safe: false\n")

        # When
        config = load_config(project)

        # Then
        assert config.reflection.safe is False
        assert config.reflection.max_file_size_mb == 1

    def test_given_explicit_file_when_load_then_used(self, tmp_path: Path) -> None:
        config_file = _write_yaml(tmp_path / "custom.yaml", "reflection:\n  loaded: true\n")

        config = load_config(config_file=config_file)

        assert config.reflection.loaded is True


class TestConfigErrors:
    """Invalid configuration handling."""

    def test_given_missing_explicit_file_when_load_then_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(config_file=tmp_path / "nope.yaml")
        assert exc_info.value.code == ErrorCode.CONFIG_FILE_NOT_FOUND

    def test_given_invalid_yaml_when_load_then_raises_parse_error(self, tmp_path: Path) -> None:
        """Malformed YAML is reported as a parse error."""
        _write_yaml(tmp_path / ".phpscope" / "config.yaml", "reflection: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)

        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_given_non_mapping_yaml_when_load_then_raises_parse_error(self, tmp_path: Path) -> None:
        _write_yaml(tmp_path / ".phpscope" / "config.yaml", "- a\n- b\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)

        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_given_invalid_value_when_load_then_raises_invalid_value(self, tmp_path: Path) -> None:
        """Validation errors name the offending field."""
        _write_yaml(
            tmp_path / ".phpscope" / "config.yaml", "reflection:\n  max_file_size_mb: -5\n"
        )

        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "max_file_size_mb" in exc_info.value.details["field"]
