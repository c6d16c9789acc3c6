"""Tests for the configuration system."""

import pytest
from pydantic import ValidationError

from gotestcraft.config import ConfigLoader, GoTestCraftConfig
from gotestcraft.config.loader import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's GOTESTCRAFT_* variables out of the loader."""
    import os

    for key in list(os.environ):
        if key.startswith(ConfigLoader.ENV_PREFIX):
            monkeypatch.delenv(key)


class TestGoTestCraftConfig:
    """Test the main GoTestCraftConfig model."""

    def test_default_config_creation(self):
        config = GoTestCraftConfig()

        assert config.generation.test_file_suffix == "_test.go"
        assert config.generation.fresh_test_name is True
        assert config.generation.indent == "\t"
        assert config.imports.local_prefix == ""
        assert config.logging.mode == "classic"

    def test_suffix_must_be_a_test_file(self):
        with pytest.raises(ValidationError) as exc_info:
            GoTestCraftConfig(generation={"test_file_suffix": "_spec.go"})
        assert "must end with '_test.go'" in str(exc_info.value)

    def test_indent_must_be_whitespace(self):
        with pytest.raises(ValidationError):
            GoTestCraftConfig(generation={"indent": "xx"})
        assert GoTestCraftConfig(generation={"indent": "    "}).generation.indent == "    "

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(ValidationError):
            GoTestCraftConfig(coverage={"minimum_line_coverage": 80})

    def test_nested_value_and_update(self):
        config = GoTestCraftConfig()
        assert config.get_nested_value("generation.indent") == "\t"
        assert config.get_nested_value("generation.missing", "x") == "x"

        updated = config.update_from_dict({"imports": {"local_prefix": "example.com"}})
        assert updated.imports.local_prefix == "example.com"
        assert updated.generation.fresh_test_name is True


class TestConfigLoader:
    """Test configuration loading from files and the environment."""

    def test_defaults_without_file(self, tmp_path):
        config = ConfigLoader(search_dir=tmp_path).load_config()
        assert config == GoTestCraftConfig()

    def test_toml_file_is_found(self, tmp_path):
        (tmp_path / ".gotestcraft.toml").write_text(
            '[generation]\nfresh_test_name = false\n\n[imports]\nlocal_prefix = "example.com"\n'
        )
        config = ConfigLoader(search_dir=tmp_path).load_config()
        assert config.generation.fresh_test_name is False
        assert config.imports.local_prefix == "example.com"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("generation:\n  indent: '  '\nlogging:\n  mode: minimal\n")
        config = ConfigLoader(config_file=path).load_config()
        assert config.generation.indent == "  "
        assert config.logging.mode == "minimal"

    def test_toml_preferred_over_yaml(self, tmp_path):
        (tmp_path / ".gotestcraft.toml").write_text("[logging]\nmode = 'minimal'\n")
        (tmp_path / ".gotestcraft.yml").write_text("logging:\n  mode: classic\n")
        assert ConfigLoader(search_dir=tmp_path).load_config().logging.mode == "minimal"

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / ".gotestcraft.toml").write_text("[generation]\nfresh_test_name = true\n")
        monkeypatch.setenv("GOTESTCRAFT_GENERATION__FRESH_TEST_NAME", "false")
        config = ConfigLoader(search_dir=tmp_path).load_config()
        assert config.generation.fresh_test_name is False

    def test_environment_lists(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GOTESTCRAFT_LOGGING__SUPPRESS_MODULES", "tree_sitter, urllib3")
        config = ConfigLoader(search_dir=tmp_path).load_config()
        assert config.logging.suppress_modules == ["tree_sitter", "urllib3"]

    def test_cli_overrides_win(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GOTESTCRAFT_IMPORTS__LOCAL_PREFIX", "env.example")
        config = ConfigLoader(search_dir=tmp_path).load_config(
            cli_overrides={"imports": {"local_prefix": "cli.example"}}
        )
        assert config.imports.local_prefix == "cli.example"

    def test_overrides_from_pairs(self, tmp_path):
        loader = ConfigLoader(search_dir=tmp_path)
        overrides = loader.overrides_from_pairs(
            ["generation.fresh_test_name=off", "Imports.Local_Prefix=example.com/m"]
        )
        assert overrides == {
            "generation": {"fresh_test_name": False},
            "imports": {"local_prefix": "example.com/m"},
        }
        config = loader.load_config(cli_overrides=overrides)
        assert config.generation.fresh_test_name is False
        assert config.imports.local_prefix == "example.com/m"

    @pytest.mark.parametrize("pair", ["generation.fresh_test_name", "=true", "generation..x=1"])
    def test_malformed_override_pair(self, tmp_path, pair):
        with pytest.raises(ConfigurationError, match="expected KEY=VALUE"):
            ConfigLoader(search_dir=tmp_path).overrides_from_pairs([pair])

    def test_config_is_cached(self, tmp_path):
        loader = ConfigLoader(search_dir=tmp_path)
        first = loader.load_config()
        assert loader.load_config() is first
        assert loader.load_config(reload=True) is not first

    def test_invalid_values_raise_configuration_error(self, tmp_path):
        (tmp_path / "gotestcraft.toml").write_text("[generation]\ntest_file_suffix = '.go'\n")
        with pytest.raises(ConfigurationError, match="validation failed"):
            ConfigLoader(search_dir=tmp_path).load_config()

    def test_malformed_toml(self, tmp_path):
        (tmp_path / ".gotestcraft.toml").write_text("[generation\n")
        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            ConfigLoader(search_dir=tmp_path).load_config()

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / ".gotestcraft.yaml"
        path.write_text("generation: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigLoader(config_file=path).load_config()
