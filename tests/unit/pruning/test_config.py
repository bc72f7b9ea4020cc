"""Tests for the prune configuration module."""

import logging
import os
from unittest.mock import patch

import pytest

from atlassian_dc_mcp.exceptions import AtlassianDCMCPError, PruneConfigError
from atlassian_dc_mcp.pruning.config import (
    DEFAULT_FUZZY_KEYS,
    DEFAULT_REMOVE_PATHS,
    PruneConfig,
    find_config_file,
    load_prune_config,
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        """
jira:
  url: https://jira.example.com
prune:
  fuzzy_keys:
    - customfield
    - _expandable
  remove_paths:
    - author.self
    - links
""",
        encoding="utf-8",
    )
    return path


def test_default_config():
    config = PruneConfig.default()

    assert config.fuzzy_keys == ["customfield"]
    assert "emailAddress" in config.remove_paths
    assert "author.self" in config.remove_paths
    assert len(config.remove_paths) == len(DEFAULT_REMOVE_PATHS)


def test_default_lists_are_not_shared():
    first = PruneConfig.default()
    first.fuzzy_keys.append("other")

    assert PruneConfig.default().fuzzy_keys == list(DEFAULT_FUZZY_KEYS)


def test_empty_config():
    config = PruneConfig.empty()

    assert config.fuzzy_keys == []
    assert config.remove_paths == []


class TestFromDict:
    """Test cases for PruneConfig.from_dict."""

    def test_none_gives_defaults(self):
        assert PruneConfig.from_dict(None) == PruneConfig.default()

    def test_missing_keys_keep_defaults(self):
        config = PruneConfig.from_dict({"remove_paths": ["status.id"]})

        assert config.fuzzy_keys == ["customfield"]
        assert config.remove_paths == ["status.id"]

    def test_comma_separated_string(self):
        config = PruneConfig.from_dict({"fuzzy_keys": "customfield, _links ,"})

        assert config.fuzzy_keys == ["customfield", "_links"]

    def test_blank_entries_dropped_and_deduplicated(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = PruneConfig.from_dict(
                {"fuzzy_keys": ["", "  ", "customfield", "customfield"]}
            )

        assert config.fuzzy_keys == ["customfield"]
        assert "Ignoring blank entry in prune.fuzzy_keys" in caplog.text

    def test_explicit_empty_list_disables_rule_kind(self):
        config = PruneConfig.from_dict({"fuzzy_keys": []})

        assert config.fuzzy_keys == []
        assert config.remove_paths == list(DEFAULT_REMOVE_PATHS)

    @pytest.mark.parametrize(
        "data,message",
        [
            ({"fuzzy_keys": 3}, "prune.fuzzy_keys must be a list of strings"),
            ({"remove_paths": ["a", 1]}, "prune.remove_paths entries must be strings"),
            (["not", "a", "mapping"], "prune section must be a mapping"),
        ],
    )
    def test_invalid_shapes(self, data, message):
        with pytest.raises(PruneConfigError, match=message):
            PruneConfig.from_dict(data)


class TestFromFile:
    """Test cases for PruneConfig.from_file."""

    def test_reads_prune_section(self, config_file):
        config = PruneConfig.from_file(config_file)

        assert config.fuzzy_keys == ["customfield", "_expandable"]
        assert config.remove_paths == ["author.self", "links"]

    def test_file_without_prune_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("jira:\n  url: https://jira.example.com\n", encoding="utf-8")

        assert PruneConfig.from_file(path) == PruneConfig.default()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert PruneConfig.from_file(path) == PruneConfig.default()

    def test_missing_file(self, tmp_path):
        with pytest.raises(PruneConfigError, match="Failed to read config file"):
            PruneConfig.from_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("prune: [unclosed\n", encoding="utf-8")

        with pytest.raises(PruneConfigError, match="Failed to parse config file"):
            PruneConfig.from_file(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(PruneConfigError, match="must contain a mapping"):
            PruneConfig.from_file(path)

    def test_error_is_package_error(self, tmp_path):
        with pytest.raises(AtlassianDCMCPError):
            PruneConfig.from_file(tmp_path / "nope.yaml")


class TestFindConfigFile:
    """Test cases for config file discovery."""

    def test_finds_in_start_directory(self, config_file):
        assert find_config_file(config_file.parent) == config_file

    def test_finds_in_parent_directory(self, config_file):
        nested = config_file.parent / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == config_file

    def test_stops_after_three_parent_levels(self, config_file):
        nested = config_file.parent / "a" / "b" / "c" / "d"
        nested.mkdir(parents=True)

        assert find_config_file(nested) is None

    def test_yml_extension(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("prune: {}\n", encoding="utf-8")

        assert find_config_file(tmp_path) == path


class TestFromEnv:
    """Test cases for PruneConfig.from_env precedence."""

    def test_defaults_without_file_or_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with patch.dict(os.environ, {}, clear=True):
            assert PruneConfig.from_env() == PruneConfig.default()

    def test_discovers_config_in_working_directory(self, config_file, monkeypatch):
        monkeypatch.chdir(config_file.parent)
        with patch.dict(os.environ, {}, clear=True):
            config = PruneConfig.from_env()

        assert config.remove_paths == ["author.self", "links"]

    def test_config_file_from_env_variable(self, config_file, tmp_path, monkeypatch):
        workdir = tmp_path / "elsewhere"
        workdir.mkdir()
        monkeypatch.chdir(workdir)
        with patch.dict(os.environ, {"MCP_CONFIG_FILE": str(config_file)}, clear=True):
            config = PruneConfig.from_env()

        assert config.fuzzy_keys == ["customfield", "_expandable"]

    def test_explicit_missing_file_raises(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(PruneConfigError):
                PruneConfig.from_env(tmp_path / "missing.yaml")

    def test_env_replaces_file_lists(self, config_file):
        env_vars = {
            "MCP_PRUNE_FUZZY_KEYS": "x_",
            "MCP_PRUNE_REMOVE_PATHS": "status.id, priority.self",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            config = PruneConfig.from_env(config_file)

        assert config.fuzzy_keys == ["x_"]
        assert config.remove_paths == ["status.id", "priority.self"]

    def test_env_empty_string_clears_list(self, config_file):
        with patch.dict(os.environ, {"MCP_PRUNE_FUZZY_KEYS": ""}, clear=True):
            config = PruneConfig.from_env(config_file)

        assert config.fuzzy_keys == []
        assert config.remove_paths == ["author.self", "links"]

    def test_extra_remove_paths_are_appended(self, config_file):
        env_vars = {"MCP_PRUNE_EXTRA_REMOVE_PATHS": "links,votes"}
        with patch.dict(os.environ, env_vars, clear=True):
            config = PruneConfig.from_env(config_file)

        assert config.remove_paths == ["author.self", "links", "votes"]

    def test_disabled(self, config_file, caplog):
        env_vars = {"MCP_PRUNE_DISABLED": "true", "MCP_PRUNE_FUZZY_KEYS": "x_"}
        with patch.dict(os.environ, env_vars, clear=True):
            with caplog.at_level(logging.INFO):
                config = PruneConfig.from_env(config_file)

        assert config == PruneConfig.empty()
        assert "Prune rules disabled" in caplog.text


def test_merged_is_deduplicated_union():
    base = PruneConfig(fuzzy_keys=["customfield"], remove_paths=["a", "b"])
    extra = PruneConfig(fuzzy_keys=["customfield", "x_"], remove_paths=["b", "c"])

    merged = base.merged(extra)

    assert merged.fuzzy_keys == ["customfield", "x_"]
    assert merged.remove_paths == ["a", "b", "c"]
    assert base.remove_paths == ["a", "b"]


def test_load_prune_config_logs_summary(config_file, caplog):
    with patch.dict(os.environ, {}, clear=True):
        with caplog.at_level(logging.INFO):
            config = load_prune_config(config_file)

    assert config.remove_paths == ["author.self", "links"]
    assert "Prune configuration: 2 fuzzy keys, 2 remove paths" in caplog.text


def test_load_prune_config_is_logged_as_operation(config_file, caplog):
    with patch.dict(os.environ, {}, clear=True):
        with caplog.at_level(logging.DEBUG):
            load_prune_config(config_file)

    records = [r for r in caplog.records if r.name == "atlassian-dc-mcp.pruning.config"]
    assert records[0].getMessage() == "Operation started: load_prune_config"
    assert "operation=load_prune_config" in records[1].context
    assert records[-1].getMessage().startswith("Operation completed: load_prune_config in")


def test_load_prune_config_failure_is_logged(tmp_path, caplog):
    with patch.dict(os.environ, {}, clear=True):
        with caplog.at_level(logging.DEBUG):
            with pytest.raises(PruneConfigError):
                load_prune_config(tmp_path / "missing.yaml")

    assert "Operation failed: load_prune_config after" in caplog.text
