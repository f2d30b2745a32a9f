"""
Tests for run-time configuration and lookup tables.
"""

import pytest
from pydantic import ValidationError

from xtract.core.config import DEFAULT_POLICY, ExtractConfig, TextPolicy, load_transform
from xtract.exceptions import ConfigurationError


class TestTextPolicy:
    """Test the text-handling toggles."""

    def test_defaults(self):
        """Test every toggle is off by default."""
        assert DEFAULT_POLICY == TextPolicy()
        assert not DEFAULT_POLICY.strict
        assert not DEFAULT_POLICY.self_closing

    def test_frozen(self):
        """Test a policy cannot be changed once built."""
        policy = TextPolicy(stem=True)
        with pytest.raises(ValidationError):
            policy.stem = False


class TestExtractConfig:
    """Test building driver configuration."""

    def test_from_dict_partial(self):
        """Test given keys override defaults and unknown keys are ignored."""
        config = ExtractConfig.from_dict({"head": "<Set>", "stop": True, "unknown": 1})
        assert config.head == "<Set>"
        assert config.tail == ""
        assert config.stop

    def test_policy(self):
        """Test the policy reflects the text toggles."""
        config = ExtractConfig(strict=True, ascii=True)
        assert config.policy == TextPolicy(strict=True, ascii=True)

    def test_from_yaml(self, tmp_path):
        """Test loading overrides from YAML."""
        path = tmp_path / "xtract.yaml"
        path.write_text('head: "<Set>"\ntail: "</Set>"\nmixed: true\n')
        config = ExtractConfig.from_yaml(path)
        assert (config.head, config.tail) == ("<Set>", "</Set>")
        assert config.policy.mixed

    def test_from_empty_yaml(self, tmp_path):
        """Test an empty file gives the defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ExtractConfig.from_yaml(path) == ExtractConfig()

    def test_yaml_errors(self, tmp_path):
        """Test unreadable and malformed files."""
        with pytest.raises(ConfigurationError):
            ExtractConfig.from_yaml(tmp_path / "missing.yaml")

        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            ExtractConfig.from_yaml(path)

        path = tmp_path / "bad.yaml"
        path.write_text("head: [unclosed\n")
        with pytest.raises(ConfigurationError):
            ExtractConfig.from_yaml(path)


class TestLoadTransform:
    """Test reading tab-separated lookup tables."""

    def test_plain(self, tmp_path):
        """Test every line becomes an entry."""
        path = tmp_path / "table.txt"
        path.write_text("a\tAlpha\nb\tBeta\n")
        assert load_transform(path) == {"a": "Alpha", "b": "Beta"}

    def test_special(self, tmp_path):
        """Test comment lines are skipped and dash values delete entries."""
        path = tmp_path / "table.txt"
        path.write_text("# comment\na\tAlpha\nb\tBeta\nb\t-\n")
        assert load_transform(path, special=True) == {"a": "Alpha"}

    def test_update_existing(self, tmp_path):
        """Test an existing table is updated in place."""
        path = tmp_path / "table.txt"
        path.write_text("b\tBeta\n")
        table = {"a": "Alpha"}
        assert load_transform(path, table=table) is table
        assert table == {"a": "Alpha", "b": "Beta"}

    def test_missing_file(self, tmp_path):
        """Test an unreadable table is a configuration error."""
        with pytest.raises(ConfigurationError, match="missing.txt"):
            load_transform(tmp_path / "missing.txt")
