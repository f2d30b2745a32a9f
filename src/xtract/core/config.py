"""
Run-time configuration for xtract.

TextPolicy collects the text-handling toggles that influence how element
contents are retrieved and cleaned. ExtractConfig gathers everything the
command-line driver needs besides the compiled Block tree, and can be
created from a dict or a YAML file with partial overrides.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import fields as dataclass_fields
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict

from xtract.exceptions import ConfigurationError


class TextPolicy(BaseModel):
    """
    Text-handling toggles passed by value through the executor.

    Params:
        mixed: Keep inline markup children and rebuild mixed content on request
        strict: Remove inline markup tags from element contents
        accent: Fold accented characters to their ASCII base
        ascii: Encode non-ASCII characters as numeric character references
        stem: Apply the English stemmer in word-level operations
        stop: Drop stop words in word-level operations
        cleanup: Repair bad spaces and collapse runs of whitespace
        self_closing: Keep empty elements without attributes, with contents "1"
    """

    model_config = ConfigDict(frozen=True)

    mixed: bool = False
    strict: bool = False
    accent: bool = False
    ascii: bool = False
    stem: bool = False
    stop: bool = False
    cleanup: bool = False
    self_closing: bool = False


DEFAULT_POLICY = TextPolicy()


@dataclass
class ExtractConfig:
    """
    Driver configuration.

    Can be created from dict or YAML with partial overrides; only keys that
    match fields are used.

    Example YAML:
        head: "<Set>"
        tail: "</Set>"
        transform: mapping.txt
        stop: true
    """

    # printed once around all output
    head: str = ""
    tail: str = ""

    # printed around each record's output
    hd: str = ""
    tl: str = ""

    # transformation tables
    transform: str | None = None
    aliases: str | None = None
    transfigure: str | None = None

    # output controls
    empty: bool = False
    ident: bool = False

    # text policy
    mixed: bool = False
    strict: bool = False
    accent: bool = False
    ascii: bool = False
    stem: bool = False
    stop: bool = False
    cleanup: bool = False
    self_closing: bool = False

    @property
    def policy(self) -> TextPolicy:
        """Build the TextPolicy for these settings."""
        return TextPolicy(
            mixed=self.mixed,
            strict=self.strict,
            accent=self.accent,
            ascii=self.ascii,
            stem=self.stem,
            stop=self.stop,
            cleanup=self.cleanup,
            self_closing=self.self_closing,
        )

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> ExtractConfig:
        """
        Create from dict, only overriding specified values.

        Params:
            config: Dictionary with partial overrides

        Returns:
            ExtractConfig instance with specified overrides
        """
        valid_fields = {f.name for f in dataclass_fields(cls)}
        filtered = {k: v for k, v in config.items() if k in valid_fields}
        return cls(**filtered)

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> ExtractConfig:
        """
        Create from YAML file with partial overrides.

        Params:
            yaml_path: Path to YAML file containing configuration

        Returns:
            ExtractConfig instance with YAML overrides

        Raises:
            ConfigurationError: If the file cannot be read or is not a mapping
        """
        path = Path(yaml_path)
        try:
            with path.open() as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(str(path), str(e)) from e

        if not isinstance(config, dict):
            raise ConfigurationError(str(path), "top level must be a mapping")

        return cls.from_dict(config)


def load_transform(path: str | Path, special: bool = False, table: dict[str, str] | None = None) -> dict[str, str]:
    """
    Read a tab-separated key/value table for -translate and related commands.

    Params:
        path: File with one "key<TAB>value" pair per line
        special: Skip lines starting with "#" and treat a value of "-" as a deletion
        table: Existing table to update, a new one if None

    Returns:
        The populated table

    Raises:
        ConfigurationError: If the file cannot be read
    """
    table = {} if table is None else table
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            for line in f:
                line = line.rstrip("\r\n")
                if special and line.startswith("#"):
                    continue
                key, _, value = line.partition("\t")
                if special and value == "-":
                    table.pop(key, None)
                else:
                    table[key] = value
    except OSError as e:
        raise ConfigurationError(str(path), str(e)) from e
    return table
