"""Configuration module for response pruning."""

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..exceptions import PruneConfigError
from ..logging_config import log_function
from ..utils.env import get_env_list, is_env_truthy, split_env_list

logger = logging.getLogger("atlassian-dc-mcp.pruning.config")

CONFIG_FILE_NAMES = ("config.yaml", "config.yml")
CONFIG_SEARCH_PARENT_LEVELS = 3

DEFAULT_FUZZY_KEYS: tuple[str, ...] = ("customfield",)

# Dotted path suffixes of fields that only add noise to tool output.
DEFAULT_REMOVE_PATHS: tuple[str, ...] = (
    "emailAddress",
    "clone",
    "locked",
    "permittedOperations",
    "threadResolved",
    "avatarUrls",
    "timeZone",
    "thumbnail",
    "participants",
    "user.id",
    "user.links",
    "user.slug",
    "user.type",
    "scmId",
    "public",
    "author.id",
    "author.slug",
    "author.type",
    "author.key",
    "author.self",
    "author.links",
    "creator.key",
    "creator.self",
    "reporter.key",
    "reporter.self",
    "updateAuthor.name",
    "updateAuthor.key",
    "updateAuthor.self",
    "committer.id",
    "committer.slug",
    "committer.type",
    "avatarId",
    "iconUrl",
    "statusCategory",
    "status.id",
    "status.self",
    "status.description",
    "fixVersions.id",
    "fixVersions.self",
    "issuetype.id",
    "issuetype.self",
    "priority.id",
    "priority.self",
    "lastViewed",
    "project.id",
    "projectCategory",
    "projectTypeKey",
    "resolution.id",
    "resolution.description",
    "resolution.self",
    "security",
    "versions.id",
    "versions.self",
    "votes",
    "watches",
    "displayId",
    "path.components",
    "path.extension",
    "path.name",
    "path.parent",
    "workratio",
    "type.id",
    "type.inward",
    "type.outward",
    "type.self",
)


def _dedupe(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _coerce_rule_list(value: Any, field_name: str) -> list[str]:
    """Normalize a configured rule list.

    Accepts a list of strings or a single comma-separated string. Blank
    entries are dropped: an empty fuzzy prefix would match every key.

    Raises:
        PruneConfigError: If the value is neither a string nor a list of strings
    """
    if value is None:
        return []
    if isinstance(value, str):
        return split_env_list(value)
    if not isinstance(value, list | tuple):
        msg = f"prune.{field_name} must be a list of strings, got {type(value).__name__}"
        raise PruneConfigError(msg)

    rules = []
    for item in value:
        if not isinstance(item, str):
            msg = f"prune.{field_name} entries must be strings, got {item!r}"
            raise PruneConfigError(msg)
        item = item.strip()
        if not item:
            logger.warning(f"Ignoring blank entry in prune.{field_name}")
            continue
        rules.append(item)
    return rules


@dataclass
class PruneConfig:
    """Rules deciding which fields are stripped from API responses.

    Loaded once at startup and read, never mutated, by every prune call.
    """

    fuzzy_keys: list[str] = field(default_factory=lambda: list(DEFAULT_FUZZY_KEYS))
    remove_paths: list[str] = field(
        default_factory=lambda: list(DEFAULT_REMOVE_PATHS)
    )

    @classmethod
    def default(cls) -> "PruneConfig":
        """Return the built-in rule set."""
        return cls()

    @classmethod
    def empty(cls) -> "PruneConfig":
        """Return a rule set that only removes zero values."""
        return cls(fuzzy_keys=[], remove_paths=[])

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "PruneConfig":
        """Create configuration from a mapping such as a parsed `prune:` section.

        Keys that are absent keep their default rules.

        Raises:
            PruneConfigError: If the mapping or its values have the wrong shape
        """
        if data is None:
            return cls.default()
        if not isinstance(data, Mapping):
            msg = f"prune section must be a mapping, got {type(data).__name__}"
            raise PruneConfigError(msg)

        config = cls.default()
        if "fuzzy_keys" in data:
            config.fuzzy_keys = _dedupe(
                _coerce_rule_list(data["fuzzy_keys"], "fuzzy_keys")
            )
        if "remove_paths" in data:
            config.remove_paths = _dedupe(
                _coerce_rule_list(data["remove_paths"], "remove_paths")
            )
        return config

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "PruneConfig":
        """Create configuration from the `prune:` section of a YAML config file.

        Raises:
            PruneConfigError: If the file cannot be read or parsed
        """
        try:
            with open(path, encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except OSError as e:
            msg = f"Failed to read config file {path}: {e}"
            raise PruneConfigError(msg) from e
        except yaml.YAMLError as e:
            msg = f"Failed to parse config file {path}: {e}"
            raise PruneConfigError(msg) from e

        if document is None:
            return cls.default()
        if not isinstance(document, Mapping):
            msg = f"Config file {path} must contain a mapping at the top level"
            raise PruneConfigError(msg)

        logger.debug(f"Loaded prune configuration from {path}")
        return cls.from_dict(document.get("prune"))

    @classmethod
    def from_env(cls, config_file: str | os.PathLike[str] | None = None) -> "PruneConfig":
        """Create configuration from the config file and environment variables.

        Precedence, lowest first: built-in defaults, the `prune:` section of
        the config file, MCP_PRUNE_FUZZY_KEYS / MCP_PRUNE_REMOVE_PATHS
        (replace), MCP_PRUNE_EXTRA_REMOVE_PATHS (append). MCP_PRUNE_DISABLED
        clears both rule lists.

        Args:
            config_file: Explicit config file; otherwise MCP_CONFIG_FILE or
                the first config.yaml found by `find_config_file`

        Raises:
            PruneConfigError: If a config file is found but is invalid
        """
        explicit_file = config_file or os.getenv("MCP_CONFIG_FILE")
        if explicit_file:
            config = cls.from_file(explicit_file)
        elif found_file := find_config_file():
            config = cls.from_file(found_file)
        else:
            config = cls.default()

        fuzzy_keys = get_env_list("MCP_PRUNE_FUZZY_KEYS")
        if fuzzy_keys is not None:
            config.fuzzy_keys = _dedupe(fuzzy_keys)

        remove_paths = get_env_list("MCP_PRUNE_REMOVE_PATHS")
        if remove_paths is not None:
            config.remove_paths = _dedupe(remove_paths)

        extra_paths = get_env_list("MCP_PRUNE_EXTRA_REMOVE_PATHS")
        if extra_paths:
            config.remove_paths = _dedupe([*config.remove_paths, *extra_paths])

        if is_env_truthy("MCP_PRUNE_DISABLED"):
            logger.info("Prune rules disabled, only empty values will be removed")
            return cls.empty()

        return config

    def merged(self, other: "PruneConfig") -> "PruneConfig":
        """Return a new configuration holding the union of both rule sets."""
        return PruneConfig(
            fuzzy_keys=_dedupe([*self.fuzzy_keys, *other.fuzzy_keys]),
            remove_paths=_dedupe([*self.remove_paths, *other.remove_paths]),
        )


def find_config_file(start: str | os.PathLike[str] | None = None) -> Path | None:
    """Look for config.yaml in `start` (default: cwd) and its parents.

    Returns:
        Path of the first file found, or None
    """
    directory = Path(start) if start is not None else Path.cwd()
    candidates = [directory, *directory.parents][: CONFIG_SEARCH_PARENT_LEVELS + 1]
    for candidate_dir in candidates:
        for name in CONFIG_FILE_NAMES:
            candidate = candidate_dir / name
            if candidate.is_file():
                return candidate
    return None


@log_function("load_prune_config")
def load_prune_config(
    config_file: str | os.PathLike[str] | None = None,
) -> PruneConfig:
    """Load the prune configuration for this process.

    Raises:
        PruneConfigError: If a config file is found but is invalid
    """
    config = PruneConfig.from_env(config_file)
    logger.info(
        f"Prune configuration: {len(config.fuzzy_keys)} fuzzy keys, "
        f"{len(config.remove_paths)} remove paths"
    )
    return config
