"""Response pruning for Atlassian DC MCP tool output."""

from .config import (
    DEFAULT_FUZZY_KEYS,
    DEFAULT_REMOVE_PATHS,
    PruneConfig,
    find_config_file,
    load_prune_config,
)
from .pruner import (
    Pruner,
    fuzzy_match,
    get_pruner,
    init_prune_config,
    is_zero_value,
    normalize_path,
    prune,
    should_remove,
)

__all__ = [
    "DEFAULT_FUZZY_KEYS",
    "DEFAULT_REMOVE_PATHS",
    "PruneConfig",
    "Pruner",
    "find_config_file",
    "fuzzy_match",
    "get_pruner",
    "init_prune_config",
    "is_zero_value",
    "load_prune_config",
    "normalize_path",
    "prune",
    "should_remove",
]
