"""Removal of noise fields from decoded Atlassian API responses.

The pruner walks a decoded JSON value (dicts, lists, scalars) and deletes,
in place:

- keys whose name starts with a configured fuzzy prefix (e.g. ``customfield_10010``),
- keys whose dotted path ends with a configured remove path (e.g. ``author.self``),
- keys mapped to an empty value (``None``, ``""``, ``{}``, ``[]``).

Paths are built as ``fields.comment[0].author.self``; list indices are
stripped before matching, so ``comment.author.self`` matches every comment.
``0`` and ``False`` are values, not noise, and are always kept.
"""

import re
from typing import Any

from .config import PruneConfig

ARRAY_INDEX_PATTERN = re.compile(r"\[\d+\]")


def is_zero_value(value: Any) -> bool:
    """Return True for values that carry no information for the caller."""
    if value is None:
        return True
    if isinstance(value, str | dict | list):
        return len(value) == 0
    return False


def normalize_path(path: str) -> str:
    """Strip list index tokens: ``a[0].b[12].c`` -> ``a.b.c``."""
    return ARRAY_INDEX_PATTERN.sub("", path)


class Pruner:
    """Applies a PruneConfig to value trees.

    The configuration is captured at construction and only read afterwards,
    so one instance may prune different trees from several threads at once.
    """

    def __init__(self, config: PruneConfig | None = None) -> None:
        self.config = config if config is not None else PruneConfig.default()
        self._fuzzy_keys = tuple(self.config.fuzzy_keys)
        self._remove_paths = tuple(self.config.remove_paths)
        self._remove_suffixes = tuple(f".{rp}" for rp in self._remove_paths)

    def fuzzy_match(self, key: str) -> bool:
        """Return True if the bare key name starts with a fuzzy prefix."""
        if not self._fuzzy_keys or not isinstance(key, str):
            return False
        return key.startswith(self._fuzzy_keys)

    def should_remove(self, path: str) -> bool:
        """Decide whether the field at `path` is removed regardless of its value.

        A remove path matches the normalized path exactly or as a suffix on a
        ``.`` boundary, so ``author.self`` never matches ``xauthor.self``.
        Failing that, the leaf key is checked against the fuzzy prefixes.
        """
        clean_path = normalize_path(path)

        if clean_path in self._remove_paths or clean_path.endswith(
            self._remove_suffixes
        ):
            return True

        return self.fuzzy_match(clean_path.rsplit(".", 1)[-1])

    def prune(self, value: Any) -> None:
        """Prune `value` in place.

        A dict root is pruned with an empty path. For a list root only dict
        elements are pruned, each under the prefix ``[i]``; nested lists at
        the root are left as they are. ``None`` and scalars are ignored.
        """
        if isinstance(value, dict):
            self._prune(value, "")
        elif isinstance(value, list):
            for i, item in enumerate(value):
                if isinstance(item, dict):
                    self._prune(item, f"[{i}]")

    def _prune(self, obj: dict[str, Any], prefix: str) -> None:
        doomed = []
        for key, value in obj.items():
            current_path = f"{prefix}.{key}" if prefix else str(key)

            if self.fuzzy_match(key) or self.should_remove(current_path):
                doomed.append(key)
                continue

            if is_zero_value(value):
                doomed.append(key)
                continue

            if isinstance(value, dict):
                self._prune(value, current_path)
                # emptied by its own pruning; a second pass would drop it
                if not value:
                    doomed.append(key)
            elif isinstance(value, list):
                for i, item in enumerate(value):
                    if isinstance(item, dict):
                        self._prune(item, f"{current_path}[{i}]")

        for key in doomed:
            del obj[key]


# Process-wide pruner. Replaced once at startup by init_prune_config, before
# any request is served; readers take no lock.
_default_pruner = Pruner()


def init_prune_config(config: PruneConfig) -> None:
    """Install `config` as the process-wide prune configuration.

    Must be called before the first `prune` call that should honor it and
    never concurrently with request handling.
    """
    global _default_pruner
    _default_pruner = Pruner(config)


def get_pruner() -> Pruner:
    """Return the process-wide pruner."""
    return _default_pruner


def prune(value: Any) -> None:
    """Prune `value` in place with the process-wide configuration."""
    _default_pruner.prune(value)


def fuzzy_match(key: str) -> bool:
    """Fuzzy-prefix check against the process-wide configuration."""
    return _default_pruner.fuzzy_match(key)


def should_remove(path: str) -> bool:
    """Path removal check against the process-wide configuration."""
    return _default_pruner.should_remove(path)
