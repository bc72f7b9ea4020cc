"""Environment variable utility functions for Atlassian DC MCP."""

import os


def is_env_truthy(env_var_name: str, default: str = "") -> bool:
    """Check if environment variable is set to a standard truthy value.

    Considers 'true', '1', 'yes' as truthy values (case-insensitive).

    Args:
        env_var_name: Name of the environment variable to check
        default: Default value if environment variable is not set

    Returns:
        True if the environment variable is set to a truthy value, False otherwise
    """
    return os.getenv(env_var_name, default).lower() in ("true", "1", "yes")


def split_env_list(value: str | None) -> list[str]:
    """Split a comma-separated environment value into its non-blank items.

    Args:
        value: Raw value such as "author.self, status.id,"

    Returns:
        Stripped items in their original order; empty list for None/blank.
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def get_env_list(env_var_name: str) -> list[str] | None:
    """Read a comma-separated list from the environment.

    Returns:
        The parsed list, or None when the variable is not set at all.
        A variable set to an empty string yields an empty list.
    """
    value = os.getenv(env_var_name)
    if value is None:
        return None
    return split_env_list(value)
