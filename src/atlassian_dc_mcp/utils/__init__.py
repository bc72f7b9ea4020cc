"""
Utility functions for the Atlassian DC MCP integration.
"""

from .env import get_env_list, is_env_truthy, split_env_list

__all__ = [
    "get_env_list",
    "is_env_truthy",
    "split_env_list",
]
