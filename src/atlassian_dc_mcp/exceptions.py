class AtlassianDCMCPError(Exception):
    """Base exception for Atlassian DC MCP errors."""

    pass


class PruneConfigError(AtlassianDCMCPError):
    """Raised when the response pruning configuration cannot be loaded."""

    pass
