"""Entry point for running the response pruner as a module."""

from atlassian_dc_mcp import main

if __name__ == "__main__":
    main()
