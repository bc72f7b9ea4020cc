import json
from typing import TextIO

import click
from dotenv import load_dotenv

__version__ = "0.1.0"

from .logging_config import DEFAULT_LOGGER_NAME, log_operation, setup_logger

# Installed before the submodules below create their child loggers
logger = setup_logger(DEFAULT_LOGGER_NAME)

from .exceptions import AtlassianDCMCPError, PruneConfigError  # noqa: E402
from .pruning import (  # noqa: E402
    PruneConfig,
    Pruner,
    init_prune_config,
    load_prune_config,
    prune,
)
from .tool_result import (  # noqa: E402
    create_tool_result,
    handle_tool_error,
    handle_tool_operation,
)


@click.command()
@click.argument("input_file", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (can be used multiple times)",
)
@click.option(
    "--env-file", type=click.Path(exists=True, dir_okay=False), help="Path to .env file"
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML config file with a 'prune' section",
)
@click.option(
    "--fuzzy-key",
    "fuzzy_keys",
    multiple=True,
    help="Additional key prefix to remove (repeatable)",
)
@click.option(
    "--remove-path",
    "remove_paths",
    multiple=True,
    help="Additional dotted path suffix to remove (repeatable)",
)
@click.option(
    "--no-prune-rules",
    is_flag=True,
    default=False,
    help="Ignore all configured rules and only drop empty values",
)
@click.option(
    "--indent",
    default=2,
    show_default=True,
    type=click.IntRange(min=0),
    help="Indentation of the JSON output",
)
def main(
    input_file: TextIO,
    verbose: int,
    env_file: str | None,
    config_file: str | None,
    fuzzy_keys: tuple[str, ...],
    remove_paths: tuple[str, ...],
    no_prune_rules: bool,
    indent: int,
) -> None:
    """Prune an Atlassian REST API JSON response the way MCP tools return it.

    Reads INPUT_FILE (default: stdin) and prints the pruned JSON to stdout.
    """
    logging_level = "WARNING"
    if verbose == 1:
        logging_level = "INFO"
    elif verbose >= 2:
        logging_level = "DEBUG"

    setup_logger(name=DEFAULT_LOGGER_NAME, level=logging_level)

    with log_operation(logger, "prune_command", app_version=__version__):
        if env_file:
            logger.info(f"Loading environment from file: {env_file}")
            load_dotenv(env_file)
        else:
            logger.debug("Attempting to load environment from default .env file")
            load_dotenv()

        if no_prune_rules:
            logger.info("Prune rules disabled, only empty values will be removed")
            config = PruneConfig.empty()
        else:
            try:
                config = load_prune_config(config_file)
            except PruneConfigError as e:
                raise click.ClickException(str(e)) from e
            config = config.merged(
                PruneConfig(fuzzy_keys=list(fuzzy_keys), remove_paths=list(remove_paths))
            )
        init_prune_config(config)

        try:
            document = json.load(input_file)
        except json.JSONDecodeError as e:
            raise click.ClickException(f"Input is not valid JSON: {e}") from e

        prune(document)
        click.echo(json.dumps(document, indent=indent or None, ensure_ascii=False))


__all__ = [
    "AtlassianDCMCPError",
    "PruneConfig",
    "PruneConfigError",
    "Pruner",
    "__version__",
    "create_tool_result",
    "handle_tool_error",
    "handle_tool_operation",
    "init_prune_config",
    "log_operation",
    "main",
    "prune",
    "setup_logger",
]

if __name__ == "__main__":
    main()
