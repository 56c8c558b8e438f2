"""
Shared utilities for CLI commands.
"""

import logging
from typing import Iterable

from evm.config import load_config
from evm.versions import TOOLCHAINS, VersionOperator

logger = logging.getLogger(__name__)


def create_operator(args) -> VersionOperator:
    """
    Build the version operator selected on the command line.

    Args:
        args: Parsed arguments with toolchain, home and config fields

    Returns:
        Operator configured with the resolved home and mirror
    """
    config = load_config(home=args.home, config_path=args.config)
    operator_class = TOOLCHAINS[args.toolchain]
    logger.debug(f"Using {operator_class.__name__} with home {config.home}")
    return operator_class.from_config(config)


def print_lines(lines: Iterable[str]) -> None:
    """Print status lines as an operation produces them."""
    for line in lines:
        print(line, flush=True)
