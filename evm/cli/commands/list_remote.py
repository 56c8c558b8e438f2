"""
List-remote command implementation.

Lists versions available for download.
"""

import logging

from evm.cli.utils import create_operator, print_lines

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list-remote command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    if args.all:
        logger.debug("Including archived releases")
    print_lines(create_operator(args).list_remote(include_archive=args.all))
    return 0
