"""
Install command implementation.

Downloads, verifies and installs a version.
"""

from evm.cli.utils import create_operator, print_lines


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    print_lines(create_operator(args).install(args.version))
    return 0
