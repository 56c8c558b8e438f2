"""
Use command implementation.

Switches the active version.
"""

from evm.cli.utils import create_operator, print_lines


def run(args) -> int:
    """Run the use command."""
    print_lines(create_operator(args).use(args.version))
    return 0
